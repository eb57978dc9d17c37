"""Tests for the HTTP client."""

import httpx
import pytest

from tasas_scraper.core.http_client import FetchError, HttpClient


def make_client(handler, max_retries=3):
    return HttpClient(
        requests_per_second=1000,
        max_retries=max_retries,
        backoff_min=0,
        backoff_max=0,
        transport=httpx.MockTransport(handler),
    )


class TestHttpClient:
    """Tests for HttpClient.fetch."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test a plain successful GET."""
        def handler(request):
            return httpx.Response(200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"})

        async with make_client(handler) as client:
            result = await client.fetch("https://bank.example/tasas.pdf")

        assert result.content == b"%PDF-1.4"
        assert result.content_type == "application/pdf"
        assert result.status_code == 200
        assert result.url == "https://bank.example/tasas.pdf"

    @pytest.mark.asyncio
    async def test_sends_browser_headers(self):
        """Test user agent and language headers."""
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, text="ok")

        async with make_client(handler) as client:
            await client.get_bytes("https://bank.example/")

        assert "Mozilla" in seen["user-agent"]
        assert seen["accept-language"].startswith("es-CO")

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        """Test that 5xx responses are retried until the attempt limit."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        async with make_client(handler, max_retries=3) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch("https://bank.example/tasas.pdf")

        assert len(calls) == 3
        assert exc_info.value.status_code == 503
        assert exc_info.value.url == "https://bank.example/tasas.pdf"

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        """Test that a 404 fails on the first attempt."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        async with make_client(handler) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.fetch("https://bank.example/missing.pdf")

        assert len(calls) == 1
        assert exc_info.value.status_code == 404
        assert "HTTP 404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_then_success(self):
        """Test that a timed out attempt is retried."""
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, text="<html></html>")

        async with make_client(handler) as client:
            content = await client.get_bytes("https://bank.example/")

        assert content == b"<html></html>"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_network_errors_exhausted(self):
        """Test that persistent connection errors become FetchError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler, max_retries=2) as client:
            with pytest.raises(FetchError) as exc_info:
                await client.get_bytes("https://bank.example/")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_requires_context(self):
        """Test that fetching outside the context manager fails."""
        client = make_client(lambda request: httpx.Response(200))
        with pytest.raises(RuntimeError):
            await client.fetch("https://bank.example/")
