"""
Async HTTP client with rate limiting and retries.

Built on httpx with:
- Per-domain rate limiting
- Exponential backoff retry (tenacity)
- Per-attempt timeout
- Browser-like user agent (some bank CDNs answer 403 otherwise)
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class FetchError(RuntimeError):
    """Raised when a document cannot be fetched after all retries."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass
class FetchResult:
    """Raw response of a successful fetch."""
    content: bytes
    content_type: str
    status_code: int
    url: str = ""


@dataclass
class RateLimiter:
    """Per-domain rate limiter."""
    requests_per_second: float = 2.0
    last_request: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire(self) -> None:
        """Wait for rate limit slot."""
        async with self.lock:
            now = time.monotonic()
            min_interval = 1.0 / self.requests_per_second
            elapsed = now - self.last_request

            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)

            self.last_request = time.monotonic()


def _is_retryable(exc: BaseException) -> bool:
    """Timeouts, network errors, 429 and 5xx are worth another attempt."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class HttpClient:
    """
    Async HTTP client with rate limiting and retries.

    Usage:
        async with HttpClient() as client:
            result = await client.fetch("https://example.com/tasas.pdf")
            pdf_bytes = result.content
    """

    def __init__(
        self,
        requests_per_second: float = 2.0,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: str = DEFAULT_USER_AGENT,
        backoff_min: float = 1.0,
        backoff_max: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            requests_per_second: Rate limit per domain
            timeout: Per-attempt timeout in seconds
            max_retries: Maximum attempts per request
            user_agent: User-Agent header sent with every request
            backoff_min: Minimum wait between attempts in seconds
            backoff_max: Maximum wait between attempts in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.requests_per_second = requests_per_second
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.user_agent = user_agent
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._rate_limiters: dict[str, RateLimiter] = {}

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={
                "Accept-Language": "es-CO,es;q=0.9,en;q=0.8",
                "User-Agent": self.user_agent,
            },
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        """Get or create rate limiter for domain."""
        domain = urlparse(url).netloc
        if domain not in self._rate_limiters:
            self._rate_limiters[domain] = RateLimiter(
                requests_per_second=self.requests_per_second
            )
        return self._rate_limiters[domain]

    async def _do_request(self, url: str, **kwargs) -> httpx.Response:
        """Execute a single GET attempt."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        limiter = self._get_rate_limiter(url)
        await limiter.acquire()

        response = await self._client.get(url, **kwargs)
        response.raise_for_status()

        return response

    async def fetch(self, url: str, **kwargs) -> FetchResult:
        """
        GET a document with retries.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments

        Returns:
            FetchResult with the raw bytes and response metadata

        Raises:
            FetchError: If every attempt failed or the status is not 2xx
        """
        logger.debug("http_get", url=url)

        def log_attempt(retry_state) -> None:
            logger.warning(
                "fetch_attempt_failed",
                url=url,
                attempt=retry_state.attempt_number,
                error=str(retry_state.outcome.exception()),
            )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=1, min=self.backoff_min, max=self.backoff_max),
                retry=retry_if_exception(_is_retryable),
                before_sleep=log_attempt,
            ):
                with attempt:
                    response = await self._do_request(url, **kwargs)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise FetchError(
                f"Failed to fetch {url} after {self.max_retries} attempts: {cause}",
                url=url,
                status_code=_status_of(cause),
            ) from cause
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} for {url}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

        return FetchResult(
            content=response.content,
            content_type=response.headers.get("content-type", "unknown"),
            status_code=response.status_code,
            url=str(response.url),
        )

    async def get_bytes(self, url: str, **kwargs) -> bytes:
        """GET request returning bytes content."""
        result = await self.fetch(url, **kwargs)
        return result.content


def _status_of(exc: Optional[BaseException]) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None
