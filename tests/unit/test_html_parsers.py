"""Tests for the HTML bank parsers."""

import asyncio

import pytest

from tasas_scraper.config.loader import ParserConfig
from tasas_scraper.core.models import (
    BankId,
    CopFixedRate,
    CurrencyIndex,
    DiscountType,
    ExtractionMethod,
    ProductType,
    Segment,
    SourceType,
    UvrSpreadRate,
)
from tasas_scraper.parsers import BancolombiaParser, BancoPopularParser
from tests.conftest import FIXTURES_DIR


def parse_fixture(parser_class):
    parser = parser_class(config=ParserConfig(use_fixtures=True, fixtures_dir=str(FIXTURES_DIR)))
    return asyncio.run(parser.parse())


def find_offer(result, product_type, currency_index, segment):
    for offer in result.offers:
        if (offer.product_type, offer.currency_index, offer.segment) == (product_type, currency_index, segment):
            return offer
    raise AssertionError(f"No offer for {product_type} {currency_index} {segment}")


@pytest.fixture(scope="module")
def bancolombia_result():
    return parse_fixture(BancolombiaParser)


@pytest.fixture(scope="module")
def popular_result():
    return parse_fixture(BancoPopularParser)


class TestBancolombiaParser:
    """Tests for the Bancolombia page."""

    def test_four_offers(self, bancolombia_result):
        assert len(bancolombia_result.offers) == 4
        assert bancolombia_result.warnings == []

    def test_uvr_rates(self, bancolombia_result):
        """Test UVR spreads for both segments."""
        vis = find_offer(bancolombia_result, ProductType.HIPOTECARIO, CurrencyIndex.UVR, Segment.VIS)
        no_vis = find_offer(bancolombia_result, ProductType.HIPOTECARIO, CurrencyIndex.UVR, Segment.NO_VIS)

        assert vis.rate == UvrSpreadRate(spread_ea_from=6.5)
        assert no_vis.rate == UvrSpreadRate(spread_ea_from=8.0)

    def test_cop_rates(self, bancolombia_result):
        """Test that equal pesos rates for both segments stay distinct offers."""
        vis = find_offer(bancolombia_result, ProductType.HIPOTECARIO, CurrencyIndex.COP, Segment.VIS)
        no_vis = find_offer(bancolombia_result, ProductType.HIPOTECARIO, CurrencyIndex.COP, Segment.NO_VIS)

        assert vis.rate == CopFixedRate(ea_percent_from=12.0)
        assert no_vis.rate == CopFixedRate(ea_percent_from=12.0)
        assert vis.id != no_vis.id

    def test_payroll_discount(self, bancolombia_result):
        """Test the one-point payroll discount on every offer."""
        for offer in bancolombia_result.offers:
            assert offer.conditions.payroll_discount.type == DiscountType.PERCENT_OFF
            assert offer.conditions.payroll_discount.value == 1.0

    def test_source(self, bancolombia_result):
        """Test provenance of the offers."""
        offer = bancolombia_result.offers[0]
        assert offer.bank_name == "Bancolombia"
        assert offer.source.source_type == SourceType.HTML
        assert offer.source.extraction.method == ExtractionMethod.CSS_SELECTOR
        assert "Vivienda VIS" in offer.source.extraction.excerpt
        assert offer.source.url.startswith("https://www.bancolombia.com/")

    def test_missing_sections(self, tmp_path):
        """Test a page without rate headings."""
        (tmp_path / "bancolombia").mkdir()
        (tmp_path / "bancolombia" / "rates-page.html").write_text(
            "<html><body><h2>Otros productos</h2></body></html>", encoding="utf-8"
        )
        parser = BancolombiaParser(config=ParserConfig(use_fixtures=True, fixtures_dir=str(tmp_path)))

        result = asyncio.run(parser.parse())

        assert result.offers == []
        assert any("Could not find section" in w for w in result.warnings)
        assert result.warnings[-1] == "No offers extracted - document structure may have changed"

    def test_unparseable_cell(self, tmp_path):
        """Test that a bad cell is a warning and other rows still parse."""
        html = """
        <h3>Tasas para vivienda en UVR</h3>
        <table><tr><td>Vivienda VIS</td><td>Consultar</td></tr>
               <tr><td>Vivienda No VIS</td><td>UVR + 8,00%</td></tr></table>
        <h3>Tasas para vivienda en pesos</h3>
        <table><tr><td>Vivienda VIS</td><td>12,00% E.A.</td></tr>
               <tr><td>Vivienda No VIS</td><td>12,00% E.A.</td></tr></table>
        """
        (tmp_path / "bancolombia").mkdir()
        (tmp_path / "bancolombia" / "rates-page.html").write_text(html, encoding="utf-8")
        parser = BancolombiaParser(config=ParserConfig(use_fixtures=True, fixtures_dir=str(tmp_path)))

        result = asyncio.run(parser.parse())

        assert len(result.offers) == 3
        assert any("Failed to parse rate 'Consultar'" in w for w in result.warnings)
        assert "Only extracted 3 offers, expected 4" in result.warnings


class TestBancoPopularParser:
    """Tests for the Banco Popular rates page."""

    def test_two_offers(self, popular_result):
        """Test that only the Casayá table is read."""
        assert len(popular_result.offers) == 2
        assert popular_result.warnings == []

    def test_mortgage(self, popular_result):
        offer = find_offer(popular_result, ProductType.HIPOTECARIO, CurrencyIndex.COP, Segment.UNKNOWN)
        assert offer.rate == CopFixedRate(ea_percent_from=17.05, ea_percent_to=17.55)

    def test_leasing(self, popular_result):
        offer = find_offer(popular_result, ProductType.LEASING, CurrencyIndex.COP, Segment.UNKNOWN)
        assert offer.rate == CopFixedRate(ea_percent_from=16.55, ea_percent_to=17.05)

    def test_no_payroll(self, popular_result):
        assert not any(offer.has_payroll_discount for offer in popular_result.offers)

    def test_locator(self, popular_result):
        assert popular_result.offers[0].source.extraction.locator == "#table-rates-casaya table.simple-table"

    def test_missing_section(self, tmp_path):
        (tmp_path / "banco_popular").mkdir()
        (tmp_path / "banco_popular" / "tasas.html").write_text("<html><body></body></html>", encoding="utf-8")
        parser = BancoPopularParser(config=ParserConfig(use_fixtures=True, fixtures_dir=str(tmp_path)))

        result = asyncio.run(parser.parse())

        assert result.offers == []
        assert any("Casayá section" in w for w in result.warnings)

    def test_bank_id(self):
        assert BancoPopularParser.bank_id == BankId.BANCO_POPULAR
