"""
Banco Popular parser.

The "Casayá" housing table lists one row per product with the rate for
a 15-year and a 20-year term; the shorter term is the lower bound.
Segments are not distinguished.
"""

from bs4 import BeautifulSoup

from tasas_scraper.core.models import BankId, CurrencyIndex, ProductType, Segment
from tasas_scraper.core.numbers import ParseError, normalize_whitespace, parse_locale_number, parse_optional_number

from .base import Extraction, ExtractedRate, HtmlBankParser

SOURCE_URL = "https://www.bancopopular.com.co/wps/portal/bancopopular/inicio/informacion-interes/tasas"

SELECTORS = {
    "casaya_section": "#table-rates-casaya",
    "rate_table": "table.simple-table",
    "rows": "tbody tr",
}


def product_from_name(name: str):
    lowered = name.lower()
    if "leasing" in lowered:
        return ProductType.LEASING
    if "hipotecario" in lowered:
        return ProductType.HIPOTECARIO
    return None


class BancoPopularParser(HtmlBankParser):
    """Parser for the Banco Popular rates page."""

    bank_id = BankId.BANCO_POPULAR
    source_url = SOURCE_URL
    document_label = "Tasas y Tarifas - Casayá"
    fixture_name = "tasas.html"
    expected_offers = 2

    def extract_from_soup(self, soup: BeautifulSoup) -> Extraction:
        extraction = Extraction()

        section = soup.select_one(SELECTORS["casaya_section"])
        if section is None:
            extraction.warnings.append(
                f"Could not find Casayá section ({SELECTORS['casaya_section']})"
            )
            return extraction

        table = section.select_one(SELECTORS["rate_table"])
        if table is None:
            extraction.warnings.append("Could not find rate table in Casayá section")
            return extraction

        locator = f"{SELECTORS['casaya_section']} {SELECTORS['rate_table']}"

        for row in table.select(SELECTORS["rows"]):
            cells = row.find_all("td")
            if len(cells) < 3:
                continue

            name = normalize_whitespace(cells[0].get_text(" "))
            rate_15 = normalize_whitespace(cells[1].get_text(" "))
            rate_20 = normalize_whitespace(cells[2].get_text(" "))

            product_type = product_from_name(name)
            if product_type is None:
                extraction.warnings.append(f"Unknown product type: {name}")
                continue

            try:
                rate_from = parse_locale_number(rate_15)
            except ParseError as e:
                extraction.warnings.append(f"Failed to parse rate {rate_15!r} for {name}: {e}")
                continue

            extraction.rates.append(ExtractedRate(
                product_type=product_type,
                currency_index=CurrencyIndex.COP,
                segment=Segment.UNKNOWN,
                rate_from=rate_from,
                # The 20-year rate is optional
                rate_to=parse_optional_number(rate_20),
                locator=locator,
                excerpt=f"{name}: {rate_15} - {rate_20}",
            ))

        return extraction
