"""
Bancolombia parser.

Rates are published on the mortgage product page as two small tables,
one under "Tasas para vivienda en UVR" and one under "Tasas para
vivienda en pesos", each with a VIS and a No VIS row.
"""

import re

from bs4 import BeautifulSoup

from tasas_scraper.core.models import (
    BankId,
    CurrencyIndex,
    DiscountType,
    PayrollDiscount,
    ProductType,
    Segment,
)
from tasas_scraper.core.numbers import ParseError, normalize_whitespace, parse_annual_percent, parse_index_spread

from .base import Extraction, ExtractedRate, HtmlBankParser, segment_from_label

SOURCE_URL = (
    "https://www.bancolombia.com/personas/creditos/vivienda/"
    "credito-hipotecario-para-comprar-vivienda"
)

SECTIONS = {
    CurrencyIndex.UVR: re.compile(r"Tasas\s+para\s+vivienda\s+en\s+UVR", re.IGNORECASE),
    CurrencyIndex.COP: re.compile(r"Tasas\s+para\s+vivienda\s+en\s+pesos", re.IGNORECASE),
}

HEADINGS = ["h2", "h3", "h4"]

# Stated as prose on the page: one percentage point off for payroll clients
PAYROLL_DISCOUNT = PayrollDiscount(
    type=DiscountType.PERCENT_OFF,
    value=1.0,
    note="Descuento para clientes con nómina en Bancolombia",
)


class BancolombiaParser(HtmlBankParser):
    """Parser for the Bancolombia mortgage page."""

    bank_id = BankId.BANCOLOMBIA
    source_url = SOURCE_URL
    document_label = "Crédito hipotecario para comprar vivienda"
    expected_offers = 4

    def extract_from_soup(self, soup: BeautifulSoup) -> Extraction:
        extraction = Extraction()

        for currency, pattern in SECTIONS.items():
            heading = soup.find(
                lambda tag: tag.name in HEADINGS and pattern.search(tag.get_text(" "))
            )
            if heading is None:
                extraction.warnings.append(f"Could not find section: {pattern.pattern}")
                continue

            table = heading.find_next("table")
            if table is None:
                extraction.warnings.append(
                    f"Could not find rate table after {heading.get_text(strip=True)!r}"
                )
                continue

            locator = f'{heading.name}:-soup-contains("{heading.get_text(strip=True)}") ~ table tr'
            extraction.rates.extend(
                self._parse_rows(table, currency, locator, extraction.warnings)
            )

        return extraction

    def _parse_rows(self, table, currency, locator, warnings) -> list[ExtractedRate]:
        rates = []

        for row in table.find_all("tr"):
            cells = row.find_all(["td", "th"])
            if len(cells) < 2:
                continue

            label = normalize_whitespace(cells[0].get_text(" "))
            value = normalize_whitespace(cells[1].get_text(" "))

            segment = segment_from_label(label)
            if segment == Segment.UNKNOWN:
                # Header row
                continue

            try:
                if currency == CurrencyIndex.UVR:
                    rate = parse_index_spread(value)
                else:
                    rate = parse_annual_percent(value)
            except ParseError as e:
                warnings.append(f"Failed to parse rate {value!r} for {label}: {e}")
                continue

            rates.append(ExtractedRate(
                product_type=ProductType.HIPOTECARIO,
                currency_index=currency,
                segment=segment,
                rate_from=rate,
                locator=locator,
                excerpt=f"{label}: {value}",
                payroll_discount=PAYROLL_DISCOUNT,
            ))

        return rates
