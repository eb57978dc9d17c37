"""
Scotiabank Colpatria parser.

Rates live in the "Hipotecario y leasing habitacional" section of the
general credit products PDF, as E.A. ranges per segment and currency.
"""

import re

from tasas_scraper.core.models import BankId, ProductType, Segment
from tasas_scraper.core.numbers import normalize_whitespace, parse_locale_number

from .base import (
    RATE_RE,
    Extraction,
    ExtractedRate,
    PdfBankParser,
    currency_from_label,
    find_section,
    segment_from_label,
)

SOURCE_URL = (
    "https://cdn.aglty.io/scotiabank-colombia/scotiabank-colpatria/pdf/"
    "tasas-y-tarifas/Tasas-y-productos-credito.pdf"
)

SECTION_START = r"Hipotecario\s+y\s+leasing\s+habitacional"
SECTION_ENDS = [
    r"Tarjetas?\s+de\s+cr[ée]dito",
    r"Cr[ée]dito\s+de\s+(?:consumo|veh[íi]culo|libre\s+inversi[óo]n)",
    r"Libranza",
]

MORTGAGE_ROW = re.compile(
    rf"Cr[ée]dito\s+hipotecario\s+(?P<segment>No\s+VIS|VIS)\s+(?P<currency>Pesos|UVR)\s+"
    rf"{RATE_RE}\s+{RATE_RE}",
    re.IGNORECASE,
)

LEASING_ROW = re.compile(
    rf"Leasing\s+habitacional\s+(?P<currency>Pesos|UVR)\s+{RATE_RE}\s+{RATE_RE}",
    re.IGNORECASE,
)


class ScotiabankColpatriaParser(PdfBankParser):
    """Parser for the Scotiabank Colpatria credit products PDF."""

    bank_id = BankId.SCOTIABANK_COLPATRIA
    source_url = SOURCE_URL
    document_label = "Tasas y productos de crédito"
    expected_offers = 5

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction()

        section = find_section(text, SECTION_START, SECTION_ENDS)
        if section is None:
            extraction.warnings.append("Could not find 'Hipotecario y leasing habitacional' section")
            return extraction

        for match in MORTGAGE_ROW.finditer(section):
            # Unnamed groups 3 and 4 are the rate bounds
            extraction.rates.append(ExtractedRate(
                product_type=ProductType.HIPOTECARIO,
                currency_index=currency_from_label(match.group("currency")),
                segment=segment_from_label(match.group("segment")),
                rate_from=parse_locale_number(match.group(3)),
                rate_to=parse_locale_number(match.group(4)),
                locator="scotiabank_hipotecario_row",
                excerpt=normalize_whitespace(match.group(0)),
            ))

        for match in LEASING_ROW.finditer(section):
            extraction.rates.append(ExtractedRate(
                product_type=ProductType.LEASING,
                currency_index=currency_from_label(match.group("currency")),
                segment=Segment.UNKNOWN,
                rate_from=parse_locale_number(match.group(2)),
                rate_to=parse_locale_number(match.group(3)),
                locator="scotiabank_leasing_row",
                excerpt=normalize_whitespace(match.group(0)),
            ))

        if not extraction.rates:
            extraction.warnings.append("No rate rows matched in the housing section")

        return extraction
