"""
Itaú parser.

The consumer rates PDF quotes one E.A. range per currency for mortgage
credit and for housing leasing, without a VIS split.
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
)

SOURCE_URL = "https://banco.itau.co/documents/d/personas/tasas-vigentes-pn-color-01-dic-2025"

HIPOTECARIO_HEADER = r"Cr[ée]dito\s+hipotecario"
LEASING_HEADER = r"Leasing\s+habitacional"
OTHER_HEADERS = [
    r"Tarjetas?\s+de\s+cr[ée]dito",
    r"Cr[ée]dito\s+de\s+(?:consumo|veh[íi]culo|libre\s+inversi[óo]n)",
    r"Libranza",
]

RANGE_ROW = re.compile(
    rf"^\s*(?P<currency>Pesos|UVR)\s+{RATE_RE}(?:\s*-\s*{RATE_RE})?",
    re.IGNORECASE | re.MULTILINE,
)


class ItauParser(PdfBankParser):
    """Parser for the Itaú consumer rates PDF."""

    bank_id = BankId.ITAU
    source_url = SOURCE_URL
    document_label = "Tasas vigentes personas naturales"
    expected_offers = 3

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction()

        sections = [
            (HIPOTECARIO_HEADER, ProductType.HIPOTECARIO, [LEASING_HEADER, *OTHER_HEADERS]),
            (LEASING_HEADER, ProductType.LEASING, [HIPOTECARIO_HEADER, *OTHER_HEADERS]),
        ]

        for header, product_type, ends in sections:
            section = find_section(text, header, ends)
            if section is None:
                extraction.warnings.append(f"Could not find section: {header}")
                continue

            matches = list(RANGE_ROW.finditer(section))
            if not matches:
                extraction.warnings.append(f"No rate rows matched in section: {header}")

            for match in matches:
                rate_from, rate_to = match.group(2), match.group(3)
                extraction.rates.append(ExtractedRate(
                    product_type=product_type,
                    currency_index=currency_from_label(match.group("currency")),
                    segment=Segment.UNKNOWN,
                    rate_from=parse_locale_number(rate_from),
                    rate_to=parse_locale_number(rate_to) if rate_to else None,
                    locator=header,
                    excerpt=normalize_whitespace(match.group(0)),
                ))

        return extraction
