"""
Banco Caja Social parser.

The housing credit PDF shows E.A. and M.V. ranges per segment and
currency, and states the date the rates apply from:

    Vigentes a partir del 1 de diciembre de 2025
    VIS Pesos 10,00% - 14,85% 0,80% - 1,16%
    VIS UVR UVR + 5,15% - UVR + 8,10% UVR + 0,42% - UVR + 0,65%
"""

import re

from tasas_scraper.core.models import BankId, ProductType
from tasas_scraper.core.numbers import normalize_whitespace, parse_locale_number

from .base import (
    RATE_RE,
    Extraction,
    ExtractedRate,
    PdfBankParser,
    currency_from_label,
    find_section,
    find_valid_from,
    segment_from_label,
)

SOURCE_URL = (
    "https://www.bancocajasocial.com/content/dam/bcs/documentos/informacion-corporativa/"
    "tasas-precios-y-comisiones/credito-vivienda/Tasas-Credito-Vivienda.pdf"
)

SECTION_START = r"Tasas\s+Cr[ée]dito\s+de\s+Vivienda"

RANGE_ROW = re.compile(
    rf"^\s*(?P<segment>No\s+VIS|VIS)\s+(?P<currency>Pesos|UVR)\s+"
    rf"{RATE_RE}\s*-\s*{RATE_RE}\s+{RATE_RE}\s*-\s*{RATE_RE}",
    re.IGNORECASE | re.MULTILINE,
)


class BancoCajaSocialParser(PdfBankParser):
    """Parser for the Banco Caja Social housing credit PDF."""

    bank_id = BankId.BANCO_CAJA_SOCIAL
    source_url = SOURCE_URL
    document_label = "Tasas Crédito de Vivienda"
    expected_offers = 4

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction(valid_from=find_valid_from(text))

        if extraction.valid_from is None:
            extraction.warnings.append("Could not find validity date ('Vigentes a partir del')")

        section = find_section(text, SECTION_START)
        if section is None:
            extraction.warnings.append("Could not find 'Tasas Crédito de Vivienda' header")
            section = text

        for match in RANGE_ROW.finditer(section):
            # Unnamed groups 3-6: E.A. from/to, M.V. from/to
            ea_from, ea_to, mv_from, mv_to = match.group(3, 4, 5, 6)
            extraction.rates.append(ExtractedRate(
                product_type=ProductType.HIPOTECARIO,
                currency_index=currency_from_label(match.group("currency")),
                segment=segment_from_label(match.group("segment")),
                rate_from=parse_locale_number(ea_from),
                rate_to=parse_locale_number(ea_to),
                monthly_from=parse_locale_number(mv_from),
                monthly_to=parse_locale_number(mv_to),
                locator="caja_social_range_row",
                excerpt=normalize_whitespace(match.group(0)),
            ))

        if not extraction.rates:
            extraction.warnings.append("No rate rows matched in the housing credit table")

        return extraction
