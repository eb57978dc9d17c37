"""
Banco de Occidente parser.

The "Tasas Vivienda" table of the personal rates PDF has four values,
mortgage from/to and leasing from/to:

    Tasas Vivienda TASA E.A. CRÉDITO HIPOTECARIO LEASING HABITACIONAL
    DESDE HASTA DESDE HASTA
    11,62% 16,51% 11,25% 16,00%

Text extraction splits the digits with spaces ("1 1 , 62 %"), so the
values are rejoined before parsing.
"""

import re
from typing import Optional

from tasas_scraper.core.models import BankId, CurrencyIndex, ProductType, Segment
from tasas_scraper.core.numbers import ParseError, collapse_spaces, parse_locale_number

from .base import Extraction, ExtractedRate, PdfBankParser

SOURCE_URL = (
    "https://www.bancodeoccidente.com.co/banco-de-occidente/documentos/tasas-tarifas/"
    "para-personas/tasas/tasas-personas.pdf"
)

SPACED_RATE = r"\d\s*\d?\s*,\s*\d\s*\d?\s*%"
SPACED_RATE_RE = re.compile(f"({SPACED_RATE})")

VIVIENDA_TABLE = re.compile(
    r"(?:Tasas\s+Vivienda|CR[ÉE]DITO\s+HIPOTECARIO\s+LEASING\s+HABITACIONAL)"
    r"[\s\S]*?DESDE\s+HASTA\s+DESDE\s+HASTA[\s\S]*?"
    rf"((?:{SPACED_RATE}\s*){{4}})",
    re.IGNORECASE,
)

FALLBACK_MARKER = "Vivienda"
FALLBACK_WINDOW = 500


def parse_spaced_rate(text: str) -> Optional[float]:
    """Parse "1 1 , 62 %" as 11.62, None if it is not a number."""
    try:
        return parse_locale_number(collapse_spaces(text))
    except ParseError:
        return None


class BancoDeOccidenteParser(PdfBankParser):
    """Parser for the Banco de Occidente personal rates PDF."""

    bank_id = BankId.BANCO_DE_OCCIDENTE
    source_url = SOURCE_URL
    document_label = "Tasas y Tarifas - Personas"
    expected_offers = 2

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction()

        match = VIVIENDA_TABLE.search(text)
        if match:
            values = SPACED_RATE_RE.findall(match.group(1))
        else:
            # Four consecutive rates shortly after the section name
            index = text.find(FALLBACK_MARKER)
            if index == -1:
                extraction.warnings.append("Could not find 'Vivienda' section")
                return extraction

            extraction.warnings.append("Vivienda table header not found, using nearby rates")
            window = text[index:index + FALLBACK_WINDOW]
            values = SPACED_RATE_RE.findall(window)

        if len(values) < 4:
            extraction.warnings.append(
                f"Expected 4 vivienda rates, found {len(values)}"
            )
            return extraction

        products = [
            (ProductType.HIPOTECARIO, "Crédito Hipotecario", values[0], values[1]),
            (ProductType.LEASING, "Leasing Habitacional", values[2], values[3]),
        ]

        for product_type, label, raw_from, raw_to in products:
            rate_from = parse_spaced_rate(raw_from)
            rate_to = parse_spaced_rate(raw_to)
            if rate_from is None or rate_to is None:
                extraction.warnings.append(f"Failed to parse {label} rates: {raw_from} - {raw_to}")
                continue

            extraction.rates.append(ExtractedRate(
                product_type=product_type,
                currency_index=CurrencyIndex.COP,
                segment=Segment.UNKNOWN,
                rate_from=rate_from,
                rate_to=rate_to,
                locator="vivienda_section",
                excerpt=f"{label}: {raw_from.strip()} - {raw_to.strip()}",
            ))

        return extraction
