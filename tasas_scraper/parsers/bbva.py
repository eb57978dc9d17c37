"""
BBVA parser.

The housing rate sheet is a PDF table with one row per line, segment
and currency, giving the E.A. rate, its M.V. equivalent and, for
mortgage lines, the payroll discount in basis points:

    Vivienda VIS Pesos 9,77% 0,78% 200 pbs
    Vivienda VIS UVR UVR + 5,52% UVR + 0,45% 200 pbs
    Leasing No VIS Pesos 10,19% 0,81%
"""

import re

from tasas_scraper.core.models import (
    BankId,
    DiscountType,
    PayrollDiscount,
    ProductType,
)
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
    "https://www.bbva.com.co/content/dam/public-web/colombia/documents/home/"
    "prefooter/tarifas/DO-11-TASAS-VIVIENDA.pdf"
)

SECTION_START = r"Tasas\s+de\s+inter[ée]s\s+l[íi]neas\s+de\s+vivienda"

ROW_PATTERN = re.compile(
    rf"^\s*(?P<line>Vivienda|Leasing)\s+(?P<segment>No\s+VIS|VIS)\s+(?P<currency>Pesos|UVR)\s+"
    rf"{RATE_RE}\s+{RATE_RE}(?:\s+(?P<bps>\d+)\s*(?:pbs|pb|bps))?",
    re.IGNORECASE | re.MULTILINE,
)


class BbvaParser(PdfBankParser):
    """Parser for the BBVA housing rates PDF."""

    bank_id = BankId.BBVA
    source_url = SOURCE_URL
    document_label = "Tasas de interés líneas de vivienda"
    expected_offers = 6

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction()

        section = find_section(text, SECTION_START)
        if section is None:
            extraction.warnings.append("Could not find 'Tasas de interés líneas de vivienda' header")
            section = text

        for match in ROW_PATTERN.finditer(section):
            # Unnamed groups 4 and 5 are the E.A. and M.V. rates
            ea_text, mv_text = match.group(4), match.group(5)
            product_type = (
                ProductType.LEASING
                if match.group("line").lower() == "leasing"
                else ProductType.HIPOTECARIO
            )

            discount = None
            if match.group("bps"):
                discount = PayrollDiscount(
                    type=DiscountType.BPS_OFF,
                    value=float(match.group("bps")),
                    note="Descuento por nómina en BBVA",
                )

            extraction.rates.append(ExtractedRate(
                product_type=product_type,
                currency_index=currency_from_label(match.group("currency")),
                segment=segment_from_label(match.group("segment")),
                rate_from=parse_locale_number(ea_text),
                monthly_from=parse_locale_number(mv_text),
                locator="bbva_vivienda_row",
                excerpt=normalize_whitespace(match.group(0)),
                payroll_discount=discount,
            ))

        if not extraction.rates:
            extraction.warnings.append("No rate rows matched in the housing rates table")

        return extraction
