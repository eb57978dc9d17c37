"""
AV Villas parser.

The rate sheet PDF changes URL with every update, so live runs first
read the mortgage landing page and follow its rates PDF link. The PDF
has three sections:

- "Créditos Hipotecarios" (branch offers)
- "Créditos Hipotecarios-Digital" (channel DIGITAL)
- "Leasing Habitacional" (no segment split)
"""

import re
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from tasas_scraper.core.http_client import FetchError
from tasas_scraper.core.models import BankId, Channel, ProductType, Segment
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

LANDING_URL = "https://www.avvillas.com.co/credito-hipotecario"
RATES_PDF_URL = "https://www.avvillas.com.co/documents/20122/0/Tasas+de+Colocacion.pdf"
LANDING_FIXTURE = "landing.html"

HIPOTECARIO_HEADER = r"Cr[ée]ditos\s+Hipotecarios(?!\s*-\s*Digital)"
DIGITAL_HEADER = r"Cr[ée]ditos\s+Hipotecarios\s*-\s*Digital"
LEASING_HEADER = r"Leasing\s+Habitacional"

SECTIONS = [
    (HIPOTECARIO_HEADER, ProductType.HIPOTECARIO, Channel.UNSPECIFIED, [DIGITAL_HEADER, LEASING_HEADER]),
    (DIGITAL_HEADER, ProductType.HIPOTECARIO, Channel.DIGITAL, [HIPOTECARIO_HEADER, LEASING_HEADER]),
    (LEASING_HEADER, ProductType.LEASING, Channel.UNSPECIFIED, [HIPOTECARIO_HEADER, DIGITAL_HEADER]),
]

ROW_PATTERN = re.compile(
    rf"^\s*(?:(?P<segment>No\s+VIS|VIS)\s+)?(?P<currency>Pesos|UVR)\s+{RATE_RE}(?:\s+{RATE_RE})?",
    re.IGNORECASE | re.MULTILINE,
)


def discover_pdf_url(html: str, base_url: str = LANDING_URL) -> Optional[str]:
    """
    Find the rates PDF linked from the landing page.

    Args:
        html: Landing page HTML
        base_url: URL the page was read from (for relative links)

    Returns:
        Absolute PDF URL or None
    """
    soup = BeautifulSoup(html, "lxml")

    for link in soup.select('a[href*=".pdf"]'):
        href = link.get("href", "")
        label = link.get_text(" ", strip=True)
        if "tasas" in href.lower() or "tasas" in label.lower():
            return urljoin(base_url, href)

    return None


class AvvillasParser(PdfBankParser):
    """Parser for the AV Villas placement rates PDF."""

    bank_id = BankId.AVVILLAS
    source_url = LANDING_URL
    document_label = "Tasas de Colocación - Crédito Según Línea y Plazo"
    expected_offers = 8

    async def load_document(self) -> bytes:
        if self.config.use_fixtures:
            self.document_url = self._fixture_pdf_url()
            return await super().load_document()

        self.logger.info("fetching_landing_page", url=LANDING_URL)
        landing = await self.fetch(LANDING_URL)

        pdf_url = discover_pdf_url(landing.decode("utf-8", errors="replace"), LANDING_URL)
        if pdf_url is None:
            raise FetchError("No rates PDF link found on landing page", url=LANDING_URL)

        self.document_url = pdf_url
        self.logger.info("fetching_document", url=pdf_url)
        return await self.fetch(pdf_url)

    def _fixture_pdf_url(self) -> str:
        """PDF URL linked from the landing page fixture, when one is stored."""
        if not self.config.fixtures_path:
            landing = self.config.fixture_file(self.bank_id, LANDING_FIXTURE)
            if landing.exists():
                html = landing.read_text(encoding="utf-8", errors="replace")
                pdf_url = discover_pdf_url(html, LANDING_URL)
                if pdf_url:
                    return pdf_url
        return RATES_PDF_URL

    def extract_from_text(self, text: str) -> Extraction:
        extraction = Extraction()

        for header, product_type, channel, ends in SECTIONS:
            section = find_section(text, header, ends)
            if section is None:
                extraction.warnings.append(f"Could not find section: {header}")
                continue

            found = self._parse_section(section, product_type, channel, header)
            if not found:
                extraction.warnings.append(f"No rate rows matched in section: {header}")
            extraction.rates.extend(found)

        return extraction

    def _parse_section(self, section, product_type, channel, locator) -> list[ExtractedRate]:
        rates = []

        for match in ROW_PATTERN.finditer(section):
            rate_from, rate_to = match.group(3), match.group(4)
            segment = (
                segment_from_label(match.group("segment"))
                if match.group("segment")
                else Segment.UNKNOWN
            )

            rates.append(ExtractedRate(
                product_type=product_type,
                currency_index=currency_from_label(match.group("currency")),
                segment=segment,
                channel=channel,
                rate_from=parse_locale_number(rate_from),
                rate_to=parse_locale_number(rate_to) if rate_to else None,
                locator=locator,
                excerpt=normalize_whitespace(match.group(0)),
            ))

        return rates
