"""
Base classes for bank parsers.

Every bank implements the same contract: obtain its rate document
(live fetch or local fixture), fingerprint it, extract rates and turn
them into Offer records. Layout problems are reported as warnings; only
a failed fetch or a missing fixture raises.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import structlog
from bs4 import BeautifulSoup

from tasas_scraper.config.loader import ParserConfig
from tasas_scraper.core.catalog import bank_name
from tasas_scraper.core.hashing import generate_offer_id, sha256_hex
from tasas_scraper.core.http_client import HttpClient
from tasas_scraper.core.numbers import parse_spanish_date
from tasas_scraper.core.models import (
    BankId,
    BankParseResult,
    Channel,
    CopFixedRate,
    CurrencyIndex,
    ExtractionInfo,
    ExtractionMethod,
    Offer,
    OfferConditions,
    OfferSource,
    PayrollDiscount,
    ProductType,
    Segment,
    SourceType,
    UvrSpreadRate,
    utc_now_iso,
)
from tasas_scraper.plugins.pdf import PdfExtractionError, extract_pdf_pages

logger = structlog.get_logger(__name__)

# One percentage as printed in rate sheets: "12,50%", "UVR + 6,50%", "12,50 % E.A."
RATE_RE = r"(?:UVR\s*\+\s*)?(\d{1,2}(?:[.,]\d{1,2})?)\s*%(?:\s*E\.\s*A\.|\s*M\.\s*V\.)?"

_VALID_FROM_RE = re.compile(
    r"Vigen(?:tes?|cia)\s+(?:a\s+partir\s+del?|desde(?:\s+el)?)\s*:?\s*(.{0,40})",
    re.IGNORECASE,
)


def find_section(
    text: str,
    start: str,
    ends: Iterable[str] = (),
) -> Optional[str]:
    """
    Slice the text that follows a section header.

    Args:
        text: Full document text
        start: Regex of the section header
        ends: Regexes of headers that close the section

    Returns:
        Text between the header and the nearest closing header (or the
        end of the document), None if the header is absent
    """
    match = re.search(start, text, re.IGNORECASE)
    if not match:
        return None

    rest = text[match.end():]
    end = len(rest)
    for pattern in ends:
        closing = re.search(pattern, rest, re.IGNORECASE)
        if closing:
            end = min(end, closing.start())

    return rest[:end]


def find_valid_from(text: str) -> Optional[str]:
    """Find a "Vigentes a partir del ..." date and return it as YYYY-MM-DD."""
    match = _VALID_FROM_RE.search(text or "")
    if not match:
        return None

    parsed = parse_spanish_date(match.group(1))
    return parsed.isoformat() if parsed else None


def segment_from_label(label: str) -> Segment:
    """Map "VIS" / "No VIS" labels to a segment ("No VIS" checked first)."""
    normalized = re.sub(r"\s+", " ", label or "").strip().upper()
    if re.search(r"\bNO\s?VIS\b|DIFERENTE\s+DE\s+VIS", normalized):
        return Segment.NO_VIS
    if re.search(r"\bVIS\b|INTER[EÉ]S\s+SOCIAL", normalized):
        return Segment.VIS
    return Segment.UNKNOWN


def currency_from_label(label: str) -> CurrencyIndex:
    """Map "UVR" / "Pesos" labels to a currency index."""
    return CurrencyIndex.UVR if "UVR" in (label or "").upper() else CurrencyIndex.COP


@dataclass
class ExtractedRate:
    """
    One rate found in a document, before it becomes an Offer.

    `rate_from`/`rate_to` hold E.A. percentages for COP and E.A. spreads
    for UVR; `monthly_from`/`monthly_to` the M.V. equivalents when shown.
    """
    product_type: ProductType
    currency_index: CurrencyIndex
    segment: Segment
    rate_from: float
    rate_to: Optional[float] = None
    monthly_from: Optional[float] = None
    monthly_to: Optional[float] = None
    channel: Channel = Channel.UNSPECIFIED
    locator: str = ""
    excerpt: Optional[str] = None
    payroll_discount: Optional[PayrollDiscount] = None
    notes: list[str] = field(default_factory=list)

    def build_rate(self):
        if self.currency_index == CurrencyIndex.COP:
            return CopFixedRate(
                ea_percent_from=self.rate_from,
                ea_percent_to=self.rate_to,
                mv_percent_from=self.monthly_from,
                mv_percent_to=self.monthly_to,
            )
        return UvrSpreadRate(
            spread_ea_from=self.rate_from,
            spread_ea_to=self.rate_to,
            spread_mv_from=self.monthly_from,
            spread_mv_to=self.monthly_to,
        )


@dataclass
class Extraction:
    """Everything a parser pulled out of one document."""
    rates: list[ExtractedRate] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    valid_from: Optional[str] = None  # YYYY-MM-DD


class BankParser(ABC):
    """
    Abstract base class for bank parsers.

    Subclasses declare the bank, its document and its extraction method
    as class attributes and implement `extract()`.
    """

    bank_id: BankId
    source_url: str
    source_type: SourceType = SourceType.HTML
    extraction_method: ExtractionMethod = ExtractionMethod.REGEX
    document_label: Optional[str] = None
    fixture_name: str = "rates.pdf"
    expected_offers: int = 0

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        http_client: Optional[HttpClient] = None,
    ):
        """
        Initialize parser.

        Args:
            config: Source toggle (live fetch or fixtures)
            http_client: Shared HTTP client (creates own if not provided)
        """
        self.config = config or ParserConfig()
        self.http_client = http_client
        self._owns_client = http_client is None
        self.document_url = self.source_url
        self.logger = logger.bind(bank=self.bank_id.value)

    async def __aenter__(self) -> "BankParser":
        """Enter async context."""
        if self._owns_client and self.http_client is None:
            self.http_client = HttpClient()
            await self.http_client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._owns_client and self.http_client:
            await self.http_client.__aexit__(exc_type, exc_val, exc_tb)
            self.http_client = None

    @property
    def fixture_path(self) -> Path:
        return self.config.fixture_file(self.bank_id, self.fixture_name)

    async def fetch(self, url: str) -> bytes:
        """Fetch a document, opening a private client when none is shared."""
        if self.http_client is not None:
            return await self.http_client.get_bytes(url)

        async with HttpClient() as client:
            return await client.get_bytes(url)

    async def load_document(self) -> bytes:
        """
        Obtain the raw document.

        Subclasses that discover the document at run time set
        `self.document_url` to the URL actually read.

        Raises:
            FileNotFoundError: Fixture mode and the fixture is missing
            FetchError: Live mode and the fetch failed
        """
        if self.config.use_fixtures:
            path = self.fixture_path
            self.logger.debug("reading_fixture", path=str(path))
            return path.read_bytes()

        self.logger.info("fetching_document", url=self.source_url)
        return await self.fetch(self.source_url)

    @abstractmethod
    def extract(self, document: bytes) -> Extraction:
        """
        Extract rates from the raw document.

        Must not raise for layout problems; report them as warnings.
        """

    async def parse(self) -> BankParseResult:
        """
        Fetch (or read) the document and extract offers.

        Returns:
            BankParseResult; zero offers with warnings when the layout
            is not recognized
        """
        document = await self.load_document()
        raw_text_hash = sha256_hex(document)
        retrieved_at = utc_now_iso()

        extraction = self.extract(document)
        warnings = list(extraction.warnings)
        offers = self._build_offers(extraction, raw_text_hash, retrieved_at, warnings)

        if not offers:
            warnings.append("No offers extracted - document structure may have changed")
        elif len(offers) < self.expected_offers:
            warnings.append(
                f"Only extracted {len(offers)} offers, expected {self.expected_offers}"
            )

        for warning in warnings:
            self.logger.warning("parser_warning", warning=warning)

        self.logger.info(
            "bank_parsed",
            offers=len(offers),
            warnings=len(warnings),
            hash=raw_text_hash[:12],
        )

        return BankParseResult(
            bank_id=self.bank_id,
            offers=offers,
            warnings=warnings,
            raw_text_hash=raw_text_hash,
        )

    def _build_offers(
        self,
        extraction: Extraction,
        raw_text_hash: str,
        retrieved_at: str,
        warnings: list[str],
    ) -> list[Offer]:
        offers = []
        seen_ids = set()

        for extracted in extraction.rates:
            try:
                rate = extracted.build_rate()
            except ValueError as e:
                warnings.append(f"Discarded {extracted.excerpt or extracted.locator}: {e}")
                continue

            offer_id = generate_offer_id(
                self.bank_id,
                extracted.product_type,
                extracted.currency_index,
                extracted.segment,
                extracted.channel,
                rate.rate_from,
            )
            if offer_id in seen_ids:
                warnings.append(f"Duplicate offer skipped: {extracted.excerpt or offer_id}")
                continue
            seen_ids.add(offer_id)

            offers.append(Offer(
                id=offer_id,
                bank_id=self.bank_id,
                bank_name=bank_name(self.bank_id),
                product_type=extracted.product_type,
                currency_index=extracted.currency_index,
                segment=extracted.segment,
                channel=extracted.channel,
                rate=rate,
                conditions=OfferConditions(
                    payroll_discount=extracted.payroll_discount,
                    notes=list(extracted.notes),
                ),
                source=OfferSource(
                    url=self.document_url,
                    source_type=self.source_type,
                    retrieved_at=retrieved_at,
                    extraction=ExtractionInfo(
                        method=self.extraction_method,
                        locator=extracted.locator,
                        excerpt=extracted.excerpt,
                    ),
                    document_label=self.document_label,
                    valid_from=extraction.valid_from,
                    extracted_text_fingerprint=raw_text_hash,
                ),
            ))

        return offers


class HtmlBankParser(BankParser):
    """Parser for banks that publish rates on an HTML page."""

    source_type = SourceType.HTML
    extraction_method = ExtractionMethod.CSS_SELECTOR
    fixture_name = "rates-page.html"

    def extract(self, document: bytes) -> Extraction:
        html = document.decode("utf-8", errors="replace")
        if not html.strip():
            return Extraction(warnings=["Empty HTML document"])

        soup = BeautifulSoup(html, "lxml")
        return self.extract_from_soup(soup)

    @abstractmethod
    def extract_from_soup(self, soup: BeautifulSoup) -> Extraction:
        """Extract rates from the parsed page."""


class PdfBankParser(BankParser):
    """Parser for banks that publish rates in a PDF document."""

    source_type = SourceType.PDF
    extraction_method = ExtractionMethod.REGEX
    fixture_name = "rates.pdf"

    def extract(self, document: bytes) -> Extraction:
        try:
            pages = extract_pdf_pages(document)
        except PdfExtractionError as e:
            return Extraction(warnings=[f"PDF text extraction failed: {e}"])

        text = "\n".join(pages)
        if not text.strip():
            return Extraction(warnings=["PDF contains no extractable text"])

        extraction = self.extract_from_text(text)
        if extraction.valid_from is None:
            extraction.valid_from = find_valid_from(text)

        return extraction

    @abstractmethod
    def extract_from_text(self, text: str) -> Extraction:
        """Extract rates from the concatenated page text."""
