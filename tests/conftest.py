"""Shared fixtures for the test suite."""

from pathlib import Path

import pytest

from tasas_scraper.config.loader import ParserConfig
from tasas_scraper.core.models import (
    BankId,
    Channel,
    CopFixedRate,
    CurrencyIndex,
    DiscountType,
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
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CORRUPTED_FIXTURE = FIXTURES_DIR / "corrupted.bin"


@pytest.fixture
def fixtures_dir() -> Path:
    """Root directory of the bank fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def fixture_config() -> ParserConfig:
    """Parser config reading documents from tests/fixtures."""
    return ParserConfig(use_fixtures=True, fixtures_dir=str(FIXTURES_DIR))


@pytest.fixture
def corrupted_config() -> ParserConfig:
    """Parser config pointing every parser at a garbage document."""
    return ParserConfig(use_fixtures=True, fixtures_path=str(CORRUPTED_FIXTURE))


def build_offer(
    offer_id: str = "a",
    bank_id: BankId = BankId.BBVA,
    product_type: ProductType = ProductType.HIPOTECARIO,
    currency_index: CurrencyIndex = CurrencyIndex.COP,
    segment: Segment = Segment.VIS,
    channel: Channel = Channel.UNSPECIFIED,
    rate_from: float = 12.0,
    rate_to: float = None,
    payroll: bool = False,
) -> Offer:
    """Build an offer with sensible defaults."""
    if currency_index == CurrencyIndex.COP:
        rate = CopFixedRate(ea_percent_from=rate_from, ea_percent_to=rate_to)
    else:
        rate = UvrSpreadRate(spread_ea_from=rate_from, spread_ea_to=rate_to)

    discount = PayrollDiscount(type=DiscountType.BPS_OFF, value=100) if payroll else None

    return Offer(
        id=offer_id,
        bank_id=bank_id,
        bank_name="Test Bank",
        product_type=product_type,
        currency_index=currency_index,
        segment=segment,
        channel=channel,
        rate=rate,
        conditions=OfferConditions(payroll_discount=discount),
        source=OfferSource(
            url="https://example.com/tasas.pdf",
            source_type=SourceType.PDF,
            retrieved_at="2025-12-01T10:00:00.000Z",
            extraction=ExtractionInfo(method=ExtractionMethod.REGEX, locator="test"),
        ),
    )


@pytest.fixture
def make_offer():
    """Factory fixture for offers."""
    return build_offer
