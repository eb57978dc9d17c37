"""
Core layer - stable foundation for the rate updater.

Components:
- models: Offer, Rate, Rankings dataclasses and enums
- catalog: Bank display names and informational URLs
- numbers: Colombian number, spread and date parsing
- hashing: Content hashes and stable offer ids
- http_client: Rate-limited, retrying HTTP client
- schemas: pydantic validation of the persisted documents
- rankings: Scenario filters and top-3 ranking
- storage: JSON snapshot persistence
- formatting: Display labels for rates and scenarios
"""

from .models import (
    BankId,
    BankParseResult,
    Channel,
    CopFixedRate,
    CurrencyIndex,
    DiscountType,
    ExtractionInfo,
    ExtractionMethod,
    MetricKind,
    Offer,
    OfferConditions,
    OffersDataset,
    OfferSource,
    PayrollDiscount,
    ProductType,
    RankedEntry,
    RankingMetric,
    Rankings,
    ScenarioKey,
    Segment,
    SourceType,
    UvrSpreadRate,
)
from .catalog import BANK_NAMES, BANK_URLS, bank_name
from .numbers import (
    ParseError,
    parse_annual_percent,
    parse_index_spread,
    parse_locale_number,
    parse_spanish_date,
)
from .hashing import generate_offer_id, sha256_hex
from .http_client import FetchError, HttpClient
from .schemas import SchemaValidationError, validate_dataset, validate_rankings
from .rankings import SCENARIO_FILTERS, best_offer, compute_rankings, rank_scenario
from .formatting import SCENARIO_LABELS, format_rate

__all__ = [
    "BankId",
    "BankParseResult",
    "Channel",
    "CopFixedRate",
    "CurrencyIndex",
    "DiscountType",
    "ExtractionInfo",
    "ExtractionMethod",
    "MetricKind",
    "Offer",
    "OfferConditions",
    "OffersDataset",
    "OfferSource",
    "PayrollDiscount",
    "ProductType",
    "RankedEntry",
    "RankingMetric",
    "Rankings",
    "ScenarioKey",
    "Segment",
    "SourceType",
    "UvrSpreadRate",
    "BANK_NAMES",
    "BANK_URLS",
    "bank_name",
    "ParseError",
    "parse_annual_percent",
    "parse_index_spread",
    "parse_locale_number",
    "parse_spanish_date",
    "generate_offer_id",
    "sha256_hex",
    "FetchError",
    "HttpClient",
    "SchemaValidationError",
    "validate_dataset",
    "validate_rankings",
    "SCENARIO_FILTERS",
    "best_offer",
    "compute_rankings",
    "rank_scenario",
    "SCENARIO_LABELS",
    "format_rate",
]
