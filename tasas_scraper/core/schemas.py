"""
Validation schemas for the persisted JSON documents.

The dataclasses in core.models are what the pipeline works with; these
pydantic models describe the serialized shape that the web layer reads.
Both the offers dataset and the rankings are validated here before
anything is written to disk.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import (
    BankId,
    Channel,
    CurrencyIndex,
    ExtractionMethod,
    MetricKind,
    ProductType,
    ScenarioKey,
    Segment,
    SourceType,
)


class SchemaValidationError(ValueError):
    """Raised when a document does not match its declared shape."""

    def __init__(self, document: str, error: ValidationError):
        super().__init__(f"{document} failed validation: {error}")
        self.document = document
        self.errors = error.errors()


def _check_iso_datetime(value: str) -> str:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"not an ISO-8601 timestamp: {value!r}") from e
    return value


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CopFixedRateSchema(_Strict):
    kind: Literal["COP_FIXED"]
    ea_percent_from: float = Field(gt=0)
    ea_percent_to: Optional[float] = Field(default=None, gt=0)
    mv_percent_from: Optional[float] = Field(default=None, gt=0)
    mv_percent_to: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_ranges(self):
        if self.ea_percent_to is not None and self.ea_percent_to < self.ea_percent_from:
            raise ValueError("ea_percent_to must be >= ea_percent_from")
        if (
            self.mv_percent_from is not None
            and self.mv_percent_to is not None
            and self.mv_percent_to < self.mv_percent_from
        ):
            raise ValueError("mv_percent_to must be >= mv_percent_from")
        return self


class UvrSpreadRateSchema(_Strict):
    kind: Literal["UVR_SPREAD"]
    spread_ea_from: float = Field(ge=0)
    spread_ea_to: Optional[float] = Field(default=None, ge=0)
    spread_mv_from: Optional[float] = Field(default=None, ge=0)
    spread_mv_to: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_ranges(self):
        if self.spread_ea_to is not None and self.spread_ea_to < self.spread_ea_from:
            raise ValueError("spread_ea_to must be >= spread_ea_from")
        if (
            self.spread_mv_from is not None
            and self.spread_mv_to is not None
            and self.spread_mv_to < self.spread_mv_from
        ):
            raise ValueError("spread_mv_to must be >= spread_mv_from")
        return self


RateSchema = Annotated[
    Union[CopFixedRateSchema, UvrSpreadRateSchema],
    Field(discriminator="kind"),
]


class PayrollDiscountSchema(_Strict):
    type: Literal["BPS_OFF", "PERCENT_OFF"]
    value: float = Field(gt=0)
    applies_to: Literal["RATE"]
    note: Optional[str] = None


class OfferConditionsSchema(_Strict):
    payroll_discount: Optional[PayrollDiscountSchema] = None
    notes: Optional[list[str]] = None


class ExtractionInfoSchema(_Strict):
    method: ExtractionMethod
    locator: str
    excerpt: Optional[str] = None


class OfferSourceSchema(_Strict):
    url: str = Field(pattern=r"^https?://")
    source_type: SourceType
    document_label: Optional[str] = None
    valid_from: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    retrieved_at: str
    extracted_text_fingerprint: Optional[str] = None
    extraction: ExtractionInfoSchema

    @field_validator("retrieved_at")
    @classmethod
    def check_retrieved_at(cls, value: str) -> str:
        return _check_iso_datetime(value)


class OfferSchema(_Strict):
    id: str = Field(pattern=r"^[0-9a-f]{16}$")
    bank_id: BankId
    bank_name: str
    product_type: ProductType
    currency_index: CurrencyIndex
    segment: Segment
    channel: Channel
    rate: RateSchema
    term_months_min: Optional[int] = Field(default=None, gt=0)
    term_months_max: Optional[int] = Field(default=None, gt=0)
    amount_min_cop: Optional[float] = Field(default=None, gt=0)
    amount_max_cop: Optional[float] = Field(default=None, gt=0)
    conditions: OfferConditionsSchema
    source: OfferSourceSchema


class RankingMetricSchema(_Strict):
    kind: MetricKind
    value: float


class RankedEntrySchema(_Strict):
    position: int = Field(ge=1, le=3)
    offer_id: str
    metric: RankingMetricSchema


class RankingsSchema(_Strict):
    generated_at: str
    scenarios: dict[ScenarioKey, list[RankedEntrySchema]]

    @field_validator("generated_at")
    @classmethod
    def check_generated_at(cls, value: str) -> str:
        return _check_iso_datetime(value)

    @field_validator("scenarios")
    @classmethod
    def check_entries(cls, scenarios):
        for key, entries in scenarios.items():
            if not entries:
                raise ValueError(f"scenario {key.value} is present but empty")
            if len(entries) > 3:
                raise ValueError(f"scenario {key.value} has more than 3 entries")
            positions = [entry.position for entry in entries]
            if positions != list(range(1, len(entries) + 1)):
                raise ValueError(f"scenario {key.value} positions are not 1..n")
        return scenarios


class OffersDatasetSchema(_Strict):
    generated_at: str
    offers: list[OfferSchema]

    @field_validator("generated_at")
    @classmethod
    def check_generated_at(cls, value: str) -> str:
        return _check_iso_datetime(value)


class BankParseResultSchema(_Strict):
    bank_id: BankId
    offers: list[OfferSchema]
    warnings: list[str]
    raw_text_hash: str = Field(pattern=r"^[0-9a-f]{64}$")


def validate_dataset(data: dict) -> OffersDatasetSchema:
    """
    Validate a serialized offers dataset.

    Raises:
        SchemaValidationError: If the document does not match
    """
    try:
        return OffersDatasetSchema.model_validate(data)
    except ValidationError as e:
        raise SchemaValidationError("offers dataset", e) from e


def validate_rankings(data: dict) -> RankingsSchema:
    """
    Validate serialized rankings.

    Raises:
        SchemaValidationError: If the document does not match
    """
    try:
        return RankingsSchema.model_validate(data)
    except ValidationError as e:
        raise SchemaValidationError("rankings", e) from e
