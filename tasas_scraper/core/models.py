"""
Data models for the mortgage rate updater.

Offers are immutable snapshots: a parser builds them once per run and
every downstream consumer (rankings, storage, web) only reads them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class BankId(str, Enum):
    """Banks known to the catalog."""
    BANCOLOMBIA = "bancolombia"
    BBVA = "bbva"
    SCOTIABANK_COLPATRIA = "scotiabank_colpatria"
    BANCO_CAJA_SOCIAL = "banco_caja_social"
    AVVILLAS = "avvillas"
    ITAU = "itau"
    FNA = "fna"
    BANCO_POPULAR = "banco_popular"
    BANCO_DE_BOGOTA = "banco_de_bogota"
    BANCO_DE_OCCIDENTE = "banco_de_occidente"
    DAVIVIENDA = "davivienda"
    BANCO_AGRARIO = "banco_agrario"
    BANCOOMEVA = "bancoomeva"


class ProductType(str, Enum):
    HIPOTECARIO = "hipotecario"
    LEASING = "leasing"


class CurrencyIndex(str, Enum):
    COP = "COP"  # Fixed rate in pesos
    UVR = "UVR"  # Spread over the inflation-indexed unit


class Segment(str, Enum):
    VIS = "VIS"  # Vivienda de Interés Social
    NO_VIS = "NO_VIS"
    UNKNOWN = "UNKNOWN"


class Channel(str, Enum):
    DIGITAL = "DIGITAL"
    BRANCH = "BRANCH"
    UNSPECIFIED = "UNSPECIFIED"


class SourceType(str, Enum):
    HTML = "HTML"
    PDF = "PDF"


class ExtractionMethod(str, Enum):
    CSS_SELECTOR = "CSS_SELECTOR"
    REGEX = "REGEX"


class DiscountType(str, Enum):
    BPS_OFF = "BPS_OFF"
    PERCENT_OFF = "PERCENT_OFF"


class MetricKind(str, Enum):
    EA_PERCENT = "EA_PERCENT"
    UVR_SPREAD_EA = "UVR_SPREAD_EA"


class ScenarioKey(str, Enum):
    """Ranking scenarios, in the order they are computed."""
    BEST_UVR_VIS_HIPOTECARIO = "best_uvr_vis_hipotecario"
    BEST_UVR_NO_VIS_HIPOTECARIO = "best_uvr_no_vis_hipotecario"
    BEST_COP_VIS_HIPOTECARIO = "best_cop_vis_hipotecario"
    BEST_COP_NO_VIS_HIPOTECARIO = "best_cop_no_vis_hipotecario"
    # Payroll scenarios (requires payroll enrollment)
    BEST_UVR_VIS_PAYROLL = "best_uvr_vis_payroll"
    BEST_UVR_NO_VIS_PAYROLL = "best_uvr_no_vis_payroll"
    BEST_COP_VIS_PAYROLL = "best_cop_vis_payroll"
    BEST_COP_NO_VIS_PAYROLL = "best_cop_no_vis_payroll"
    BEST_DIGITAL_HIPOTECARIO = "best_digital_hipotecario"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _check_range(name: str, low: Optional[float], high: Optional[float]) -> None:
    if low is not None and high is not None and high < low:
        raise ValueError(f"{name}: upper bound {high} is below lower bound {low}")


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class CopFixedRate:
    """Fixed effective-annual rate in pesos, e.g. 12.0 means 12% E.A."""

    ea_percent_from: float
    ea_percent_to: Optional[float] = None
    mv_percent_from: Optional[float] = None
    mv_percent_to: Optional[float] = None

    kind = "COP_FIXED"

    def __post_init__(self):
        _check_range("ea_percent", self.ea_percent_from, self.ea_percent_to)
        _check_range("mv_percent", self.mv_percent_from, self.mv_percent_to)

    @property
    def rate_from(self) -> float:
        return self.ea_percent_from

    def to_dict(self) -> dict:
        return _drop_none({
            "kind": self.kind,
            "ea_percent_from": self.ea_percent_from,
            "ea_percent_to": self.ea_percent_to,
            "mv_percent_from": self.mv_percent_from,
            "mv_percent_to": self.mv_percent_to,
        })


@dataclass(frozen=True)
class UvrSpreadRate:
    """Spread over UVR, e.g. 6.5 means "UVR + 6.50%"."""

    spread_ea_from: float
    spread_ea_to: Optional[float] = None
    spread_mv_from: Optional[float] = None
    spread_mv_to: Optional[float] = None

    kind = "UVR_SPREAD"

    def __post_init__(self):
        _check_range("spread_ea", self.spread_ea_from, self.spread_ea_to)
        _check_range("spread_mv", self.spread_mv_from, self.spread_mv_to)

    @property
    def rate_from(self) -> float:
        return self.spread_ea_from

    def to_dict(self) -> dict:
        return _drop_none({
            "kind": self.kind,
            "spread_ea_from": self.spread_ea_from,
            "spread_ea_to": self.spread_ea_to,
            "spread_mv_from": self.spread_mv_from,
            "spread_mv_to": self.spread_mv_to,
        })


Rate = Union[CopFixedRate, UvrSpreadRate]


def rate_from_dict(data: dict) -> Rate:
    """Build a Rate from its tagged dictionary form."""
    kind = data.get("kind")
    fields = {k: v for k, v in data.items() if k != "kind"}
    if kind == CopFixedRate.kind:
        return CopFixedRate(**fields)
    if kind == UvrSpreadRate.kind:
        return UvrSpreadRate(**fields)
    raise ValueError(f"Unknown rate kind: {kind!r}")


@dataclass(frozen=True)
class PayrollDiscount:
    """Rate reduction for clients whose payroll is deposited with the bank."""

    type: DiscountType
    value: float  # e.g. 100 (bps) or 1.0 (%)
    applies_to: str = "RATE"
    note: Optional[str] = None

    def __post_init__(self):
        if self.value <= 0:
            raise ValueError(f"Payroll discount must be positive, got {self.value}")

    def to_dict(self) -> dict:
        return _drop_none({
            "type": self.type.value,
            "value": self.value,
            "applies_to": self.applies_to,
            "note": self.note,
        })

    @classmethod
    def from_dict(cls, data: dict) -> "PayrollDiscount":
        return cls(
            type=DiscountType(data["type"]),
            value=data["value"],
            applies_to=data.get("applies_to", "RATE"),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class OfferConditions:
    payroll_discount: Optional[PayrollDiscount] = None
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {}
        if self.payroll_discount:
            data["payroll_discount"] = self.payroll_discount.to_dict()
        if self.notes:
            data["notes"] = list(self.notes)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OfferConditions":
        discount = data.get("payroll_discount")
        return cls(
            payroll_discount=PayrollDiscount.from_dict(discount) if discount else None,
            notes=list(data.get("notes", [])),
        )


@dataclass(frozen=True)
class ExtractionInfo:
    """How a value was located inside the source document."""

    method: ExtractionMethod
    locator: str  # CSS selector or regex identifier
    excerpt: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            "method": self.method.value,
            "locator": self.locator,
            "excerpt": self.excerpt,
        })

    @classmethod
    def from_dict(cls, data: dict) -> "ExtractionInfo":
        return cls(
            method=ExtractionMethod(data["method"]),
            locator=data["locator"],
            excerpt=data.get("excerpt"),
        )


@dataclass(frozen=True)
class OfferSource:
    """Provenance of an offer."""

    url: str
    source_type: SourceType
    retrieved_at: str  # ISO timestamp
    extraction: ExtractionInfo
    document_label: Optional[str] = None
    valid_from: Optional[str] = None  # YYYY-MM-DD
    extracted_text_fingerprint: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            "url": self.url,
            "source_type": self.source_type.value,
            "document_label": self.document_label,
            "valid_from": self.valid_from,
            "retrieved_at": self.retrieved_at,
            "extracted_text_fingerprint": self.extracted_text_fingerprint,
            "extraction": self.extraction.to_dict(),
        })

    @classmethod
    def from_dict(cls, data: dict) -> "OfferSource":
        return cls(
            url=data["url"],
            source_type=SourceType(data["source_type"]),
            retrieved_at=data["retrieved_at"],
            extraction=ExtractionInfo.from_dict(data["extraction"]),
            document_label=data.get("document_label"),
            valid_from=data.get("valid_from"),
            extracted_text_fingerprint=data.get("extracted_text_fingerprint"),
        )


@dataclass(frozen=True)
class Offer:
    """
    A single mortgage rate offer published by a bank.

    The id is derived from the discriminating fields (see
    core.hashing.generate_offer_id), so a rate change yields a new offer
    rather than an update of an existing one.
    """

    id: str
    bank_id: BankId
    bank_name: str

    product_type: ProductType
    currency_index: CurrencyIndex
    segment: Segment
    channel: Channel

    rate: Rate
    source: OfferSource
    conditions: OfferConditions = field(default_factory=OfferConditions)

    # Constraints, only when explicitly disclosed
    term_months_min: Optional[int] = None
    term_months_max: Optional[int] = None
    amount_min_cop: Optional[float] = None
    amount_max_cop: Optional[float] = None

    @property
    def has_payroll_discount(self) -> bool:
        return self.conditions.payroll_discount is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return _drop_none({
            "id": self.id,
            "bank_id": self.bank_id.value,
            "bank_name": self.bank_name,
            "product_type": self.product_type.value,
            "currency_index": self.currency_index.value,
            "segment": self.segment.value,
            "channel": self.channel.value,
            "rate": self.rate.to_dict(),
            "term_months_min": self.term_months_min,
            "term_months_max": self.term_months_max,
            "amount_min_cop": self.amount_min_cop,
            "amount_max_cop": self.amount_max_cop,
            "conditions": self.conditions.to_dict(),
            "source": self.source.to_dict(),
        })

    @classmethod
    def from_dict(cls, data: dict) -> "Offer":
        return cls(
            id=data["id"],
            bank_id=BankId(data["bank_id"]),
            bank_name=data["bank_name"],
            product_type=ProductType(data["product_type"]),
            currency_index=CurrencyIndex(data["currency_index"]),
            segment=Segment(data["segment"]),
            channel=Channel(data["channel"]),
            rate=rate_from_dict(data["rate"]),
            source=OfferSource.from_dict(data["source"]),
            conditions=OfferConditions.from_dict(data.get("conditions", {})),
            term_months_min=data.get("term_months_min"),
            term_months_max=data.get("term_months_max"),
            amount_min_cop=data.get("amount_min_cop"),
            amount_max_cop=data.get("amount_max_cop"),
        )


@dataclass(frozen=True)
class RankingMetric:
    """The single comparable number of an offer inside one scenario."""

    kind: MetricKind
    value: float

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "RankingMetric":
        return cls(kind=MetricKind(data["kind"]), value=data["value"])


@dataclass(frozen=True)
class RankedEntry:
    position: int  # 1-indexed
    offer_id: str
    metric: RankingMetric

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "offer_id": self.offer_id,
            "metric": self.metric.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RankedEntry":
        return cls(
            position=data["position"],
            offer_id=data["offer_id"],
            metric=RankingMetric.from_dict(data["metric"]),
        )


@dataclass(frozen=True)
class Rankings:
    """
    Best offers per scenario.

    A scenario with no matching offers is absent from `scenarios`.
    """

    generated_at: str
    scenarios: dict[ScenarioKey, list[RankedEntry]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at,
            "scenarios": {
                key.value: [entry.to_dict() for entry in entries]
                for key, entries in self.scenarios.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Rankings":
        return cls(
            generated_at=data["generated_at"],
            scenarios={
                ScenarioKey(key): [RankedEntry.from_dict(entry) for entry in entries]
                for key, entries in data.get("scenarios", {}).items()
            },
        )


@dataclass(frozen=True)
class OffersDataset:
    generated_at: str
    offers: list[Offer] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at,
            "offers": [offer.to_dict() for offer in self.offers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OffersDataset":
        return cls(
            generated_at=data["generated_at"],
            offers=[Offer.from_dict(offer) for offer in data.get("offers", [])],
        )


@dataclass
class BankParseResult:
    """Output of one parser invocation."""

    bank_id: BankId
    offers: list[Offer] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    raw_text_hash: str = ""

    def to_dict(self) -> dict:
        return {
            "bank_id": self.bank_id.value,
            "offers": [offer.to_dict() for offer in self.offers],
            "warnings": list(self.warnings),
            "raw_text_hash": self.raw_text_hash,
        }
