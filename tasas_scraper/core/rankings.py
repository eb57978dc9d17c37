"""
Ranking engine.

Classifies offers into scenarios through a static filter table and
keeps the three lowest rates of each scenario. Every scenario except
the digital one pins a single currency index, so an EA percentage is
never compared against a UVR spread there. The digital scenario mixes
both metric kinds and orders them by raw value; each entry carries its
metric kind so readers can tell them apart.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Optional

import structlog

from .models import (
    Channel,
    CopFixedRate,
    CurrencyIndex,
    MetricKind,
    Offer,
    ProductType,
    RankedEntry,
    RankingMetric,
    Rankings,
    ScenarioKey,
    Segment,
    utc_now_iso,
)

logger = structlog.get_logger(__name__)

TOP_N = 3


@dataclass(frozen=True)
class ScenarioFilter:
    """Conjunction of optional equality predicates over an offer."""

    product_type: Optional[ProductType] = None
    currency_index: Optional[CurrencyIndex] = None
    segment: Optional[Segment] = None
    channel: Optional[Channel] = None
    has_payroll_discount: bool = False

    def matches(self, offer: Offer) -> bool:
        if self.product_type and offer.product_type != self.product_type:
            return False
        if self.currency_index and offer.currency_index != self.currency_index:
            return False
        if self.segment and offer.segment != self.segment:
            return False
        if self.channel and offer.channel != self.channel:
            return False
        if self.has_payroll_discount and not offer.has_payroll_discount:
            return False
        return True


SCENARIO_FILTERS = MappingProxyType({
    ScenarioKey.BEST_UVR_VIS_HIPOTECARIO: ScenarioFilter(
        product_type=ProductType.HIPOTECARIO,
        currency_index=CurrencyIndex.UVR,
        segment=Segment.VIS,
    ),
    ScenarioKey.BEST_UVR_NO_VIS_HIPOTECARIO: ScenarioFilter(
        product_type=ProductType.HIPOTECARIO,
        currency_index=CurrencyIndex.UVR,
        segment=Segment.NO_VIS,
    ),
    ScenarioKey.BEST_COP_VIS_HIPOTECARIO: ScenarioFilter(
        product_type=ProductType.HIPOTECARIO,
        currency_index=CurrencyIndex.COP,
        segment=Segment.VIS,
    ),
    ScenarioKey.BEST_COP_NO_VIS_HIPOTECARIO: ScenarioFilter(
        product_type=ProductType.HIPOTECARIO,
        currency_index=CurrencyIndex.COP,
        segment=Segment.NO_VIS,
    ),
    # Payroll benefit, partitioned like the base scenarios
    ScenarioKey.BEST_UVR_VIS_PAYROLL: ScenarioFilter(
        currency_index=CurrencyIndex.UVR,
        segment=Segment.VIS,
        has_payroll_discount=True,
    ),
    ScenarioKey.BEST_UVR_NO_VIS_PAYROLL: ScenarioFilter(
        currency_index=CurrencyIndex.UVR,
        segment=Segment.NO_VIS,
        has_payroll_discount=True,
    ),
    ScenarioKey.BEST_COP_VIS_PAYROLL: ScenarioFilter(
        currency_index=CurrencyIndex.COP,
        segment=Segment.VIS,
        has_payroll_discount=True,
    ),
    ScenarioKey.BEST_COP_NO_VIS_PAYROLL: ScenarioFilter(
        currency_index=CurrencyIndex.COP,
        segment=Segment.NO_VIS,
        has_payroll_discount=True,
    ),
    ScenarioKey.BEST_DIGITAL_HIPOTECARIO: ScenarioFilter(
        product_type=ProductType.HIPOTECARIO,
        channel=Channel.DIGITAL,
    ),
})


def offer_metric(offer: Offer) -> RankingMetric:
    """Comparable number of an offer: E.A. lower bound or UVR spread lower bound."""
    if isinstance(offer.rate, CopFixedRate):
        return RankingMetric(kind=MetricKind.EA_PERCENT, value=offer.rate.ea_percent_from)
    return RankingMetric(kind=MetricKind.UVR_SPREAD_EA, value=offer.rate.spread_ea_from)


def rank_offers(
    offers: Iterable[Offer],
    scenario_filter: ScenarioFilter,
    limit: int = TOP_N,
) -> list[RankedEntry]:
    """
    Rank the offers matching a filter, lowest rate first.

    Ties keep the input order (sorted() is stable), so callers control
    the tie-break through the order they pass offers in.

    Args:
        offers: Candidate offers
        scenario_filter: Filter selecting the scenario subset
        limit: Maximum number of entries

    Returns:
        Up to `limit` entries with 1-indexed positions
    """
    matching = [offer for offer in offers if scenario_filter.matches(offer)]
    ordered = sorted(matching, key=lambda offer: offer_metric(offer).value)

    return [
        RankedEntry(position=index, offer_id=offer.id, metric=offer_metric(offer))
        for index, offer in enumerate(ordered[:limit], start=1)
    ]


def rank_scenario(
    offers: Iterable[Offer],
    key: ScenarioKey,
    limit: int = TOP_N,
) -> list[RankedEntry]:
    """Rank offers for one named scenario."""
    return rank_offers(offers, SCENARIO_FILTERS[ScenarioKey(key)], limit=limit)


def compute_rankings(offers: Iterable[Offer]) -> Rankings:
    """
    Compute rankings for every scenario.

    Scenarios without a matching offer are left out of the result.

    Args:
        offers: Full offer set of a run, in bank order

    Returns:
        Rankings stamped with the current UTC time
    """
    offers = list(offers)
    scenarios: dict[ScenarioKey, list[RankedEntry]] = {}

    for key, scenario_filter in SCENARIO_FILTERS.items():
        entries = rank_offers(offers, scenario_filter)
        if entries:
            scenarios[key] = entries

    logger.debug(
        "rankings_computed",
        offers=len(offers),
        scenarios=len(scenarios),
    )

    return Rankings(generated_at=utc_now_iso(), scenarios=scenarios)


def mixes_metric_kinds(entries: Iterable[RankedEntry]) -> bool:
    """True when a ranked list compares E.A. percentages with UVR spreads."""
    return len({entry.metric.kind for entry in entries}) > 1


def best_offer(rankings: Rankings, key: ScenarioKey) -> Optional[RankedEntry]:
    """Position-1 entry of a scenario, or None when the scenario has no data."""
    entries = rankings.scenarios.get(ScenarioKey(key))
    return entries[0] if entries else None
