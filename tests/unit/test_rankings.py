"""Tests for the ranking engine."""

import pytest

from tasas_scraper.core.models import (
    BankId,
    Channel,
    CurrencyIndex,
    MetricKind,
    ProductType,
    ScenarioKey,
    Segment,
)
from tasas_scraper.core.rankings import (
    SCENARIO_FILTERS,
    ScenarioFilter,
    best_offer,
    compute_rankings,
    mixes_metric_kinds,
    offer_metric,
    rank_offers,
    rank_scenario,
)
from tasas_scraper.core.schemas import validate_rankings
from tests.conftest import build_offer


class TestScenarioFilters:
    """Tests for the static scenario table."""

    def test_all_scenarios_defined(self):
        """Test that every scenario key has a filter."""
        assert set(SCENARIO_FILTERS) == set(ScenarioKey)

    def test_only_digital_mixes_indexes(self):
        """Test that every other scenario pins a currency index."""
        for key, scenario_filter in SCENARIO_FILTERS.items():
            if key == ScenarioKey.BEST_DIGITAL_HIPOTECARIO:
                assert scenario_filter.currency_index is None
            else:
                assert scenario_filter.currency_index is not None

    def test_filter_matches_all_fields(self):
        """Test a conjunction of predicates."""
        scenario_filter = ScenarioFilter(
            product_type=ProductType.HIPOTECARIO,
            currency_index=CurrencyIndex.COP,
            segment=Segment.VIS,
        )
        assert scenario_filter.matches(build_offer())
        assert not scenario_filter.matches(build_offer(segment=Segment.NO_VIS))
        assert not scenario_filter.matches(build_offer(product_type=ProductType.LEASING))

    def test_payroll_predicate(self):
        """Test that the payroll predicate requires a discount."""
        scenario_filter = ScenarioFilter(has_payroll_discount=True)
        assert scenario_filter.matches(build_offer(payroll=True))
        assert not scenario_filter.matches(build_offer(payroll=False))


class TestOfferMetric:
    """Tests for offer_metric."""

    def test_cop_metric(self):
        """Test COP offers rank on their E.A. lower bound."""
        metric = offer_metric(build_offer(rate_from=11.5, rate_to=14.0))
        assert metric.kind == MetricKind.EA_PERCENT
        assert metric.value == 11.5

    def test_uvr_metric(self):
        """Test UVR offers rank on their spread lower bound."""
        metric = offer_metric(build_offer(currency_index=CurrencyIndex.UVR, rate_from=6.5))
        assert metric.kind == MetricKind.UVR_SPREAD_EA
        assert metric.value == 6.5


class TestRankOffers:
    """Tests for ranking within one scenario."""

    def test_lowest_rate_first(self):
        """Test ascending order by metric."""
        offers = [
            build_offer("a", rate_from=12.0),
            build_offer("b", rate_from=11.5),
            build_offer("c", rate_from=13.0),
        ]

        entries = rank_scenario(offers, ScenarioKey.BEST_COP_VIS_HIPOTECARIO)

        assert [e.offer_id for e in entries] == ["b", "a", "c"]
        assert [e.position for e in entries] == [1, 2, 3]
        assert entries[0].metric.value == 11.5

    def test_ties_keep_input_order(self):
        """Test that equal rates keep their input order."""
        offers = [
            build_offer("first", rate_from=12.0),
            build_offer("second", rate_from=12.0),
        ]

        entries = rank_scenario(offers, ScenarioKey.BEST_COP_VIS_HIPOTECARIO)

        assert [e.offer_id for e in entries] == ["first", "second"]

    def test_capped_at_three(self):
        """Test that at most three entries are returned."""
        offers = [build_offer(str(i), rate_from=10.0 + i) for i in range(5)]

        entries = rank_scenario(offers, ScenarioKey.BEST_COP_VIS_HIPOTECARIO)

        assert len(entries) == 3
        assert [e.offer_id for e in entries] == ["0", "1", "2"]

    def test_custom_limit(self):
        """Test an explicit limit."""
        offers = [build_offer(str(i), rate_from=10.0 + i) for i in range(5)]
        assert len(rank_offers(offers, ScenarioFilter(), limit=1)) == 1

    def test_string_scenario_key(self):
        """Test that scenario keys may be passed as strings."""
        entries = rank_scenario([build_offer("a")], "best_cop_vis_hipotecario")
        assert entries[0].offer_id == "a"

    def test_unknown_scenario_key(self):
        """Test that unknown scenario keys are rejected."""
        with pytest.raises(ValueError):
            rank_scenario([build_offer("a")], "best_everything")


class TestComputeRankings:
    """Tests for compute_rankings."""

    def test_empty_offers(self):
        """Test that no offers yields no scenarios."""
        rankings = compute_rankings([])
        assert rankings.scenarios == {}
        validate_rankings(rankings.to_dict())
        assert best_offer(rankings, ScenarioKey.BEST_UVR_VIS_HIPOTECARIO) is None

    def test_empty_scenarios_omitted(self):
        """Test that only scenarios with matches are present."""
        rankings = compute_rankings([build_offer("a")])
        assert list(rankings.scenarios) == [ScenarioKey.BEST_COP_VIS_HIPOTECARIO]

    def test_uvr_never_in_cop_scenarios(self):
        """Test that a low UVR spread cannot win a pesos scenario."""
        offers = [
            build_offer("cop", rate_from=12.0),
            build_offer("uvr", currency_index=CurrencyIndex.UVR, rate_from=6.5),
        ]

        rankings = compute_rankings(offers)

        cop = rankings.scenarios[ScenarioKey.BEST_COP_VIS_HIPOTECARIO]
        uvr = rankings.scenarios[ScenarioKey.BEST_UVR_VIS_HIPOTECARIO]
        assert [e.offer_id for e in cop] == ["cop"]
        assert [e.offer_id for e in uvr] == ["uvr"]

    def test_unknown_segment_excluded_from_segment_scenarios(self):
        """Test that UNKNOWN segment offers only appear where segment is free."""
        offers = [build_offer("a", segment=Segment.UNKNOWN, channel=Channel.DIGITAL)]

        rankings = compute_rankings(offers)

        assert list(rankings.scenarios) == [ScenarioKey.BEST_DIGITAL_HIPOTECARIO]

    def test_leasing_excluded_from_base_scenarios(self):
        """Test that leasing offers do not compete with mortgages."""
        offers = [build_offer("lease", product_type=ProductType.LEASING, rate_from=9.0)]
        assert compute_rankings(offers).scenarios == {}

    def test_leasing_included_in_payroll(self):
        """Test that payroll scenarios accept any product type."""
        offers = [
            build_offer("lease", product_type=ProductType.LEASING, rate_from=9.0, payroll=True),
            build_offer("mortgage", rate_from=10.0, payroll=True),
        ]

        rankings = compute_rankings(offers)

        payroll = rankings.scenarios[ScenarioKey.BEST_COP_VIS_PAYROLL]
        assert [e.offer_id for e in payroll] == ["lease", "mortgage"]

    def test_payroll_partitioned_by_currency_and_segment(self):
        """Test that each payroll scenario sees only its own partition."""
        offers = [
            build_offer("cop_vis", payroll=True),
            build_offer("cop_novis", segment=Segment.NO_VIS, payroll=True),
            build_offer("uvr_vis", currency_index=CurrencyIndex.UVR, rate_from=6.0, payroll=True),
            build_offer(
                "uvr_novis",
                currency_index=CurrencyIndex.UVR,
                segment=Segment.NO_VIS,
                rate_from=7.0,
                payroll=True,
            ),
        ]

        rankings = compute_rankings(offers)

        assert best_offer(rankings, ScenarioKey.BEST_COP_VIS_PAYROLL).offer_id == "cop_vis"
        assert best_offer(rankings, ScenarioKey.BEST_COP_NO_VIS_PAYROLL).offer_id == "cop_novis"
        assert best_offer(rankings, ScenarioKey.BEST_UVR_VIS_PAYROLL).offer_id == "uvr_vis"
        assert best_offer(rankings, ScenarioKey.BEST_UVR_NO_VIS_PAYROLL).offer_id == "uvr_novis"
        for key in (
            ScenarioKey.BEST_COP_VIS_PAYROLL,
            ScenarioKey.BEST_COP_NO_VIS_PAYROLL,
            ScenarioKey.BEST_UVR_VIS_PAYROLL,
            ScenarioKey.BEST_UVR_NO_VIS_PAYROLL,
        ):
            assert len(rankings.scenarios[key]) == 1

    def test_digital_requires_hipotecario(self):
        """Test that digital leasing is not a digital mortgage."""
        offers = [
            build_offer("lease", product_type=ProductType.LEASING, channel=Channel.DIGITAL),
            build_offer("branch", channel=Channel.BRANCH),
        ]

        rankings = compute_rankings(offers)

        assert ScenarioKey.BEST_DIGITAL_HIPOTECARIO not in rankings.scenarios

    def test_digital_leasing_never_wins(self):
        """Test that a cheaper digital leasing offer loses to a digital mortgage."""
        offers = [
            build_offer("lease", product_type=ProductType.LEASING, channel=Channel.DIGITAL, rate_from=9.0),
            build_offer("mortgage", channel=Channel.DIGITAL, rate_from=12.0),
        ]

        winner = best_offer(compute_rankings(offers), ScenarioKey.BEST_DIGITAL_HIPOTECARIO)

        assert winner.offer_id == "mortgage"

    def test_digital_mixes_indexes(self):
        """Test that the digital scenario compares the lower bound across indexes."""
        offers = [
            build_offer("cop", channel=Channel.DIGITAL, rate_from=11.0),
            build_offer("uvr", currency_index=CurrencyIndex.UVR, channel=Channel.DIGITAL, rate_from=7.5),
        ]

        entries = compute_rankings(offers).scenarios[ScenarioKey.BEST_DIGITAL_HIPOTECARIO]

        assert [e.offer_id for e in entries] == ["uvr", "cop"]
        assert [e.metric.kind for e in entries] == [MetricKind.UVR_SPREAD_EA, MetricKind.EA_PERCENT]
        assert mixes_metric_kinds(entries)

    def test_single_index_scenarios_never_mix(self):
        """Test that pinned-currency scenarios hold one metric kind."""
        offers = [
            build_offer("cop", rate_from=11.0, payroll=True),
            build_offer("uvr", currency_index=CurrencyIndex.UVR, rate_from=6.0, payroll=True),
        ]

        rankings = compute_rankings(offers)

        for key, entries in rankings.scenarios.items():
            assert not mixes_metric_kinds(entries), key

    def test_entries_reference_input_offers(self):
        """Test that every ranked id belongs to the input set."""
        offers = [
            build_offer(str(i), bank_id=bank, rate_from=10.0 + i, payroll=i % 2 == 0)
            for i, bank in enumerate([BankId.BBVA, BankId.ITAU, BankId.AVVILLAS, BankId.BANCOLOMBIA])
        ]
        ids = {offer.id for offer in offers}

        rankings = compute_rankings(offers)

        for entries in rankings.scenarios.values():
            assert 1 <= len(entries) <= 3
            assert all(entry.offer_id in ids for entry in entries)
            values = [entry.metric.value for entry in entries]
            assert values == sorted(values)

    def test_rankings_validate(self):
        """Test that computed rankings match the persisted schema."""
        offers = [build_offer(str(i), rate_from=10.0 + i) for i in range(4)]
        validate_rankings(compute_rankings(offers).to_dict())
