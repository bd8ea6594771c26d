"""Tests for scout.policy — confidence-weighted rebalance decisions."""

import pytest

from scout.models import BinRange
from scout.personality import Personality, PersonalityProfile
from scout.policy import RebalancePolicy, adjust_for_personality, make_rebalance_decision
from tests.factories import make_position, make_status


def _profile(tolerance: float) -> PersonalityProfile:
    return PersonalityProfile("Test", tolerance, 10, "test profile", "")


OUT_OF_RANGE_CRITICAL = make_status(make_position(active=200), health="critical", rebalance_needed=True)
DRIFTED_IN_RANGE = make_status(make_position(active=126), rebalance_needed=True)


class TestHoldPath:
    def test_healthy_position_holds_with_fixed_confidence(self):
        decision = make_rebalance_decision(make_status(), Personality.AGGRESSIVE, 5)
        assert decision.action == "hold"
        assert decision.confidence == 95
        assert not decision.should_act
        assert not decision.should_rebalance
        assert decision.suggested_range is None


class TestRebalancePath:
    def test_aggressive_out_of_range_caps_at_99(self):
        decision = make_rebalance_decision(OUT_OF_RANGE_CRITICAL, _profile(0.9), 5)
        assert decision.confidence == 99
        assert decision.action == "rebalance"
        assert decision.should_act and decision.should_rebalance
        # midpoint 120, half-width 15
        assert decision.suggested_range == BinRange(105, 135)
        assert decision.reason == "Position is in critical state"
        assert "99%" in decision.reasoning

    def test_conservative_out_of_range_still_rebalances_wider(self):
        decision = make_rebalance_decision(OUT_OF_RANGE_CRITICAL, Personality.CONSERVATIVE, 5)
        assert decision.confidence == 85
        assert decision.action == "rebalance"
        assert decision.suggested_range == BinRange(100, 140)

    def test_balanced_takes_no_adjustment(self):
        decision = make_rebalance_decision(OUT_OF_RANGE_CRITICAL, Personality.BALANCED, 5)
        assert decision.confidence == 100
        assert decision.suggested_range == BinRange(100, 140)

    def test_out_of_range_warning_conservative_hits_gate_exactly(self):
        status = make_status(make_position(active=200), health="warning")
        decision = make_rebalance_decision(status, _profile(0.2), 5)
        assert decision.confidence == 75
        assert decision.action == "rebalance"

    def test_odd_span_uses_floor_boundaries(self):
        status = make_status(make_position(lower=101, upper=140, active=300), health="critical")
        decision = make_rebalance_decision(status, _profile(0.9), 5)
        # midpoint 120.5 -> floor(105.5), floor(135.5)
        assert decision.suggested_range == BinRange(105, 135)


class TestMonitorPath:
    def test_conservative_drift_is_monitored(self):
        decision = make_rebalance_decision(DRIFTED_IN_RANGE, _profile(0.2), 5)
        assert decision.confidence == 55
        assert decision.action == "monitor"
        assert not decision.should_act
        assert not decision.should_rebalance
        assert decision.suggested_range is None
        assert "75%" in decision.reasoning
        assert "55%" in decision.reasoning

    def test_balanced_drift_is_monitored(self):
        decision = make_rebalance_decision(DRIFTED_IN_RANGE, Personality.BALANCED, 5)
        assert decision.confidence == 70
        assert decision.action == "monitor"

    def test_aggressive_drift_acts(self):
        decision = make_rebalance_decision(DRIFTED_IN_RANGE, Personality.AGGRESSIVE, 5)
        assert decision.confidence == 80
        assert decision.action == "rebalance"


class TestProperties:
    @pytest.mark.parametrize("tolerance", [0.1, 0.3, 0.5, 0.6, 0.8, 0.95])
    def test_deterministic(self, tolerance):
        for status in (make_status(), DRIFTED_IN_RANGE, OUT_OF_RANGE_CRITICAL):
            first = make_rebalance_decision(status, _profile(tolerance), 5)
            second = make_rebalance_decision(status, _profile(tolerance), 5)
            assert first == second

    @pytest.mark.parametrize("base", [70, 80, 90, 100])
    def test_adjustments_are_clamped(self, base):
        assert 50 <= adjust_for_personality(base, 0.9) <= 99
        assert 50 <= adjust_for_personality(base, 0.1) <= 99

    def test_boundaries_of_neutral_band(self):
        assert adjust_for_personality(70, 0.4) == 70
        assert adjust_for_personality(70, 0.7) == 70

    def test_suggested_range_is_symmetric(self):
        for lower, upper in [(0, 40), (-60, -20), (1000, 1100)]:
            status = make_status(
                make_position(lower=lower, upper=upper, active=upper + 50), health="critical"
            )
            r = make_rebalance_decision(status, Personality.AGGRESSIVE, 5).suggested_range
            mid = (lower + upper) / 2
            assert isinstance(r.lower_bin, int) and isinstance(r.upper_bin, int)
            assert mid - r.lower_bin == r.upper_bin - mid


class TestRebalancePolicy:
    def test_uses_configured_il_ceiling(self):
        status = make_status(make_position(il_percent=8))
        assert RebalancePolicy(Personality.BALANCED, 10).decide(status).action == "hold"
        assert RebalancePolicy(Personality.BALANCED, 5).decide(status).action == "monitor"
