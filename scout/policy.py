"""
Rebalance policy — the agent's confidence-weighted judgment call.

Decisions are a flat tree with three terminal outcomes: hold (healthy),
monitor (problem detected, confidence below the auto-execution gate) and
rebalance (with a suggested symmetric bin range).
"""

import math

from scout.health import classify_position
from scout.models import BinRange, PositionStatus, RebalanceDecision
from scout.personality import Personality, PersonalityProfile

HEALTHY_CONFIDENCE = 95
BASE_CONFIDENCE = 70
OUT_OF_RANGE_BONUS = 20
CRITICAL_BONUS = 10

AGGRESSIVE_TOLERANCE = 0.7
AGGRESSIVE_BONUS = 10
CONFIDENCE_CEILING = 99
CONSERVATIVE_TOLERANCE = 0.4
CONSERVATIVE_PENALTY = 15
CONFIDENCE_FLOOR = 50

AUTO_EXECUTE_CONFIDENCE = 75

# Half-width of the suggested range, in bins
AGGRESSIVE_HALF_WIDTH = 15
DEFAULT_HALF_WIDTH = 20


def _as_profile(personality) -> PersonalityProfile:
    if isinstance(personality, Personality):
        return personality.profile
    return personality


def adjust_for_personality(confidence: float, risk_tolerance: float) -> float:
    if risk_tolerance > AGGRESSIVE_TOLERANCE:
        return min(CONFIDENCE_CEILING, confidence + AGGRESSIVE_BONUS)
    if risk_tolerance < CONSERVATIVE_TOLERANCE:
        return max(CONFIDENCE_FLOOR, confidence - CONSERVATIVE_PENALTY)
    return confidence


def suggest_range(status: PositionStatus, risk_tolerance: float) -> BinRange:
    """Symmetric range around the current midpoint; narrower when aggressive."""
    current = BinRange(status.position.lower_bin, status.position.upper_bin)
    mid = current.midpoint
    half_width = (
        AGGRESSIVE_HALF_WIDTH if risk_tolerance > AGGRESSIVE_TOLERANCE else DEFAULT_HALF_WIDTH
    )
    return BinRange(
        lower_bin=math.floor(mid - half_width),
        upper_bin=math.floor(mid + half_width),
    )


def make_rebalance_decision(
    status: PositionStatus, personality, max_il_percent: float
) -> RebalanceDecision:
    """Decide hold / monitor / rebalance for one position.

    ``personality`` may be a Personality member or a bare PersonalityProfile.
    """
    profile = _as_profile(personality)
    health = classify_position(status, max_il_percent)

    if not health.requires_attention:
        return RebalanceDecision(
            should_rebalance=False,
            should_act=False,
            action="hold",
            reason="Position is healthy",
            reasoning="Position is performing well within acceptable parameters",
            confidence=HEALTHY_CONFIDENCE,
        )

    confidence = BASE_CONFIDENCE
    if not status.position.is_in_range:
        confidence += OUT_OF_RANGE_BONUS
    if status.health == "critical":
        confidence += CRITICAL_BONUS

    confidence = adjust_for_personality(confidence, profile.risk_tolerance)

    if confidence < AUTO_EXECUTE_CONFIDENCE:
        return RebalanceDecision(
            should_rebalance=False,
            should_act=False,
            action="monitor",
            reason=health.reason,
            reasoning=(
                f"Conditions detected ({health.reason}) but confidence ({confidence}%) "
                f"below auto-execution threshold ({AUTO_EXECUTE_CONFIDENCE}%)"
            ),
            confidence=confidence,
        )

    return RebalanceDecision(
        should_rebalance=True,
        should_act=True,
        action="rebalance",
        reason=health.reason,
        reasoning=f"{health.reason}. Agent confidence: {confidence}%. Rebalancing to capture fees.",
        confidence=confidence,
        suggested_range=suggest_range(status, profile.risk_tolerance),
    )


class RebalancePolicy:
    """make_rebalance_decision() bound to a personality and IL ceiling."""

    def __init__(self, personality: Personality, max_il_percent: float):
        self.personality = personality
        self.max_il_percent = max_il_percent

    def decide(self, status: PositionStatus) -> RebalanceDecision:
        return make_rebalance_decision(status, self.personality, self.max_il_percent)
