"""
Market observer — turns a batch of pool scores into a sentiment call.

The only cross-cycle state in the decision core lives here: a counter of
consecutive bullish scans. classify_market() is the pure form and takes and
returns the counter explicitly; MarketObserver owns one counter per instance.
"""

import logging

import numpy as np

from scout.errors import InvalidInputError
from scout.models import MarketAlert, MarketObservation, PoolScore

logger = logging.getLogger(__name__)

HIGH_YIELD_APY = 50
BULLISH_AVG_SCORE = 70
BULLISH_MIN_HIGH_YIELD = 2
BEARISH_AVG_SCORE = 40
BEARISH_AVG_IL_RISK = 8

EXCEPTIONAL_SCORE = 85
EXCEPTIONAL_APY = 100
SUSTAINED_MOMENTUM_SCANS = 3

MARKET_RECOMMENDATIONS = {
    "bullish": "Consider increasing position sizes",
    "bearish": "Reduce exposure, wait for better conditions",
    "neutral": "Maintain current strategy",
}


def classify_market(
    scores: list[PoolScore], momentum: int
) -> tuple[MarketObservation, int]:
    """Classify one scan. Returns (observation, updated momentum)."""
    if not scores:
        raise InvalidInputError("Cannot observe market conditions from an empty score batch")

    totals = np.array([s.total_score for s in scores], dtype=float)
    il_risks = np.array([s.il_risk for s in scores], dtype=float)
    avg_score = float(totals.mean())
    avg_il_risk = float(il_risks.mean())
    high_yield_pools = sum(1 for s in scores if s.estimated_apy > HIGH_YIELD_APY)

    if avg_score > BULLISH_AVG_SCORE and high_yield_pools >= BULLISH_MIN_HIGH_YIELD:
        sentiment = "bullish"
        summary = f"Market is hot! {high_yield_pools} high-yield opportunities detected."
        momentum += 1
    elif avg_score < BEARISH_AVG_SCORE or avg_il_risk > BEARISH_AVG_IL_RISK:
        sentiment = "bearish"
        summary = "Market conditions are risky. Being cautious."
        momentum = 0
    else:
        sentiment = "neutral"
        summary = "Market is stable. Monitoring for opportunities."
        momentum = max(0, momentum - 1)

    observation = MarketObservation(
        sentiment=sentiment,
        summary=summary,
        avg_score=avg_score,
        high_yield_pools=high_yield_pools,
        avg_il_risk=avg_il_risk,
        recommendation=MARKET_RECOMMENDATIONS[sentiment],
    )
    return observation, momentum


class MarketObserver:
    """Tracks sentiment momentum across scans."""

    def __init__(self, consecutive_good_scans: int = 0):
        if consecutive_good_scans < 0:
            raise InvalidInputError("consecutive_good_scans cannot be negative")
        self.consecutive_good_scans = consecutive_good_scans
        self.last_sentiment = "neutral"

    def observe(self, scores: list[PoolScore]) -> MarketObservation:
        observation, self.consecutive_good_scans = classify_market(
            scores, self.consecutive_good_scans
        )
        self.last_sentiment = observation.sentiment
        logger.debug(
            "Market sentiment=%s avg_score=%.1f avg_il=%.1f momentum=%d",
            observation.sentiment,
            observation.avg_score,
            observation.avg_il_risk,
            self.consecutive_good_scans,
        )
        return observation

    def evaluate_opportunity(self, scores: list[PoolScore]) -> MarketAlert:
        """Advisory check: is this scan worth telling a human about?

        ``scores`` must be sorted best-first; only the top entry is inspected.
        """
        if not scores:
            return MarketAlert(should_alert=False)

        top = scores[0]
        if top.total_score > EXCEPTIONAL_SCORE and top.estimated_apy > EXCEPTIONAL_APY:
            return MarketAlert(
                should_alert=True,
                message=(
                    f"Exceptional opportunity! {top.estimated_apy:.0f}% APY pool found "
                    f"with {top.total_score:.0f}/100 score"
                ),
            )

        if self.consecutive_good_scans >= SUSTAINED_MOMENTUM_SCANS:
            return MarketAlert(
                should_alert=True,
                message="Sustained favorable market conditions detected. Good time to deploy capital.",
            )

        return MarketAlert(should_alert=False)
