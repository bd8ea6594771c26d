"""
Opportunity scoring for DLMM pools.

score_pool() is a pure function of one PoolTelemetry. PoolScanner pulls
telemetry from a market data provider and tolerates per-pool failures.
"""

import logging

from scout.errors import DataUnavailableError
from scout.models import PoolScore, PoolTelemetry

logger = logging.getLogger(__name__)

# Sub-score weights (sum to 1.0)
YIELD_WEIGHT = 0.40
VOLUME_WEIGHT = 0.25
STABILITY_WEIGHT = 0.20
TVL_WEIGHT = 0.15

ESTABLISHED_TOKENS = frozenset({"USDC", "USDT", "SOL"})
VOLATILE_TOKENS = frozenset({"BONK", "WIF", "PEPE", "SHIB"})

# Recommendation thresholds on total score, highest first
RECOMMENDATION_STEPS = (
    (80, "strong_buy"),
    (60, "buy"),
    (40, "hold"),
)


def estimate_apy(pool: PoolTelemetry) -> float:
    """Annualized fee yield in percent; 0 for an empty pool."""
    if pool.tvl <= 0:
        return 0.0
    return pool.fees_24h * 365 / pool.tvl * 100


def stability_score(pool: PoolTelemetry) -> float:
    """Higher score for more established pairs (SOL-USDC > memecoins)."""
    established = sum(
        1 for token in (pool.token_x, pool.token_y) if token.symbol in ESTABLISHED_TOKENS
    )
    if established == 2:
        return 90.0
    if established == 1:
        return 70.0
    return 50.0


def estimate_il_risk(pool: PoolTelemetry) -> float:
    """Impermanent loss risk (%) from pair volatility."""
    symbols = (pool.token_x.symbol, pool.token_y.symbol)
    if any(s in VOLATILE_TOKENS for s in symbols):
        return 10.0
    if symbols == ("SOL", "USDC"):
        return 3.0
    return 2.0


def recommend(total_score: float) -> str:
    for threshold, label in RECOMMENDATION_STEPS:
        if total_score >= threshold:
            return label
    return "avoid"


def score_pool(pool: PoolTelemetry) -> PoolScore:
    """Normalize pool telemetry into 0-100 sub-scores and a weighted total."""
    apy = estimate_apy(pool)

    yield_score = min(apy * 2, 100.0)  # 50% APY saturates
    if pool.tvl > 0:
        volume_score = min(pool.volume_24h / pool.tvl * 100, 100.0)
    else:
        volume_score = 0.0
    stable = stability_score(pool)
    tvl_score = min(pool.tvl / 1_000_000 * 10, 100.0)

    total = (
        yield_score * YIELD_WEIGHT
        + volume_score * VOLUME_WEIGHT
        + stable * STABILITY_WEIGHT
        + tvl_score * TVL_WEIGHT
    )

    return PoolScore(
        pool_address=pool.address,
        total_score=total,
        yield_score=yield_score,
        volume_score=volume_score,
        stability_score=stable,
        tvl_score=tvl_score,
        estimated_apy=apy,
        il_risk=estimate_il_risk(pool),
        recommendation=recommend(total),
    )


class PoolScanner:
    """Fetches telemetry for a fixed list of pools via a market data provider."""

    def __init__(self, market_data, pools):
        self.market_data = market_data
        self.pools = tuple(pools)
        self._cache: dict[str, PoolTelemetry] = {}

    def scan_pool(self, address: str) -> PoolTelemetry | None:
        """Return telemetry for one pool, or None when it cannot be fetched."""
        try:
            pool = self.market_data.get_pool(address)
        except DataUnavailableError as e:
            logger.warning("Failed to scan pool %s: %s", address, e.reason)
            return None
        except Exception as e:
            # Live providers surface transport errors directly
            logger.warning("Failed to scan pool %s: %s", address, e)
            return None
        self._cache[address] = pool
        return pool

    def scan_all_pools(self) -> list[PoolTelemetry]:
        logger.info("Scanning %d pools...", len(self.pools))
        results = []
        for address in self.pools:
            pool = self.scan_pool(address)
            if pool is not None:
                results.append(pool)
        return results

    def get_cached_pool(self, address: str) -> PoolTelemetry | None:
        return self._cache.get(address)
