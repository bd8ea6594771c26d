"""
Records passed between the scanner, observer, health classifier and policy.

Telemetry and derived records are frozen; only PerformanceMetrics is mutable
because the agent accumulates it across cycles.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Recommendation = Literal["strong_buy", "buy", "hold", "avoid"]
Health = Literal["healthy", "warning", "critical"]
Sentiment = Literal["bullish", "bearish", "neutral"]
Action = Literal["hold", "rebalance", "close", "monitor"]


@dataclass(frozen=True)
class TokenInfo:
    mint: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class PoolTelemetry:
    address: str
    token_x: TokenInfo
    token_y: TokenInfo
    active_bin: int
    active_price: float
    tvl: float
    volume_24h: float
    fees_24h: float
    bin_step: int
    base_fee: float  # percent

    @property
    def name(self) -> str:
        return f"{self.token_x.symbol}-{self.token_y.symbol}"


@dataclass(frozen=True)
class PoolScore:
    pool_address: str
    total_score: float
    yield_score: float
    volume_score: float
    stability_score: float
    tvl_score: float
    estimated_apy: float
    il_risk: float
    recommendation: Recommendation


@dataclass(frozen=True)
class PositionTelemetry:
    address: str
    pool_address: str
    lower_bin: int
    upper_bin: int
    total_x_amount: float
    total_y_amount: float
    fee_x: float
    fee_y: float
    active_bin: int
    is_in_range: bool
    entry_price: float
    current_price: float
    il_percent: float = 0.0


@dataclass(frozen=True)
class PositionStatus:
    position: PositionTelemetry
    health: Health
    time_in_range: int
    total_fees_usd: float
    pnl_usd: float
    rebalance_needed: bool


@dataclass(frozen=True)
class MarketObservation:
    sentiment: Sentiment
    summary: str
    avg_score: float
    high_yield_pools: int
    avg_il_risk: float
    recommendation: str


@dataclass(frozen=True)
class MarketAlert:
    should_alert: bool
    message: str = ""


@dataclass(frozen=True)
class HealthCheck:
    requires_attention: bool
    reason: str


@dataclass(frozen=True)
class BinRange:
    lower_bin: int
    upper_bin: int

    @property
    def midpoint(self) -> float:
        return self.lower_bin + (self.upper_bin - self.lower_bin) / 2


@dataclass(frozen=True)
class RebalanceDecision:
    should_rebalance: bool
    should_act: bool
    action: Action
    reason: str
    reasoning: str
    confidence: float
    suggested_range: BinRange | None = None

    def to_dict(self) -> dict:
        record = {
            "should_rebalance": self.should_rebalance,
            "should_act": self.should_act,
            "action": self.action,
            "reason": self.reason,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "suggested_range": None,
        }
        if self.suggested_range is not None:
            record["suggested_range"] = [
                self.suggested_range.lower_bin,
                self.suggested_range.upper_bin,
            ]
        return record


@dataclass(frozen=True)
class ScanResult:
    timestamp: datetime
    pools_scanned: int
    opportunities: tuple[PoolScore, ...]
    top_pick: PoolScore | None
    market_conditions: MarketObservation | None = None


@dataclass(frozen=True)
class ExecutionReport:
    pool_address: str
    position_address: str
    success: bool
    signatures: tuple[str, ...] = ()
    error: str | None = None


@dataclass
class PerformanceMetrics:
    total_scans: int = 0
    opportunities_found: int = 0
    rebalances_executed: int = 0
    fees_earned: float = 0.0
    start_time: float = field(default_factory=time.time)

    def runtime_hours(self, now: float | None = None) -> float:
        now = time.time() if now is None else now
        return max(0.0, now - self.start_time) / 3600


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
