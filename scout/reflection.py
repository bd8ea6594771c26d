"""Periodic self-assessment of the agent's own performance."""

from scout.config import AgentConfig
from scout.models import PerformanceMetrics


def generate_reflection(metrics: PerformanceMetrics, now: float | None = None) -> str:
    runtime = metrics.runtime_hours(now)
    scans_per_hour = metrics.total_scans / runtime if runtime > 0 else 0.0
    avg_opportunities = (
        metrics.opportunities_found / metrics.total_scans if metrics.total_scans > 0 else 0.0
    )

    if scans_per_hour < 0.5:
        return "Scanning infrequently. May miss short-lived opportunities."

    if avg_opportunities > 2:
        return "Finding many opportunities. Market is favorable."

    if avg_opportunities < 0.5:
        return "Few opportunities lately. May need to lower standards or wait."

    if metrics.rebalances_executed > 5:
        return "Active rebalancing paying off. Fees accumulating nicely."

    return "Steady performance. Continuing to monitor."


def adapt_strategy(
    metrics: PerformanceMetrics, config: AgentConfig, now: float | None = None
) -> dict:
    """Return AgentConfig field overrides suggested by recent performance."""
    runtime = metrics.runtime_hours(now)

    # Long quiet stretch: relax the APY bar
    if runtime > 24 and metrics.opportunities_found < 5:
        return {"min_apy_threshold": max(5.0, config.min_apy_threshold - 5)}

    # Churning without fees: widen ranges
    if metrics.rebalances_executed > 10 and metrics.fees_earned < 1:
        return {"default_bin_range": config.default_bin_range + 10}

    return {}
