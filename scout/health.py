"""
Position health: derive a PositionStatus from raw telemetry, then decide
whether the position needs attention.
"""

import numpy as np

from scout.models import HealthCheck, PositionStatus, PositionTelemetry

# Below this much accrued fee value an in-range position is only "warning"
MIN_FEES_USD = 0.1
# Simulated seconds-in-range credited to an in-range position per check
IN_RANGE_SECONDS = 3600


def is_in_range(active_bin: int, lower_bin: int, upper_bin: int) -> bool:
    return lower_bin <= active_bin <= upper_bin


def impermanent_loss_pct(entry_price: float, current_price: float) -> float:
    """Magnitude of impermanent loss in percent for a 50/50 position."""
    if entry_price <= 0 or current_price <= 0:
        return 0.0
    price_ratio = current_price / entry_price
    sqrt_ratio = np.sqrt(price_ratio)
    return float(abs((2.0 * sqrt_ratio / (1.0 + price_ratio)) - 1.0) * 100)


def has_drifted(position: PositionTelemetry, trigger_percent: float) -> bool:
    """True when the active bin sits too far from the range center."""
    center = (position.lower_bin + position.upper_bin) // 2
    width = position.upper_bin - position.lower_bin
    if width <= 0:
        return True
    distance = abs(position.active_bin - center)
    return distance / width > trigger_percent / 100


def derive_status(position: PositionTelemetry, trigger_percent: float) -> PositionStatus:
    # Fees in token Y units (token X valued at the current price)
    total_fees_usd = position.fee_x * position.current_price + position.fee_y

    if not position.is_in_range:
        health = "critical"
    elif total_fees_usd < MIN_FEES_USD:
        health = "warning"
    else:
        health = "healthy"

    rebalance_needed = not position.is_in_range or has_drifted(position, trigger_percent)

    return PositionStatus(
        position=position,
        health=health,
        time_in_range=IN_RANGE_SECONDS if position.is_in_range else 0,
        total_fees_usd=total_fees_usd,
        pnl_usd=total_fees_usd,
        rebalance_needed=rebalance_needed,
    )


def classify_position(status: PositionStatus, max_il_percent: float) -> HealthCheck:
    """First matching finding wins; softer findings never mask harder ones."""
    if status.health == "critical":
        return HealthCheck(True, "Position is in critical state")

    if not status.position.is_in_range:
        return HealthCheck(True, "Position is out of range and not earning fees")

    if status.rebalance_needed:
        return HealthCheck(True, "Price has moved significantly from entry")

    if status.position.il_percent > max_il_percent:
        return HealthCheck(True, "Impermanent loss exceeding threshold")

    return HealthCheck(False, "Position is healthy")
