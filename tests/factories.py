"""Builders and fakes shared by the scout tests."""

from scout.errors import DataUnavailableError, ExecutionError
from scout.models import PoolScore, PoolTelemetry, PositionStatus, PositionTelemetry, TokenInfo

# Settings read by load_config; cleared so tests see only what they set
ENV_VARS = [
    "RPC_URL",
    "WALLET_PRIVATE_KEY",
    "WALLET_ADDRESS",
    "SCAN_INTERVAL_MINUTES",
    "MIN_APY_THRESHOLD",
    "MAX_IL_RISK_PERCENT",
    "AUTO_REBALANCE",
    "RISK_LEVEL",
    "DEFAULT_BIN_RANGE",
    "REBALANCE_TRIGGER_PERCENT",
    "MIN_POSITION_USD",
    "DEMO_MODE",
    "SCOUT_POOLS",
    "SCOUT_DATA_DIR",
    "SIM_SEED",
]


def make_token(symbol: str, decimals: int = 6) -> TokenInfo:
    return TokenInfo(mint=f"{symbol}_mint", symbol=symbol, decimals=decimals)


def make_pool(
    address="poolA",
    x="SOL",
    y="USDC",
    tvl=1_000_000.0,
    volume_24h=3_000_000.0,
    fees_24h=2_000.0,
    active_bin=120,
    active_price=150.0,
) -> PoolTelemetry:
    return PoolTelemetry(
        address=address,
        token_x=make_token(x),
        token_y=make_token(y),
        active_bin=active_bin,
        active_price=active_price,
        tvl=tvl,
        volume_24h=volume_24h,
        fees_24h=fees_24h,
        bin_step=10,
        base_fee=0.1,
    )


def make_score(total=50.0, apy=20.0, il=2.0, address="poolA") -> PoolScore:
    return PoolScore(
        pool_address=address,
        total_score=total,
        yield_score=0.0,
        volume_score=0.0,
        stability_score=0.0,
        tvl_score=0.0,
        estimated_apy=apy,
        il_risk=il,
        recommendation="hold",
    )


def make_position(
    lower=100,
    upper=140,
    active=120,
    in_range=None,
    fee_x=0.01,
    fee_y=1.0,
    il_percent=0.0,
    pool="poolA",
    address="pos1",
    price=150.0,
) -> PositionTelemetry:
    if in_range is None:
        in_range = lower <= active <= upper
    return PositionTelemetry(
        address=address,
        pool_address=pool,
        lower_bin=lower,
        upper_bin=upper,
        total_x_amount=1.0,
        total_y_amount=100.0,
        fee_x=fee_x,
        fee_y=fee_y,
        active_bin=active,
        is_in_range=in_range,
        entry_price=price,
        current_price=price,
        il_percent=il_percent,
    )


def make_status(
    position=None, health="healthy", rebalance_needed=False, fees=1.0
) -> PositionStatus:
    position = position or make_position()
    return PositionStatus(
        position=position,
        health=health,
        time_in_range=3600 if position.is_in_range else 0,
        total_fees_usd=fees,
        pnl_usd=fees,
        rebalance_needed=rebalance_needed,
    )


class FakeMarketData:
    """``errors`` maps a pool address to the exception its fetch raises."""

    def __init__(self, pools, errors=None):
        self.pools = {p.address: p for p in pools}
        self.errors = errors or {}
        self.calls = []

    def get_pool(self, address):
        self.calls.append(address)
        if address in self.errors:
            raise self.errors[address]
        if address not in self.pools:
            raise DataUnavailableError(address, "pool not found")
        return self.pools[address]


class FakePositionData:
    def __init__(self, positions, errors=None):
        self.positions = positions
        self.errors = errors or {}

    def get_positions(self, pool_address):
        if pool_address in self.errors:
            raise self.errors[pool_address]
        if pool_address not in self.positions:
            raise DataUnavailableError(pool_address, "no positions readable")
        return list(self.positions[pool_address])


class RecordingExecutor:
    def __init__(self, fail=False, error=None):
        self.fail = fail
        self.error = error
        self.calls = []

    def execute_rebalance(self, pool_address, position_address, new_range):
        self.calls.append((pool_address, position_address, new_range))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise ExecutionError("simulated settlement failure")
        return ["sig_1"]
