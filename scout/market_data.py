"""
Simulated market and position data providers.

Live pool/position fetching is an external collaborator; these providers
produce plausible telemetry for demo mode and tests. Any object with the same
get_pool() / get_positions() methods can be injected into ScoutAgent instead.
"""

import logging
import re
from dataclasses import dataclass, replace

import numpy as np

from scout.config import BONK_SOL_POOL, JUP_USDC_POOL, SOL_USDC_POOL
from scout.errors import DataUnavailableError
from scout.health import impermanent_loss_pct, is_in_range
from scout.models import BinRange, PoolTelemetry, PositionTelemetry, TokenInfo

logger = logging.getLogger(__name__)

BASE58_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

SOL = TokenInfo("So11111111111111111111111111111111111111112", "SOL", 9)
USDC = TokenInfo("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC", 6)
BONK = TokenInfo("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "BONK", 5)
JUP = TokenInfo("JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", "JUP", 6)


@dataclass(frozen=True)
class PoolProfile:
    token_x: TokenInfo
    token_y: TokenInfo
    base_bin: int
    base_price: float
    bin_step: int  # basis points per bin
    base_fee: float  # percent
    base_volume: float


KNOWN_POOLS = {
    SOL_USDC_POOL: PoolProfile(SOL, USDC, 8_000, 150.0, 10, 0.1, 2_500_000),
    BONK_SOL_POOL: PoolProfile(BONK, SOL, -2_000, 0.00000015, 100, 1.0, 800_000),
    JUP_USDC_POOL: PoolProfile(JUP, USDC, 4_000, 0.85, 25, 0.25, 1_200_000),
}

# Max bins the simulated active bin moves per read
ACTIVE_BIN_STEP = 8


def bin_price(profile: PoolProfile, bin_id: int) -> float:
    """Price of ``bin_id`` relative to the profile's reference bin."""
    return profile.base_price * (1 + profile.bin_step / 10_000) ** (bin_id - profile.base_bin)


class SimulatedMarketData:
    """Random-walk pool telemetry for the KNOWN_POOLS catalog."""

    def __init__(self, seed: int | None = None, pools: dict | None = None):
        self.rng = np.random.default_rng(seed)
        self.pools = dict(KNOWN_POOLS if pools is None else pools)
        self._active_bins = {address: p.base_bin for address, p in self.pools.items()}

    def profile(self, address: str) -> PoolProfile:
        if not BASE58_ADDRESS.match(address):
            raise DataUnavailableError(address, "invalid pool address")
        if address not in self.pools:
            raise DataUnavailableError(address, "pool not found")
        return self.pools[address]

    def active_bin(self, address: str) -> int:
        self.profile(address)
        return self._active_bins[address]

    def _step_active_bin(self, address: str) -> int:
        step = int(self.rng.integers(-ACTIVE_BIN_STEP, ACTIVE_BIN_STEP + 1))
        self._active_bins[address] += step
        return self._active_bins[address]

    def get_pool(self, address: str) -> PoolTelemetry:
        profile = self.profile(address)
        active = self._step_active_bin(address)

        # Placeholder TVL/volume until a stats API is wired in
        tvl = 500_000 + float(self.rng.random()) * 2_000_000
        volume_24h = profile.base_volume
        fees_24h = volume_24h * (profile.base_fee / 100)

        return PoolTelemetry(
            address=address,
            token_x=profile.token_x,
            token_y=profile.token_y,
            active_bin=active,
            active_price=bin_price(profile, active),
            tvl=tvl,
            volume_24h=volume_24h,
            fees_24h=fees_24h,
            bin_step=profile.bin_step,
            base_fee=profile.base_fee,
        )


class SimulatedPositionData:
    """One simulated wallet position per known pool, tracking the market walk."""

    def __init__(self, market_data: SimulatedMarketData, bin_range: int = 40, seed: int | None = None):
        self.market_data = market_data
        self.bin_range = bin_range
        self.rng = np.random.default_rng(seed)
        self._ranges: dict[str, BinRange] = {}
        self._entry_prices: dict[str, float] = {}

    @staticmethod
    def position_address(pool_address: str) -> str:
        return f"sim_position_{pool_address[:8]}"

    def _open_position(self, pool_address: str, active: int) -> BinRange:
        half = self.bin_range // 2
        offset = int(self.rng.integers(-half, half + 1))
        lower = active - half + offset
        new_range = BinRange(lower, lower + self.bin_range)
        self._set_range(pool_address, new_range)
        return new_range

    def _set_range(self, pool_address: str, new_range: BinRange) -> None:
        profile = self.market_data.profile(pool_address)
        self._ranges[pool_address] = new_range
        self._entry_prices[pool_address] = bin_price(profile, int(new_range.midpoint))

    def move_position(self, pool_address: str, new_range: BinRange) -> None:
        """Re-center the simulated position after a rebalance."""
        self._set_range(pool_address, new_range)
        logger.debug("Simulated position on %s moved to %s", pool_address, new_range)

    def get_positions(self, pool_address: str) -> list[PositionTelemetry]:
        profile = self.market_data.profile(pool_address)
        active = self.market_data.active_bin(pool_address)
        current_range = self._ranges.get(pool_address) or self._open_position(
            pool_address, active
        )

        in_range = is_in_range(active, current_range.lower_bin, current_range.upper_bin)
        current_price = bin_price(profile, active)
        entry_price = self._entry_prices[pool_address]

        position = PositionTelemetry(
            address=self.position_address(pool_address),
            pool_address=pool_address,
            lower_bin=current_range.lower_bin,
            upper_bin=current_range.upper_bin,
            total_x_amount=float(self.rng.uniform(1, 10)),
            total_y_amount=float(self.rng.uniform(100, 1_000)),
            fee_x=float(self.rng.uniform(0, 0.01)) if in_range else 0.0,
            fee_y=float(self.rng.uniform(0, 1.0)) if in_range else 0.0,
            active_bin=active,
            is_in_range=in_range,
            entry_price=entry_price,
            current_price=current_price,
        )
        return [replace(position, il_percent=impermanent_loss_pct(entry_price, current_price))]
