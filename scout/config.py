import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from scout.personality import RiskLevel

# Load .env from the working directory into os.environ BEFORE reading settings.
# override=False means shell env vars take precedence over .env.
load_dotenv(Path.cwd() / ".env", override=False)

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

# Meteora DLMM pools scanned when SCOUT_POOLS is not set
SOL_USDC_POOL = "BGm1tav58oGcsQJehL9WXBFXF7D27vZsKefj4xJKD5Y"
BONK_SOL_POOL = "5rCf1DM8LjKT7f2bmGn6W9o1Fh6y5wBe6MzcqFDQ3G"
JUP_USDC_POOL = "DVPWKSP6ZSDcQhP1KpnHtkDaXzH6pHGHDCdF6j9T"
POPULAR_POOLS = (SOL_USDC_POOL, BONK_SOL_POOL, JUP_USDC_POOL)

# Scan cadence / history
SCAN_HISTORY_LIMIT = 100
REFLECTION_EVERY_N_SCANS = 5
OPPORTUNITY_MIN_SCORE = 60
OPPORTUNITY_REPORT_SCORE = 80

_TRUE_VALUES = ("true", "1", "yes")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in _TRUE_VALUES


def _env_pools() -> tuple[str, ...]:
    raw = os.environ.get("SCOUT_POOLS", "")
    pools = tuple(p.strip() for p in raw.split(",") if p.strip())
    return pools or POPULAR_POOLS


@dataclass(frozen=True)
class AgentConfig:
    """Typed agent settings loaded from environment variables."""

    rpc_url: str = DEFAULT_RPC_URL
    wallet_private_key: str = ""
    wallet_address: str = ""
    scan_interval_minutes: float = 30
    min_apy_threshold: float = 15.0
    max_il_risk_percent: float = 5.0
    auto_rebalance: bool = False
    risk_level: str = RiskLevel.MEDIUM.value
    default_bin_range: int = 40
    rebalance_trigger_percent: float = 10.0
    min_position_usd: float = 50.0
    demo_mode: bool = False
    pools: tuple[str, ...] = POPULAR_POOLS
    data_dir: str = "scout_data"
    sim_seed: int | None = None

    @property
    def report_dir(self) -> Path:
        return Path(self.data_dir) / "reports"

    @property
    def decisions_dir(self) -> Path:
        return Path(self.data_dir) / "decisions"


def load_config(env_path: str | None = None) -> AgentConfig:
    """Build an AgentConfig from the environment.

    Values are parsed but not range-checked; call ``validate_config`` for that.
    A malformed number raises ``ValueError`` naming the variable.
    """
    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)

    def _num(name: str, default: str, cast=float):
        raw = os.environ.get(name, default)
        try:
            return cast(raw)
        except ValueError:
            raise ValueError(f"{name} must be a number, got {raw!r}") from None

    seed = os.environ.get("SIM_SEED")
    return AgentConfig(
        rpc_url=os.environ.get("RPC_URL", DEFAULT_RPC_URL),
        wallet_private_key=os.environ.get("WALLET_PRIVATE_KEY", ""),
        wallet_address=os.environ.get("WALLET_ADDRESS", ""),
        scan_interval_minutes=_num("SCAN_INTERVAL_MINUTES", "30"),
        min_apy_threshold=_num("MIN_APY_THRESHOLD", "15"),
        max_il_risk_percent=_num("MAX_IL_RISK_PERCENT", "5"),
        auto_rebalance=_env_bool("AUTO_REBALANCE"),
        risk_level=os.environ.get("RISK_LEVEL", RiskLevel.MEDIUM.value).strip().lower(),
        default_bin_range=_num("DEFAULT_BIN_RANGE", "40", int),
        rebalance_trigger_percent=_num("REBALANCE_TRIGGER_PERCENT", "10"),
        min_position_usd=_num("MIN_POSITION_USD", "50"),
        demo_mode=_env_bool("DEMO_MODE"),
        pools=_env_pools(),
        data_dir=os.environ.get("SCOUT_DATA_DIR", "scout_data"),
        sim_seed=_num("SIM_SEED", seed, int) if seed else None,
    )


def validate_config(config: AgentConfig) -> list[str]:
    """Return human-readable configuration errors (empty list when valid)."""
    errors = []

    if not config.wallet_private_key and not config.demo_mode:
        errors.append("WALLET_PRIVATE_KEY is required (or use DEMO_MODE=true)")

    if config.min_apy_threshold < 0 or config.min_apy_threshold > 1000:
        errors.append("MIN_APY_THRESHOLD must be between 0 and 1000")

    if config.max_il_risk_percent < 0 or config.max_il_risk_percent > 50:
        errors.append("MAX_IL_RISK_PERCENT must be between 0 and 50")

    if config.rebalance_trigger_percent <= 0 or config.rebalance_trigger_percent > 100:
        errors.append("REBALANCE_TRIGGER_PERCENT must be in (0, 100]")

    if config.scan_interval_minutes <= 0:
        errors.append("SCAN_INTERVAL_MINUTES must be positive")

    if config.default_bin_range <= 0:
        errors.append("DEFAULT_BIN_RANGE must be positive")

    if config.risk_level not in RiskLevel.values():
        errors.append(
            f"RISK_LEVEL must be one of {', '.join(RiskLevel.values())}, "
            f"got {config.risk_level!r}"
        )

    return errors
