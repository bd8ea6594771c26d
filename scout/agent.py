"""
ScoutAgent — autonomous decision loop for DLMM liquidity positions.

Each cycle: scan pools -> score -> observe market -> check positions ->
decide -> (optionally) hand rebalances to the execution collaborator.
Cycles run strictly one after another.
"""

import json
import logging
import os
import secrets
import time
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from scout.config import (
    OPPORTUNITY_MIN_SCORE,
    OPPORTUNITY_REPORT_SCORE,
    REFLECTION_EVERY_N_SCANS,
    SCAN_HISTORY_LIMIT,
    AgentConfig,
    validate_config,
)
from scout.errors import ConfigError, DataUnavailableError
from scout.executor import SimulatedExecutor
from scout.health import classify_position, derive_status
from scout.market_data import SimulatedMarketData, SimulatedPositionData
from scout.models import (
    ExecutionReport,
    PerformanceMetrics,
    PoolScore,
    PositionStatus,
    RebalanceDecision,
    ScanResult,
    utc_now,
)
from scout.observer import MarketObserver
from scout.personality import Personality
from scout.policy import RebalancePolicy
from scout.reflection import adapt_strategy, generate_reflection
from scout.reporter import SelfReporter
from scout.scorer import PoolScanner, score_pool

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
def configure_logging(log_dir, level: str = "INFO") -> None:
    """Console at ``level`` plus a DEBUG file handler on decisions.log."""
    os.makedirs(log_dir, exist_ok=True)
    root = logging.getLogger("scout")
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level.upper())
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    fh = logging.FileHandler(os.path.join(log_dir, "decisions.log"))
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)


@dataclass(frozen=True)
class PositionReview:
    status: PositionStatus
    decision: RebalanceDecision
    execution: ExecutionReport | None = None


class ScoutAgent:
    """Autonomous DLMM scout: scans, judges and rebalances without prompting."""

    def __init__(
        self,
        config: AgentConfig,
        market_data=None,
        position_data=None,
        executor=None,
        reporter: SelfReporter | None = None,
        sleep=time.sleep,
    ):
        self.config = config
        self.personality = Personality.from_risk_level(config.risk_level)

        if config.demo_mode:
            logger.warning("DEMO MODE: No real transactions will be executed")
            if market_data is None:
                market_data = SimulatedMarketData(seed=config.sim_seed)
            if position_data is None and isinstance(market_data, SimulatedMarketData):
                position_data = SimulatedPositionData(
                    market_data, config.default_bin_range, seed=config.sim_seed
                )
            if executor is None:
                sim_positions = (
                    position_data if isinstance(position_data, SimulatedPositionData) else None
                )
                executor = SimulatedExecutor(positions=sim_positions)

        missing = [
            name
            for name, value in (
                ("market_data", market_data),
                ("position_data", position_data),
                ("executor", executor),
            )
            if value is None
        ]
        if missing:
            raise ConfigError(
                f"Live mode needs injected collaborators: {', '.join(missing)} "
                "(or set DEMO_MODE=true)"
            )

        self.wallet_address = config.wallet_address or (
            "demo_" + secrets.token_hex(16) if config.demo_mode else "unknown_wallet"
        )

        self.scanner = PoolScanner(market_data, config.pools)
        self.position_data = position_data
        self.executor = executor
        self.observer = MarketObserver()
        self.policy = RebalancePolicy(self.personality, config.max_il_risk_percent)
        self.reporter = reporter or SelfReporter(self.wallet_address, config.report_dir)
        self._sleep = sleep

        self.decisions_jsonl = config.decisions_dir / "decisions.jsonl"
        self.scan_history: deque[ScanResult] = deque(maxlen=SCAN_HISTORY_LIMIT)
        self.metrics = PerformanceMetrics()
        self.is_running = False

        profile = self.personality.profile
        logger.info("Personality: %s", profile.name)
        logger.info("Risk Tolerance: %.0f%%", profile.risk_tolerance * 100)
        logger.info('Quote: "%s"', profile.quote)

    # ------------------------------------------------------------------
    # Market intelligence
    # ------------------------------------------------------------------

    def _is_opportunity(self, score: PoolScore) -> bool:
        return (
            score.total_score >= OPPORTUNITY_MIN_SCORE
            and score.estimated_apy >= self.config.min_apy_threshold
        )

    def scan_pools(self) -> list[PoolScore]:
        """Score every reachable pool, best first, and record the scan."""
        logger.info("[AUTONOMOUS SCAN] Analyzing market opportunities...")
        start = time.time()

        pools = self.scanner.scan_all_pools()
        scores = sorted(
            (score_pool(pool) for pool in pools),
            key=lambda s: s.total_score,
            reverse=True,
        )

        observation = None
        if scores:
            observation = self.observer.observe(scores)
        else:
            logger.warning("No pool telemetry this scan; skipping market observation")

        opportunities = tuple(s for s in scores if self._is_opportunity(s))
        result = ScanResult(
            timestamp=utc_now(),
            pools_scanned=len(pools),
            opportunities=opportunities,
            top_pick=scores[0] if scores else None,
            market_conditions=observation,
        )
        self.scan_history.append(result)

        self.metrics.total_scans += 1
        self.metrics.opportunities_found += len(opportunities)

        logger.info("Scan complete in %.1fs", time.time() - start)
        if observation is not None:
            logger.info('Agent observation: "%s"', observation.summary)

        if opportunities and opportunities[0].total_score > OPPORTUNITY_REPORT_SCORE:
            self.reporter.report_opportunity(opportunities[0])

        return scores

    # ------------------------------------------------------------------
    # Portfolio monitoring
    # ------------------------------------------------------------------

    def _fetch_statuses(self, pool_address: str) -> list[PositionStatus]:
        try:
            positions = self.position_data.get_positions(pool_address)
        except DataUnavailableError as e:
            logger.warning("Error monitoring positions on %s: %s", pool_address, e.reason)
            return []
        except Exception as e:
            logger.warning("Error monitoring positions on %s: %s", pool_address, e)
            return []
        return [
            derive_status(position, self.config.rebalance_trigger_percent)
            for position in positions
        ]

    def monitor_positions(self, pool_address: str | None = None) -> list[PositionStatus]:
        logger.info("[AUTONOMOUS MONITOR] Checking position health...")
        addresses = [pool_address] if pool_address else list(self.scanner.pools)

        statuses = []
        for address in addresses:
            statuses.extend(self._fetch_statuses(address))

        for status in statuses:
            check = classify_position(status, self.config.max_il_risk_percent)
            if check.requires_attention:
                logger.warning(
                    "Agent alert: %s (%s)", check.reason, status.position.address
                )
        return statuses

    # ------------------------------------------------------------------
    # Decisions / execution
    # ------------------------------------------------------------------

    def _pool_name(self, pool_address: str) -> str:
        pool = self.scanner.get_cached_pool(pool_address)
        return pool.name if pool else pool_address[:16]

    def review_position(self, status: PositionStatus, auto_execute: bool = False) -> PositionReview:
        """Decide for one position and execute if every gate allows it."""
        decision = self.policy.decide(status)
        self.log_decision(status, decision)

        if decision.should_act:
            logger.info(
                "Agent Decision: %s | %s | confidence=%s%%",
                decision.action.upper(),
                decision.reasoning,
                decision.confidence,
            )
            if decision.suggested_range is not None:
                logger.info(
                    "Target Range: %d - %d",
                    decision.suggested_range.lower_bin,
                    decision.suggested_range.upper_bin,
                )
        else:
            logger.info("No action taken: %s", decision.reasoning)

        execution = None
        if auto_execute and self.config.auto_rebalance and decision.should_act:
            execution = self._execute(status, decision)
        return PositionReview(status, decision, execution)

    def _position_value(self, status: PositionStatus) -> float:
        position = status.position
        return position.total_x_amount * position.current_price + position.total_y_amount

    def _execute(self, status: PositionStatus, decision: RebalanceDecision) -> ExecutionReport | None:
        position = status.position
        pool_name = self._pool_name(position.pool_address)

        if decision.action == "close":
            logger.warning("Close action is not supported; leaving %s open", position.address)
            return None
        if decision.action != "rebalance":
            return None

        value = self._position_value(status)
        if value < self.config.min_position_usd:
            logger.info(
                "Skipping rebalance of %s: position value %.2f below minimum %.2f",
                position.address,
                value,
                self.config.min_position_usd,
            )
            return None

        logger.info("Executing autonomous rebalance on %s...", pool_name)
        try:
            signatures = self.executor.execute_rebalance(
                position.pool_address, position.address, decision.suggested_range
            )
        except Exception as e:
            # The decision stands; retries are left to the next cycle
            logger.error("Rebalance failed on %s: %s", pool_name, e)
            self.reporter.report_error("rebalance_failed", str(e))
            return ExecutionReport(
                pool_address=position.pool_address,
                position_address=position.address,
                success=False,
                error=str(e),
            )

        self.metrics.rebalances_executed += 1
        first_sig = signatures[0] if signatures else None
        logger.info("Rebalance success! TX: %s", first_sig)
        self.reporter.report_action("rebalance", pool_name, first_sig)
        return ExecutionReport(
            pool_address=position.pool_address,
            position_address=position.address,
            success=True,
            signatures=tuple(signatures),
        )

    def evaluate_and_rebalance(self, pool_address: str, auto_execute: bool = False) -> list[PositionReview]:
        logger.info("[AUTONOMOUS DECISION] Evaluating %s...", self._pool_name(pool_address))
        return [
            self.review_position(status, auto_execute)
            for status in self._fetch_statuses(pool_address)
        ]

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run_cycle(self) -> bool:
        """One full autonomous cycle. Returns False if the cycle errored."""
        logger.info("Autonomous Cycle #%d", self.metrics.total_scans + 1)
        try:
            scores = self.scan_pools()

            alert = self.observer.evaluate_opportunity(scores)
            if alert.should_alert:
                logger.info("Agent Alert: %s", alert.message)

            statuses = self.monitor_positions()
            if statuses:
                logger.info("Managing %d positions", len(statuses))
                need_action = [
                    s for s in statuses if s.rebalance_needed or s.health != "healthy"
                ]
                if need_action:
                    logger.warning("%d positions require attention", len(need_action))
                for status in need_action:
                    self.review_position(status, auto_execute=True)

                self.metrics.fees_earned = sum(s.total_fees_usd for s in statuses)

            if self.metrics.total_scans % REFLECTION_EVERY_N_SCANS == 0:
                logger.info("Agent Reflection: %s", generate_reflection(self.metrics))
                self._adapt()

            logger.info(
                "Cycle complete. Runtime: %.1fh | Scans: %d | Rebalances: %d",
                self.metrics.runtime_hours(),
                self.metrics.total_scans,
                self.metrics.rebalances_executed,
            )
            return True
        except Exception as e:
            logger.error("Cycle error: %s", e, exc_info=True)
            self.reporter.report_error("cycle_error", str(e))
            return False

    def _adapt(self) -> None:
        overrides = adapt_strategy(self.metrics, self.config)
        if not overrides:
            return
        self.config = replace(self.config, **overrides)
        if "default_bin_range" in overrides and isinstance(self.position_data, SimulatedPositionData):
            self.position_data.bin_range = self.config.default_bin_range
        logger.info("Strategy adapted: %s", overrides)

    def start(self, max_cycles: int | None = None) -> bool:
        """Run cycles until stopped. Returns False if the config is invalid."""
        errors = validate_config(self.config)
        if errors:
            logger.error("Configuration errors:")
            for error in errors:
                logger.error("  - %s", error)
            return False

        logger.info(
            "Entering full autonomous mode. Checking every %s min. Press Ctrl+C to stop.",
            self.config.scan_interval_minutes,
        )
        self.is_running = True
        cycles = 0
        try:
            while self.is_running:
                self.run_cycle()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                self._sleep(self.config.scan_interval_minutes * 60)
        except KeyboardInterrupt:
            logger.info("Agent stopped by user.")
        finally:
            self.stop()
        return True

    def stop(self) -> str:
        self.is_running = False
        summary = self.reporter.generate_session_report(self.metrics)
        logger.info("Agent stopped. Session report generated.")
        return summary

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def log_decision(self, status: PositionStatus, decision: RebalanceDecision) -> None:
        """Log decision details to decisions.log and decisions.jsonl."""
        position = status.position
        logger.debug(
            "DECISION: %s confidence=%s | active_bin=%d | range=[%d,%d] | "
            "health=%s in_range=%s | position=%s",
            decision.action.upper(),
            decision.confidence,
            position.active_bin,
            position.lower_bin,
            position.upper_bin,
            status.health,
            position.is_in_range,
            position.address,
        )

        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "personality": self.personality.profile.name,
            "pool": position.pool_address,
            "position": position.address,
            "active_bin": position.active_bin,
            "range": [position.lower_bin, position.upper_bin],
            "health": status.health,
            "in_range": position.is_in_range,
            **decision.to_dict(),
        }
        self.decisions_jsonl.parent.mkdir(parents=True, exist_ok=True)
        with open(self.decisions_jsonl, "a") as f:
            f.write(json.dumps(record) + "\n")

    def status_text(self) -> str:
        profile = self.personality.profile
        return "\n".join(
            [
                f"Agent: {profile.name}",
                f"Runtime: {self.metrics.runtime_hours():.1f} hours",
                f"Scans: {self.metrics.total_scans}",
                f"Opportunities: {self.metrics.opportunities_found}",
                f"Rebalances: {self.metrics.rebalances_executed}",
                f"Fees Earned: ${self.metrics.fees_earned:.4f}",
                f"Personality: {profile.description}",
            ]
        )
