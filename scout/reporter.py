"""
SelfReporter — the agent's unprompted reporting channel.

Every report is logged, appended to an in-memory action log and written as a
standalone JSON file under the report directory.
"""

import json
import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from scout.models import PerformanceMetrics, PoolScore

logger = logging.getLogger(__name__)

# Oldest entries drop off in long-running sessions
ACTION_LOG_LIMIT = 1000


@dataclass(frozen=True)
class ActionLogEntry:
    timestamp: datetime
    type: str
    details: str
    value: float | None = None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type,
            "details": self.details,
            "value": self.value,
        }


class SelfReporter:
    def __init__(self, wallet_address: str, report_dir):
        self.wallet_address = wallet_address
        self.report_dir = Path(report_dir)
        self.report_dir.mkdir(parents=True, exist_ok=True)
        self.action_log: deque[ActionLogEntry] = deque(maxlen=ACTION_LOG_LIMIT)

    def _log_action(self, type_: str, details: str, value: float | None = None) -> None:
        self.action_log.append(
            ActionLogEntry(datetime.now(timezone.utc), type_, details, value)
        )

    def _save(self, prefix: str, report: dict) -> Path:
        # Millisecond timestamps can collide within one cycle; add a counter
        stamp = int(time.time() * 1000)
        path = self.report_dir / f"{prefix}_{stamp}.json"
        n = 1
        while path.exists():
            path = self.report_dir / f"{prefix}_{stamp}_{n}.json"
            n += 1
        path.write_text(json.dumps(report, indent=2))
        return path

    def report_opportunity(self, opportunity: PoolScore) -> Path:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "OPPORTUNITY",
            "pool": opportunity.pool_address,
            "score": opportunity.total_score,
            "apy": opportunity.estimated_apy,
            "risk": opportunity.il_risk,
            "recommendation": opportunity.recommendation,
        }
        self._log_action(
            "opportunity_found",
            f"Found {opportunity.estimated_apy:.1f}% APY opportunity",
            opportunity.total_score,
        )
        logger.info(
            "[AGENT REPORT] High-value opportunity: pool=%s apy=%.1f%% score=%.0f/100 il=%s%%",
            opportunity.pool_address[:20],
            opportunity.estimated_apy,
            opportunity.total_score,
            opportunity.il_risk,
        )
        return self._save("report", report)

    def report_action(self, action: str, target: str, tx_signature: str | None = None) -> Path:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "ACTION",
            "action": action,
            "target": target,
            "tx_signature": tx_signature,
            "wallet": self.wallet_address,
        }
        self._log_action(action, f"{action} on {target}")
        logger.info("[AGENT ACTION] %s target=%s tx=%s", action.upper(), target, tx_signature)
        return self._save("report", report)

    def report_error(self, error_type: str, message: str) -> Path:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "ERROR",
            "error_type": error_type,
            "message": message,
            "wallet": self.wallet_address,
        }
        self._log_action("error", f"{error_type}: {message}")
        logger.warning("[AGENT ERROR] %s: %s", error_type, message)
        return self._save("report", report)

    def generate_session_report(self, metrics: PerformanceMetrics) -> str:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "SESSION_SUMMARY",
            "wallet": self.wallet_address,
            "runtime_seconds": metrics.runtime_hours() * 3600,
            "metrics": {
                "total_scans": metrics.total_scans,
                "opportunities_found": metrics.opportunities_found,
                "rebalances_executed": metrics.rebalances_executed,
                "fees_earned": metrics.fees_earned,
            },
            "action_log": [entry.to_dict() for entry in self.action_log],
        }
        path = self._save("session", report)

        summary = "\n".join(
            [
                "AGENT SESSION REPORT",
                f"Runtime: {metrics.runtime_hours():.1f} hours",
                f"Scans: {metrics.total_scans}",
                f"Opportunities: {metrics.opportunities_found}",
                f"Rebalances: {metrics.rebalances_executed}",
                f"Fees Earned: ${metrics.fees_earned:.4f}",
                f"Actions Logged: {len(self.action_log)}",
                f"Report saved: {path}",
            ]
        )
        logger.info("Session report saved to %s", path)
        return summary

    def generate_shareable_report(self, metrics: PerformanceMetrics) -> str:
        lines = [
            "Meteora DLMM Scout Agent - Performance Report",
            f"Runtime: {metrics.runtime_hours():.1f} hours",
            f"Scans: {metrics.total_scans}",
            f"Opportunities: {metrics.opportunities_found}",
            f"Rebalances: {metrics.rebalances_executed}",
            f"Fees: ${metrics.fees_earned:.4f}",
            "",
            "Key Actions:",
        ]
        for entry in list(self.action_log)[-5:]:
            lines.append(f"- {entry.timestamp.strftime('%H:%M:%S')}: {entry.type}")
        lines.append("")
        lines.append(f"Wallet: {self.wallet_address[:16]}...")
        return "\n".join(lines)

    def recent_reports(self, limit: int = 20) -> list[dict]:
        """Newest-first JSON reports from the report directory."""
        return load_reports(self.report_dir, limit)


def load_reports(report_dir, limit: int = 20) -> list[dict]:
    report_dir = Path(report_dir)
    if not report_dir.exists():
        return []
    paths = sorted(report_dir.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
    reports = []
    for path in paths[:limit]:
        try:
            reports.append(json.loads(path.read_text()))
        except json.JSONDecodeError:
            logger.warning("Skipping unreadable report %s", path)
    return reports
