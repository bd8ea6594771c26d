#!/usr/bin/env python3
"""Command-line entry point for the DLMM scout agent."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from scout.agent import ScoutAgent, configure_logging
from scout.config import load_config, validate_config
from scout.errors import ScoutError

logger = logging.getLogger(__name__)

MEDALS = ("#1", "#2", "#3", "#4", "#5")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scout",
        description="Autonomous Meteora DLMM scout agent",
        epilog="Environment: DEMO_MODE=true, RISK_LEVEL=low|medium|high, AUTO_REBALANCE=true|false",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("LOG_LEVEL", "INFO"),
    )
    parser.add_argument("--env-file", default=None, help="Extra .env file to load")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("scout", help="Scan all pools for opportunities")

    monitor = sub.add_parser("monitor", help="Monitor positions")
    monitor.add_argument("pool", nargs="?", default=None, help="Limit to one pool address")

    agent = sub.add_parser("agent", help="Start autonomous agent mode")
    agent.add_argument("--cycles", type=int, default=None, help="Stop after N cycles")

    rebalance = sub.add_parser("rebalance", help="Evaluate and rebalance positions in a pool")
    rebalance.add_argument("pool", help="Pool address")

    sub.add_parser("status", help="Show agent status")

    dashboard = sub.add_parser("dashboard", help="Serve the status dashboard")
    dashboard.add_argument("--host", default=os.environ.get("DASHBOARD_HOST", "127.0.0.1"))
    dashboard.add_argument(
        "--port", type=int, default=int(os.environ.get("DASHBOARD_PORT", "5005"))
    )

    return parser.parse_args(argv)


def _print_scores(scores) -> None:
    print("\nTOP OPPORTUNITIES:")
    print("-" * 60)
    for medal, score in zip(MEDALS, scores):
        print(f"\n{medal} {score.pool_address[:20]}...")
        print(f"   Score: {score.total_score:.1f}/100 | APY: {score.estimated_apy:.1f}%")
        print(f"   Risk: {score.il_risk:g}% IL | {score.recommendation.upper()}")


def _print_statuses(statuses) -> None:
    if not statuses:
        print("\nNo positions found")
        return
    print(f"\nMONITORING {len(statuses)} POSITION(S):")
    print("-" * 60)
    for status in statuses:
        position = status.position
        marker = "IN RANGE" if position.is_in_range else "OUT OF RANGE"
        print(f"\n[{marker}] Position: {position.address[:20]}...")
        print(f"   Health: {status.health.upper()}")
        print(f"   Range: {position.lower_bin} - {position.upper_bin} (active {position.active_bin})")
        print(f"   Fees Earned: ${status.total_fees_usd:.4f}")
        print(f"   Rebalance Needed: {'YES' if status.rebalance_needed else 'No'}")


def _print_reviews(reviews) -> None:
    if not reviews:
        print("\nNo positions found")
        return
    for review in reviews:
        decision = review.decision
        print(f"\nPosition: {review.status.position.address}")
        print(f"   Decision: {decision.action.upper()} (confidence {decision.confidence}%)")
        print(f"   Reasoning: {decision.reasoning}")
        if decision.suggested_range is not None:
            r = decision.suggested_range
            print(f"   Target Range: {r.lower_bin} - {r.upper_bin}")
        if review.execution is not None:
            outcome = "OK" if review.execution.success else f"FAILED ({review.execution.error})"
            print(f"   Execution: {outcome}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(env_path=args.env_file)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # argparse does not check choices against an env-supplied default
    if args.log_level.upper() not in LOG_LEVELS:
        print(f"Configuration error: unknown log level {args.log_level!r}", file=sys.stderr)
        return 1
    configure_logging(config.decisions_dir, args.log_level)

    if args.command == "dashboard":
        from scout.dashboard import serve

        serve(config.decisions_dir / "decisions.jsonl", config.report_dir, args.host, args.port)
        return 0

    errors = validate_config(config)
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    try:
        agent = ScoutAgent(config)

        if args.command == "scout":
            _print_scores(agent.scan_pools())
        elif args.command == "monitor":
            _print_statuses(agent.monitor_positions(args.pool))
        elif args.command == "agent":
            agent.start(max_cycles=args.cycles)
        elif args.command == "rebalance":
            _print_reviews(agent.evaluate_and_rebalance(args.pool, auto_execute=True))
        elif args.command == "status":
            print(agent.status_text())
    except ScoutError as e:
        logger.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
