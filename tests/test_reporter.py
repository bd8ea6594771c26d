"""Tests for scout.reporter — JSON report files and session summaries."""

import json

from scout.models import PerformanceMetrics
from scout.reporter import SelfReporter, load_reports
from tests.factories import make_score


def test_reports_are_written_as_separate_files(tmp_path):
    reporter = SelfReporter("wallet123", tmp_path / "reports")

    first = reporter.report_opportunity(make_score(total=88, apy=120))
    second = reporter.report_action("rebalance", "SOL-USDC", "sig_1")
    third = reporter.report_error("rebalance_failed", "boom")

    assert len({first, second, third}) == 3
    assert json.loads(first.read_text())["type"] == "OPPORTUNITY"
    action = json.loads(second.read_text())
    assert action["wallet"] == "wallet123"
    assert action["tx_signature"] == "sig_1"
    assert json.loads(third.read_text())["message"] == "boom"
    assert [e.type for e in reporter.action_log] == ["opportunity_found", "rebalance", "error"]


def test_session_report(tmp_path):
    reporter = SelfReporter("wallet123", tmp_path)
    reporter.report_action("rebalance", "SOL-USDC")
    metrics = PerformanceMetrics(total_scans=4, opportunities_found=2, rebalances_executed=1)

    summary = reporter.generate_session_report(metrics)

    assert "Scans: 4" in summary
    assert "Actions Logged: 1" in summary
    [session] = [r for r in reporter.recent_reports() if r["type"] == "SESSION_SUMMARY"]
    assert session["metrics"]["rebalances_executed"] == 1
    assert session["action_log"][0]["type"] == "rebalance"


def test_shareable_report(tmp_path):
    reporter = SelfReporter("wallet1234567890abcdef", tmp_path)
    reporter.report_action("rebalance", "SOL-USDC")
    text = reporter.generate_shareable_report(PerformanceMetrics(total_scans=3))
    assert "Scans: 3" in text
    assert "rebalance" in text
    assert "Wallet: wallet1234567890..." in text


def test_load_reports(tmp_path):
    assert load_reports(tmp_path / "nowhere") == []

    (tmp_path / "report_1.json").write_text(json.dumps({"type": "ACTION"}))
    (tmp_path / "report_2.json").write_text("{not json")
    assert load_reports(tmp_path) == [{"type": "ACTION"}]


def test_action_log_is_bounded(tmp_path, monkeypatch):
    monkeypatch.setattr("scout.reporter.ACTION_LOG_LIMIT", 3)
    reporter = SelfReporter("wallet123", tmp_path)
    for i in range(5):
        reporter._log_action("scan", f"scan {i}")

    assert [e.details for e in reporter.action_log] == ["scan 2", "scan 3", "scan 4"]
    assert "Actions Logged: 3" in reporter.generate_session_report(PerformanceMetrics())
