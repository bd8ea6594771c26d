"""
Scout dashboard — read-only Flask view over the agent's decision log and
JSON reports.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from flask import Flask, jsonify

from scout.reporter import load_reports

logger = logging.getLogger(__name__)


def read_decisions(decisions_path, limit: int = 50) -> list[dict]:
    decisions_path = Path(decisions_path)
    if not decisions_path.exists():
        return []
    decisions = []
    for line in decisions_path.read_text().splitlines()[-limit:]:
        try:
            decisions.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return decisions


def create_app(decisions_path, report_dir) -> Flask:
    app = Flask(__name__)

    @app.route("/api/state")
    def api_state():
        decisions = read_decisions(decisions_path)
        reports = load_reports(report_dir)
        actions = [d for d in decisions if d.get("should_act")]
        return jsonify(
            {
                "status": "ok" if decisions or reports else "empty",
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "decisions": decisions,
                "actionable": len(actions),
                "reports": reports,
            }
        )

    @app.route("/health")
    def health():
        if Path(decisions_path).exists():
            return jsonify({"ok": True, "status": "ok"}), 200
        return jsonify({"ok": False, "status": "initializing"}), 503

    return app


def serve(decisions_path, report_dir, host: str = "127.0.0.1", port: int = 5005) -> None:
    app = create_app(decisions_path, report_dir)
    logger.info("Scout dashboard starting on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=False)
