"""Run a win check outside of HTTP (cron / manual backfill).

Runs with automation privileges: whoever can execute this script already
has database credentials.

Usage:
  python scripts/run_reconciliation.py
  python scripts/run_reconciliation.py --game powerball --date 2025-01-04
"""

from __future__ import annotations

import argparse
import json
import pathlib
import sys
from datetime import date

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from lottopool import create_app
from lottopool.schemas.reconciliation import RunReportSchema
from lottopool.services.prize_table import GameType
from lottopool.services.reconciliation_service import build_reconciliation_service


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile unchecked tickets against official draws")
    parser.add_argument("--game", choices=[g.value for g in GameType], default=None)
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="draw date, YYYY-MM-DD")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    app = create_app()
    session_factory = app.extensions["session_factory"]

    with app.app_context():
        service = build_reconciliation_service(
            app.config,
            app.extensions.get("email_client"),
            triggered_by="check_wins script",
        )
        with session_factory() as session:
            report = service.run(session, game_type=args.game, draw_date=args.date)
            session.commit()

    print(json.dumps(RunReportSchema().dump(report), indent=2))
    return 0 if report.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
