"""Win-check trigger route (controller). No business logic here."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from lottopool.db import get_session
from lottopool.schemas.reconciliation import CheckWinsRequestSchema, RunReportSchema
from lottopool.services.auth_service import AuthService
from lottopool.services.reconciliation_service import build_reconciliation_service
from lottopool.utils.responses import run_report

logger = logging.getLogger(__name__)

reconciliation_bp = Blueprint("reconciliation", __name__)

_request_schema = CheckWinsRequestSchema()
_report_schema = RunReportSchema()


def _auth_service() -> AuthService:
    cfg = current_app.config
    return AuthService(
        cron_secret=str(cfg.get("CRON_SECRET") or ""),
        jwt_secret=str(cfg.get("JWT_SECRET_KEY") or cfg.get("SECRET_KEY")),
        jwt_algorithm=str(cfg.get("JWT_ALGORITHM", "HS256")),
    )


@reconciliation_bp.route("/check-wins", methods=["GET", "POST"])
def check_wins():
    """Reconcile unchecked tickets against the latest (or a given) drawing."""

    session = get_session()
    caller = _auth_service().authenticate(
        session,
        authorization=request.headers.get("Authorization"),
        cron_header=request.headers.get("X-Cron-Secret"),
    )
    logger.info("Win check triggered by %s", caller.label)

    payload = (request.get_json(silent=True) or {}) if request.method == "POST" else {}
    data = _request_schema.load(payload)

    service = build_reconciliation_service(
        current_app.config,
        current_app.extensions.get("email_client"),
        triggered_by=f"check_wins {caller.label}",
    )
    report = service.run(session, game_type=data.get("game_type"), draw_date=data.get("draw_date"))

    return run_report(_report_schema.dump(report))
