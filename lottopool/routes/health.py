"""Health check routes."""

from __future__ import annotations

import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lottopool.db import get_session
from lottopool.utils.responses import fail, ok

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness plus a database round trip."""

    try:
        get_session().execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        return fail("unavailable", "Database unreachable", 503)

    return ok({"status": "ok", "database": "ok"})
