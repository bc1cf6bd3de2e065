"""Lottery pool draw reconciliation service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: Config values applied after the environment config.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from lottopool.config import get_config
    from lottopool.db import init_db
    from lottopool.error_handlers import register_error_handlers
    from lottopool.logging_config import configure_logging
    from lottopool.routes.health import health_bp
    from lottopool.routes.reconciliation import reconciliation_bp
    from lottopool.services.reconciliation_service import build_email_client

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.extensions["email_client"] = build_email_client(app.config)

    app.register_blueprint(health_bp)
    app.register_blueprint(reconciliation_bp)

    return app
