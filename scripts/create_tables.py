"""Create database tables in the configured database.

Reads DATABASE_URL from .env / environment, creates all registered ORM tables
and seeds the default win email template when none exists.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy import select, text

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from lottopool.config import resolve_database_url
from lottopool.db import create_app_engine, create_session_factory
from lottopool.models.base import Base
from lottopool.models.email import EmailTemplate

# Import models so they register with Base.metadata
from lottopool import models  # noqa: F401

DEFAULT_WIN_TEMPLATE = {
    "name": "win_notification",
    "version": 1,
    "subject": "{{pool_name}} won {{total_amount}}!",
    "html_body": (
        "<p>Hi {{member_name}},</p>"
        "<p>Your pool <strong>{{pool_name}}</strong> won {{total_amount}} "
        "in the {{draw_date}} drawing ({{tier_summary}}).</p>"
        "<p>Your share: <strong>{{per_member_share}}</strong></p>"
    ),
    "variables": ["member_name", "pool_name", "total_amount", "draw_date", "tier_summary", "per_member_share"],
    "description": "Sent to every pool member after a winning drawing.",
}


def main() -> int:
    """Create all ORM tables in the target database."""

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    database_url = resolve_database_url()

    engine = create_app_engine(database_url)
    Base.metadata.create_all(bind=engine)

    # create_all() does not add indexes to existing tables.
    if engine.dialect.name == "postgresql":
        ddl = [
            "CREATE UNIQUE INDEX IF NOT EXISTS uq_winnings_ticket_id ON winnings (ticket_id)",
            "CREATE INDEX IF NOT EXISTS ix_tickets_game_date_checked ON tickets (game_type, draw_date, checked)",
        ]
        with engine.begin() as conn:
            for stmt in ddl:
                conn.execute(text(stmt))

    session_factory = create_session_factory(engine)
    with session_factory() as session:
        existing = session.scalars(
            select(EmailTemplate).where(EmailTemplate.name == DEFAULT_WIN_TEMPLATE["name"])
        ).first()
        if existing is None:
            session.add(EmailTemplate(**DEFAULT_WIN_TEMPLATE))
            session.commit()
            print("Seeded default win email template.")

    print("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
