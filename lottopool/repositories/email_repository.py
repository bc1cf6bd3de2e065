"""Email template lookup and the delivery log."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from lottopool.models.email import EmailLog, EmailTemplate


class EmailRepository:
    def get_active_template(self, session: Session, name: str) -> EmailTemplate | None:
        """Highest active version of the named template."""

        stmt = (
            select(EmailTemplate)
            .where(EmailTemplate.name == name, EmailTemplate.is_active.is_(True))
            .order_by(EmailTemplate.version.desc())
            .limit(1)
        )
        return session.scalars(stmt).first()

    def create_log(self, session: Session, **values: Any) -> EmailLog:
        entry = EmailLog(**values)
        session.add(entry)
        session.flush()
        return entry
