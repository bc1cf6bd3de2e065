"""Lookups used by trigger authentication."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from lottopool.models.admin_user import AdminUser
from lottopool.models.user import User


class AdminRepository:
    def get_user(self, session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    def get_active_admin(self, session: Session, user_id: int) -> AdminUser | None:
        stmt = select(AdminUser).where(AdminUser.user_id == user_id, AdminUser.is_active.is_(True))
        return session.scalars(stmt).first()
