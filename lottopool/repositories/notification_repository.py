"""Append-only stores: in-app notifications and the activity log."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from lottopool.models.activity_log import ActivityLog
from lottopool.models.notification import Notification


class NotificationRepository:
    def create(
        self,
        session: Session,
        *,
        user_id: int,
        type: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(user_id=user_id, type=type, title=title, message=message, data=data or {})
        session.add(notification)
        session.flush()
        return notification


class ActivityLogRepository:
    def log(
        self,
        session: Session,
        *,
        action: str,
        user_id: int | None = None,
        pool_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> ActivityLog:
        entry = ActivityLog(user_id=user_id, pool_id=pool_id, action=action, details=details or {})
        session.add(entry)
        session.flush()
        return entry
