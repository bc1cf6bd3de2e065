"""Trigger authentication: automation secret or an admin's bearer token."""

from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass

import jwt
from sqlalchemy.orm import Session

from lottopool.errors import ForbiddenError, UnauthorizedError
from lottopool.repositories.admin_repository import AdminRepository

logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Caller:
    kind: str  # "automation" | "admin"
    user_id: int | None = None
    role: str | None = None

    @property
    def label(self) -> str:
        if self.kind == "admin":
            return f"admin (user:{self.user_id})"
        return "automation"


class AuthService:
    """Authenticate a reconciliation trigger before any data is read."""

    def __init__(
        self,
        *,
        cron_secret: str,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        repository: AdminRepository | None = None,
    ) -> None:
        self._cron_secret = cron_secret or ""
        self._jwt_secret = jwt_secret
        self._jwt_algorithm = jwt_algorithm
        self._repo = repository or AdminRepository()

    def _matches_secret(self, presented: str | None) -> bool:
        if not self._cron_secret or not presented:
            return False
        return hmac.compare_digest(presented.encode(), self._cron_secret.encode())

    def _decode_user_id(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self._jwt_secret, algorithms=[self._jwt_algorithm])
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError("Invalid or expired token") from exc

        raw = payload.get("user_id", payload.get("sub"))
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise UnauthorizedError("Invalid or expired token") from exc

    def authenticate(
        self,
        session: Session,
        *,
        authorization: str | None,
        cron_header: str | None = None,
    ) -> Caller:
        authorization = (authorization or "").strip()
        token = _BEARER.sub("", authorization).strip() if _BEARER.match(authorization) else ""

        if self._matches_secret(cron_header) or self._matches_secret(token):
            return Caller(kind="automation")

        if not token:
            raise UnauthorizedError("Missing authorization token")

        user_id = self._decode_user_id(token)
        if self._repo.get_user(session, user_id) is None:
            raise UnauthorizedError("Invalid or expired token")

        admin = self._repo.get_active_admin(session, user_id)
        if admin is None:
            logger.warning("User %s attempted a reconciliation run without admin access", user_id)
            raise ForbiddenError("Admin access required")

        return Caller(kind="admin", user_id=user_id, role=admin.role)
