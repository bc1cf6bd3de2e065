"""Fan out win notifications (in-app and email) to pool members."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from lottopool.db import unit_of_work
from lottopool.models.email import EmailTemplate
from lottopool.repositories.notification_repository import NotificationRepository
from lottopool.repositories.pool_repository import MemberRecord, PoolRepository
from lottopool.services.email_service import EmailService
from lottopool.services.pool_aggregation_service import PoolRollup

logger = logging.getLogger(__name__)

PENDING_REVIEW = "pending review"


@dataclass(frozen=True)
class NotifyResult:
    pool_id: int
    notifications_created: int = 0
    notifications_failed: int = 0
    emails_sent: int = 0
    emails_failed: int = 0


def format_money(amount: Decimal | None) -> str:
    if amount is None:
        return PENDING_REVIEW
    return f"${Decimal(amount):,.2f}"


def amount_text(rollup: PoolRollup) -> str:
    """Total for display; any unknown amount turns the whole total into 'pending review'."""

    if rollup.pending_review:
        if rollup.total_amount > 0:
            return f"{format_money(rollup.total_amount)} + {PENDING_REVIEW}"
        return PENDING_REVIEW
    return format_money(rollup.total_amount)


def idempotency_key(rollup: PoolRollup, user_id: int) -> str:
    """Email dedupe key for one member and one set of credited records.

    Each run claims a disjoint set of winnings, so a later win for the same
    pool and draw gets its own key.
    """

    ids = sorted(rollup.winning_ids)
    span = f"{ids[0]}-{ids[-1]}" if ids else "none"
    return f"win-{rollup.pool_id}-{rollup.draw_date.isoformat()}-{user_id}-{span}"


def build_message(rollup: PoolRollup) -> tuple[str, str]:
    title = f"Your pool {rollup.pool_name} won!"
    message = f"{rollup.pool_name} won {amount_text(rollup)} ({rollup.tier_summary})"
    if rollup.per_member_share is not None and not rollup.pending_review:
        message += f". Your share: {format_money(rollup.per_member_share)}"
    return title, message


class NotificationService:
    """One notification and at most one email per member, each its own unit of work."""

    def __init__(
        self,
        email: EmailService | None = None,
        pools: PoolRepository | None = None,
        notifications: NotificationRepository | None = None,
        triggered_by: str = "check_wins",
    ) -> None:
        self._email = email
        self._pools = pools or PoolRepository()
        self._notifications = notifications or NotificationRepository()
        self._triggered_by = triggered_by

    def notify_pool(self, session: Session, rollup: PoolRollup) -> NotifyResult:
        members = self._pools.list_members(session, rollup.pool_id)
        title, message = build_message(rollup)
        data = {
            "pool_id": rollup.pool_id,
            "draw_date": rollup.draw_date.isoformat(),
            "prize_tiers": [t.value for t in rollup.tiers],
            "total_amount": float(rollup.total_amount),
            "per_member_share": float(rollup.per_member_share) if rollup.per_member_share is not None else None,
            "pending_review": rollup.pending_review,
            "winning_ids": list(rollup.winning_ids),
        }

        template = self._load_template(session)

        created = failed = sent = email_failed = 0
        for member in members:
            try:
                with unit_of_work(session):
                    self._notifications.create(
                        session,
                        user_id=member.user_id,
                        type="win",
                        title=title,
                        message=message,
                        data=data,
                    )
                created += 1
            except Exception:
                failed += 1
                logger.exception("Failed to create win notification for user %s (pool %s)", member.user_id, rollup.pool_id)

            if template is None or not member.email:
                continue

            try:
                with unit_of_work(session):
                    entry = self._email.send_templated(  # type: ignore[union-attr]
                        session,
                        template,
                        to=member.email,
                        variables=self._variables(rollup, member),
                        triggered_by=f"{self._triggered_by} (pool:{rollup.pool_id})",
                        idempotency_key=idempotency_key(rollup, member.user_id),
                    )
                if entry.status == "sent":
                    sent += 1
                else:
                    email_failed += 1
            except Exception:
                email_failed += 1
                logger.exception("Failed to email user %s (pool %s)", member.user_id, rollup.pool_id)

        logger.info(
            "Pool %s: %d notification(s), %d email(s) sent, %d email(s) failed",
            rollup.pool_id,
            created,
            sent,
            email_failed,
        )
        return NotifyResult(
            pool_id=rollup.pool_id,
            notifications_created=created,
            notifications_failed=failed,
            emails_sent=sent,
            emails_failed=email_failed,
        )

    def _load_template(self, session: Session) -> EmailTemplate | None:
        if self._email is None or not self._email.enabled:
            return None
        try:
            template = self._email.get_template(session)
        except Exception:
            logger.exception("Failed to load win email template")
            return None
        if template is None:
            logger.info("No active win email template; skipping email")
        return template

    @staticmethod
    def _variables(rollup: PoolRollup, member: MemberRecord) -> dict[str, str]:
        return {
            "pool_name": rollup.pool_name,
            "total_amount": amount_text(rollup),
            "per_member_share": (
                format_money(rollup.per_member_share) if not rollup.pending_review else PENDING_REVIEW
            ),
            "tier_summary": rollup.tier_summary,
            "draw_date": rollup.draw_date.isoformat(),
            "member_name": member.display_name or member.email or "",
        }
