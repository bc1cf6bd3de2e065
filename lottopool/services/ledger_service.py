"""Winnings ledger writer.

Persists one winnings record per winning ticket and moves every evaluated
ticket to ``checked``. Callers wrap each ticket in its own unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from lottopool.repositories.drawing_repository import DrawingRecord
from lottopool.repositories.notification_repository import ActivityLogRepository
from lottopool.repositories.ticket_repository import TicketRecord, TicketRepository
from lottopool.repositories.winning_repository import WinningRepository
from lottopool.services.match_evaluator import MatchResult
from lottopool.services.prize_table import PrizeTier

logger = logging.getLogger(__name__)

WIN_DETECTED = "win_detected"


@dataclass(frozen=True)
class LedgerOutcome:
    ticket_id: int
    pool_id: int
    winning_id: int
    tier: PrizeTier
    prize_amount: Decimal | None
    created: bool

    @property
    def needs_review(self) -> bool:
        return self.prize_amount is None


class LedgerService:
    """Idempotent winnings writes keyed on ticket id."""

    def __init__(
        self,
        winnings: WinningRepository | None = None,
        tickets: TicketRepository | None = None,
        activity: ActivityLogRepository | None = None,
    ) -> None:
        self._winnings = winnings or WinningRepository()
        self._tickets = tickets or TicketRepository()
        self._activity = activity or ActivityLogRepository()

    def record(
        self,
        session: Session,
        ticket: TicketRecord,
        drawing: DrawingRecord,
        result: MatchResult,
    ) -> LedgerOutcome | None:
        """Write the outcome of one evaluated ticket.

        Returns None for a losing ticket. A ticket whose record already
        exists (retried run) is reported with ``created=False`` and the
        stored tier and amount.
        """

        if result.tier is None:
            self._tickets.mark_checked(session, ticket.id, is_winner=False)
            return None

        winning_id, created = self._winnings.insert_if_absent(
            session,
            ticket_id=ticket.id,
            pool_id=ticket.pool_id,
            prize_tier=result.tier.value,
            prize_amount=result.prize_amount,
            numbers_matched=result.main_matches,
            bonus_matched=result.bonus_match,
            draw_date=drawing.draw_date,
        )

        tier = result.tier
        amount = result.prize_amount
        if created:
            if result.needs_review:
                logger.warning(
                    "Jackpot win for ticket %s but jackpot amount is unknown; stored for manual review",
                    ticket.id,
                )
            self._activity.log(
                session,
                action=WIN_DETECTED,
                user_id=ticket.entered_by,
                pool_id=ticket.pool_id,
                details={
                    "ticket_id": ticket.id,
                    "amount": float(amount) if amount is not None else None,
                    "prize_tier": tier.value,
                    "needs_review": amount is None,
                },
            )
        else:
            existing = self._winnings.get_by_ticket(session, ticket.id)
            if existing is not None:
                tier = PrizeTier(existing.prize_tier)
                amount = existing.prize_amount
            logger.info("Winning for ticket %s already recorded (id=%s)", ticket.id, winning_id)

        self._tickets.mark_checked(session, ticket.id, is_winner=True)

        return LedgerOutcome(
            ticket_id=ticket.id,
            pool_id=ticket.pool_id,
            winning_id=winning_id,
            tier=tier,
            prize_amount=amount,
            created=created,
        )
