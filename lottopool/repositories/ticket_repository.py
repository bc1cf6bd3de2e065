"""Repository layer for ticket reconciliation state."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from lottopool.models.ticket import Ticket


@dataclass(frozen=True)
class TicketRecord:
    id: int
    pool_id: int
    game_type: str
    numbers: tuple[int, ...]
    bonus_number: int
    draw_date: date
    entered_by: int | None


class TicketRepository:
    def list_unchecked(self, session: Session, game_type: str, draw_date: date) -> Sequence[TicketRecord]:
        stmt = (
            select(Ticket)
            .where(
                Ticket.game_type == game_type,
                Ticket.draw_date == draw_date,
                Ticket.checked.is_(False),
            )
            .order_by(Ticket.id.asc())
        )
        return [
            TicketRecord(
                id=int(t.id),
                pool_id=int(t.pool_id),
                game_type=str(t.game_type),
                numbers=tuple(int(n) for n in t.numbers),
                bonus_number=int(t.bonus_number),
                draw_date=t.draw_date,
                entered_by=t.entered_by,
            )
            for t in session.scalars(stmt).all()
        ]

    def mark_checked(self, session: Session, ticket_id: int, *, is_winner: bool) -> None:
        # A winner flag, once set, is never cleared.
        values: dict[str, bool] = {"checked": True}
        if is_winner:
            values["is_winner"] = True
        stmt = update(Ticket).where(Ticket.id == ticket_id).values(**values)
        session.execute(stmt.execution_options(synchronize_session=False))
