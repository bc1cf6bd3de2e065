"""Repository layer for the winnings ledger.

The unique constraint on ``winnings.ticket_id`` is what makes the ledger
idempotent; inserts here never overwrite an existing record.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from lottopool.models.winning import Winning


@dataclass(frozen=True)
class WinningRecord:
    id: int
    ticket_id: int
    pool_id: int
    prize_tier: str
    prize_amount: Decimal | None
    per_member_share: Decimal | None
    contributing_members: int | None


def _dialect_insert(session: Session) -> Any:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        return pg_insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert

        return sqlite_insert
    return None


class WinningRepository:
    def get_by_ticket(self, session: Session, ticket_id: int) -> WinningRecord | None:
        row = session.scalars(select(Winning).where(Winning.ticket_id == ticket_id)).first()
        if row is None:
            return None
        return WinningRecord(
            id=int(row.id),
            ticket_id=int(row.ticket_id),
            pool_id=int(row.pool_id),
            prize_tier=str(row.prize_tier),
            prize_amount=row.prize_amount,
            per_member_share=row.per_member_share,
            contributing_members=row.contributing_members,
        )

    def insert_if_absent(self, session: Session, **values: Any) -> tuple[int, bool]:
        """Insert a record unless one already exists for the ticket.

        Returns ``(winning_id, created)``.
        """

        ticket_id = int(values["ticket_id"])
        dialect_insert = _dialect_insert(session)

        if dialect_insert is not None:
            stmt = (
                dialect_insert(Winning)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[Winning.ticket_id])
                .returning(Winning.id)
            )
            new_id = session.execute(stmt).scalar_one_or_none()
            if new_id is not None:
                return int(new_id), True
        else:
            existing = self.get_by_ticket(session, ticket_id)
            if existing is None:
                # A concurrent insert surfaces as IntegrityError and the ticket is retried next run.
                new_id = session.execute(insert(Winning).values(**values).returning(Winning.id)).scalar_one()
                return int(new_id), True

        existing = self.get_by_ticket(session, ticket_id)
        if existing is None:
            raise RuntimeError(f"Winning for ticket {ticket_id} vanished after conflict")
        return existing.id, False

    def claim_for_aggregation(
        self,
        session: Session,
        winning_ids: Sequence[int],
        member_count: int,
    ) -> list[tuple[int, Decimal | None]]:
        """Stamp ``contributing_members`` on records not yet aggregated.

        Only rows this call actually transitions are returned, so a record is
        credited to its pool once even when runs overlap.
        """

        if not winning_ids:
            return []
        stmt = (
            update(Winning)
            .where(Winning.id.in_(list(winning_ids)), Winning.contributing_members.is_(None))
            .values(contributing_members=int(member_count))
            .returning(Winning.id, Winning.prize_amount)
        )
        rows = session.execute(stmt.execution_options(synchronize_session=False)).all()
        return [(int(r[0]), r[1]) for r in rows]

    def set_share(self, session: Session, winning_ids: Sequence[int], share: Decimal | None) -> None:
        if not winning_ids:
            return
        stmt = update(Winning).where(Winning.id.in_(list(winning_ids))).values(per_member_share=share)
        session.execute(stmt.execution_options(synchronize_session=False))
