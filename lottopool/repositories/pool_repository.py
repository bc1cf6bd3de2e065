"""Repository layer for pools and their members."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lottopool.models.pool import Pool, PoolMember
from lottopool.models.user import User


@dataclass(frozen=True)
class PoolRecord:
    id: int
    name: str
    game_type: str
    total_winnings: Decimal


@dataclass(frozen=True)
class MemberRecord:
    user_id: int
    email: str | None
    display_name: str | None
    role: str


class PoolRepository:
    def get(self, session: Session, pool_id: int) -> PoolRecord | None:
        row = session.get(Pool, pool_id)
        if row is None:
            return None
        return PoolRecord(
            id=int(row.id),
            name=str(row.name),
            game_type=str(row.game_type),
            total_winnings=Decimal(row.total_winnings or 0),
        )

    def count_members(self, session: Session, pool_id: int) -> int:
        stmt = select(func.count()).select_from(PoolMember).where(PoolMember.pool_id == pool_id)
        return int(session.scalar(stmt) or 0)

    def list_members(self, session: Session, pool_id: int) -> Sequence[MemberRecord]:
        stmt = (
            select(PoolMember.user_id, User.email, User.display_name, PoolMember.role)
            .join(User, User.id == PoolMember.user_id)
            .where(PoolMember.pool_id == pool_id)
            .order_by(PoolMember.id.asc())
        )
        return [
            MemberRecord(user_id=int(r[0]), email=r[1], display_name=r[2], role=str(r[3]))
            for r in session.execute(stmt).all()
        ]

    def increment_total(self, session: Session, pool_id: int, amount: Decimal) -> None:
        """Add ``amount`` to the running total in SQL, never read-modify-write."""

        stmt = (
            update(Pool)
            .where(Pool.id == pool_id)
            .values(total_winnings=Pool.total_winnings + amount)
        )
        session.execute(stmt.execution_options(synchronize_session=False))
