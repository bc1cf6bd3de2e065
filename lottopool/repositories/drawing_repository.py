"""Read access to official draw results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from lottopool.models.drawing import Drawing


@dataclass(frozen=True)
class DrawingRecord:
    id: int
    game_type: str
    draw_date: date
    winning_numbers: tuple[int, ...]
    bonus_number: int
    multiplier: int | None
    jackpot_amount: Decimal | None


def _to_record(row: Drawing) -> DrawingRecord:
    return DrawingRecord(
        id=int(row.id),
        game_type=str(row.game_type),
        draw_date=row.draw_date,
        winning_numbers=tuple(int(n) for n in row.winning_numbers),
        bonus_number=int(row.bonus_number),
        multiplier=int(row.multiplier) if row.multiplier is not None else None,
        jackpot_amount=Decimal(row.jackpot_amount) if row.jackpot_amount is not None else None,
    )


class DrawingRepository:
    """Lookups keyed by (game, draw date)."""

    def get_latest(self, session: Session, game_type: str) -> DrawingRecord | None:
        stmt = (
            select(Drawing)
            .where(Drawing.game_type == game_type)
            .order_by(Drawing.draw_date.desc())
            .limit(1)
        )
        row = session.scalars(stmt).first()
        return _to_record(row) if row is not None else None

    def get_for_date(self, session: Session, game_type: str, draw_date: date) -> DrawingRecord | None:
        stmt = select(Drawing).where(Drawing.game_type == game_type, Drawing.draw_date == draw_date)
        row = session.scalars(stmt).first()
        return _to_record(row) if row is not None else None
