"""Official draw results.

One row per (game, draw date), written by the results ingestion job and
read-only to the reconciliation engine.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Date, DateTime, Integer, Numeric, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lottopool.models.base import Base, utcnow


class Drawing(Base):
    __tablename__ = "lottery_draws"
    __table_args__ = (UniqueConstraint("game_type", "draw_date", name="uq_lottery_draws_game_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    draw_date: Mapped[date] = mapped_column(Date, nullable=False)
    winning_numbers: Mapped[list[int]] = mapped_column(JSON, nullable=False)  # 5 main numbers
    bonus_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    multiplier: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    jackpot_amount: Mapped[Decimal | None] = mapped_column(Numeric(16, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
