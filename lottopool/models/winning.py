"""Winnings ledger.

``ticket_id`` is unique: at most one record per ticket no matter how many
times, or how concurrently, reconciliation runs.

``claimed`` is the member-facing "prize claimed" flag, set outside
reconciliation once the prize is collected. Reconciliation leaves it at False;
its own credit marker is ``contributing_members``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from lottopool.models.base import Base, utcnow


class Winning(Base):
    __tablename__ = "winnings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), unique=True)
    pool_id: Mapped[int] = mapped_column(Integer, ForeignKey("pools.id", ondelete="CASCADE"), index=True)
    prize_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    # NULL means the jackpot amount was unknown at detection time.
    prize_amount: Mapped[Decimal | None] = mapped_column(Numeric(16, 2), nullable=True)
    numbers_matched: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    bonus_matched: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Filled in once by pool aggregation; NULL contributing_members = not yet credited.
    per_member_share: Mapped[Decimal | None] = mapped_column(Numeric(16, 2), nullable=True)
    contributing_members: Mapped[int | None] = mapped_column(Integer, nullable=True)
    claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    draw_date: Mapped[date] = mapped_column(Date, nullable=False)
    detected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
