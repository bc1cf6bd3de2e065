"""Ticket ORM model."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from lottopool.models.base import Base, utcnow


class Ticket(Base):
    """One submitted play for a pool and draw date.

    ``checked`` and ``is_winner`` only move forward: unchecked -> checked,
    or unchecked -> checked + winner.
    """

    __tablename__ = "tickets"
    __table_args__ = (Index("ix_tickets_game_date_checked", "game_type", "draw_date", "checked"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pool_id: Mapped[int] = mapped_column(Integer, ForeignKey("pools.id", ondelete="CASCADE"), index=True)
    game_type: Mapped[str] = mapped_column(String(20), nullable=False)
    numbers: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    bonus_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    multiplier: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    draw_date: Mapped[date] = mapped_column(Date, nullable=False)
    entered_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    entry_method: Mapped[str] = mapped_column(String(10), nullable=False, default="manual")  # scan | manual
    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
