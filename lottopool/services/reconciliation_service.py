"""Reconciliation run orchestration.

One run walks each requested game: resolve its drawing, evaluate every
unchecked ticket, then credit and notify each pool that won. Every write is
its own unit of work so a run can fail part-way and simply be run again:
checked tickets are not selected twice and winnings are unique per ticket.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from lottopool.db import unit_of_work
from lottopool.repositories.drawing_repository import DrawingRecord, DrawingRepository
from lottopool.repositories.ticket_repository import TicketRepository
from lottopool.services.email_service import EmailService, ResendClient
from lottopool.services.ledger_service import LedgerOutcome, LedgerService
from lottopool.services.match_evaluator import evaluate
from lottopool.services.notification_service import NotificationService
from lottopool.services.pool_aggregation_service import (
    PoolAggregationService,
    PoolRollup,
    rollup_from_outcomes,
)
from lottopool.services.prize_table import GameType

logger = logging.getLogger(__name__)

NO_DRAW_DATA = "No draw data found"


@dataclass
class GameResult:
    game_type: str
    draw_date: str
    tickets_checked: int = 0
    wins_found: int = 0
    prize_tiers: dict[str, int] = field(default_factory=dict)
    jackpot_amount: float | None = None
    success: bool = True
    error: str | None = None


@dataclass
class RunReport:
    success: bool
    checked_count: int
    wins_found: int
    results: list[GameResult]
    duration_ms: int
    error: str | None = None


def parse_supported_games(raw: str | Sequence[str]) -> list[GameType]:
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    games: list[GameType] = []
    for item in items:
        name = str(item).strip().lower()
        if name and GameType(name) not in games:
            games.append(GameType(name))
    return games


class ReconciliationService:
    """Drive evaluation, ledger writes, pool aggregation and notification."""

    def __init__(
        self,
        *,
        drawings: DrawingRepository | None = None,
        tickets: TicketRepository | None = None,
        ledger: LedgerService | None = None,
        aggregator: PoolAggregationService | None = None,
        notifier: NotificationService | None = None,
        supported_games: Sequence[GameType] = (GameType.POWERBALL, GameType.MEGA_MILLIONS),
    ) -> None:
        self._drawings = drawings or DrawingRepository()
        self._tickets = tickets or TicketRepository()
        self._ledger = ledger or LedgerService()
        self._aggregator = aggregator or PoolAggregationService()
        self._notifier = notifier or NotificationService()
        self._supported_games = list(supported_games)

    def run(
        self,
        session: Session,
        *,
        game_type: GameType | str | None = None,
        draw_date: date | None = None,
    ) -> RunReport:
        started = time.monotonic()
        games = [GameType(game_type)] if game_type else list(self._supported_games)
        logger.info(
            "Starting win check for: %s%s",
            ", ".join(g.value for g in games),
            f" on {draw_date.isoformat()}" if draw_date else " (latest)",
        )

        results: list[GameResult] = []
        try:
            for game in games:
                results.append(self.reconcile_game(session, game, draw_date))
        except Exception as exc:
            session.rollback()
            duration_ms = int((time.monotonic() - started) * 1000)
            logger.exception("Fatal error during win check after %dms", duration_ms)
            return RunReport(
                success=False,
                checked_count=sum(r.tickets_checked for r in results),
                wins_found=sum(r.wins_found for r in results),
                results=results,
                duration_ms=duration_ms,
                error=str(exc) or exc.__class__.__name__,
            )

        duration_ms = int((time.monotonic() - started) * 1000)
        report = RunReport(
            success=any(r.success for r in results),
            checked_count=sum(r.tickets_checked for r in results),
            wins_found=sum(r.wins_found for r in results),
            results=results,
            duration_ms=duration_ms,
        )
        logger.info(
            "Win check completed in %dms: %d ticket(s) checked, %d win(s)",
            duration_ms,
            report.checked_count,
            report.wins_found,
        )
        return report

    def _resolve_drawing(self, session: Session, game: GameType, draw_date: date | None) -> DrawingRecord | None:
        if draw_date is not None:
            return self._drawings.get_for_date(session, game.value, draw_date)
        return self._drawings.get_latest(session, game.value)

    def reconcile_game(self, session: Session, game: GameType, draw_date: date | None = None) -> GameResult:
        drawing = self._resolve_drawing(session, game, draw_date)
        if drawing is None:
            logger.warning(
                "No draw data found for %s%s", game.value, f" on {draw_date.isoformat()}" if draw_date else ""
            )
            return GameResult(
                game_type=game.value,
                draw_date=draw_date.isoformat() if draw_date else "latest",
                success=False,
                error=NO_DRAW_DATA,
            )

        jackpot = float(drawing.jackpot_amount) if drawing.jackpot_amount is not None else None
        result = GameResult(
            game_type=game.value,
            draw_date=drawing.draw_date.isoformat(),
            jackpot_amount=jackpot,
        )
        logger.info(
            "Checking %s draw on %s: numbers %s, bonus %s",
            game.value,
            result.draw_date,
            list(drawing.winning_numbers),
            drawing.bonus_number,
        )

        try:
            tickets = self._tickets.list_unchecked(session, game.value, drawing.draw_date)
        except Exception as exc:
            session.rollback()
            logger.exception("Failed to load tickets for %s on %s", game.value, result.draw_date)
            result.success = False
            result.error = str(exc)
            return result

        if not tickets:
            logger.info("No unchecked tickets for %s on %s", game.value, result.draw_date)
            return result

        logger.info("Found %d unchecked ticket(s) for %s", len(tickets), game.value)

        wins_by_pool: dict[int, list[LedgerOutcome]] = {}
        for ticket in tickets:
            match = evaluate(
                game,
                ticket.numbers,
                ticket.bonus_number,
                drawing.winning_numbers,
                drawing.bonus_number,
                drawing.jackpot_amount,
            )
            try:
                with unit_of_work(session):
                    outcome = self._ledger.record(session, ticket, drawing, match)
            except Exception:
                # The ticket stays unchecked and is picked up again next run.
                logger.exception("Failed to record result for ticket %s", ticket.id)
                continue

            result.tickets_checked += 1
            if outcome is None:
                continue
            result.wins_found += 1
            result.prize_tiers[outcome.tier.value] = result.prize_tiers.get(outcome.tier.value, 0) + 1
            wins_by_pool.setdefault(outcome.pool_id, []).append(outcome)

        for pool_id, outcomes in wins_by_pool.items():
            self._settle_pool(session, drawing, pool_id, outcomes)

        logger.info(
            "%s: checked %d ticket(s), found %d win(s)", game.value, result.tickets_checked, result.wins_found
        )
        return result

    def _settle_pool(
        self,
        session: Session,
        drawing: DrawingRecord,
        pool_id: int,
        outcomes: Sequence[LedgerOutcome],
    ) -> None:
        rollup: PoolRollup | None
        try:
            with unit_of_work(session):
                rollup = self._aggregator.aggregate(session, pool_id, drawing.draw_date, outcomes)
        except Exception:
            logger.exception(
                "Failed to aggregate winnings for pool %s; winnings %s left uncredited for manual reconciliation",
                pool_id,
                sorted(o.winning_id for o in outcomes),
            )
            rollup = rollup_from_outcomes(pool_id, self._safe_pool_name(session, pool_id), drawing.draw_date, outcomes)

        if rollup is None:
            return

        try:
            self._notifier.notify_pool(session, rollup)
        except Exception:
            session.rollback()
            logger.exception("Failed to notify members of pool %s", pool_id)

    def _safe_pool_name(self, session: Session, pool_id: int) -> str:
        try:
            return self._aggregator.pool_name(session, pool_id)
        except Exception:
            session.rollback()
            logger.exception("Failed to load pool %s", pool_id)
            return f"Pool {pool_id}"


def build_reconciliation_service(
    config: Mapping[str, Any],
    email_client: ResendClient | None = None,
    *,
    triggered_by: str = "check_wins",
) -> ReconciliationService:
    """Wire the engine from application config."""

    email = EmailService(
        email_client,
        from_email=str(config.get("FROM_EMAIL", "")),
        template_name=str(config.get("WIN_EMAIL_TEMPLATE", "win_notification")),
        enabled=bool(config.get("EMAIL_ENABLED", True)),
    )
    return ReconciliationService(
        notifier=NotificationService(email=email, triggered_by=triggered_by),
        supported_games=parse_supported_games(config.get("SUPPORTED_GAMES", "powerball,mega_millions")),
    )


def build_email_client(config: Mapping[str, Any]) -> ResendClient | None:
    """Resend client when an API key is configured, else None (email off)."""

    api_key = str(config.get("RESEND_API_KEY") or "")
    if not api_key:
        return None
    return ResendClient(
        api_key,
        api_url=str(config.get("RESEND_API_URL", "https://api.resend.com/emails")),
        timeout_seconds=float(config.get("HTTP_TIMEOUT_SECONDS", 10.0)),
        retries=int(config.get("HTTP_RETRIES", 2)),
    )
