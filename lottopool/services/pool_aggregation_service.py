"""Per-pool roll-up of a run's winnings."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from lottopool.repositories.pool_repository import PoolRepository
from lottopool.repositories.winning_repository import WinningRepository
from lottopool.services.ledger_service import LedgerOutcome
from lottopool.services.prize_table import PrizeTier

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PoolRollup:
    """What one pool won in one run; input to the notifier."""

    pool_id: int
    pool_name: str
    draw_date: date
    tiers: list[PrizeTier]
    total_amount: Decimal
    pending_review: bool
    member_count: int | None = None
    per_member_share: Decimal | None = None
    aggregated: bool = True
    winning_ids: list[int] = field(default_factory=list)

    @property
    def tier_summary(self) -> str:
        return ", ".join(t.label for t in self.tiers)


def split_evenly(total: Decimal, member_count: int) -> Decimal | None:
    """Flat equal split rounded to cents. None when the pool has no members."""

    if member_count <= 0:
        return None
    return (Decimal(total) / Decimal(member_count)).quantize(CENT, rounding=ROUND_HALF_UP)


def rollup_from_outcomes(
    pool_id: int,
    pool_name: str,
    draw_date: date,
    outcomes: Sequence[LedgerOutcome],
) -> PoolRollup:
    """Best-available summary when aggregation could not be written."""

    known = [o.prize_amount for o in outcomes if o.prize_amount is not None]
    return PoolRollup(
        pool_id=pool_id,
        pool_name=pool_name,
        draw_date=draw_date,
        tiers=[o.tier for o in outcomes],
        total_amount=sum(known, Decimal("0")),
        pending_review=any(o.needs_review for o in outcomes),
        aggregated=False,
        winning_ids=[o.winning_id for o in outcomes],
    )


class PoolAggregationService:
    """Credit a pool with the winnings its tickets produced in this run."""

    def __init__(
        self,
        pools: PoolRepository | None = None,
        winnings: WinningRepository | None = None,
    ) -> None:
        self._pools = pools or PoolRepository()
        self._winnings = winnings or WinningRepository()

    def pool_name(self, session: Session, pool_id: int) -> str:
        pool = self._pools.get(session, pool_id)
        return pool.name if pool is not None else f"Pool {pool_id}"

    def aggregate(
        self,
        session: Session,
        pool_id: int,
        draw_date: date,
        outcomes: Sequence[LedgerOutcome],
    ) -> PoolRollup | None:
        """Claim, split and credit this run's records for ``pool_id``.

        Returns None when every record was already credited by another run,
        in which case nothing is written and nobody should be notified again.
        """

        pool = self._pools.get(session, pool_id)
        if pool is None:
            raise LookupError(f"Pool {pool_id} not found")

        member_count = self._pools.count_members(session, pool_id)
        claimed = self._winnings.claim_for_aggregation(
            session, [o.winning_id for o in outcomes], member_count
        )
        if not claimed:
            logger.info("Pool %s: winnings already credited by another run", pool_id)
            return None

        claimed_ids = {winning_id for winning_id, _ in claimed}
        credited = [o for o in outcomes if o.winning_id in claimed_ids]

        total = sum((amount for _, amount in claimed if amount is not None), Decimal("0"))
        share = split_evenly(total, member_count)
        self._winnings.set_share(session, sorted(claimed_ids), share)
        if total > 0:
            self._pools.increment_total(session, pool_id, total)

        logger.info(
            "Pool %s: credited %s across %d member(s), share %s",
            pool_id,
            total,
            member_count,
            share,
        )

        return PoolRollup(
            pool_id=pool_id,
            pool_name=pool.name,
            draw_date=draw_date,
            tiers=[o.tier for o in credited],
            total_amount=total,
            pending_review=any(amount is None for _, amount in claimed),
            member_count=member_count,
            per_member_share=share,
            aggregated=True,
            winning_ids=sorted(claimed_ids),
        )
