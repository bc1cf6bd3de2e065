"""Compare a ticket against a drawing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from lottopool.services.prize_table import GameType, PrizeTier, determine_tier, resolve_prize_amount


@dataclass(frozen=True)
class MatchResult:
    main_matches: int
    bonus_match: bool
    tier: PrizeTier | None
    prize_amount: Decimal | None = None

    @property
    def is_win(self) -> bool:
        return self.tier is not None

    @property
    def needs_review(self) -> bool:
        """A win whose amount is unknown (jackpot without a published amount)."""

        return self.is_win and self.prize_amount is None


def count_main_matches(ticket_numbers: Iterable[int], winning_numbers: Iterable[int]) -> int:
    return len({int(n) for n in ticket_numbers} & {int(n) for n in winning_numbers})


def evaluate(
    game: GameType | str,
    ticket_numbers: Iterable[int],
    ticket_bonus: int,
    winning_numbers: Iterable[int],
    winning_bonus: int,
    jackpot_amount: Decimal | None = None,
) -> MatchResult:
    """Match one ticket against the winning numbers of its drawing."""

    main_matches = count_main_matches(ticket_numbers, winning_numbers)
    bonus_match = int(ticket_bonus) == int(winning_bonus)
    tier = determine_tier(main_matches, bonus_match)
    if tier is None:
        return MatchResult(main_matches=main_matches, bonus_match=bonus_match, tier=None)

    return MatchResult(
        main_matches=main_matches,
        bonus_match=bonus_match,
        tier=tier,
        prize_amount=resolve_prize_amount(game, tier, jackpot_amount),
    )
