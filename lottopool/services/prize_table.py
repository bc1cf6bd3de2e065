"""Static prize tables for the supported games.

Both games share the same tier topology and differ only in payout amounts.
The jackpot is never a fixed amount: it is resolved from the drawing.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class GameType(str, Enum):
    POWERBALL = "powerball"
    MEGA_MILLIONS = "mega_millions"


class PrizeTier(str, Enum):
    JACKPOT = "jackpot"
    MATCH_5 = "match_5"
    MATCH_4_BONUS = "match_4_bonus"
    MATCH_4 = "match_4"
    MATCH_3_BONUS = "match_3_bonus"
    MATCH_3 = "match_3"
    MATCH_2_BONUS = "match_2_bonus"
    MATCH_1_BONUS = "match_1_bonus"
    MATCH_BONUS = "match_bonus"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS: dict[PrizeTier, str] = {
    PrizeTier.JACKPOT: "Jackpot",
    PrizeTier.MATCH_5: "Match 5",
    PrizeTier.MATCH_4_BONUS: "Match 4 + Bonus",
    PrizeTier.MATCH_4: "Match 4",
    PrizeTier.MATCH_3_BONUS: "Match 3 + Bonus",
    PrizeTier.MATCH_3: "Match 3",
    PrizeTier.MATCH_2_BONUS: "Match 2 + Bonus",
    PrizeTier.MATCH_1_BONUS: "Match 1 + Bonus",
    PrizeTier.MATCH_BONUS: "Bonus Only",
}


@dataclass(frozen=True)
class Payout:
    """Either a fixed amount or a marker to read the amount off the drawing."""

    amount: Decimal | None = None
    from_drawing: bool = False

    def resolve(self, jackpot_amount: Decimal | None) -> Decimal | None:
        if self.from_drawing:
            return jackpot_amount
        return self.amount


FROM_DRAWING = Payout(from_drawing=True)


def _fixed(amount: int) -> Payout:
    return Payout(amount=Decimal(amount))


PRIZE_TABLES: dict[GameType, dict[PrizeTier, Payout]] = {
    GameType.POWERBALL: {
        PrizeTier.JACKPOT: FROM_DRAWING,
        PrizeTier.MATCH_5: _fixed(1_000_000),
        PrizeTier.MATCH_4_BONUS: _fixed(50_000),
        PrizeTier.MATCH_4: _fixed(100),
        PrizeTier.MATCH_3_BONUS: _fixed(100),
        PrizeTier.MATCH_3: _fixed(7),
        PrizeTier.MATCH_2_BONUS: _fixed(7),
        PrizeTier.MATCH_1_BONUS: _fixed(4),
        PrizeTier.MATCH_BONUS: _fixed(4),
    },
    GameType.MEGA_MILLIONS: {
        PrizeTier.JACKPOT: FROM_DRAWING,
        PrizeTier.MATCH_5: _fixed(1_000_000),
        PrizeTier.MATCH_4_BONUS: _fixed(10_000),
        PrizeTier.MATCH_4: _fixed(500),
        PrizeTier.MATCH_3_BONUS: _fixed(200),
        PrizeTier.MATCH_3: _fixed(10),
        PrizeTier.MATCH_2_BONUS: _fixed(10),
        PrizeTier.MATCH_1_BONUS: _fixed(4),
        PrizeTier.MATCH_BONUS: _fixed(2),
    },
}

# (main matches, bonus matched) -> tier. Anything not listed wins nothing.
_TIER_BY_MATCH: dict[tuple[int, bool], PrizeTier] = {
    (5, True): PrizeTier.JACKPOT,
    (5, False): PrizeTier.MATCH_5,
    (4, True): PrizeTier.MATCH_4_BONUS,
    (4, False): PrizeTier.MATCH_4,
    (3, True): PrizeTier.MATCH_3_BONUS,
    (3, False): PrizeTier.MATCH_3,
    (2, True): PrizeTier.MATCH_2_BONUS,
    (1, True): PrizeTier.MATCH_1_BONUS,
    (0, True): PrizeTier.MATCH_BONUS,
}


def determine_tier(main_matches: int, bonus_match: bool) -> PrizeTier | None:
    """Return the prize tier for a match outcome, or None for no win."""

    return _TIER_BY_MATCH.get((int(main_matches), bool(bonus_match)))


def resolve_prize_amount(
    game: GameType | str,
    tier: PrizeTier,
    jackpot_amount: Decimal | None = None,
) -> Decimal | None:
    """Payout for ``tier`` in ``game``.

    Returns None only for a jackpot whose amount is not known yet.
    """

    table = PRIZE_TABLES[GameType(game)]
    return table[tier].resolve(jackpot_amount)
