from decimal import Decimal

import pytest

from lottopool.services.match_evaluator import count_main_matches, evaluate
from lottopool.services.prize_table import (
    PRIZE_TABLES,
    GameType,
    PrizeTier,
    determine_tier,
    resolve_prize_amount,
)

EXPECTED_TIERS = {
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


@pytest.mark.parametrize("main_matches", range(6))
@pytest.mark.parametrize("bonus_match", [True, False])
def test_determine_tier_covers_every_outcome(main_matches, bonus_match):
    assert determine_tier(main_matches, bonus_match) == EXPECTED_TIERS.get((main_matches, bonus_match))


@pytest.mark.parametrize("main_matches", [0, 1, 2])
def test_low_matches_without_bonus_win_nothing(main_matches):
    assert determine_tier(main_matches, False) is None


def test_prize_tables_share_tier_topology():
    for game in GameType:
        assert set(PRIZE_TABLES[game]) == set(PrizeTier)


@pytest.mark.parametrize(
    "game, tier, amount",
    [
        (GameType.POWERBALL, PrizeTier.MATCH_5, Decimal("1000000")),
        (GameType.POWERBALL, PrizeTier.MATCH_4_BONUS, Decimal("50000")),
        (GameType.POWERBALL, PrizeTier.MATCH_BONUS, Decimal("4")),
        (GameType.MEGA_MILLIONS, PrizeTier.MATCH_4_BONUS, Decimal("10000")),
        (GameType.MEGA_MILLIONS, PrizeTier.MATCH_4, Decimal("500")),
        (GameType.MEGA_MILLIONS, PrizeTier.MATCH_BONUS, Decimal("2")),
    ],
)
def test_fixed_payouts(game, tier, amount):
    assert resolve_prize_amount(game, tier) == amount


def test_jackpot_amount_comes_from_drawing():
    assert resolve_prize_amount("powerball", PrizeTier.JACKPOT, Decimal("450000000")) == Decimal("450000000")
    assert resolve_prize_amount("mega_millions", PrizeTier.JACKPOT, None) is None


def test_jackpot_amount_ignores_fixed_table_for_other_tiers():
    assert resolve_prize_amount("powerball", PrizeTier.MATCH_3, Decimal("450000000")) == Decimal("7")


def test_count_main_matches_ignores_order():
    assert count_main_matches([59, 12, 31, 24, 48], [12, 24, 31, 48, 59]) == 5
    assert count_main_matches([1, 2, 3, 4, 5], [5, 6, 7, 8, 9]) == 1


def test_jackpot_scenario_with_known_amount():
    result = evaluate("powerball", [12, 24, 31, 48, 59], 15, [12, 24, 31, 48, 59], 15, Decimal("450000000"))

    assert result.main_matches == 5
    assert result.bonus_match is True
    assert result.tier is PrizeTier.JACKPOT
    assert result.prize_amount == Decimal("450000000")
    assert result.needs_review is False


def test_jackpot_scenario_with_unknown_amount_needs_review():
    result = evaluate("powerball", [12, 24, 31, 48, 59], 15, [12, 24, 31, 48, 59], 15, None)

    assert result.tier is PrizeTier.JACKPOT
    assert result.prize_amount is None
    assert result.needs_review is True


def test_near_miss_bonus_only():
    result = evaluate("powerball", [4, 12, 28, 31, 56], 12, [9, 15, 22, 40, 61], 12)

    assert result.main_matches == 0
    assert result.bonus_match is True
    assert result.tier is PrizeTier.MATCH_BONUS
    assert result.prize_amount == Decimal("4")


def test_no_win():
    result = evaluate("mega_millions", [2, 18, 33, 45, 50], 18, [1, 7, 21, 39, 60], 4)

    assert result.main_matches == 0
    assert result.tier is None
    assert result.is_win is False
    assert result.needs_review is False


def test_tier_labels_are_human_readable():
    assert PrizeTier.MATCH_4_BONUS.label == "Match 4 + Bonus"
    assert PrizeTier.JACKPOT.label == "Jackpot"
