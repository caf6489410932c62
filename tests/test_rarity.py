import random
from collections import Counter

import pytest

from app.core.enums import CardRarity
from app.game.rarity import RARITY_WEIGHTS, apply_rarity_hint, roll_rarity


def test_weights_sum_to_one_hundred():
    assert sum(RARITY_WEIGHTS.values()) == 100


def test_roll_follows_weighted_distribution():
    rng = random.Random(42)
    counts = Counter(roll_rarity(rng=rng) for _ in range(20_000))

    assert counts[CardRarity.COMMON] > counts[CardRarity.UNCOMMON] > counts[CardRarity.RARE]
    assert counts[CardRarity.RARE] > counts[CardRarity.EPIC] > counts[CardRarity.LEGENDARY] > 0
    assert 0.47 < counts[CardRarity.COMMON] / 20_000 < 0.53


def test_roll_is_reproducible_with_seed():
    first = [roll_rarity(rng=random.Random(7)) for _ in range(5)]
    second = [roll_rarity(rng=random.Random(7)) for _ in range(5)]

    assert first == second


def test_no_hint_keeps_rolled_rarity(fixed_random):
    assert apply_rarity_hint(CardRarity.COMMON, None, fixed_random(0.0)) is CardRarity.COMMON


@pytest.mark.parametrize(
    ("rolled", "hint", "roll", "expected"),
    [
        (CardRarity.EPIC, CardRarity.LEGENDARY, 0.29, CardRarity.LEGENDARY),
        (CardRarity.EPIC, CardRarity.LEGENDARY, 0.30, CardRarity.EPIC),
        (CardRarity.RARE, CardRarity.EPIC, 0.24, CardRarity.EPIC),
        (CardRarity.RARE, CardRarity.EPIC, 0.25, CardRarity.RARE),
        (CardRarity.RARE, CardRarity.LEGENDARY, 0.14, CardRarity.EPIC),
        (CardRarity.RARE, CardRarity.LEGENDARY, 0.15, CardRarity.RARE),
        (CardRarity.UNCOMMON, CardRarity.RARE, 0.29, CardRarity.RARE),
        (CardRarity.UNCOMMON, CardRarity.RARE, 0.30, CardRarity.UNCOMMON),
        (CardRarity.UNCOMMON, CardRarity.EPIC, 0.19, CardRarity.RARE),
        (CardRarity.UNCOMMON, CardRarity.LEGENDARY, 0.25, CardRarity.UNCOMMON),
        (CardRarity.COMMON, CardRarity.RARE, 0.24, CardRarity.UNCOMMON),
        (CardRarity.COMMON, CardRarity.LEGENDARY, 0.24, CardRarity.UNCOMMON),
        (CardRarity.COMMON, CardRarity.RARE, 0.25, CardRarity.COMMON),
    ],
)
def test_hint_upgrades(fixed_random, rolled, hint, roll, expected):
    assert apply_rarity_hint(rolled, hint, fixed_random(roll)) is expected


@pytest.mark.parametrize("rolled", list(CardRarity))
def test_common_hint_never_upgrades(fixed_random, rolled):
    assert apply_rarity_hint(rolled, CardRarity.COMMON, fixed_random(0.0)) is rolled


def test_legendary_roll_is_never_changed(fixed_random):
    result = apply_rarity_hint(CardRarity.LEGENDARY, CardRarity.LEGENDARY, fixed_random(0.0))

    assert result is CardRarity.LEGENDARY


def test_upgrade_is_at_most_one_tier(fixed_random):
    for rolled in CardRarity:
        for hint in CardRarity:
            result = apply_rarity_hint(rolled, hint, fixed_random(0.0))
            assert result - rolled in (0, 1)
