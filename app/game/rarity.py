import random
from collections.abc import Callable
from dataclasses import dataclass

from app.core.enums import CardRarity

RARITY_WEIGHTS: dict[CardRarity, int] = {
    CardRarity.COMMON: 50,
    CardRarity.UNCOMMON: 25,
    CardRarity.RARE: 15,
    CardRarity.EPIC: 8,
    CardRarity.LEGENDARY: 2,
}


@dataclass(frozen=True)
class RarityUpgrade:
    """Bump a rolled rarity when the generator's own guess ranked the card higher."""

    hint_matches: Callable[[CardRarity], bool]
    rolled: CardRarity
    chance: float
    upgraded: CardRarity


# First matching rule wins.
RARITY_UPGRADES: tuple[RarityUpgrade, ...] = (
    RarityUpgrade(
        lambda hint: hint is CardRarity.LEGENDARY, CardRarity.EPIC, 0.30, CardRarity.LEGENDARY
    ),
    RarityUpgrade(lambda hint: hint is CardRarity.EPIC, CardRarity.RARE, 0.25, CardRarity.EPIC),
    RarityUpgrade(
        lambda hint: hint is CardRarity.LEGENDARY, CardRarity.RARE, 0.15, CardRarity.EPIC
    ),
    RarityUpgrade(
        lambda hint: hint is CardRarity.RARE, CardRarity.UNCOMMON, 0.30, CardRarity.RARE
    ),
    RarityUpgrade(
        lambda hint: hint >= CardRarity.EPIC, CardRarity.UNCOMMON, 0.20, CardRarity.RARE
    ),
    RarityUpgrade(
        lambda hint: hint >= CardRarity.RARE, CardRarity.COMMON, 0.25, CardRarity.UNCOMMON
    ),
)


def _roll_base_rarity(rng: random.Random) -> CardRarity:
    roll = rng.randint(1, sum(RARITY_WEIGHTS.values()))
    cumulative = 0
    for rarity, weight in RARITY_WEIGHTS.items():
        cumulative += weight
        if roll <= cumulative:
            return rarity
    return CardRarity.COMMON


def apply_rarity_hint(
    rolled: CardRarity, hint: CardRarity | None, rng: random.Random | None = None
) -> CardRarity:
    """Give the hint a chance to lift the rolled rarity by one tier."""
    if hint is None:
        return rolled

    rng = rng or random.Random()
    for rule in RARITY_UPGRADES:
        if rule.rolled is rolled and rule.hint_matches(hint) and rng.random() < rule.chance:
            return rule.upgraded
    return rolled


def roll_rarity(hint: CardRarity | None = None, rng: random.Random | None = None) -> CardRarity:
    """Roll a rarity from the shared weighted distribution.

    Args:
        hint: Rarity suggested by whatever produced the card's stats, if any.
        rng: Random source, mostly useful to make tests reproducible.

    Returns:
        The final rarity, possibly upgraded by one tier towards the hint.
    """
    rng = rng or random.Random()
    return apply_rarity_hint(_roll_base_rarity(rng), hint, rng)
