import random
import uuid
from dataclasses import dataclass

from loguru import logger

from app.core.enums import Personality
from app.game.rarity import roll_rarity
from app.schemas.card import CardData
from app.schemas.opponent import Opponent

MIN_POOL_SIZE = 5
MAX_POOL_SIZE = 7


@dataclass(frozen=True)
class StatRange:
    low: int
    high: int

    def roll(self, rng: random.Random) -> int:
        return rng.randint(self.low, self.high)


@dataclass(frozen=True)
class OpponentProfile:
    display_names: tuple[str, ...]
    card_names: tuple[str, ...]
    attack: StatRange
    defense: StatRange
    flavor: str


OPPONENT_PROFILES: dict[Personality, OpponentProfile] = {
    Personality.AGGRESSIVE: OpponentProfile(
        display_names=("Blaze the Berserker", "Rampage Rex", "Captain Crash"),
        card_names=(
            "Inferno Fang",
            "Raging Bull",
            "Thunder Fist",
            "Blood Hawk",
            "Wildfire Drake",
            "Storm Breaker",
            "Iron Charger",
            "Volcano Titan",
        ),
        attack=StatRange(6, 10),
        defense=StatRange(1, 5),
        flavor="Strikes first and asks questions never.",
    ),
    Personality.DEFENSIVE: OpponentProfile(
        display_names=("Warden Granite", "Lady Bulwark", "Old Turtle"),
        card_names=(
            "Stone Sentinel",
            "Crystal Wall",
            "Iron Tortoise",
            "Ancient Oak",
            "Moat Keeper",
            "Shield Golem",
            "Frost Bastion",
            "Mountain Heart",
        ),
        attack=StatRange(1, 5),
        defense=StatRange(6, 10),
        flavor="Patience carved in stone.",
    ),
    Personality.BALANCED: OpponentProfile(
        display_names=("Sir Equilibrium", "Ranger Vale", "Monk Harmony"),
        card_names=(
            "Twin Blade",
            "Forest Ranger",
            "Dawn Knight",
            "River Spirit",
            "Silver Fox",
            "Steady Paladin",
            "Wind Dancer",
            "Dusk Archer",
        ),
        attack=StatRange(4, 8),
        defense=StatRange(4, 8),
        flavor="Never too much, never too little.",
    ),
    Personality.SMART: OpponentProfile(
        display_names=("Professor Gambit", "The Strategist", "Oracle Nine"),
        card_names=(
            "Chess Knight",
            "Cunning Owl",
            "Shadow Tactician",
            "Clockwork Mind",
            "Mirror Mage",
            "Riddle Sphinx",
            "Arcane Scholar",
            "Puzzle Golem",
        ),
        attack=StatRange(3, 9),
        defense=StatRange(3, 9),
        flavor="Already three moves ahead of you.",
    ),
    Personality.CHAOTIC: OpponentProfile(
        display_names=("Jester Jinx", "Madame Mayhem", "Glitch"),
        card_names=(
            "Rubber Chicken",
            "Dice Demon",
            "Confetti Cannon",
            "Wobbly Slime",
            "Lucky Goblin",
            "Prism Imp",
            "Void Pigeon",
            "Coin Flip Cat",
        ),
        attack=StatRange(1, 10),
        defense=StatRange(1, 10),
        flavor="Even it doesn't know what happens next.",
    ),
}


def generate_opponent(
    personality: Personality | None = None, rng: random.Random | None = None
) -> Opponent:
    """Build a generated opponent with a personality-flavored card pool.

    Synthetic cards get negative IDs so they can never collide with stored cards.
    """
    rng = rng or random.Random()
    personality = personality or rng.choice(list(Personality))
    profile = OPPONENT_PROFILES[personality]

    opponent_id = f"opponent-{uuid.uuid4().hex[:12]}"
    pool_size = rng.randint(MIN_POOL_SIZE, MAX_POOL_SIZE)
    names = rng.sample(profile.card_names, pool_size)

    cards = [
        CardData(
            id=-(index + 1),
            name=name,
            attack=profile.attack.roll(rng),
            defense=profile.defense.roll(rng),
            rarity=roll_rarity(rng=rng),
            owner_id=opponent_id,
            description=profile.flavor,
        )
        for index, name in enumerate(names)
    ]
    opponent = Opponent(
        id=opponent_id,
        name=rng.choice(profile.display_names),
        personality=personality,
        cards=cards,
    )
    logger.debug(f"Generated {personality} opponent {opponent.name} with {len(cards)} cards")
    return opponent
