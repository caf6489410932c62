from enum import IntEnum, StrEnum


class CardRarity(IntEnum):
    """Card rarity tiers, ordered from most to least common."""

    COMMON = 1
    UNCOMMON = 2
    RARE = 3
    EPIC = 4
    LEGENDARY = 5

    def __str__(self) -> str:
        return self.name.title()

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


class BattlePosition(StrEnum):
    ATTACK = "attack"
    DEFENSE = "defense"


class BattleState(StrEnum):
    WAITING_FOR_MOVES = "waiting_for_moves"
    ROUND_IN_PROGRESS = "round_in_progress"
    BATTLE_COMPLETE = "battle_complete"


class Personality(StrEnum):
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    SMART = "smart"
    CHAOTIC = "chaotic"
