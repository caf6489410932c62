import random
from collections.abc import Callable, Sequence

from app.core.enums import BattlePosition, Personality
from app.game.session import MAX_ROUNDS
from app.schemas.card import CardData

AGGRESSIVE_ATTACK_CHANCE = 0.8
DEFENSIVE_DEFENSE_CHANCE = 0.8
SMART_BEHIND_ATTACK_CHANCE = 0.7

type Move = tuple[CardData, BattlePosition]


def _strongest(
    cards: Sequence[CardData], key: Callable[[CardData], int]
) -> CardData | None:
    return max(cards, key=key, default=None)


def _by_attack(card: CardData) -> int:
    return card.attack


def _by_defense(card: CardData) -> int:
    return card.defense


def _by_total(card: CardData) -> int:
    return card.total_power


def _random_move(cards: Sequence[CardData], rng: random.Random) -> Move:
    return rng.choice(cards), rng.choice(list(BattlePosition))


def _aggressive(cards: Sequence[CardData], rng: random.Random) -> Move | None:
    card = _strongest(cards, _by_attack)
    if card is None:
        return None
    if rng.random() < AGGRESSIVE_ATTACK_CHANCE:
        return card, BattlePosition.ATTACK
    return card, BattlePosition.DEFENSE


def _defensive(cards: Sequence[CardData], rng: random.Random) -> Move | None:
    card = _strongest(cards, _by_defense)
    if card is None:
        return None
    if rng.random() < DEFENSIVE_DEFENSE_CHANCE:
        return card, BattlePosition.DEFENSE
    return card, BattlePosition.ATTACK


def _balanced(cards: Sequence[CardData]) -> Move | None:
    card = _strongest(cards, _by_total)
    if card is None:
        return None
    position = BattlePosition.ATTACK if card.attack > card.defense else BattlePosition.DEFENSE
    return card, position


def _smart(
    cards: Sequence[CardData], round_number: int, score: tuple[int, int], rng: random.Random
) -> Move | None:
    own_score, opponent_score = score
    if own_score < opponent_score:
        card = _strongest(cards, _by_attack)
    elif own_score > opponent_score:
        card = _strongest(cards, _by_defense)
    else:
        card = _strongest(cards, _by_total)
    if card is None:
        return None

    if round_number >= MAX_ROUNDS and own_score == opponent_score:
        # Final round on a tied score always attacks
        return card, BattlePosition.ATTACK
    if own_score < opponent_score:
        if rng.random() < SMART_BEHIND_ATTACK_CHANCE:
            return card, BattlePosition.ATTACK
        return card, BattlePosition.DEFENSE
    position = BattlePosition.ATTACK if card.attack >= card.defense else BattlePosition.DEFENSE
    return card, position


def choose_move(
    personality: Personality,
    available_cards: Sequence[CardData],
    round_number: int,
    score: tuple[int, int],
    rng: random.Random | None = None,
) -> Move:
    """Pick the card and position a generated opponent plays this round.

    Args:
        personality: Strategy the opponent follows.
        available_cards: The opponent's unused battle cards.
        round_number: Current round, starting at 1.
        score: ``(own_score, opponent_score)`` before this round.
        rng: Random source for the probabilistic branches.

    Returns:
        The chosen card and position. Falls back to a uniformly random move when the
        personality has no preference.

    Raises:
        ValueError: If ``available_cards`` is empty. A battle never asks for a move once
            the opponent's cards are used up, so this only signals caller misuse.
    """
    if not available_cards:
        msg = "No cards left to choose a move from"
        raise ValueError(msg)

    rng = rng or random.Random()
    match personality:
        case Personality.AGGRESSIVE:
            move = _aggressive(available_cards, rng)
        case Personality.DEFENSIVE:
            move = _defensive(available_cards, rng)
        case Personality.BALANCED:
            move = _balanced(available_cards)
        case Personality.SMART:
            move = _smart(available_cards, round_number, score, rng)
        case Personality.CHAOTIC:
            move = None

    return move or _random_move(available_cards, rng)
