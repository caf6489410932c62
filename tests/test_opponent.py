import random

import pytest

from app.core.enums import Personality
from app.game.opponent import MAX_POOL_SIZE, MIN_POOL_SIZE, OPPONENT_PROFILES, generate_opponent

STAT_RANGES = {
    Personality.AGGRESSIVE: ((6, 10), (1, 5)),
    Personality.DEFENSIVE: ((1, 5), (6, 10)),
    Personality.BALANCED: ((4, 8), (4, 8)),
    Personality.SMART: ((3, 9), (3, 9)),
    Personality.CHAOTIC: ((1, 10), (1, 10)),
}


@pytest.mark.parametrize("personality", list(Personality))
def test_profiles_have_enough_card_names(personality):
    assert len(OPPONENT_PROFILES[personality].card_names) >= MAX_POOL_SIZE


@pytest.mark.parametrize("personality", list(Personality))
@pytest.mark.parametrize("seed", range(10))
def test_generated_cards_follow_personality(personality, seed):
    opponent = generate_opponent(personality, rng=random.Random(seed))
    (attack_low, attack_high), (defense_low, defense_high) = STAT_RANGES[personality]

    assert opponent.personality is personality
    assert MIN_POOL_SIZE <= len(opponent.cards) <= MAX_POOL_SIZE
    assert opponent.name in OPPONENT_PROFILES[personality].display_names
    for card in opponent.cards:
        assert attack_low <= card.attack <= attack_high
        assert defense_low <= card.defense <= defense_high
        assert card.name in OPPONENT_PROFILES[personality].card_names
        assert card.owner_id == opponent.id


def test_card_ids_are_negative_and_unique():
    opponent = generate_opponent(rng=random.Random(3))
    ids = [card.id for card in opponent.cards]

    assert all(card_id < 0 for card_id in ids)
    assert len(set(ids)) == len(ids)
    assert len({card.name for card in opponent.cards}) == len(ids)


def test_random_personality_when_none_given():
    personalities = {generate_opponent(rng=random.Random(seed)).personality for seed in range(60)}

    assert personalities == set(Personality)


def test_opponent_ids_are_distinct():
    first = generate_opponent(Personality.SMART)
    second = generate_opponent(Personality.SMART)

    assert first.id.startswith("opponent-")
    assert first.id != second.id
