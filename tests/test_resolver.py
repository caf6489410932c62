import pytest

from app.core.enums import BattlePosition
from app.game.resolver import resolve_round
from app.schemas.battle import BattleMove

ATTACK = BattlePosition.ATTACK
DEFENSE = BattlePosition.DEFENSE


def _move(make_card, participant_id, card_id, attack, defense, position):
    card = make_card(card_id, attack, defense, owner_id=participant_id)
    return BattleMove(participant_id=participant_id, card=card, position=position, round_number=1)


@pytest.mark.parametrize(
    ("a_stats", "a_position", "b_stats", "b_position", "expected_winner"),
    [
        ((7, 1), ATTACK, (5, 1), ATTACK, "a"),
        ((5, 1), ATTACK, (7, 1), ATTACK, "b"),
        ((6, 1), ATTACK, (6, 1), ATTACK, None),
        ((8, 1), ATTACK, (1, 7), DEFENSE, "a"),
        ((7, 1), ATTACK, (1, 7), DEFENSE, "b"),
        ((6, 1), ATTACK, (1, 7), DEFENSE, "b"),
        ((1, 7), DEFENSE, (5, 1), ATTACK, "a"),
        ((1, 5), DEFENSE, (5, 1), ATTACK, "a"),
        ((1, 4), DEFENSE, (5, 1), ATTACK, "b"),
        ((1, 1), DEFENSE, (10, 10), DEFENSE, None),
        ((10, 10), DEFENSE, (1, 1), DEFENSE, None),
    ],
)
def test_resolution_table(make_card, a_stats, a_position, b_stats, b_position, expected_winner):
    move_a = _move(make_card, "a", 1, *a_stats, a_position)
    move_b = _move(make_card, "b", 2, *b_stats, b_position)

    result = resolve_round(move_a, move_b, 1)

    assert result.winner_id == expected_winner
    assert result.points_awarded == (0 if expected_winner is None else 1)


def test_defender_wins_on_equal_stats(make_card):
    # A defends with attack 7 on the card, but only defense counts in DEFENSE position
    move_a = _move(make_card, "a", 1, 7, 7, DEFENSE)
    move_b = _move(make_card, "b", 2, 5, 1, ATTACK)

    result = resolve_round(move_a, move_b, 2)

    assert result.winner_id == "a"
    assert result.points_awarded == 1
    assert result.round_number == 2


def test_result_keeps_moves_in_order(make_card):
    move_a = _move(make_card, "a", 1, 3, 3, ATTACK)
    move_b = _move(make_card, "b", 2, 9, 9, ATTACK)

    result = resolve_round(move_a, move_b, 1)

    assert result.move_a == move_a
    assert result.move_b == move_b


def test_description_is_deterministic(make_card):
    move_a = _move(make_card, "a", 1, 8, 2, ATTACK)
    move_b = _move(make_card, "b", 2, 1, 6, DEFENSE)

    first = resolve_round(move_a, move_b, 1)
    second = resolve_round(move_a, move_b, 1)

    assert first.description == second.description
    assert first.description.splitlines()[0] == "Card 1 (ATTACK) vs Card 2 (DEFENSE)"
    assert "Card 1 wins the round!" in first.description


def test_tie_description(make_card):
    move_a = _move(make_card, "a", 1, 4, 4, DEFENSE)
    move_b = _move(make_card, "b", 2, 4, 4, DEFENSE)

    result = resolve_round(move_a, move_b, 3)

    assert result.description.endswith("It's a tie! No points awarded.")
