import random

import pytest

from app.core.enums import BattlePosition, BattleState
from app.game.session import (
    END_REASON_CLINCHED,
    END_REASON_HIGHER_SCORE,
    END_REASON_TIE,
    ERROR_BATTLE_COMPLETE,
    ERROR_CARD_NOT_IN_DECK,
    ERROR_CARD_USED,
    ERROR_MOVE_SUBMITTED,
    MAX_ROUNDS,
    BattleSession,
)
from app.schemas.battle import BattleComplete, MoveAccepted, MoveError, RoundComplete

ATTACK = BattlePosition.ATTACK
DEFENSE = BattlePosition.DEFENSE


@pytest.fixture
def session(deck_a, deck_b) -> BattleSession:
    return BattleSession(
        channel_id="channel-1",
        player_a_id="player-a",
        player_a_cards=deck_a,
        player_b_id="player-b",
        player_b_cards=deck_b,
    )


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_rejects_same_participant_twice(deck_a, deck_b):
    with pytest.raises(ValueError, match="two different participants"):
        BattleSession(
            channel_id="c",
            player_a_id="same",
            player_a_cards=deck_a,
            player_b_id="same",
            player_b_cards=deck_b,
        )


def test_rejects_wrong_deck_size(deck_a, deck_b):
    with pytest.raises(ValueError, match="exactly 3 cards"):
        BattleSession(
            channel_id="c",
            player_a_id="player-a",
            player_a_cards=deck_a[:2],
            player_b_id="player-b",
            player_b_cards=deck_b,
        )


def test_rejects_shared_card_ids(deck_a):
    with pytest.raises(ValueError, match="unique"):
        BattleSession(
            channel_id="c",
            player_a_id="player-a",
            player_a_cards=deck_a,
            player_b_id="player-b",
            player_b_cards=deck_a,
        )


def test_initial_state(session):
    assert session.state is BattleState.WAITING_FOR_MOVES
    assert session.current_round == 1
    assert session.rounds_played == 0
    assert session.rounds_remaining == MAX_ROUNDS
    assert session.score("player-a") == 0
    assert session.result is None
    assert [card.id for card in session.remaining_cards("player-b")] == [4, 5, 6]


# ---------------------------------------------------------------------------
# Move validation
# ---------------------------------------------------------------------------


def test_first_move_is_accepted(session):
    outcome = session.submit_move("player-a", 1, ATTACK)

    assert isinstance(outcome, MoveAccepted)
    assert outcome.move.card.id == 1
    assert outcome.move.round_number == 1
    assert session.state is BattleState.ROUND_IN_PROGRESS
    assert session.has_pending_move("player-a")
    assert not session.has_pending_move("player-b")
    assert session.is_card_used(1)


def test_card_used_by_other_player_is_rejected(session):
    session.submit_move("player-a", 1, ATTACK)

    outcome = session.submit_move("player-b", 1, ATTACK)

    assert outcome == MoveError(message=ERROR_CARD_USED)


def test_used_card_check_comes_before_pending_move_check(session):
    session.submit_move("player-a", 1, ATTACK)

    outcome = session.submit_move("player-a", 1, DEFENSE)

    assert outcome == MoveError(message=ERROR_CARD_USED)


def test_second_move_in_same_round_is_rejected(session):
    session.submit_move("player-a", 1, ATTACK)

    outcome = session.submit_move("player-a", 2, DEFENSE)

    assert outcome == MoveError(message=ERROR_MOVE_SUBMITTED)
    assert session.is_card_used(2) is False


def test_card_from_other_deck_is_rejected(session):
    outcome = session.submit_move("player-b", 2, ATTACK)

    assert outcome == MoveError(message=ERROR_CARD_NOT_IN_DECK)


def test_unknown_card_is_rejected(session):
    outcome = session.submit_move("player-a", 99, ATTACK)

    assert outcome == MoveError(message=ERROR_CARD_NOT_IN_DECK)


def test_errors_do_not_change_state(session):
    session.submit_move("player-a", 1, ATTACK)
    before = (session.state, session.current_round, session.remaining_cards("player-a"))

    session.submit_move("player-a", 2, ATTACK)
    session.submit_move("player-b", 1, ATTACK)
    session.submit_move("player-b", 3, ATTACK)

    assert (session.state, session.current_round, session.remaining_cards("player-a")) == before
    assert not session.has_pending_move("player-b")


def test_used_card_stays_rejected_for_the_rest_of_the_battle(session):
    session.submit_move("player-a", 1, ATTACK)
    session.submit_move("player-b", 5, DEFENSE)

    for participant_id in ("player-a", "player-b"):
        outcome = session.submit_move(participant_id, 1, ATTACK)
        assert outcome == MoveError(message=ERROR_CARD_USED)


# ---------------------------------------------------------------------------
# Rounds and termination
# ---------------------------------------------------------------------------


def test_round_resolves_after_both_moves(session):
    session.submit_move("player-a", 1, ATTACK)
    outcome = session.submit_move("player-b", 4, ATTACK)

    assert isinstance(outcome, RoundComplete)
    assert outcome.round_result.winner_id == "player-a"
    assert outcome.next_round_number == 2
    assert session.state is BattleState.WAITING_FOR_MOVES
    assert session.current_round == 2
    assert session.score("player-a") == 1
    assert session.rounds_remaining == 2
    assert not session.has_pending_move("player-a")


def test_second_player_can_move_first_in_a_round(session):
    assert isinstance(session.submit_move("player-b", 4, ATTACK), MoveAccepted)
    outcome = session.submit_move("player-a", 1, ATTACK)

    assert isinstance(outcome, RoundComplete)
    assert outcome.round_result.move_a.participant_id == "player-a"


def test_two_round_wins_end_the_battle_early(session):
    session.submit_move("player-a", 1, ATTACK)
    session.submit_move("player-b", 4, ATTACK)
    session.submit_move("player-a", 2, DEFENSE)
    outcome = session.submit_move("player-b", 6, ATTACK)

    assert isinstance(outcome, BattleComplete)
    result = outcome.battle_result
    assert result.winner_id == "player-a"
    assert (result.score_a, result.score_b) == (2, 0)
    assert result.end_reason == END_REASON_CLINCHED
    assert len(result.rounds) == 2
    assert session.is_complete
    assert session.rounds_remaining == 0
    assert session.result == result


def test_moves_after_completion_are_rejected(session):
    session.submit_move("player-a", 1, ATTACK)
    session.submit_move("player-b", 4, ATTACK)
    session.submit_move("player-a", 2, DEFENSE)
    session.submit_move("player-b", 6, ATTACK)

    assert session.submit_move("player-a", 3, ATTACK) == MoveError(message=ERROR_BATTLE_COMPLETE)
    assert session.submit_move("player-b", 5, ATTACK) == MoveError(message=ERROR_BATTLE_COMPLETE)


def test_tie_game_after_three_rounds(session):
    # A wins round 1, B wins round 2, round 3 is DEFENSE vs DEFENSE
    session.submit_move("player-a", 1, ATTACK)
    session.submit_move("player-b", 4, ATTACK)
    session.submit_move("player-a", 3, ATTACK)
    session.submit_move("player-b", 5, DEFENSE)
    session.submit_move("player-a", 2, DEFENSE)
    outcome = session.submit_move("player-b", 6, DEFENSE)

    assert isinstance(outcome, BattleComplete)
    result = outcome.battle_result
    assert result.winner_id is None
    assert (result.score_a, result.score_b) == (1, 1)
    assert result.end_reason == END_REASON_TIE
    assert [r.winner_id for r in result.rounds] == ["player-a", "player-b", None]


def test_higher_score_after_three_rounds(session):
    session.submit_move("player-a", 1, ATTACK)
    session.submit_move("player-b", 4, ATTACK)
    session.submit_move("player-a", 2, DEFENSE)
    session.submit_move("player-b", 5, DEFENSE)
    session.submit_move("player-a", 3, ATTACK)
    outcome = session.submit_move("player-b", 6, ATTACK)

    assert isinstance(outcome, BattleComplete)
    result = outcome.battle_result
    assert result.winner_id == "player-a"
    assert (result.score_a, result.score_b) == (1, 0)
    assert result.end_reason == END_REASON_HIGHER_SCORE
    assert result.score_of("player-b") == 0


@pytest.mark.parametrize("seed", range(50))
def test_random_battles_never_reach_a_fourth_round(session, seed):
    rng = random.Random(seed)

    while not session.is_complete:
        for participant_id in session.participants:
            card = rng.choice(session.remaining_cards(participant_id))
            session.submit_move(participant_id, card.id, rng.choice(list(BattlePosition)))

    assert 1 <= session.rounds_played <= MAX_ROUNDS
    assert session.result is not None
    for participant_id in session.participants:
        for card in session.deck(participant_id):
            outcome = session.submit_move(participant_id, card.id, ATTACK)
            assert outcome == MoveError(message=ERROR_BATTLE_COMPLETE)
