import uuid
from collections.abc import Sequence

from loguru import logger

from app.core.enums import BattlePosition, BattleState
from app.game.resolver import resolve_round
from app.schemas.battle import (
    BattleComplete,
    BattleMove,
    BattleResult,
    MoveAccepted,
    MoveError,
    MoveOutcome,
    RoundComplete,
    RoundResult,
)
from app.schemas.card import CardData

# Every deck holds exactly three cards and a card can't be replayed, so a battle can
# never go past three rounds. Bigger decks would need a different termination policy.
DECK_SIZE = 3
MAX_ROUNDS = 3
WINS_TO_CLINCH = 2

ERROR_BATTLE_COMPLETE = "battle already complete"
ERROR_CARD_USED = "card already used"
ERROR_MOVE_SUBMITTED = "move already submitted this round"
ERROR_CARD_NOT_IN_DECK = "card not in your battle deck"

END_REASON_CLINCHED = "first to 2 round wins"
END_REASON_HIGHER_SCORE = "higher score after 3 rounds"
END_REASON_TIE = "tie game after 3 rounds"


class BattleSession:
    """A best-of-three battle between two participants with three cards each.

    Moves are submitted one at a time and kept secret until both participants have
    played for the round, then the round resolves on its own. The session does no
    locking, so callers must serialize ``submit_move`` calls for the same session.
    """

    def __init__(
        self,
        *,
        channel_id: str,
        player_a_id: str,
        player_a_cards: Sequence[CardData],
        player_b_id: str,
        player_b_cards: Sequence[CardData],
        session_id: str | None = None,
    ) -> None:
        if player_a_id == player_b_id:
            msg = "A battle needs two different participants"
            raise ValueError(msg)
        for cards in (player_a_cards, player_b_cards):
            if len(cards) != DECK_SIZE:
                msg = f"Battle decks must hold exactly {DECK_SIZE} cards, got {len(cards)}"
                raise ValueError(msg)
        card_ids = [card.id for card in (*player_a_cards, *player_b_cards)]
        if len(set(card_ids)) != len(card_ids):
            msg = "Card IDs must be unique across both battle decks"
            raise ValueError(msg)

        self.session_id = session_id or uuid.uuid4().hex
        self.channel_id = channel_id
        self.player_a_id = player_a_id
        self.player_b_id = player_b_id
        self._decks: dict[str, tuple[CardData, ...]] = {
            player_a_id: tuple(player_a_cards),
            player_b_id: tuple(player_b_cards),
        }

        self._used_card_ids: set[int] = set()
        self._pending_moves: dict[str, BattleMove] = {}
        self._rounds: list[RoundResult] = []
        self._current_round = 1
        self._state = BattleState.WAITING_FOR_MOVES
        self._result: BattleResult | None = None

    def __repr__(self) -> str:
        return (
            f"<BattleSession {self.session_id} channel={self.channel_id} "
            f"round={self._current_round} state={self._state.value}>"
        )

    @property
    def state(self) -> BattleState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._state is BattleState.BATTLE_COMPLETE

    @property
    def current_round(self) -> int:
        return self._current_round

    @property
    def rounds(self) -> tuple[RoundResult, ...]:
        return tuple(self._rounds)

    @property
    def rounds_played(self) -> int:
        return len(self._rounds)

    @property
    def rounds_remaining(self) -> int:
        if self.is_complete:
            return 0
        return MAX_ROUNDS - self.rounds_played

    @property
    def result(self) -> BattleResult | None:
        """The final result, set once the battle is complete."""
        return self._result

    @property
    def participants(self) -> tuple[str, str]:
        return self.player_a_id, self.player_b_id

    def is_participant(self, participant_id: str) -> bool:
        return participant_id in self._decks

    def opponent_of(self, participant_id: str) -> str:
        if participant_id == self.player_a_id:
            return self.player_b_id
        if participant_id == self.player_b_id:
            return self.player_a_id
        msg = f"{participant_id} is not part of this battle"
        raise ValueError(msg)

    def deck(self, participant_id: str) -> tuple[CardData, ...]:
        return self._decks.get(participant_id, ())

    def score(self, participant_id: str) -> int:
        """Number of rounds won by the participant so far."""
        return sum(1 for result in self._rounds if result.winner_id == participant_id)

    def has_pending_move(self, participant_id: str) -> bool:
        return participant_id in self._pending_moves

    def remaining_cards(self, participant_id: str) -> list[CardData]:
        return [card for card in self.deck(participant_id) if card.id not in self._used_card_ids]

    def is_card_used(self, card_id: int) -> bool:
        return card_id in self._used_card_ids

    def _validate_move(self, participant_id: str, card_id: int) -> CardData | MoveError:
        if self.is_complete:
            return MoveError(message=ERROR_BATTLE_COMPLETE)
        if card_id in self._used_card_ids:
            return MoveError(message=ERROR_CARD_USED)
        if participant_id in self._pending_moves:
            return MoveError(message=ERROR_MOVE_SUBMITTED)

        card = next((c for c in self.deck(participant_id) if c.id == card_id), None)
        if card is None:
            return MoveError(message=ERROR_CARD_NOT_IN_DECK)
        return card

    def submit_move(
        self, participant_id: str, card_id: int, position: BattlePosition
    ) -> MoveOutcome:
        """Submit a participant's move for the current round.

        Validation failures come back as ``MoveError`` and leave the session untouched.
        The second move of a round resolves it, and may end the battle.
        """
        card = self._validate_move(participant_id, card_id)
        if isinstance(card, MoveError):
            logger.debug(f"Rejected move in {self.session_id} by {participant_id}: {card.message}")
            return card

        move = BattleMove(
            participant_id=participant_id,
            card=card,
            position=position,
            round_number=self._current_round,
        )
        self._pending_moves[participant_id] = move
        self._used_card_ids.add(card.id)

        if len(self._pending_moves) < 2:  # noqa: PLR2004
            self._state = BattleState.ROUND_IN_PROGRESS
            return MoveAccepted(move=move)

        return self._resolve_current_round()

    def _resolve_current_round(self) -> RoundComplete | BattleComplete:
        round_result = resolve_round(
            self._pending_moves[self.player_a_id],
            self._pending_moves[self.player_b_id],
            self._current_round,
        )
        self._rounds.append(round_result)
        self._pending_moves.clear()
        logger.info(
            f"Battle {self.session_id} round {round_result.round_number} resolved, "
            f"winner={round_result.winner_id}"
        )

        result = self._check_termination()
        if result is not None:
            self._state = BattleState.BATTLE_COMPLETE
            self._result = result
            logger.info(
                f"Battle {self.session_id} complete: winner={result.winner_id} "
                f"score={result.score_a}-{result.score_b} ({result.end_reason})"
            )
            return BattleComplete(final_round=round_result, battle_result=result)

        self._current_round += 1
        self._state = BattleState.WAITING_FOR_MOVES
        return RoundComplete(round_result=round_result, next_round_number=self._current_round)

    def _check_termination(self) -> BattleResult | None:
        score_a = self.score(self.player_a_id)
        score_b = self.score(self.player_b_id)

        if score_a >= WINS_TO_CLINCH or score_b >= WINS_TO_CLINCH:
            winner_id = self.player_a_id if score_a > score_b else self.player_b_id
            return self._build_result(winner_id, score_a, score_b, END_REASON_CLINCHED)

        if self.rounds_played >= MAX_ROUNDS:
            if score_a == score_b:
                return self._build_result(None, score_a, score_b, END_REASON_TIE)
            winner_id = self.player_a_id if score_a > score_b else self.player_b_id
            return self._build_result(winner_id, score_a, score_b, END_REASON_HIGHER_SCORE)

        return None

    def _build_result(
        self, winner_id: str | None, score_a: int, score_b: int, end_reason: str
    ) -> BattleResult:
        return BattleResult(
            session_id=self.session_id,
            player_a_id=self.player_a_id,
            player_b_id=self.player_b_id,
            winner_id=winner_id,
            score_a=score_a,
            score_b=score_b,
            rounds=tuple(self._rounds),
            end_reason=end_reason,
        )
