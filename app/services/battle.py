import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence

from fastapi import HTTPException, status
from loguru import logger

from app.core.enums import BattlePosition, Personality
from app.game.opponent import generate_opponent
from app.game.registry import ActiveBattle, SessionRegistry
from app.game.session import DECK_SIZE, BattleSession
from app.game.strategy import choose_move
from app.schemas.battle import BattleComplete, MoveAccepted, MoveError, MoveOutcome
from app.schemas.card import CardData

type OutcomeCallback = Callable[[ActiveBattle, MoveOutcome], Awaitable[None]]
type ErrorCallback = Callable[[ActiveBattle, Exception], Awaitable[None]]

ERROR_NO_BATTLE = "No active battle in this channel"
ERROR_NOT_PARTICIPANT = "You're not part of this battle"


def _channel_busy() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="There's already an active battle in this channel! Wait for it to finish.",
    )


class OpponentMoveError(Exception):
    """Raised inside the opponent task when its chosen move gets rejected."""


class BattleService:
    """Pairs decks into battles and routes moves to the right session.

    Every move runs under the registry's per-channel lock. In battles against a
    generated opponent, an accepted human move schedules the opponent's reply as a
    background task that waits a random "thinking" delay before playing.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        think_delay: tuple[float, float] = (2.0, 4.0),
        rng: random.Random | None = None,
    ) -> None:
        low, high = think_delay
        if low < 0 or high < low:
            msg = f"Invalid opponent think delay range: {think_delay}"
            raise ValueError(msg)

        self.registry = registry
        self.think_delay = think_delay
        self.rng = rng or random.Random()

    def _draw_deck(self, cards: Sequence[CardData], participant_id: str) -> list[CardData]:
        if len(cards) < DECK_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"<@{participant_id}> needs at least {DECK_SIZE} cards to battle!",
            )
        if len(cards) == DECK_SIZE:
            return list(cards)
        return self.rng.sample(list(cards), DECK_SIZE)

    def _register(self, battle: ActiveBattle) -> ActiveBattle:
        if not self.registry.add(battle):
            raise _channel_busy()
        return battle

    def _ensure_channel_free(self, channel_id: str) -> None:
        if channel_id in self.registry:
            raise _channel_busy()

    def start_battle(
        self,
        *,
        channel_id: str,
        player_a_id: str,
        player_a_cards: Sequence[CardData],
        player_b_id: str,
        player_b_cards: Sequence[CardData],
    ) -> ActiveBattle:
        """Start a battle between two players, each playing three cards from their pool."""
        self._ensure_channel_free(channel_id)

        session = BattleSession(
            channel_id=channel_id,
            player_a_id=player_a_id,
            player_a_cards=self._draw_deck(player_a_cards, player_a_id),
            player_b_id=player_b_id,
            player_b_cards=self._draw_deck(player_b_cards, player_b_id),
        )
        return self._register(ActiveBattle(session=session))

    def start_opponent_battle(
        self,
        *,
        channel_id: str,
        player_id: str,
        player_cards: Sequence[CardData],
        personality: Personality | None = None,
    ) -> ActiveBattle:
        """Start a battle against a freshly generated opponent."""
        self._ensure_channel_free(channel_id)

        opponent = generate_opponent(personality, rng=self.rng)
        session = BattleSession(
            channel_id=channel_id,
            player_a_id=player_id,
            player_a_cards=self._draw_deck(player_cards, player_id),
            player_b_id=opponent.id,
            player_b_cards=self._draw_deck(opponent.cards, opponent.id),
        )
        logger.info(
            f"Starting battle {session.session_id}: {player_id} vs "
            f"{opponent.name} ({opponent.personality})"
        )
        return self._register(ActiveBattle(session=session, opponent=opponent))

    def abandon(self, channel_id: str) -> ActiveBattle | None:
        """Drop a channel's battle. A pending opponent task finds it gone and stops."""
        return self.registry.remove(channel_id)

    async def submit_move(  # noqa: PLR0913
        self,
        *,
        channel_id: str,
        participant_id: str,
        card_id: int,
        position: BattlePosition,
        on_opponent_outcome: OutcomeCallback,
        on_opponent_error: ErrorCallback,
    ) -> tuple[ActiveBattle | None, MoveOutcome]:
        """Submit a player's move in a channel's battle.

        Returns the battle that handled the move, which is no longer registered once the
        move completes it, together with the outcome. The opponent callbacks are only used
        in battles against a generated opponent, and run once the opponent has played.
        """
        async with self.registry.lock(channel_id):
            battle = self.registry.get(channel_id)
            if battle is None:
                return None, MoveError(message=ERROR_NO_BATTLE)

            session = battle.session
            if not session.is_participant(participant_id) or (
                battle.opponent is not None and participant_id == battle.opponent.id
            ):
                return battle, MoveError(message=ERROR_NOT_PARTICIPANT)

            outcome = session.submit_move(participant_id, card_id, position)
            if isinstance(outcome, BattleComplete):
                self.registry.remove(channel_id, session_id=session.session_id)

        if battle.opponent is not None and isinstance(outcome, MoveAccepted):
            self._schedule_opponent_move(battle, on_opponent_outcome, on_opponent_error)
        return battle, outcome

    def retry_opponent_move(
        self, channel_id: str, on_outcome: OutcomeCallback, on_error: ErrorCallback
    ) -> bool:
        """Reschedule a stalled opponent move. Returns whether a move was scheduled."""
        battle = self.registry.get(channel_id)
        if battle is None or battle.opponent is None:
            return False
        if battle.opponent_task is not None and not battle.opponent_task.done():
            return False

        session = battle.session
        human_id = session.opponent_of(battle.opponent.id)
        if not session.has_pending_move(human_id) or not self._opponent_may_move(battle):
            return False

        logger.info(f"Retrying opponent move in battle {session.session_id}")
        self._schedule_opponent_move(battle, on_outcome, on_error)
        return True

    def _schedule_opponent_move(
        self, battle: ActiveBattle, on_outcome: OutcomeCallback, on_error: ErrorCallback
    ) -> None:
        delay = self.rng.uniform(*self.think_delay)
        battle.opponent_task = asyncio.create_task(
            self._play_opponent_move(battle, delay, on_outcome, on_error),
            name=f"opponent-move-{battle.session.session_id}",
        )

    def _opponent_may_move(self, battle: ActiveBattle) -> bool:
        if battle.opponent is None or self.registry.get(battle.channel_id) is not battle:
            return False
        session = battle.session
        return not session.is_complete and not session.has_pending_move(battle.opponent.id)

    async def _play_opponent_move(
        self,
        battle: ActiveBattle,
        delay: float,
        on_outcome: OutcomeCallback,
        on_error: ErrorCallback,
    ) -> None:
        session = battle.session
        try:
            await asyncio.sleep(delay)

            async with self.registry.lock(battle.channel_id):
                if not self._opponent_may_move(battle):
                    logger.debug(f"Opponent move in {session.session_id} no longer needed")
                    return

                assert battle.opponent is not None
                opponent = battle.opponent
                card, position = choose_move(
                    opponent.personality,
                    session.remaining_cards(opponent.id),
                    session.current_round,
                    (session.score(opponent.id), session.score(session.opponent_of(opponent.id))),
                    rng=self.rng,
                )
                outcome = session.submit_move(opponent.id, card.id, position)
                if isinstance(outcome, BattleComplete):
                    self.registry.remove(battle.channel_id, session_id=session.session_id)

            if isinstance(outcome, MoveError):
                raise OpponentMoveError(outcome.message)
        except Exception as e:
            logger.exception(f"Opponent move failed in battle {session.session_id}")
            try:
                await on_error(battle, e)
            except Exception:
                logger.exception("Failed to report opponent move failure")
            return

        # The move is applied past this point, so announcement failures are only logged
        logger.debug(f"{opponent.name} played {card.name} in {position} position")
        try:
            await on_outcome(battle, outcome)
        except Exception:
            logger.exception(f"Failed to announce opponent move in battle {session.session_id}")
