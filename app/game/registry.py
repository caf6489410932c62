import asyncio
from collections.abc import Iterator
from dataclasses import dataclass

from loguru import logger

from app.game.session import BattleSession
from app.schemas.opponent import Opponent


@dataclass(eq=False)
class ActiveBattle:
    session: BattleSession
    opponent: Opponent | None = None
    """Set when player B is a generated opponent"""
    opponent_task: asyncio.Task[None] | None = None

    @property
    def channel_id(self) -> str:
        return self.session.channel_id

    @property
    def is_against_opponent(self) -> bool:
        return self.opponent is not None


class SessionRegistry:
    """Maps each channel to at most one live battle.

    ``lock(channel_id)`` is the serialization boundary: every ``submit_move`` on a
    channel's session has to run while holding that channel's lock.

    Locks outlive their battles: ``remove`` keeps the channel's lock because a pending
    opponent task may still hold or wait on it. The lock map is therefore bounded by the
    number of channels the bot has hosted a battle in, one small lock each.
    """

    def __init__(self) -> None:
        self._battles: dict[str, ActiveBattle] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._battles

    def __len__(self) -> int:
        return len(self._battles)

    def __iter__(self) -> Iterator[ActiveBattle]:
        return iter(list(self._battles.values()))

    def get(self, channel_id: str) -> ActiveBattle | None:
        return self._battles.get(channel_id)

    def lock(self, channel_id: str) -> asyncio.Lock:
        return self._locks.setdefault(channel_id, asyncio.Lock())

    def add(self, battle: ActiveBattle) -> bool:
        """Register a battle, returns False if its channel already has one."""
        if battle.channel_id in self._battles:
            return False

        self._battles[battle.channel_id] = battle
        logger.info(f"Registered battle {battle.session.session_id} in channel {battle.channel_id}")
        return True

    def remove(self, channel_id: str, *, session_id: str | None = None) -> ActiveBattle | None:
        """Remove a channel's battle.

        When ``session_id`` is given, only a battle with that session ID is removed, so a
        stale caller can't drop a newer battle started in the same channel.
        """
        battle = self._battles.get(channel_id)
        if battle is None:
            return None
        if session_id is not None and battle.session.session_id != session_id:
            return None

        del self._battles[channel_id]
        logger.info(f"Removed battle {battle.session.session_id} from channel {channel_id}")
        return battle
