import pytest

from app.game.registry import ActiveBattle, SessionRegistry
from app.game.session import BattleSession


def _battle(deck_a, deck_b, channel_id="channel-1") -> ActiveBattle:
    session = BattleSession(
        channel_id=channel_id,
        player_a_id="player-a",
        player_a_cards=deck_a,
        player_b_id="player-b",
        player_b_cards=deck_b,
    )
    return ActiveBattle(session=session)


def test_one_battle_per_channel(deck_a, deck_b):
    registry = SessionRegistry()
    first = _battle(deck_a, deck_b)

    assert registry.add(first)
    assert not registry.add(_battle(deck_a, deck_b))
    assert registry.get("channel-1") is first
    assert "channel-1" in registry
    assert len(registry) == 1


def test_channels_are_independent(deck_a, deck_b):
    registry = SessionRegistry()
    registry.add(_battle(deck_a, deck_b, "channel-1"))

    assert registry.add(_battle(deck_a, deck_b, "channel-2"))
    assert {battle.channel_id for battle in registry} == {"channel-1", "channel-2"}


def test_remove(deck_a, deck_b):
    registry = SessionRegistry()
    battle = _battle(deck_a, deck_b)
    registry.add(battle)

    assert registry.remove("channel-1") is battle
    assert registry.get("channel-1") is None
    assert registry.remove("channel-1") is None


def test_remove_ignores_stale_session_id(deck_a, deck_b):
    registry = SessionRegistry()
    old = _battle(deck_a, deck_b)
    registry.add(old)
    registry.remove("channel-1")
    new = _battle(deck_a, deck_b)
    registry.add(new)

    assert registry.remove("channel-1", session_id=old.session.session_id) is None
    assert registry.get("channel-1") is new
    assert registry.remove("channel-1", session_id=new.session.session_id) is new


def test_iteration_allows_removal(deck_a, deck_b):
    registry = SessionRegistry()
    registry.add(_battle(deck_a, deck_b, "channel-1"))
    registry.add(_battle(deck_a, deck_b, "channel-2"))

    for battle in registry:
        registry.remove(battle.channel_id)

    assert len(registry) == 0


@pytest.mark.anyio
async def test_lock_is_shared_per_channel():
    registry = SessionRegistry()

    assert registry.lock("channel-1") is registry.lock("channel-1")
    assert registry.lock("channel-1") is not registry.lock("channel-2")

    async with registry.lock("channel-1"):
        assert registry.lock("channel-1").locked()
        assert not registry.lock("channel-2").locked()


@pytest.mark.anyio
async def test_lock_survives_battle_removal(deck_a, deck_b):
    registry = SessionRegistry()
    registry.add(_battle(deck_a, deck_b))
    lock = registry.lock("channel-1")

    async with lock:
        registry.remove("channel-1")
        registry.add(_battle(deck_a, deck_b))
        # A new battle in the channel waits on the lock the old one still holds
        assert registry.lock("channel-1") is lock
        assert registry.lock("channel-1").locked()


def test_battle_flags(deck_a, deck_b):
    battle = _battle(deck_a, deck_b)

    assert not battle.is_against_opponent
    assert battle.channel_id == "channel-1"
