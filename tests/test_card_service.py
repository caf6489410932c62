import random

import pytest
from fastapi import HTTPException

from app.core.enums import CardRarity
from app.schemas.card import CardCreate, CardData
from app.services.card import CardService

pytestmark = pytest.mark.anyio


async def _create_cards(service: CardService, owner_id: str, count: int) -> None:
    for index in range(count):
        await service.create_card(
            CardCreate(
                name=f"{owner_id} card {index}",
                attack=index % 10 + 1,
                defense=10 - index % 10,
                rarity=CardRarity.COMMON,
            ),
            owner_id=owner_id,
            image_url=f"https://cdn.example.com/{owner_id}/{index}.png",
        )


async def test_create_and_get_card(db_session):
    service = CardService(db_session)

    card = await service.create_card(
        CardCreate(name="Fire Dragon", attack=8, defense=3, rarity=CardRarity.RARE),
        owner_id="123",
        image_url="https://cdn.example.com/dragon.png",
    )

    assert card.id is not None
    fetched = await service.get_card(card.id)
    assert fetched is not None
    assert fetched.name == "Fire Dragon"
    assert fetched.rarity is CardRarity.RARE
    assert fetched.owner_id == "123"


async def test_get_missing_card(db_session):
    assert await CardService(db_session).get_card(404) is None


async def test_player_cards_are_scoped_to_owner(db_session):
    service = CardService(db_session)
    await _create_cards(service, "alice", 2)
    await _create_cards(service, "bob", 3)

    alice_cards = await service.get_player_cards("alice")
    bob_cards = await service.get_player_cards("bob")

    assert [card.name for card in alice_cards] == ["alice card 0", "alice card 1"]
    assert len(bob_cards) == 3
    assert await service.get_player_card(owner_id="alice", card_id=bob_cards[0].id) is None
    assert await service.get_player_card(owner_id="bob", card_id=bob_cards[0].id) is not None


async def test_clear_player_cards(db_session):
    service = CardService(db_session)
    await _create_cards(service, "alice", 4)
    await _create_cards(service, "bob", 1)

    assert await service.clear_player_cards("alice") == 4
    assert await service.get_player_cards("alice") == []
    assert len(await service.get_player_cards("bob")) == 1
    assert await service.clear_player_cards("alice") == 0


async def test_pick_battle_deck(db_session):
    service = CardService(db_session)
    await _create_cards(service, "alice", 6)

    deck = await service.pick_battle_deck("alice", random.Random(1))

    assert len(deck) == 3
    assert all(isinstance(card, CardData) for card in deck)
    assert all(card.owner_id == "alice" for card in deck)
    assert len({card.id for card in deck}) == 3


async def test_pick_battle_deck_needs_three_cards(db_session):
    service = CardService(db_session)
    await _create_cards(service, "alice", 2)

    with pytest.raises(HTTPException) as exc_info:
        await service.pick_battle_deck("alice")

    assert exc_info.value.status_code == 400
    assert "at least 3 cards" in exc_info.value.detail
