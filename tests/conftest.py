import os
import random
from collections.abc import AsyncGenerator, Callable

os.environ.setdefault("DISCORD_BOT_TOKEN", "test-token")
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import create_tables
from app.core.enums import CardRarity
from app.schemas.card import CardData

type CardFactory = Callable[..., CardData]


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_card() -> CardFactory:
    def factory(
        card_id: int,
        attack: int = 5,
        defense: int = 5,
        *,
        owner_id: str = "player-a",
        name: str | None = None,
        rarity: CardRarity = CardRarity.COMMON,
    ) -> CardData:
        return CardData(
            id=card_id,
            name=name or f"Card {card_id}",
            attack=attack,
            defense=defense,
            rarity=rarity,
            owner_id=owner_id,
        )

    return factory


@pytest.fixture
def deck_a(make_card: CardFactory) -> list[CardData]:
    return [
        make_card(1, 7, 3, owner_id="player-a"),
        make_card(2, 4, 8, owner_id="player-a"),
        make_card(3, 5, 5, owner_id="player-a"),
    ]


@pytest.fixture
def deck_b(make_card: CardFactory) -> list[CardData]:
    return [
        make_card(4, 6, 2, owner_id="player-b"),
        make_card(5, 3, 9, owner_id="player-b"),
        make_card(6, 5, 5, owner_id="player-b"),
    ]


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await create_tables(engine)

    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session

    await engine.dispose()
