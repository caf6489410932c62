import random
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.game.session import DECK_SIZE
from app.models.card import Card
from app.schemas.card import CardCreate, CardData


class CardService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_card(self, card_id: int) -> Card | None:
        result = await self.db.exec(select(Card).where(Card.id == card_id))
        return result.first()

    async def get_player_card(self, *, owner_id: str, card_id: int) -> Card | None:
        result = await self.db.exec(
            select(Card).where(Card.id == card_id, Card.owner_id == owner_id)
        )
        return result.first()

    async def get_player_cards(self, owner_id: str) -> Sequence[Card]:
        result = await self.db.exec(
            select(Card).where(Card.owner_id == owner_id).order_by(col(Card.id))
        )
        return result.all()

    async def create_card(self, card_data: CardCreate, *, owner_id: str, image_url: str) -> Card:
        card = Card(
            name=card_data.name,
            image_url=image_url,
            attack=card_data.attack,
            defense=card_data.defense,
            rarity=card_data.rarity,
            owner_id=owner_id,
            description=card_data.description,
        )

        self.db.add(card)
        await self.db.commit()
        await self.db.refresh(card)
        return card

    async def clear_player_cards(self, owner_id: str) -> int:
        """Delete every card a player owns. Returns the number of cards removed."""
        cards = await self.get_player_cards(owner_id)
        count = len(cards)

        for card in cards:
            await self.db.delete(card)

        await self.db.commit()
        return count

    async def pick_battle_deck(
        self, owner_id: str, rng: random.Random | None = None
    ) -> list[CardData]:
        """Pick a random battle deck from the player's collection.

        Raises:
            HTTPException: If the player owns fewer cards than a battle deck needs.
        """
        cards = await self.get_player_cards(owner_id)
        if len(cards) < DECK_SIZE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"<@{owner_id}> needs at least {DECK_SIZE} cards to battle! "
                "Upload some images to create more cards.",
            )

        rng = rng or random.Random()
        return [card.to_data() for card in rng.sample(list(cards), DECK_SIZE)]
