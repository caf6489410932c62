from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.card import Card
from app.schemas.common import APIResponse
from app.services.card import CardService

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("/")
async def get_player_cards(
    service: Annotated[CardService, Depends()],
    owner_id: Annotated[str, Query(description="Discord user ID of the card owner")],
) -> APIResponse[Sequence[Card]]:
    cards = await service.get_player_cards(owner_id)
    return APIResponse(data=cards)


@router.get("/{card_id}")
async def get_card(card_id: int, service: Annotated[CardService, Depends()]) -> APIResponse[Card]:
    card = await service.get_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return APIResponse(data=card)
