from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Personality
from app.schemas.card import CardData


class Opponent(BaseModel):
    """A generated, non-human participant."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    personality: Personality
    cards: Sequence[CardData] = Field(min_length=3)
