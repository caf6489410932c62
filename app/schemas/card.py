import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import CardRarity
from app.utils.misc import get_utc_now

CARD_STAT_MIN = 1
CARD_STAT_MAX = 10


class CardData(BaseModel):
    """Immutable card value consumed by the battle engine.

    Construction raises a ``ValidationError`` when a stat is outside 1-10.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    attack: int = Field(ge=CARD_STAT_MIN, le=CARD_STAT_MAX)
    defense: int = Field(ge=CARD_STAT_MIN, le=CARD_STAT_MAX)
    rarity: CardRarity
    owner_id: str
    description: str | None = None
    image_url: str = ""
    created_at: datetime.datetime = Field(default_factory=get_utc_now)

    @property
    def total_power(self) -> int:
        return self.attack + self.defense

    def __str__(self) -> str:
        return f"{self.name} (ATK {self.attack} / DEF {self.defense})"


class CardCreate(BaseModel):
    """Stats assigned to an uploaded image before the card is stored."""

    name: str = Field(max_length=100)
    attack: int = Field(ge=CARD_STAT_MIN, le=CARD_STAT_MAX)
    defense: int = Field(ge=CARD_STAT_MIN, le=CARD_STAT_MAX)
    rarity: CardRarity
    description: str | None = None
