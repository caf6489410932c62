import sqlmodel

from app.core.enums import CardRarity
from app.schemas.card import CardData

from ._base import BaseModel


class Card(BaseModel, table=True):
    __tablename__: str = "cards"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    name: str = sqlmodel.Field(max_length=100, index=True)
    image_url: str = sqlmodel.Field(max_length=1024)
    attack: int = sqlmodel.Field(ge=1, le=10)
    defense: int = sqlmodel.Field(ge=1, le=10)
    rarity: CardRarity
    owner_id: str = sqlmodel.Field(max_length=64, index=True)
    """Discord user ID of the card owner"""
    description: str | None = sqlmodel.Field(default=None, nullable=True)

    def to_data(self) -> CardData:
        """Freeze the row into the immutable value the battle engine works with."""
        return CardData(
            id=self.id,
            name=self.name,
            attack=self.attack,
            defense=self.defense,
            rarity=self.rarity,
            owner_id=self.owner_id,
            description=self.description,
            image_url=self.image_url,
            created_at=self.created_at,
        )

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"
