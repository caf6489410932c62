import sqlmodel

from app.core.enums import Personality

from ._base import BaseModel


class BattleRecord(BaseModel, table=True):
    __tablename__: str = "battle_records"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    session_id: str = sqlmodel.Field(max_length=64, unique=True)
    channel_id: str = sqlmodel.Field(max_length=64, index=True)
    player_a_id: str = sqlmodel.Field(max_length=64, index=True)
    player_b_id: str = sqlmodel.Field(max_length=64, index=True)
    winner_id: str | None = sqlmodel.Field(
        max_length=64, index=True, nullable=True, default=None
    )
    """None when the battle ended in a tie"""
    score_a: int = sqlmodel.Field(ge=0, le=3)
    score_b: int = sqlmodel.Field(ge=0, le=3)
    rounds_played: int = sqlmodel.Field(ge=1, le=3)
    end_reason: str
    opponent_personality: Personality | None = sqlmodel.Field(default=None, nullable=True)
    """Set when player B was a generated opponent"""
