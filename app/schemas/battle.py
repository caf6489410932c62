from collections.abc import Sequence
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import BattlePosition
from app.schemas.card import CardData


class BattleMove(BaseModel):
    model_config = ConfigDict(frozen=True)

    participant_id: str
    card: CardData
    position: BattlePosition
    round_number: int = Field(ge=1)

    def __str__(self) -> str:
        return f"{self.card.name} ({self.position.name})"


class RoundResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    round_number: int = Field(ge=1)
    winner_id: str | None
    """None when the round is a tie"""
    move_a: BattleMove
    move_b: BattleMove
    description: str
    points_awarded: int = Field(ge=0, le=1)


class BattleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    player_a_id: str
    player_b_id: str
    winner_id: str | None
    """None when the battle ended in a tie"""
    score_a: int
    score_b: int
    rounds: Sequence[RoundResult]
    end_reason: str

    def score_of(self, participant_id: str) -> int:
        return self.score_a if participant_id == self.player_a_id else self.score_b


class MoveAccepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["move_accepted"] = "move_accepted"
    move: BattleMove


class RoundComplete(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["round_complete"] = "round_complete"
    round_result: RoundResult
    next_round_number: int


class BattleComplete(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["battle_complete"] = "battle_complete"
    final_round: RoundResult
    battle_result: BattleResult


class MoveError(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    message: str


type MoveOutcome = Annotated[
    MoveAccepted | RoundComplete | BattleComplete | MoveError, Field(discriminator="kind")
]
