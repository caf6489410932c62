from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlalchemy import ColumnElement
from sqlmodel import col, func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import Personality
from app.models.battle_record import BattleRecord
from app.schemas.battle import BattleResult
from app.schemas.battle_record import PlayerBattleStats
from app.schemas.common import PaginationData


def _involves(player_id: str) -> ColumnElement[bool]:
    return or_(
        col(BattleRecord.player_a_id) == player_id, col(BattleRecord.player_b_id) == player_id
    )


class BattleRecordService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_battle_records(
        self, *, page: int, page_size: int, player_id: str | None = None
    ) -> tuple[Sequence[BattleRecord], PaginationData]:
        offset = (page - 1) * page_size

        query = select(BattleRecord)
        if player_id is not None:
            query = query.where(_involves(player_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_items = (await self.db.exec(count_query)).one()

        result = await self.db.exec(
            query.order_by(col(BattleRecord.id).desc()).offset(offset).limit(page_size)
        )
        records = result.all()

        pagination = PaginationData.from_total(
            page=page, page_size=page_size, total_items=total_items
        )

        return records, pagination

    async def get_battle_record(self, record_id: int) -> BattleRecord | None:
        result = await self.db.exec(select(BattleRecord).where(BattleRecord.id == record_id))
        return result.first()

    async def save_result(
        self,
        result: BattleResult,
        *,
        channel_id: str,
        opponent_personality: Personality | None = None,
    ) -> BattleRecord:
        record = BattleRecord(
            session_id=result.session_id,
            channel_id=channel_id,
            player_a_id=result.player_a_id,
            player_b_id=result.player_b_id,
            winner_id=result.winner_id,
            score_a=result.score_a,
            score_b=result.score_b,
            rounds_played=len(result.rounds),
            end_reason=result.end_reason,
            opponent_personality=opponent_personality,
        )

        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def get_player_stats(self, player_id: str) -> PlayerBattleStats:
        result = await self.db.exec(select(BattleRecord).where(_involves(player_id)))
        records = result.all()

        wins = sum(1 for record in records if record.winner_id == player_id)
        ties = sum(1 for record in records if record.winner_id is None)
        return PlayerBattleStats(
            player_id=player_id, wins=wins, losses=len(records) - wins - ties, ties=ties
        )
