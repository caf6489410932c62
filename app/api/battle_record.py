from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.battle_record import BattleRecord
from app.schemas.battle_record import PlayerBattleStats
from app.schemas.common import APIResponse, PaginatedResponse
from app.services.battle_record import BattleRecordService

router = APIRouter(prefix="/battles", tags=["battles"])


@router.get("/")
async def get_battle_records(
    service: Annotated[BattleRecordService, Depends()],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    player_id: Annotated[
        str | None, Query(description="Only battles this player took part in")
    ] = None,
) -> PaginatedResponse[Sequence[BattleRecord]]:
    records, pagination = await service.get_battle_records(
        page=page, page_size=page_size, player_id=player_id
    )
    return PaginatedResponse(data=records, pagination=pagination)


@router.get("/stats/{player_id}")
async def get_player_stats(
    player_id: str, service: Annotated[BattleRecordService, Depends()]
) -> APIResponse[PlayerBattleStats]:
    stats = await service.get_player_stats(player_id)
    return APIResponse(data=stats)


@router.get("/{record_id}")
async def get_battle_record(
    record_id: int, service: Annotated[BattleRecordService, Depends()]
) -> APIResponse[BattleRecord]:
    record = await service.get_battle_record(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Battle record not found")
    return APIResponse(data=record)
