import json
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import CellTaken, InvalidInput
from core.grid import OccupancyCache
from db.command_log import CommandLog
from db.database import get_async_session
from db.repository import SqlItemRepository
from schemas.commands import CommandEnvelope, decode_command
from services.storage import CommandOutcome, StorageService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_occupancy(request: Request) -> OccupancyCache:
    return request.app.state.occupancy


async def _record_outcome(db: AsyncSession, outcome: CommandOutcome) -> None:
    data_out = json.dumps(outcome.response)
    logger.info("%s %s -> %s", outcome.command, outcome.data_in, data_out)
    if not settings.command_log_enabled:
        return
    try:
        db.add(
            CommandLog(
                command=outcome.command,
                data_in=outcome.data_in,
                data_out=data_out,
                succeeded=outcome.succeeded,
            )
        )
        await db.commit()
    except Exception as e:
        # Command is already committed at this point
        await db.rollback()
        logger.error("Failed to write command log: %s", e, exc_info=True)


@router.post("/", response_model=Dict)
async def run_command(
    payload: CommandEnvelope,
    db: AsyncSession = Depends(get_async_session),
    occupancy: OccupancyCache = Depends(get_occupancy),
):
    """Decode one storage command and run it."""
    try:
        command = decode_command(payload.data)
    except ValueError as e:
        logger.warning("Rejected command payload: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    service = StorageService(SqlItemRepository(db), occupancy)
    try:
        outcome = await service.execute(command)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CellTaken as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Box {e} is already taken, retry the insert")

    await _record_outcome(db, outcome)
    return outcome.response
