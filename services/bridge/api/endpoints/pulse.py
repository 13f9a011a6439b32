"""
Pulse API Endpoint
Heartbeats grouped by thread tag
"""
from fastapi import APIRouter, Depends

from database import get_uow_provider
from schemas import ErrorResponse, InsertedRow, PulseCreate

router = APIRouter(tags=["pulse"])


@router.post(
    "/pulse",
    response_model=InsertedRow,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Record an actor heartbeat",
)
async def create_pulse(payload: PulseCreate, uow_provider=Depends(get_uow_provider)):
    async with uow_provider() as uow:
        row_id, ts = await uow.thread_continuity.add(uow.session, payload.to_row())
    return InsertedRow(id=row_id, ts=ts)
