"""
Shelf Change API Endpoints
Write one shelf lifecycle event, read the feed, look up a receipt
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from config import FEED_DEFAULT_LIMIT, FEED_MAX_LIMIT
from database import get_uow_provider
from exceptions import ReceiptNotFound
from schemas import ErrorResponse, InsertedRow, ShelfChangeRecord, ShelfMetaCreate

router = APIRouter(tags=["shelf"])


@router.post(
    "/shelf-meta",
    response_model=InsertedRow,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Record a shelf lifecycle change",
)
async def create_shelf_change(payload: ShelfMetaCreate, uow_provider=Depends(get_uow_provider)):
    async with uow_provider() as uow:
        row_id, ts = await uow.shelf_changes.add(uow.session, payload.to_row())
    return InsertedRow(id=row_id, ts=ts)


@router.get(
    "/feed",
    response_model=List[ShelfChangeRecord],
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Recent shelf changes, newest first",
)
async def get_feed(
    actor: Optional[str] = Query(None, description="Exact actor match"),
    limit: int = Query(FEED_DEFAULT_LIMIT, ge=1, le=FEED_MAX_LIMIT, description="Maximum rows"),
    uow_provider=Depends(get_uow_provider),
):
    """
    Shelf changes ordered by ts DESC, id DESC.

    Args:
        actor: only rows whose actor equals this value (optional, empty = all)
        limit: row cap, 1..FEED_MAX_LIMIT
    """
    # An empty actor means no filter
    async with uow_provider() as uow:
        return await uow.shelf_changes.feed(uow.session, actor or None, limit)


@router.get(
    "/receipt/{receipt_hash}",
    response_model=ShelfChangeRecord,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Look up a shelf change by receipt hash",
)
async def get_receipt(receipt_hash: str, uow_provider=Depends(get_uow_provider)):
    async with uow_provider() as uow:
        row = await uow.shelf_changes.get_by_receipt(uow.session, receipt_hash)

    if row is None:
        raise ReceiptNotFound(receipt_hash)
    return row
