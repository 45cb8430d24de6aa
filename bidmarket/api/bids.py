from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.api._serialize import bid_out
from bidmarket.core.db import get_session
from bidmarket.core.errors import ValidationError
from bidmarket.schemas import BidCreate, BidRef, BidUpdate
from bidmarket import services

router = APIRouter(prefix="/bids", tags=["bids"])


def _require_bid_id(payload: Optional[dict]) -> int:
    bid_id = (payload or {}).get("bidId")
    if not bid_id:
        raise ValidationError("bidId is required")
    # no coercion: 1.9 or true must not land on some other bid
    if isinstance(bid_id, int) and not isinstance(bid_id, bool):
        return bid_id
    if isinstance(bid_id, str) and bid_id.strip().isdecimal():
        return int(bid_id.strip())
    raise ValidationError("bidId must be an integer")


@router.get("")
async def list_bids(
    request: Request,
    collection_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
):
    """Bids sorted by price, highest first, optionally for one collection."""
    limit = limit or request.app.state.settings.DEFAULT_PAGE_SIZE
    bids, paging = await services.list_bids(db, collection_id=collection_id, page=page, limit=limit)
    return {"bids": [bid_out(b) for b in bids], "pagination": paging.as_dict()}


@router.post("")
async def create_bid(payload: BidCreate, db: AsyncSession = Depends(get_session)):
    bid = await services.create_bid(db, payload)
    return bid_out(bid)


@router.put("")
async def update_bid(payload: BidUpdate, db: AsyncSession = Depends(get_session)):
    bid = await services.update_bid(db, payload)
    return bid_out(bid)


@router.delete("")
async def delete_bid(payload: BidRef, db: AsyncSession = Depends(get_session)):
    await services.delete_bid(db, payload.id)
    return {"success": True}


@router.post("/accept")
async def accept_bid(payload: Optional[dict] = Body(None), db: AsyncSession = Depends(get_session)):
    """
    Accept a bid: take one unit of stock from its collection and
    reject every other bid on that collection.
    """
    await services.accept_bid(db, _require_bid_id(payload))
    return {"success": True}


@router.post("/reject")
async def reject_bid(payload: Optional[dict] = Body(None), db: AsyncSession = Depends(get_session)):
    await services.reject_bid(db, _require_bid_id(payload))
    return {"success": True}
