from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.api._serialize import collection_out
from bidmarket.core.db import get_session
from bidmarket.schemas import CollectionCreate, CollectionRef, CollectionUpdate
from bidmarket import services

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("")
async def list_collections(
    request: Request,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    include_bids: bool = Query(False, alias="includeBids"),
    db: AsyncSession = Depends(get_session),
):
    limit = limit or request.app.state.settings.DEFAULT_PAGE_SIZE
    rows, paging = await services.list_collections(
        db,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        include_bids=include_bids,
    )
    collections = [
        collection_out(c, bids=c.bids if include_bids else None, bid_count=count)
        for c, count in rows
    ]
    return {"collections": collections, "pagination": paging.as_dict()}


@router.post("")
async def create_collection(payload: CollectionCreate, db: AsyncSession = Depends(get_session)):
    collection = await services.create_collection(db, payload)
    return collection_out(collection, bids=collection.bids)


@router.put("")
async def update_collection(payload: CollectionUpdate, db: AsyncSession = Depends(get_session)):
    collection = await services.update_collection(db, payload)
    return collection_out(collection, bids=collection.bids)


@router.delete("")
async def delete_collection(payload: CollectionRef, db: AsyncSession = Depends(get_session)):
    """Delete a collection together with every bid placed on it."""
    await services.delete_collection(db, payload.id)
    return {"success": True}
