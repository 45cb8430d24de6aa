import logging
from typing import List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bidmarket.core.errors import NotFound, ValidationError
from bidmarket.domain.models import Bid, Collection, User
from bidmarket.schemas import CollectionCreate, CollectionUpdate
from bidmarket.services._guard import storage_guard
from bidmarket.services.pagination import Page

logger = logging.getLogger("collections")

SORT_COLUMNS = {
    "name": Collection.name,
    "stocks": Collection.stocks,
    "price": Collection.price,
    "owner": User.name,
}
SORT_ORDERS = {"asc", "desc"}
UPDATABLE_FIELDS = ("name", "description", "stocks", "price")


def _with_owner_and_bids():
    return (
        selectinload(Collection.owner),
        selectinload(Collection.bids).selectinload(Bid.user),
    )


async def _load_collection(session: AsyncSession, collection_id: int) -> Collection:
    res = await session.execute(
        select(Collection)
        .where(Collection.id == collection_id)
        .options(*_with_owner_and_bids())
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def list_collections(
    session: AsyncSession,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "name",
    sort_order: str = "asc",
    include_bids: bool = False,
) -> Tuple[List[Tuple[Collection, int]], Page]:
    """
    Return (collection, bid_count) pairs for one page.
    The bid count is computed separately from `include_bids`.
    """
    if sort_by not in SORT_COLUMNS:
        raise ValidationError(f"sortBy must be one of: {', '.join(SORT_COLUMNS)}")
    if sort_order not in SORT_ORDERS:
        raise ValidationError("sortOrder must be 'asc' or 'desc'")

    paging = Page(page, limit)
    bid_count = (
        select(func.count(Bid.id))
        .where(Bid.collection_id == Collection.id)
        .correlate(Collection)
        .scalar_subquery()
        .label("bid_count")
    )
    stmt = select(Collection, bid_count).options(selectinload(Collection.owner))
    if include_bids:
        stmt = stmt.options(selectinload(Collection.bids).selectinload(Bid.user))
    if sort_by == "owner":
        stmt = stmt.join(User, Collection.owner_id == User.id)

    column = SORT_COLUMNS[sort_by]
    order = column.desc() if sort_order == "desc" else column.asc()

    async with storage_guard(session, "Failed to fetch collections", logger):
        total = (await session.execute(select(func.count(Collection.id)))).scalar() or 0
        res = await session.execute(
            stmt.order_by(order, Collection.id.asc()).offset(paging.offset).limit(paging.limit)
        )
        rows = [(c, n or 0) for c, n in res.all()]

    return rows, paging.with_total(total)


async def create_collection(session: AsyncSession, payload: CollectionCreate) -> Collection:
    collection = Collection(
        name=payload.name,
        description=payload.description,
        stocks=payload.stocks,
        price=payload.price,
        owner_id=payload.owner_id,
    )
    async with storage_guard(session, "Failed to create collection", logger):
        session.add(collection)
        await session.commit()
        created = await _load_collection(session, collection.id)
    logger.info("collection created id=%s owner_id=%s", collection.id, collection.owner_id)
    return created


async def update_collection(session: AsyncSession, payload: CollectionUpdate) -> Collection:
    """
    Write only name/description/stocks/price.
    The stored owner always wins over any ownerId in the payload.
    """
    sent = payload.model_dump(exclude_unset=True)
    async with storage_guard(session, "Failed to update collection", logger):
        existing = await session.get(Collection, payload.id)
        if existing is None:
            raise NotFound("Collection not found")
        owner_id = existing.owner_id
        for key in UPDATABLE_FIELDS:
            if sent.get(key) is not None:
                setattr(existing, key, sent[key])
        existing.owner_id = owner_id
        await session.commit()
        updated = await _load_collection(session, payload.id)

    if sent.get("owner_id") not in (None, owner_id):
        logger.warning("ignored owner change on collection id=%s (owner_id=%s)", payload.id, owner_id)
    return updated


async def delete_collection(session: AsyncSession, collection_id: int) -> None:
    # bids go first so the foreign key on bids.collection_id never dangles
    async with storage_guard(session, "Failed to delete collection", logger):
        await session.execute(delete(Bid).where(Bid.collection_id == collection_id))
        res = await session.execute(delete(Collection).where(Collection.id == collection_id))
        if res.rowcount == 0:
            raise NotFound("Collection not found")
        await session.commit()
    logger.info("collection deleted id=%s", collection_id)
