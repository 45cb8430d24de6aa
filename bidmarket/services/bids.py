"""Bid lifecycle: listing, editing, and the accept/reject transitions."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bidmarket.core.errors import NotFound, OutOfStock
from bidmarket.domain.models import Bid, BidStatus, Collection
from bidmarket.schemas import BidCreate, BidUpdate
from bidmarket.services._guard import storage_guard
from bidmarket.services.pagination import Page

logger = logging.getLogger("bids")


def _with_relations():
    return (
        selectinload(Bid.user),
        selectinload(Bid.collection).selectinload(Collection.owner),
    )


async def _load_bid(session: AsyncSession, bid_id: int) -> Optional[Bid]:
    res = await session.execute(
        select(Bid)
        .where(Bid.id == bid_id)
        .options(*_with_relations())
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def list_bids(
    session: AsyncSession,
    collection_id: Optional[int] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Bid], Page]:
    """
    Return one page of bids, highest price first, plus pagination info.
    The total counts every bid matching the filter, not just this page.
    """
    paging = Page(page, limit)
    count_stmt = select(func.count(Bid.id))
    stmt = select(Bid).options(*_with_relations())
    if collection_id is not None:
        count_stmt = count_stmt.where(Bid.collection_id == collection_id)
        stmt = stmt.where(Bid.collection_id == collection_id)

    async with storage_guard(session, "Failed to fetch bids", logger):
        total = (await session.execute(count_stmt)).scalar() or 0
        res = await session.execute(
            stmt.order_by(Bid.price.desc(), Bid.id.asc()).offset(paging.offset).limit(paging.limit)
        )
        bids = list(res.scalars().all())

    return bids, paging.with_total(total)


async def create_bid(session: AsyncSession, payload: BidCreate) -> Bid:
    # no checks on stock, ownership or price: any caller may bid on anything
    bid = Bid(
        collection_id=payload.collection_id,
        user_id=payload.user_id,
        price=payload.price,
        status=(payload.status or BidStatus.PENDING).value,
    )
    async with storage_guard(session, "Failed to create bid", logger):
        session.add(bid)
        await session.commit()
        created = await _load_bid(session, bid.id)
    logger.info("bid created id=%s collection_id=%s user_id=%s", bid.id, bid.collection_id, bid.user_id)
    return created


async def update_bid(session: AsyncSession, payload: BidUpdate) -> Bid:
    """
    Apply whichever allow-listed fields were sent.
    There is no status guard, so accepted or rejected bids stay editable.
    """
    sent = payload.model_dump(exclude_unset=True, exclude={"id"})
    fields = {k: v for k, v in sent.items() if v is not None}
    if "status" in fields:
        fields["status"] = BidStatus(fields["status"]).value

    async with storage_guard(session, "Failed to update bid", logger):
        bid = await session.get(Bid, payload.id)
        if bid is None:
            raise NotFound("Bid not found")
        for key, value in fields.items():
            setattr(bid, key, value)
        await session.commit()
        updated = await _load_bid(session, payload.id)
    return updated


async def delete_bid(session: AsyncSession, bid_id: int) -> None:
    async with storage_guard(session, "Failed to delete bid", logger):
        res = await session.execute(delete(Bid).where(Bid.id == bid_id))
        if res.rowcount == 0:
            raise NotFound("Bid not found")
        await session.commit()


async def accept_bid(session: AsyncSession, bid_id: int) -> None:
    """
    Accept one bid on a collection.

    The collection gives up one unit of stock, the bid becomes accepted and
    every other bid on the same collection becomes rejected, whatever state
    it was in. All three writes commit together.
    """
    async with storage_guard(session, "Failed to accept bid", logger):
        bid = await session.get(Bid, bid_id, options=[selectinload(Bid.collection)])
        if bid is None:
            raise NotFound("Bid not found")
        if bid.collection is None:
            raise NotFound("Collection not found")
        if bid.collection.stocks <= 0:
            raise OutOfStock()

        collection_id = bid.collection_id

        # Claim the unit first: the guarded decrement locks the collection row,
        # so concurrent accepts on it serialize here and a loser sees no row.
        claimed = await session.execute(
            update(Collection)
            .where(Collection.id == collection_id, Collection.stocks > 0)
            .values(stocks=Collection.stocks - 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            raise OutOfStock()

        await session.execute(
            update(Bid)
            .where(Bid.id == bid_id)
            .values(status=BidStatus.ACCEPTED.value)
        )
        await session.execute(
            update(Bid)
            .where(Bid.collection_id == collection_id, Bid.id != bid_id)
            .values(status=BidStatus.REJECTED.value)
        )
        await session.commit()

    logger.info("bid accepted id=%s collection_id=%s", bid_id, collection_id)


async def reject_bid(session: AsyncSession, bid_id: int) -> None:
    # reachable from any state, including accepted; stock is not restored
    async with storage_guard(session, "Failed to reject bid", logger):
        res = await session.execute(
            update(Bid)
            .where(Bid.id == bid_id)
            .values(status=BidStatus.REJECTED.value)
        )
        if res.rowcount == 0:
            raise NotFound("Bid not found")
        await session.commit()

    logger.info("bid rejected id=%s", bid_id)
