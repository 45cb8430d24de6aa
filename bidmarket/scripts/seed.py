"""Seed users, collections and pending bids for local use."""

import asyncio
import datetime as dt
import logging
import random
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.core.db import create_schema, make_engine, make_sessionmaker
from bidmarket.core.settings import settings
from bidmarket.domain.models import Bid, BidStatus, Collection, User

logger = logging.getLogger("seed")


async def seed(
    session: AsyncSession,
    users: int = 10,
    collections: int = 100,
    bids_per_collection: int = 10,
    rng: Optional[random.Random] = None,
) -> dict:
    rng = rng or random.Random()
    now = dt.datetime.now(dt.timezone.utc)

    people = [User(name=f"User {i + 1}", email=f"user{i + 1}@example.com") for i in range(users)]
    session.add_all(people)
    await session.flush()

    listings = []
    for i in range(collections):
        owner = people[i % len(people)]
        listings.append(
            Collection(
                name=f"Collection {i + 1}",
                description=f"Description for collection {i + 1}",
                stocks=rng.randint(1, 100),
                price=round(rng.uniform(10, 1010), 2),
                owner_id=owner.id,
            )
        )
    session.add_all(listings)
    await session.flush()

    created_bids = 0
    for collection in listings:
        bidders = [u for u in people if u.id != collection.owner_id]
        if not bidders:
            continue
        for j in range(bids_per_collection):
            bidder = bidders[j % len(bidders)]
            session.add(
                Bid(
                    collection_id=collection.id,
                    user_id=bidder.id,
                    price=round(collection.price * (0.8 + rng.random() * 0.4), 2),
                    status=BidStatus.PENDING.value,
                    created_at=now - dt.timedelta(seconds=rng.random() * 30 * 24 * 3600),
                )
            )
            created_bids += 1

    await session.commit()
    return {"users": len(people), "collections": len(listings), "bids": created_bids}


async def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    engine = make_engine(settings)
    try:
        await create_schema(engine)
        async with make_sessionmaker(engine)() as s:
            counts = await seed(s)
    finally:
        await engine.dispose()
    logger.info("Database seeded: %s", counts)


if __name__ == "__main__":
    asyncio.run(main())
