import httpx
import pytest_asyncio
from sqlalchemy import select

from bidmarket.core.db import create_schema
from bidmarket.core.settings import load_settings
from bidmarket.domain.models import Bid, Collection, User
from bidmarket.main import create_app


@pytest_asyncio.fixture
async def app():
    # in-memory SQLite; StaticPool keeps one connection so data survives between sessions
    application = create_app(load_settings(DB_URL="sqlite+aiosqlite://", RUN_DDL_ON_START=False))
    await create_schema(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def session(app):
    async with app.state.sessionmaker() as s:
        yield s


class Store:
    """Direct database access for arranging and checking state."""

    def __init__(self, app):
        self.sessionmaker = app.state.sessionmaker

    async def add(self, obj):
        async with self.sessionmaker() as s:
            s.add(obj)
            await s.commit()
            return obj

    async def user(self, name: str, email: str = None) -> User:
        return await self.add(User(name=name, email=email or f"{name.lower().replace(' ', '')}@example.com"))

    async def collection(self, owner: User, name: str = "Collection", stocks: int = 5, price: float = 100.0) -> Collection:
        return await self.add(
            Collection(name=name, description=f"{name} description", stocks=stocks, price=price, owner_id=owner.id)
        )

    async def bid(self, collection: Collection, user: User, price: float, status: str = "pending") -> Bid:
        return await self.add(Bid(collection_id=collection.id, user_id=user.id, price=price, status=status))

    async def get_bid(self, bid_id: int):
        async with self.sessionmaker() as s:
            return await s.get(Bid, bid_id)

    async def get_collection(self, collection_id: int):
        async with self.sessionmaker() as s:
            return await s.get(Collection, collection_id)

    async def bids_for(self, collection_id: int):
        async with self.sessionmaker() as s:
            res = await s.execute(select(Bid).where(Bid.collection_id == collection_id).order_by(Bid.id))
            return list(res.scalars().all())


@pytest_asyncio.fixture
async def store(app):
    return Store(app)


@pytest_asyncio.fixture
async def market(store):
    """Two owners, one bidder, two collections with a few bids."""
    alice = await store.user("Alice")
    bob = await store.user("Bob")
    carol = await store.user("Carol")
    lamps = await store.collection(alice, name="Lamps", stocks=3, price=50.0)
    rugs = await store.collection(bob, name="Rugs", stocks=1, price=300.0)
    b1 = await store.bid(lamps, carol, 45.0)
    b2 = await store.bid(lamps, bob, 60.0)
    b3 = await store.bid(lamps, carol, 52.5, status="rejected")
    b4 = await store.bid(rugs, carol, 280.0)
    return {
        "users": {"alice": alice, "bob": bob, "carol": carol},
        "collections": {"lamps": lamps, "rugs": rugs},
        "bids": {"b1": b1, "b2": b2, "b3": b3, "b4": b4},
    }
