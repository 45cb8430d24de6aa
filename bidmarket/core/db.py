from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bidmarket.core.settings import Settings
from bidmarket.domain.models import Base


def make_engine(settings: Settings) -> AsyncEngine:
    if not settings.DB_URL:
        # Fail fast with a clear message instead of throwing from SQLAlchemy
        raise RuntimeError("DB_URL is not configured. Set it in environment or .env before starting the app.")

    engine_kwargs = {"echo": settings.DB_ECHO, "future": True}

    # SQLite benefits from a single shared connection and longer busy timeout to avoid "database is locked".
    if settings.DB_URL.startswith("sqlite"):
        engine_kwargs.update(
            {
                "connect_args": {"timeout": 30, "check_same_thread": False},
                "poolclass": StaticPool,
            }
        )

    engine = create_async_engine(settings.DB_URL, **engine_kwargs)

    if settings.DB_URL.startswith("sqlite"):
        # SQLite ignores FOREIGN KEY clauses unless enabled per connection
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request, from the sessionmaker the app owns."""
    async with request.app.state.sessionmaker() as s:
        yield s
