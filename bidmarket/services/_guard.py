import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.core.errors import MarketplaceError, StorageError


@asynccontextmanager
async def storage_guard(session: AsyncSession, message: str, logger: logging.Logger):
    """
    Roll back on any failure inside the block.
    Domain errors pass through; database errors are logged and
    re-raised as StorageError carrying the fixed `message`.
    """
    try:
        yield
    except MarketplaceError:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception(message)
        raise StorageError(message) from exc
