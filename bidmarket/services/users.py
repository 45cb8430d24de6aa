import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.domain.models import User
from bidmarket.services._guard import storage_guard

logger = logging.getLogger("users")


async def list_users(session: AsyncSession) -> List[User]:
    """All users, by name."""
    async with storage_guard(session, "Failed to fetch users", logger):
        res = await session.execute(select(User).order_by(User.name.asc(), User.id.asc()))
        return list(res.scalars().all())
