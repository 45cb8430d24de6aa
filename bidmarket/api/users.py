from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bidmarket.api._serialize import user_out
from bidmarket.core.db import get_session
from bidmarket import services

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(db: AsyncSession = Depends(get_session)):
    users = await services.list_users(db)
    return [user_out(u) for u in users]
