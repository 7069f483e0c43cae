"""Shared API dependencies — single import point for all routers.

Re-exports the per-request database session and builds repositories bound
to it, so router modules can import everything they need from one place::

    from app.api.deps import get_villa_repository
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repository.villa import VillaRepository
from app.repository.villa_number import VillaNumberRepository


async def get_villa_repository(db: AsyncSession = Depends(get_db)) -> VillaRepository:
    return VillaRepository(db)


async def get_villa_number_repository(db: AsyncSession = Depends(get_db)) -> VillaNumberRepository:
    return VillaNumberRepository(db)


__all__ = [
    "get_db",
    "get_villa_repository",
    "get_villa_number_repository",
]
