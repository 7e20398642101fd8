"""
FastAPI dependency injection.

An endpoint declares `db: AsyncSession = Depends(get_db)`; FastAPI opens
the session before the endpoint runs and closes it afterwards. Tests
replace get_db through app.dependency_overrides.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from models.base import AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yields an async database session, auto-closes when the request ends."""
    async with AsyncSessionLocal() as session:
        yield session
