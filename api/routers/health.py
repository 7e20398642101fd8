"""
Health check endpoint.

Checks that the run database is reachable. Load balancers and container
orchestrators use this to decide if the service is ready for traffic.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> dict:
    """Run a trivial query against the run database."""
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "database": "ok"}
