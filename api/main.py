"""
FastAPI application factory for the run history API.

This file:
1. Creates the FastAPI app
2. Creates the runs / job_attempts tables on startup (no-op if they exist)
3. Registers the routers (runs, health)
4. Disposes the DB engine on shutdown

The dispatcher (worker/main.py) writes to the same sqlite file; this app
only reads it.

To run:
    dispatcher-api                        # binds settings.API_HOST:API_PORT
    uvicorn api.main:app --reload         # development
"""

import logging
from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI

from config.settings import settings
from models.base import async_engine, Base
from api.routers import health, runs

# Imported for their side effect: registering tables on Base.metadata
import models.job_attempt  # noqa: F401
import models.run  # noqa: F401

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ─────────────────────────────────────────────────
    logger.info("Creating database tables...")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"API ready — reading runs from {settings.DB_PATH}")

    yield

    # ── Shutdown ────────────────────────────────────────────────
    await async_engine.dispose()
    logger.info("API shut down")


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    app = FastAPI(
        title="Job Dispatcher",
        description="Run history for the priority job dispatcher simulation",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(runs.router)

    return app


# This is what uvicorn imports: `uvicorn api.main:app`
app = create_app()


def serve() -> None:
    """Console-script entry point: serve the API on API_HOST:API_PORT."""
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=logging.getLevelName(settings.log_level).lower(),
    )
