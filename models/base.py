"""
SQLAlchemy engine and session factories.

Two kinds of engine exist because:
- FastAPI is async → needs the aiosqlite driver + async sessions (module-level below)
- The dispatcher runs synchronously → worker/main.py builds a plain sqlite engine
  with create_sync_engine() for whatever --db path the run was given

Both point at a sqlite file. Engines are lazy: nothing touches the disk
until the first connection is opened.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Base class for all ORM models. SQLAlchemy uses this to track table metadata."""
    pass


def create_sync_engine(url: str) -> Engine:
    """
    Build a sync engine for the recorder.

    File databases are switched to WAL so the API can read while a run
    is still writing attempt rows.
    """
    engine = create_engine(url, echo=False)
    if url.startswith("sqlite") and ":memory:" not in url:
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()
    return engine


# ── Async engine (for FastAPI) ──────────────────────────────────
async_engine = create_async_engine(settings.database_url, echo=False)
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)
