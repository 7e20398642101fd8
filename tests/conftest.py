"""
Shared test fixtures.

These replace real infrastructure with lightweight in-memory alternatives:
- sqlite file → SQLite in memory (sync for the recorder, aiosqlite for the API)
- real time → SimulatedClock (sleep_ms advances a counter, nothing blocks)
- random draws → ScriptedProcessModel (outcomes chosen by the test)
- HTTP server → httpx.AsyncClient with ASGI transport (no network)

This means tests:
- Run without touching disk
- Run in milliseconds (no real backoff or service delays)
- Are fully deterministic
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import sessionmaker

from api.dependencies import get_db
from api.main import create_app
from jobs.process_model import RandomProcessModel
from models.base import Base
from worker.clock import SimulatedClock
from worker.observers import RunObserver

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class ScriptedProcessModel(RandomProcessModel):
    """
    Process model whose draws are dictated by the test.

    - priorities: consumed one per seeded job (default 5 once exhausted)
    - failures:   consumed one per attempt (default success once exhausted)
    - service_ms: constant service duration
    """

    def __init__(self, priorities=(), failures=(), service_ms=50):
        super().__init__(mean_ms=service_ms, stddev_ms=1)
        self._priorities = list(priorities)
        self._failures = list(failures)
        self._service_ms = service_ms
        self.fail_checks: list[int] = []   # attempt number passed to each should_fail()

    def service_duration(self) -> int:
        return self._service_ms

    def priority(self) -> int:
        return self._priorities.pop(0) if self._priorities else 5

    def should_fail(self, attempt: int) -> bool:
        self.fail_checks.append(attempt)
        return self._failures.pop(0) if self._failures else False


class CollectingObserver(RunObserver):
    """Keeps every event it receives, in order."""

    def __init__(self):
        self.started: list[tuple[str, int]] = []
        self.attempts = []
        self.summaries = []

    def run_started(self, run_id, started_at):
        self.started.append((run_id, started_at))

    def attempt_completed(self, event):
        self.attempts.append(event)

    def run_finished(self, summary):
        self.summaries.append(summary)


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def collector():
    return CollectingObserver()


@pytest.fixture
def scripted_model():
    """Factory: scripted_model(priorities=[...], failures=[...], service_ms=50)."""
    return ScriptedProcessModel


@pytest.fixture
def sync_session_factory():
    """In-memory sqlite with the runs / job_attempts tables created."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield sessionmaker(engine)
    engine.dispose()


@pytest_asyncio.fixture
async def async_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """Create a database session bound to the test engine."""
    factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(async_session):
    """
    Test HTTP client that talks directly to the FastAPI app.

    dependency_overrides swaps the real get_db for the in-memory session,
    and ASGITransport sends requests to the app in-process.
    """
    app = create_app()

    async def override_get_db():
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
