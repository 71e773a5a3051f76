"""Pytest configuration and fixtures."""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from qrinsights.core.cache import ResultCache
from qrinsights.core.db import Base, get_db
from qrinsights.main import create_app

# Import all models so create_all sees every table
from qrinsights.models.batch import Batch  # noqa: F401
from qrinsights.models.brand import Brand  # noqa: F401
from qrinsights.models.qr_code import QRCode  # noqa: F401
from qrinsights.models.state import State  # noqa: F401

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


class QueryCounter:
    """Counts statements sent to the store."""

    def __init__(self):
        self.count = 0
        self.statements: list[str] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        self.count += 1
        self.statements.append(statement)

    def reset(self) -> None:
        self.count = 0
        self.statements.clear()


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def db_engine():
    """Fresh schema per test."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create fresh DB session for each test."""
    async_session_maker = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def query_counter(db_engine):
    """Attach a statement counter to the test engine."""
    counter = QueryCounter()
    event.listen(db_engine.sync_engine, "before_cursor_execute", counter)
    yield counter
    event.remove(db_engine.sync_engine, "before_cursor_execute", counter)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def result_cache(clock) -> ResultCache:
    return ResultCache(ttl_seconds=60, max_entries=100, clock=clock)


@pytest.fixture
def app(result_cache, db_session):
    """App wired to the test session and an injectable-clock cache."""
    app = create_app(result_cache=result_cache)

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest_asyncio.fixture
async def client(app):
    """Create async test client with overridden DB dependency."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
