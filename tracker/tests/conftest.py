"""
Centralized Test Configuration.
"""

import random

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from tracker.app.main import app
from tracker.app.db.session import get_db, Base
from tracker.app.models.parcel import Parcel  # noqa: F401
from tracker.app.models.parcel_enums import ParcelStatus
from tracker.app.schemas.parcel import ParcelCreate, utc_timestamp
from tracker.app.services.parcel_service import ParcelService
from tracker.app.services.parcel_store import ParcelStore

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Seeded per test session so generated client IDs can be reproduced
@pytest.fixture(scope="session")
def rng():
    return random.Random(20240501)


@pytest.fixture
async def engine():
    """In-memory database with the parcel table, fresh for every test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield test_engine
    
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return ParcelStore(db_session)


@pytest.fixture
def service(store):
    return ParcelService(store)


@pytest.fixture
def make_parcel():
    """Factory for an unsaved registered parcel."""
    def _make(client: int = 1000, address: str = "test", status: str = ParcelStatus.REGISTERED.value):
        return ParcelCreate(
            client=client,
            status=status,
            address=address,
            created_at=utc_timestamp(),
        )
    return _make


@pytest.fixture
async def client(session_factory):
    """Async client for testing, one session per request."""
    async def override_get_db():
        async with session_factory() as session:
            yield session
    
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}
