"""Service test fixtures — async session store DB, fake data service, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - Cache and data service client overridden per test (the ASGI test transport
      does not run the app lifespan)
    - The admin_users table holds one administrator: admin / admin123

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so every session
      sees the tables created by the fixture
    - bcrypt cost 4 for seeded hashes: keeps the suite fast
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from admin_gateway.api.dependencies import get_cache, get_data_service
from admin_gateway.core.cache_store import CacheStore
from admin_gateway.core.credentials import hash_password
from admin_gateway.core.errors import DatabaseError
from admin_gateway.db.base import Base
from admin_gateway.infrastructure.database import get_db
from admin_gateway.infrastructure.session_repository import SqlSessionRepository
from admin_gateway.main import app
from admin_gateway.models.admin_session import AdminSession  # noqa: F401

from tests.services.mock_data_service import FakeDataService

ADMIN_PASSWORD = "admin123"


class FakeCookies:
    """Plain-dict CookieStore."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.jar: dict[str, str] = dict(initial or {})
        self.max_ages: dict[str, int] = {}
        self.deleted: list[str] = []

    def get(self, name: str) -> str | None:
        return self.jar.get(name)

    def set(self, name: str, value: str, *, max_age: int) -> None:
        self.jar[name] = value
        self.max_ages[name] = max_age

    def delete(self, name: str) -> None:
        self.jar.pop(name, None)
        self.deleted.append(name)


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class BrokenRepository:
    """SessionRepository whose every call fails like a lost connection."""

    async def save(self, record):
        raise DatabaseError("disk full", "insert")

    async def get(self, token_digest):
        raise DatabaseError("connection lost", "select")

    async def delete(self, token_digest):
        raise DatabaseError("connection lost", "delete")

    async def delete_expired(self, now):
        raise DatabaseError("connection lost", "purge")


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def session_repo(test_db):
    return SqlSessionRepository(test_db)


@pytest.fixture
def cookies():
    return FakeCookies()


@pytest.fixture
def clock():
    return MutableClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def data_service():
    return FakeDataService({
        "admin_users": [{
            "id": "admin-1",
            "username": "admin",
            "email": "admin@example.com",
            "password_hash": hash_password(ADMIN_PASSWORD, 4),
            "role": "admin",
        }],
        "templates": [
            {"id": "t1", "name": "Sofa", "created_at": "2026-01-02"},
            {"id": "t2", "name": "Chair", "created_at": "2026-01-01"},
        ],
        "products": [{"id": "p1", "name": "Lamp"}],
        "homepage_sections": [{"id": "s1", "title": "New", "position": 1}],
    })


@pytest.fixture
def cache():
    return CacheStore()


@pytest.fixture
async def client(test_session_factory, data_service, cache):
    """FastAPI test client with DB, cache and data service overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    data_client = data_service.client()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_data_service] = lambda: data_client

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    await data_client.aclose()

