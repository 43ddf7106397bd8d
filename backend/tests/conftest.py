"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own outer transaction that rolls back after the test.
- Code under test that commits only releases a savepoint inside it.
- Set TEST_DATABASE_URL to run against PostgreSQL; the default is an
  in-memory SQLite database.
"""

import os
import uuid
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from marketplace.auth.jwt import create_token_pair
from marketplace.auth.passwords import hash_password
from marketplace.database import Base, get_db
from marketplace.main import app
from marketplace.models.provider import Provider

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Nights the default test property is open for: 2030-06-01 .. 2030-06-10
OPEN_NIGHTS = [f"2030-06-{day:02d}" for day in range(1, 11)]


def _make_engine():
    if not _test_db_url.startswith("sqlite"):
        return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)

    engine = create_async_engine(
        _test_db_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# ---------------------------------------------------------------------------
# Per-test: fresh schema and transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine with all tables, dropped again after the test."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: authenticated providers
# ---------------------------------------------------------------------------


async def make_provider(db_session: AsyncSession, name: str = "Test Host", is_active: bool = True) -> Provider:
    """Create a password-based provider directly in the DB."""
    unique = uuid.uuid4().hex[:8]
    provider = Provider(
        email=f"host-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        auth_provider="local",
        is_active=is_active,
    )
    db_session.add(provider)
    await db_session.flush()
    await db_session.refresh(provider)
    return provider


@pytest_asyncio.fixture
async def test_provider(db_session: AsyncSession) -> Provider:
    """Create and return the provider that owns the test property."""
    return await make_provider(db_session)


@pytest_asyncio.fixture
async def auth_headers(test_provider: Provider) -> dict[str, str]:
    """Return Authorization headers for the test provider."""
    tokens = create_token_pair(str(test_provider.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def other_provider(db_session: AsyncSession) -> Provider:
    """A second provider who owns nothing the tests create by default."""
    return await make_provider(db_session, name="Other Host")


@pytest_asyncio.fixture
async def other_auth_headers(other_provider: Provider) -> dict[str, str]:
    tokens = create_token_pair(str(other_provider.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Convenience fixtures: property with open inventory
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, auth_headers: dict) -> dict:
    """Create a property via the API, open for every night in OPEN_NIGHTS."""
    response = await client.post(
        "/api/v1/properties",
        json={
            "title": "Test Cottage",
            "description": "A cottage for automated tests.",
            "price_per_night": "100.00",
            "images": ["front.jpg"],
            "inventory": [{"date": night, "available": True} for night in OPEN_NIGHTS],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()
