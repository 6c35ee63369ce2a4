"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Env vars set before any catalog module reads settings
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden and app.state.broker replaced for route tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store
      and route tests (no PostgreSQL-specific features used)
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOGIN_PASSWORD", "test-password")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

import catalog.infrastructure.database as db_module  # noqa: E402
import catalog.models  # noqa: E402,F401
from catalog.db.base import Base  # noqa: E402
from catalog.infrastructure.database import (  # noqa: E402
    DatabaseSessionManager, get_db,
)
from catalog.infrastructure.notification_broker import NotificationBroker  # noqa: E402
from catalog.main import app  # noqa: E402

TEST_PASSWORD = os.environ["LOGIN_PASSWORD"]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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
def broker():
    b = NotificationBroker()
    yield b
    b.shutdown()


@pytest.fixture
async def client(test_engine, test_session_factory, broker):
    """FastAPI test client with DB dependency and broker overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.broker = broker

    # Patch db_manager for the readiness probe
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def auth_headers(client):
    """Register a user, log in, and return bearer headers."""
    res = await client.post(
        "/api/v1/users",
        json={"username": "librarian", "favorite_genre": "fantasy"},
    )
    assert res.status_code == 201
    res = await client.post(
        "/api/v1/login",
        json={"username": "librarian", "password": TEST_PASSWORD},
    )
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['value']}"}
