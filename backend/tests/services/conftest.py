"""Service test fixtures — async DB, seeded users and the FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for ledger
      rules (row locks are a no-op there; FOR UPDATE is exercised on PostgreSQL only)
    - StaticPool: every session shares the single in-memory connection
    - Seed fixtures go through the services, never raw inserts, so rows
      obey the same rules the API enforces
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

import goodjob.models  # noqa: F401
from goodjob.db.base import Base
from goodjob.infrastructure.database import get_db, DatabaseSessionManager
from goodjob.infrastructure.security import hash_password
from goodjob.services.auth_service import issue_token
from goodjob.services.user_directory import UserDirectory
import goodjob.infrastructure.database as db_module
from goodjob.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
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
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

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


# ─── Seeded users ───────────────────────────────────────────────

@pytest.fixture
async def users(test_session_factory):
    """Three members (alice, bob, carol) and one admin, keyed by name."""
    async with test_session_factory() as session:
        directory = UserDirectory(session)
        seeded = {
            "admin": await directory.create("admin", hash_password("admin123"), is_admin=True),
        }
        for name in ("alice", "bob", "carol"):
            seeded[name] = await directory.create(name, hash_password(f"{name}-pw"))
    return seeded


@pytest.fixture
def auth_headers(users):
    """Bearer headers per seeded user name."""
    return {
        name: {"Authorization": f"Bearer {issue_token(user)}"}
        for name, user in users.items()
    }
