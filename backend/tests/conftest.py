"""
Quotely Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite +
       StaticPool) with the real schema, so constraints, joins and the tag
       upsert run for real. bcrypt runs at its minimum cost to keep tests fast.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings pointing at in-memory SQLite
    ├── db_engine → db_session: for service-level tests
    ├── user / other_user: persisted users owning test data
    ├── mock_db_session: AsyncMock session for failure injection
    └── app → test_client: HTTPX AsyncClient against a fresh app
"""

import os
from unittest.mock import AsyncMock, MagicMock

# Must be set before quotely.main builds its module-level app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from quotely.config import Settings
from quotely.database import build_engine, build_session_factory, create_all
from quotely.models.user import User

TEST_JWT_SECRET = "test-signing-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_JWT_SECRET,
        jwt_issuer="quotely-test",
        jwt_audience="quotely-test-clients",
        bcrypt_rounds=4,
        log_level="WARNING",
    )


# ══════════════════════════════════════════════════════════════════════════
# Service-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(test_settings):
    engine = build_engine(test_settings)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """
    A real AsyncSession on a fresh schema.

    Services only flush, so everything a test writes is visible to later
    queries in the same session without committing.
    """
    session_factory = build_session_factory(db_engine)
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _make_user(session, email: str) -> User:
    user = User(email=email, password_hash="not-a-real-hash")
    session.add(user)
    await session.flush()
    return user


@pytest_asyncio.fixture
async def user(db_session) -> User:
    return await _make_user(db_session, "reader@example.com")


@pytest_asyncio.fixture
async def other_user(db_session) -> User:
    return await _make_user(db_session, "someone.else@example.com")


@pytest.fixture
def mock_db_session():
    """
    Mock async database session for injecting failures.

    Usage:
        mock_db_session.flush.side_effect = IntegrityError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fresh application with its own database.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    from quotely.main import create_app

    application = create_app(test_settings)
    await create_all(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

