"""
Quotely Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine factory, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   `create_app()` builds one engine and one session factory from `Settings`
       and stores them on `app.state`. `get_db_session` hands each request its
       own session that commits on success and rolls back on error.

Transaction Model:
    One request = one session = one transaction. Services only `flush()`;
    the commit happens here after the route handler returns. Tag creation,
    quote writes and association rewrites of a request therefore persist
    together or not at all.

Connection Pooling Strategy:
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600 for
    server databases. In-memory SQLite (tests) uses a StaticPool so every
    session sees the same database.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from quotely.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object that Alembic reads for migrations.
    """
    pass


# ── Engine & Session Factories ────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    SQLite URLs skip the pool sizing options (SQLite pools reject them);
    an in-memory SQLite database is pinned to a single shared connection.
    """
    url = make_url(settings.database_url)
    echo = settings.log_level == "DEBUG"

    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            return create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models are built from attributes after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's session factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back (no partial quote/tag/association state)
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception is re-raised for the global error handlers.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_all(engine: AsyncEngine) -> None:
    """Create any missing tables. Development convenience; production uses Alembic."""
    # Registers every model on Base.metadata before create_all runs
    from quotely.models import quote, tag, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """Gracefully closes all pooled connections on shutdown."""
    await engine.dispose()
