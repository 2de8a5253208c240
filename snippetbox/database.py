"""
Snippetbox — Database Engine & Session Management
===================================================

What:  Async SQLAlchemy engine factory, session factory, declarative base and
       the per-request session dependency.
How:   `create_engine()` builds a pooled async engine from Settings;
       `create_app()` keeps the engine and its session factory on `app.state`;
       `get_db_session()` hands each request its own AsyncSession, committing
       on success and rolling back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and by
       the application lifespan (ping on startup, dispose on shutdown).

Connection Pooling:
    pool_size / max_overflow come from Settings. SQLite URLs (used by the test
    suite) keep SQLAlchemy's default pool for that dialect.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snippetbox.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, Alembic autogenerate and
    the test suite's `create_all`.
    """
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine (and its connection pool) for the configured URL.

    Creating the engine does not connect; call `ping()` to verify the database
    is reachable.
    """
    options = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps loaded attributes readable after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def ping(engine: AsyncEngine) -> None:
    """Run `SELECT 1`; raises the driver's error if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/")
        async def home(request: Request, db: AsyncSession = Depends(get_db_session)):
            ...
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
