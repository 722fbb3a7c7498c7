import os
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def normalize_database_url(database_url: str) -> str:
    """Rewrite plain ``postgresql://`` URLs to the asyncpg driver."""

    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def _engine_options(database_url: str) -> dict[str, Any]:
    if not database_url.startswith("sqlite+aiosqlite://"):
        return {"echo": False, "pool_pre_ping": True}
    # An in-memory database only lives as long as its single connection.
    if ":memory:" in database_url:
        return {"echo": False, "poolclass": StaticPool}
    return {"echo": False, "poolclass": NullPool}


def get_engine() -> AsyncEngine:
    """Return the lazily created async engine for ``DATABASE_URL``.

    Nothing connects at import time, so tests can point the store at SQLite
    before the first request. ``RuntimeError`` is raised when the variable is
    missing.
    """

    global engine, AsyncSessionLocal

    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL environment variable is required")

        database_url = normalize_database_url(database_url)
        engine = create_async_engine(database_url, **_engine_options(database_url))
        AsyncSessionLocal = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    return engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""

    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_session() -> AsyncSession:
    """Provide a database session for FastAPI dependencies."""

    if AsyncSessionLocal is None:
        get_engine()

    assert AsyncSessionLocal is not None  # for type checkers
    async with AsyncSessionLocal() as session:
        yield session
