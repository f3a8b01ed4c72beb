from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from config import Settings

# Create declarative base for models
Base = declarative_base()


def create_engine_from_settings(settings: Settings, null_pool: bool = False) -> AsyncEngine:
    """
    Build the async engine for the document store.

    SQLite (aiosqlite) is the default; any async SQLAlchemy URL can be supplied
    via DATABASE_URL.
    """
    database_url = settings.database_url

    # Validate production database configuration
    if settings.is_production and "sqlite" in database_url.lower():
        raise RuntimeError("SQLite is forbidden in production. Use a server-backed DATABASE_URL.")

    kwargs = {"echo": False, "future": True}
    if null_pool:
        kwargs["poolclass"] = NullPool
    return create_async_engine(database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize the database by creating all tables.
    This should be called on application startup.
    """
    async with engine.begin() as conn:
        # Import models here to ensure they're registered with Base
        from database_models import Document  # noqa: F401
        # Create all tables
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: Optional[AsyncEngine]) -> None:
    """Drop all tables (used by the test suite)."""
    if engine is None:
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
