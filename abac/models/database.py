"""
Database connection and session management.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from abac.core.config import DatabaseSettings


def create_engine_from_settings(db_settings: DatabaseSettings) -> AsyncEngine:
    """Create an async engine; pool options only apply to pooled backends."""
    if db_settings.is_sqlite:
        return create_async_engine(db_settings.url, echo=db_settings.echo)

    return create_async_engine(
        db_settings.url,
        echo=db_settings.echo,
        pool_size=db_settings.pool_size,
        max_overflow=db_settings.pool_overflow,
        pool_timeout=db_settings.pool_timeout,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database (create tables)."""
    from .base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    """Drop all tables."""
    from .base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
