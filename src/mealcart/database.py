"""Database configuration and session management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from mealcart.config import get_settings

settings = get_settings()
_SQL_ECHO = settings.is_development and settings.log_level.upper() == "DEBUG"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


# Async engine for FastAPI endpoints
async_engine = create_async_engine(settings.database_url, echo=_SQL_ECHO)
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def worker_session() -> AsyncIterator[AsyncSession]:
    """
    Session for one Celery task.

    Each task runs its own event loop, so the task gets its own unpooled
    engine, disposed of when the session closes.
    """
    engine = create_async_engine(settings.database_url, echo=_SQL_ECHO, poolclass=NullPool)
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield session
    finally:
        await engine.dispose()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for FastAPI endpoints."""
    async with AsyncSessionLocal() as session:
        yield session
