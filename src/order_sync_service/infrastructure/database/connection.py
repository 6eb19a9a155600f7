"""Database connection management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import orjson
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from order_sync_service.config import Settings, get_settings


def _json_serializer(value) -> str:
    return orjson.dumps(value).decode()


def get_async_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create async database engine with connection pooling."""
    settings = settings or get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        pool_recycle=settings.db_pool_recycle,
        json_serializer=_json_serializer,
        json_deserializer=orjson.loads,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def engine_scope(settings: Settings | None = None) -> AsyncGenerator[AsyncEngine, None]:
    """Create an engine for the duration of the block and dispose it afterwards.

    Used by the worker and scripts, which run each job on a fresh event loop.
    """
    engine = get_async_engine(settings)
    try:
        yield engine
    finally:
        await engine.dispose()
