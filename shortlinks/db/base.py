"""Database engine and session factory.

One async engine is created per process from ``settings.SQLALCHEMY_DATABASE_URI``.
Pool sizing depends on the environment; the testing environment and
SQLite URLs get no connection pool of their own.
"""

from typing import Any, AsyncGenerator, Dict
import logging
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from shortlinks.core.config import EnvironmentType, settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` in the current environment."""
    if settings.ENVIRONMENT == EnvironmentType.TESTING or make_url(url).get_backend_name() == "sqlite":
        return {"echo": settings.DB_ECHO, "poolclass": NullPool}

    return {
        "echo": settings.DB_ECHO and settings.ENVIRONMENT != EnvironmentType.PRODUCTION,
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_POOL_MAX_OVERFLOW,
        "pool_timeout": settings.POSTGRES_POOL_TIMEOUT,
        "pool_recycle": settings.POSTGRES_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """Create the async engine for the configured database."""
    url = settings.SQLALCHEMY_DATABASE_URI
    logger.info(f"Creating database engine for environment: {settings.ENVIRONMENT.value}")
    return create_async_engine(url, **engine_options(url))


engine = get_engine()

# Objects stay readable after commit; the actions return them to callers
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session and always close it, returning its connection to the pool."""
    session = async_session_factory()
    try:
        yield session
    finally:
        await session.close()


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create the links table and its indexes when they are missing."""
    # Registers the link table on the metadata
    import shortlinks.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables verified")
