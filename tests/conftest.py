"""Test fixtures for the short links application."""

import os
import tempfile

# Settings are read at import time, so the test environment goes in first
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", TEST_SQLALCHEMY_DATABASE_URL)
os.environ.setdefault("DB_CREATE_TABLES", "false")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "shortlinks-test-logs"))

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shortlinks.db.session import get_db
from shortlinks.main import app as main_app
# Import models to ensure they're registered with SQLModel metadata
from shortlinks.models.link import Link  # noqa: F401
from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.actions import LinkActions
from shortlinks.services.links import LinkService


def enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite emit BEGIN itself so SAVEPOINT works under the ORM."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def link_repository() -> LinkRepository:
    return LinkRepository()


@pytest.fixture
def link_service(link_repository) -> LinkService:
    return LinkService(link_repository=link_repository, owner_scoped_writes=True)


@pytest.fixture
def legacy_link_service(link_repository) -> LinkService:
    """Service that writes first and compares the owner afterwards."""
    return LinkService(link_repository=link_repository, owner_scoped_writes=False)


@pytest.fixture
def link_actions(link_service) -> LinkActions:
    return LinkActions(link_service=link_service)


@pytest.fixture
def override_get_db(test_db):
    """Override the get_db dependency for testing."""
    async def _override_get_db():
        yield test_db

    return _override_get_db


@pytest_asyncio.fixture
async def client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application with the test session injected."""
    main_app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    main_app.dependency_overrides.clear()
