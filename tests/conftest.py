"""Shared test fixtures.

Store-backed tests run against a throwaway SQLite file through aiosqlite. The
driver's own transaction handling is switched off so SQLAlchemy can emit
BEGIN / SAVEPOINT itself.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from skillpath.config import get_settings
from skillpath.database import close_db, get_engine, get_session_factory, init_db
from skillpath.db import models  # noqa: F401
from skillpath.db.base import Base


def _enable_savepoints(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _record):  # noqa: ANN001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[str, None]:
    """Fresh SQLite database with the full schema; yields its URL."""
    tmpdir = tempfile.mkdtemp(prefix="skillpath_test_")
    url = f"sqlite+aiosqlite:///{os.path.join(tmpdir, 'test.db')}"
    os.environ["SKILLPATH_DATABASE_URL"] = url
    os.environ["SKILLPATH_LOG_FORMAT"] = "console"
    get_settings.cache_clear()

    await init_db(url)
    engine = get_engine()
    _enable_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield url

    await close_db()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def session_factory(database: str) -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test setup and assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app. Redis is not initialized, so rate limiting passes through."""
    from skillpath.main import create_app

    app = create_app()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
