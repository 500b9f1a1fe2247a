import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

# Settings are read at import time; point them away from any real database first.
_TEST_DIR = Path(tempfile.mkdtemp(prefix="pos_reviews_test_"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DIR / 'app.db'}")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from pos_reviews.db.session import Base, get_db  # noqa: E402
from pos_reviews.main import app  # noqa: E402

# Fixtures in tests/seeds.py are only visible to pytest when registered here.
pytest_plugins = ["tests.seeds"]

# Throwaway SQLite file, recreated for every test
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DIR / 'test.db'}"

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
async_session = async_sessionmaker(engine, expire_on_commit=False)


@event.listens_for(engine.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Create tables and yield a session, then drop tables after test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client that uses the test database session."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def committing_client(db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client whose requests each run in their own committed or rolled-back transaction."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def session_factory(db: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Factory for sessions independent of the shared ``db`` session."""
    return async_session
