"""
Shared fixtures: a throwaway SQLite database and the app wired to it.
"""

import os
import tempfile

# Must be set before ``config.settings`` is imported anywhere.
_TMP_DIR = tempfile.mkdtemp(prefix="bioscoop-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_DIR}/default.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_DEMO_ACCOUNT", "false")
os.environ.setdefault("CLIENT_STATE_FILE", f"{_TMP_DIR}/session.json")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from client.api import AuthApiClient
from database.models import Base, User
from database.session import get_db_session


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def count_users(session_factory):
    async def _count() -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count()).select_from(User))

    return _count


@pytest.fixture
def app(session_factory):
    from main import create_app

    application = create_app()

    async def _override():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = _override
    return application


@pytest_asyncio.fixture
async def http_client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def api_client(app):
    """Client-side transport talking to the in-process app."""
    return AuthApiClient("http://test/auth", transport=httpx.ASGITransport(app=app))
