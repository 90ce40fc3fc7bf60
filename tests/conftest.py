"""
Test configuration and fixtures for the Waitlist Referral API.

Every test gets its own SQLite database file, so nothing leaks between tests.
"""

import os
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_waitlist.db")

from app.main import create_app  # noqa: E402
from app.platform.config import Settings  # noqa: E402
from app.platform.db.session import Database  # noqa: E402


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'waitlist.db'}",
        AUTO_CREATE_TABLES=True,
    )


@pytest.fixture
def test_app(test_settings):
    """Create FastAPI test application."""
    return create_app(test_settings)


@pytest.fixture
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Entering the client runs the app lifespan, which creates the tables.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    db = Database.from_settings(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session
