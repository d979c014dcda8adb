"""
Student Registry Backend: Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── sample_student_fields: A valid create/replace body
    ├── test_settings: Settings pointing at a SQLite file in tmp_path
    ├── app: Application with its lifespan entered (schema created)
    └── test_client: HTTPX AsyncClient bound to `app` through ASGITransport
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

# Set before the application modules build their settings singleton
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test-students.sqlite")

from student_registry.config import Settings  # noqa: E402
from student_registry.main import create_app  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_student(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
            result = await student_service.get_student(mock_db_session, "1")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_student_fields():
    """A body as the decoder hands it to the service: every value is text."""
    return {
        "firstname": "Ana",
        "lastname": "Lopez",
        "gender": "female",
        "age": "23",
    }


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'students.sqlite'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings) -> AsyncGenerator[FastAPI, None]:
    """
    Application bound to a fresh temporary store.

    ASGITransport does not send lifespan events, so the lifespan is entered
    here: the store is opened before the test and closed after it.
    """
    application = create_app(test_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
