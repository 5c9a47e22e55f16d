"""
YourTales Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Endpoint tests run the real FastAPI app over httpx's ASGITransport
       against a throwaway SQLite database; service unit tests use AsyncMock
       sessions and never touch a database.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── db:              empty schema, recreated for every test
    ├── test_client:     httpx.AsyncClient bound to the app (depends on db)
    └── auth helpers:    register_user / verified_user / auth_headers
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════
# Must run before anything imports yourtales.config: the settings singleton
# and the engine are built at import time.
_TEST_DIR = tempfile.mkdtemp(prefix="yourtales_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-only-0123456789"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["SMTP_HOST"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Callable, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402

import yourtales.models  # noqa: E402,F401
from yourtales.database import Base, async_session_factory, engine  # noqa: E402
from yourtales.models.user import User  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock AsyncSession for service unit tests.

    Usage:
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = row
        mock_db_session.execute.return_value = mock_result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    # `async with db.begin_nested():` needs an async context manager
    nested = MagicMock()
    nested.__aenter__ = AsyncMock(return_value=None)
    nested.__aexit__ = AsyncMock(return_value=False)
    session.begin_nested = MagicMock(return_value=nested)
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database & HTTP fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db():
    """Fresh, empty schema for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from yourtales.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def fetch_user(email: str) -> User:
    """Read a user row directly, e.g. to learn the OTP that was emailed."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one()


@pytest.fixture
def register_user(test_client) -> Callable:
    async def _register(
        email: str = "writer@example.com",
        password: str = "s3cret-pass",
        full_name: str = "Wendy Writer",
        **extra: Any,
    ) -> Dict[str, Any]:
        response = await test_client.post(
            "/api/users/register",
            json={"fullName": full_name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def verified_user(test_client, register_user) -> Callable:
    """Register, verify with the stored OTP, log in. Returns the login body."""

    async def _create(
        email: str = "writer@example.com",
        password: str = "s3cret-pass",
        full_name: str = "Wendy Writer",
        **extra: Any,
    ) -> Dict[str, Any]:
        await register_user(email=email, password=password, full_name=full_name, **extra)
        user = await fetch_user(email)
        verify = await test_client.post(
            "/api/users/verify-otp", json={"email": email, "otp": user.otp_code}
        )
        assert verify.status_code == 200, verify.text
        login = await test_client.post(
            "/api/users/login", json={"email": email, "password": password}
        )
        assert login.status_code == 200, login.text
        return login.json()

    return _create


def auth_headers(login_body: Dict[str, Any]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {login_body['token']}"}
