"""Shared test fixtures."""

import os

# Settings() is built at import time and JWT_SECRET has no default
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RESOLUTION_SCHEDULER_ENABLED", "false")

from collections.abc import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.dg_common.database import get_db_session  # noqa: E402
from src.dg_gateway.middleware.rate_limit import sync_rate_limit  # noqa: E402
from src.main import app  # noqa: E402


@pytest.fixture
def fake_db() -> AsyncMock:
    """Stand-in AsyncSession; services under test are mocked, so it is never queried."""
    return AsyncMock()


@pytest.fixture
async def client(fake_db: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints without DB or Redis."""

    async def _db() -> AsyncGenerator[AsyncMock, None]:
        yield fake_db

    async def _no_limit() -> None:
        return None

    app.dependency_overrides[get_db_session] = _db
    app.dependency_overrides[sync_rate_limit] = _no_limit
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
