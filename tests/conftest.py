"""Shared fixtures: a fresh in-memory database per test and an ASGI client."""
import os

import pytest
from httpx import ASGITransport, AsyncClient

# Keep tests away from any local .env database
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.core.database import init_db, close_db  # noqa: E402
from app.main import app  # noqa: E402

TEST_DB_URL = "sqlite://:memory:"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db(anyio_backend):
    await init_db(TEST_DB_URL)
    yield
    await close_db()


@pytest.fixture
async def client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
