"""Shared test fixtures."""

from __future__ import annotations

import os

# Settings are read at import time by qgame.main; pin them before any qgame import.
os.environ["QG_STORAGE_BACKEND"] = "memory"
os.environ["QG_SIMULATION_ENABLED"] = "false"
os.environ["QG_LOG_FORMAT"] = "console"
os.environ.pop("QG_REDIS_URL", None)

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from qgame.auth.jwt import create_identity_token  # noqa: E402
from qgame.auth.storage import DatabaseAuthStorage, MemAuthStorage  # noqa: E402
from qgame.chains.seed import seed_chains  # noqa: E402
from qgame.config import get_settings  # noqa: E402
from qgame.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from qgame.db.base import Base  # noqa: E402
from qgame.main import create_app  # noqa: E402
from qgame.storage import DatabaseStorage, MemStorage  # noqa: E402

get_settings.cache_clear()

PLAYER_CLAIMS: dict[str, Any] = {
    "sub": "player-1",
    "email": "satoshi@example.com",
    "first_name": "Satoshi",
    "last_name": "Nakamoto",
}


def auth_header(claims: dict[str, Any] | None = None) -> dict[str, str]:
    """Authorization header carrying a freshly signed identity token."""
    token = create_identity_token(claims or PLAYER_CLAIMS)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mem_storage() -> MemStorage:
    return MemStorage(starting_tokens=1000.0)


@pytest_asyncio.fixture
async def sqlite_url(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Initialize the shared engine on a throwaway SQLite file with all tables created."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'qgame.db'}"
    await init_db(url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield url
    await close_db()


@pytest_asyncio.fixture
async def db_storage(sqlite_url: str) -> DatabaseStorage:
    return DatabaseStorage(get_session_factory(), starting_tokens=1000.0)


@pytest_asyncio.fixture
async def db_auth_storage(sqlite_url: str) -> DatabaseAuthStorage:
    return DatabaseAuthStorage(get_session_factory())


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[Any, None]:
    """Both storage backends, so one behaviour suite covers each."""
    if request.param == "memory":
        yield MemStorage(starting_tokens=1000.0)
        return

    url = f"sqlite+aiosqlite:///{tmp_path / 'qgame.db'}"
    await init_db(url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DatabaseStorage(get_session_factory(), starting_tokens=1000.0)
    await close_db()


@pytest_asyncio.fixture
async def app(mem_storage: MemStorage) -> FastAPI:
    """Application wired to seeded in-memory storage (no lifespan, no simulator)."""
    application = create_app()
    application.state.storage = mem_storage
    application.state.auth_storage = MemAuthStorage()
    await seed_chains(mem_storage)
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client authenticated as PLAYER_CLAIMS via a bearer token."""
    client.headers.update(auth_header())
    return client
