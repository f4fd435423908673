"""Shared pytest fixtures for Streamer Discovery tests.

Fixture summary
---------------
engine           Async in-memory SQLite engine with every table created
                 and foreign keys enforced.
session_factory  async_sessionmaker bound to ``engine``.
writer           StreamerWriter over ``session_factory``.
settings         Settings with test credentials for every platform.
twitch_poller    LiveStatusPoller with a stub fetcher (routes tests).
chzzk_poller     Same, for Chzzk.
client           httpx.AsyncClient against the FastAPI app with the DB,
                 settings and pollers overridden.

No fixture touches the network or a live database server.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before any application module is imported so that Settings() does not
# raise a ValidationError during collection.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "DATABASE_URL": "sqlite+aiosqlite://",
    "YOUTUBE_API_KEY": "test-youtube-key",
    "TWITCH_CLIENT_ID": "test-twitch-id",
    "TWITCH_CLIENT_SECRET": "test-twitch-secret",
    "CHZZK_CLIENT_ID": "test-chzzk-id",
    "CHZZK_CLIENT_SECRET": "test-chzzk-secret",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

from streamer_discovery.api.dependencies import (  # noqa: E402
    get_app_settings,
    get_chzzk_poller,
    get_twitch_poller,
)
from streamer_discovery.api.main import app  # noqa: E402
from streamer_discovery.config.settings import Settings, get_settings  # noqa: E402
from streamer_discovery.core.database import build_session_factory, get_db  # noqa: E402
from streamer_discovery.core.live_status import LiveStatusPoller, MemoryTTLCache  # noqa: E402
from streamer_discovery.core.models import Base  # noqa: E402
from streamer_discovery.core.writer import StreamerWriter  # noqa: E402

get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Yield a fresh in-memory database per test.

    ``StaticPool`` keeps a single connection so every session sees the same
    in-memory database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
def writer(session_factory: async_sessionmaker[AsyncSession]) -> StreamerWriter:
    return StreamerWriter(session_factory)


# ---------------------------------------------------------------------------
# Settings and pollers
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        youtube_api_key="test-youtube-key",
        twitch_client_id="test-twitch-id",
        twitch_client_secret="test-twitch-secret",
        chzzk_client_id="test-chzzk-id",
        chzzk_client_secret="test-chzzk-secret",
        cron_secret="cron-secret",
        youtube_search_delay_seconds=0,
    )


@pytest.fixture
def twitch_fetch() -> AsyncMock:
    return AsyncMock(return_value={})


@pytest.fixture
def chzzk_fetch() -> AsyncMock:
    return AsyncMock(return_value={})


@pytest.fixture
def twitch_poller(twitch_fetch: AsyncMock) -> LiveStatusPoller:
    return LiveStatusPoller("twitch", twitch_fetch, MemoryTTLCache(300))


@pytest.fixture
def chzzk_poller(chzzk_fetch: AsyncMock) -> LiveStatusPoller:
    return LiveStatusPoller("chzzk", chzzk_fetch, MemoryTTLCache(300))


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    twitch_poller: LiveStatusPoller,
    chzzk_poller: LiveStatusPoller,
) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx.AsyncClient against the FastAPI app.

    ``get_db`` yields sessions from the in-memory database; settings and
    both pollers are replaced by the fixtures above.
    """

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_twitch_poller] = lambda: twitch_poller
    app.dependency_overrides[get_chzzk_poller] = lambda: chzzk_poller

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
