"""Job entry points shared by the CLI, the Celery tasks and the cron routes.

Each job builds its clients from :class:`Settings`, binds a run ID to the
logging context, runs one orchestrator or maintenance routine, and closes
every client it opened.  A session factory can be injected; by default the
process-wide one from :mod:`streamer_discovery.core.database` is used.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from streamer_discovery.config.settings import Settings, get_settings
from streamer_discovery.core.database import get_session_factory
from streamer_discovery.core.logging_config import bind_run_context
from streamer_discovery.core.records import Platform
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms import maintenance
from streamer_discovery.platforms.chzzk.client import ChzzkClient
from streamer_discovery.platforms.chzzk.discovery import (
    ChzzkDiscovery,
    ChzzkDiscoveryOptions,
)
from streamer_discovery.platforms.summary import DiscoverySummary
from streamer_discovery.platforms.twitch.client import TwitchClient
from streamer_discovery.platforms.twitch.discovery import (
    TwitchDiscovery,
    TwitchDiscoveryOptions,
)
from streamer_discovery.platforms.youtube import maintenance as youtube_maintenance
from streamer_discovery.platforms.youtube.client import YouTubeClient
from streamer_discovery.platforms.youtube.discovery import (
    YouTubeDiscovery,
    YouTubeDiscoveryOptions,
)
from streamer_discovery.platforms.youtube.filters import CandidateFilter


SessionFactory = async_sessionmaker[AsyncSession]


def _writer(session_factory: SessionFactory | None) -> StreamerWriter:
    return StreamerWriter(session_factory or get_session_factory())


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


async def discover_youtube(
    options: YouTubeDiscoveryOptions | None = None,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> DiscoverySummary:
    settings = settings or get_settings()
    options = options or YouTubeDiscoveryOptions(
        search_delay_seconds=settings.youtube_search_delay_seconds
    )
    bind_run_context("discover", Platform.YOUTUBE.value)
    async with YouTubeClient.from_settings(settings) as client:
        return await YouTubeDiscovery(client, _writer(session_factory)).run(options)


async def discover_twitch(
    options: TwitchDiscoveryOptions | None = None,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> DiscoverySummary:
    settings = settings or get_settings()
    bind_run_context("discover", Platform.TWITCH.value)
    async with TwitchClient.from_settings(settings) as client:
        return await TwitchDiscovery(client, _writer(session_factory)).run(options)


async def discover_chzzk(
    options: ChzzkDiscoveryOptions | None = None,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> DiscoverySummary:
    settings = settings or get_settings()
    bind_run_context("discover", Platform.CHZZK.value)
    async with ChzzkClient.from_settings(settings) as client:
        return await ChzzkDiscovery(client, _writer(session_factory)).run(options)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


async def update_youtube(
    limit: int = youtube_maintenance.DEFAULT_UPDATE_LIMIT,
    categories: list[str] | None = None,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> DiscoverySummary:
    settings = settings or get_settings()
    bind_run_context("update", Platform.YOUTUBE.value)
    async with YouTubeClient.from_settings(settings) as client:
        return await youtube_maintenance.update_youtube_streamers(
            _writer(session_factory),
            CandidateFilter(client),
            limit=limit,
            categories=categories,
            delay_seconds=settings.youtube_search_delay_seconds,
        )


async def check_inactive(
    mode: youtube_maintenance.InactivityMode = youtube_maintenance.InactivityMode.BOTH,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> dict[str, int]:
    settings = settings or get_settings()
    bind_run_context("check-inactive", Platform.YOUTUBE.value)
    async with YouTubeClient.from_settings(settings) as client:
        return await youtube_maintenance.check_inactive_streamers(
            _writer(session_factory),
            CandidateFilter(client),
            mode=mode,
            delay_seconds=settings.youtube_search_delay_seconds,
        )


async def link_youtube_categories(
    *, session_factory: SessionFactory | None = None
) -> DiscoverySummary:
    bind_run_context("link-categories", Platform.YOUTUBE.value)
    return await youtube_maintenance.link_youtube_categories(_writer(session_factory))


async def link_keywords(*, session_factory: SessionFactory | None = None) -> DiscoverySummary:
    bind_run_context("link-keywords")
    return await maintenance.link_streamers_to_keywords(_writer(session_factory))


async def truncate(
    platform: Platform | str, *, session_factory: SessionFactory | None = None
) -> dict[str, int]:
    bind_run_context("truncate", Platform(platform).value)
    return await maintenance.truncate_tables(_writer(session_factory), platform)


# ---------------------------------------------------------------------------
# Cron compositions
# ---------------------------------------------------------------------------


async def twitch_collect(
    *, settings: Settings | None = None, session_factory: SessionFactory | None = None
) -> dict[str, Any]:
    """Empty the Twitch tables, then run Twitch discovery with defaults."""
    settings = settings or get_settings()
    bind_run_context("twitch-collect", Platform.TWITCH.value)
    writer = _writer(session_factory)
    async with TwitchClient.from_settings(settings) as client:
        deleted = await maintenance.truncate_tables(writer, Platform.TWITCH)
        summary = await TwitchDiscovery(client, writer).run()
    return {"deleted": deleted, **summary.as_dict()}


async def collect_streamers(
    *, settings: Settings | None = None, session_factory: SessionFactory | None = None
) -> dict[str, Any]:
    """Run YouTube discovery with the legacy mirror, then link keywords."""
    settings = settings or get_settings()
    summary = await discover_youtube(
        YouTubeDiscoveryOptions(
            mirror_legacy=True,
            search_delay_seconds=settings.youtube_search_delay_seconds,
        ),
        settings=settings,
        session_factory=session_factory,
    )
    keywords = await link_keywords(session_factory=session_factory)
    return {
        **summary.as_dict(),
        "keyword_links_created": keywords.mappings_created,
    }
