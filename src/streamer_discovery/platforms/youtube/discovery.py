"""YouTube streamer discovery.

Sweeps every game category with keyword searches, filters the channels
found and stores the accepted ones::

    for category in youtube_game_categories (by sort_order):
        for keyword in keywords(category):
            search -> for each channel: filter -> upsert -> map

Runs are strictly sequential; a configurable pause follows every search
call to stay friendly with the API quota.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from streamer_discovery.config.game_keywords import GAME_KEYWORDS, default_keywords_for
from streamer_discovery.core.exceptions import PlatformFetchError
from streamer_discovery.core.records import CategoryRecord, Platform, StreamerRecord
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms.summary import DiscoverySummary, SeenIds
from streamer_discovery.platforms.youtube.client import YouTubeClient
from streamer_discovery.platforms.youtube.config import YOUTUBE_CHANNEL_URL
from streamer_discovery.platforms.youtube.filters import (
    CandidateFilter,
    ChannelDetails,
    RejectionReason,
)

logger = structlog.get_logger(__name__)


@dataclass
class YouTubeDiscoveryOptions:
    """Per-run switches for :class:`YouTubeDiscovery`.

    Attributes:
        games: Only sweep categories with these names.
        keywords: Only search with these phrases (intersected with each
            category's phrase list).
        skip_mapping: Store streamers without writing category links.
        mirror_legacy: Also write accepted channels to the legacy
            ``streamers`` table, tagged with the category as ``game_type``.
        seed_seen: Skip channels that are already stored.
        search_delay_seconds: Pause after every search call.
    """

    games: list[str] | None = None
    keywords: list[str] | None = None
    skip_mapping: bool = False
    mirror_legacy: bool = False
    seed_seen: bool = True
    search_delay_seconds: float = 0.5


@dataclass
class _SweepTarget:
    category_id: Any
    name: str
    keywords: list[str] = field(default_factory=list)


class YouTubeDiscovery:
    """Keyword-search discovery for Korean gaming channels on YouTube.

    Args:
        client: YouTube API client.
        writer: Persistence for streamers, categories and links.
        candidate_filter: Channel filter; built from *client* when omitted.
        sleep: Awaitable pause used between searches; injectable for tests.
    """

    def __init__(
        self,
        client: YouTubeClient,
        writer: StreamerWriter,
        candidate_filter: CandidateFilter | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._writer = writer
        self._filter = candidate_filter or CandidateFilter(client)
        self._sleep = sleep

    async def _load_targets(self, options: YouTubeDiscoveryOptions) -> list[_SweepTarget]:
        categories = await self._writer.list_categories(Platform.YOUTUBE)
        if not categories:
            logger.info("youtube_categories_seeded", count=len(GAME_KEYWORDS))
            for name in GAME_KEYWORDS:
                await self._writer.get_or_create_category(
                    CategoryRecord(platform=Platform.YOUTUBE, name=name, display_name=name)
                )
            categories = await self._writer.list_categories(Platform.YOUTUBE)

        targets: list[_SweepTarget] = []
        for category in categories:
            if options.games and category.name not in options.games:
                continue
            keywords = default_keywords_for(category.name, category.display_name)
            if options.keywords:
                keywords = [k for k in keywords if k in options.keywords]
            if not keywords:
                continue
            targets.append(_SweepTarget(category.id, category.name, keywords))
        return targets

    async def run(self, options: YouTubeDiscoveryOptions | None = None) -> DiscoverySummary:
        """Sweep every selected category and keyword once.

        Returns:
            The run's counters.

        Raises:
            PlatformAuthError: If the API key is rejected; the run stops.
        """
        options = options or YouTubeDiscoveryOptions()
        summary = DiscoverySummary(platform=Platform.YOUTUBE.value)
        seen = await SeenIds.load(self._writer, Platform.YOUTUBE, seed=options.seed_seen)
        targets = await self._load_targets(options)
        logger.info(
            "youtube_discovery_started",
            categories=[t.name for t in targets],
            keywords=sum(len(t.keywords) for t in targets),
            skip_mapping=options.skip_mapping,
        )

        for target in targets:
            for keyword in target.keywords:
                await self._sweep_keyword(target, keyword, seen, summary, options)

        summary.log()
        return summary

    async def _sweep_keyword(
        self,
        target: _SweepTarget,
        keyword: str,
        seen: SeenIds,
        summary: DiscoverySummary,
        options: YouTubeDiscoveryOptions,
    ) -> None:
        summary.searches += 1
        try:
            items = await self._client.search_channels(keyword)
        except PlatformFetchError as exc:
            summary.failures += 1
            logger.warning("youtube_search_failed", keyword=keyword, error=str(exc))
            items = []
        finally:
            if options.search_delay_seconds > 0:
                await self._sleep(options.search_delay_seconds)

        for item in items:
            summary.discovered += 1
            snippet = item.get("snippet") or {}
            channel_id = (item.get("id") or {}).get("channelId") or snippet.get("channelId")
            title = snippet.get("title") or snippet.get("channelTitle") or ""
            if not channel_id:
                summary.skipped += 1
                continue
            if channel_id in seen:
                summary.skipped += 1
                logger.debug("youtube_channel_seen", channel=title, keyword=keyword)
                continue

            result = await self._filter.evaluate(
                channel_id, title, snippet.get("description") or ""
            )
            if not result.accepted or result.details is None:
                if result.reason is RejectionReason.FETCH_FAILED:
                    summary.failures += 1
                    logger.warning(
                        "youtube_channel_fetch_failed", channel=title, error=result.message
                    )
                else:
                    summary.skipped += 1
                    seen.add(channel_id)
                    logger.info(
                        "youtube_channel_rejected",
                        channel=title,
                        keyword=keyword,
                        reason=result.message,
                    )
                continue

            await self._store(target, result.details, title, seen, summary, options)

    async def _store(
        self,
        target: _SweepTarget,
        details: ChannelDetails,
        title: str,
        seen: SeenIds,
        summary: DiscoverySummary,
        options: YouTubeDiscoveryOptions,
    ) -> None:
        name = details.title or title
        record = StreamerRecord(
            platform=Platform.YOUTUBE,
            platform_id=details.channel_id,
            name=name,
            display_name=name,
            channel_url=YOUTUBE_CHANNEL_URL.format(channel_id=details.channel_id),
            description=details.description,
            profile_image_url=details.profile_image_url,
            popularity=details.subscribers,
            last_active_at=details.latest_upload_at,
        )
        streamer_id = await self._writer.upsert_streamer(record)
        if streamer_id is None:
            summary.failures += 1
            return

        summary.new_streamers += 1
        seen.add(details.channel_id)
        logger.info(
            "youtube_streamer_saved",
            channel=name,
            category=target.name,
            subscribers=details.subscribers,
        )

        if options.mirror_legacy:
            if await self._writer.upsert_legacy_streamer(record, target.name) is None:
                summary.failures += 1

        if not options.skip_mapping:
            summary.count_link(
                await self._writer.link_streamer_to_category(
                    Platform.YOUTUBE,
                    streamer_id,
                    target.category_id,
                    label=f"{name} -> {target.name}",
                )
            )
