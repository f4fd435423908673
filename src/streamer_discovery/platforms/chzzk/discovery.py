"""Chzzk streamer discovery.

Walks the live-channel list (most viewers first) up to a limit, stores
every broadcaster and maps it to the category it is streaming in.  A page
that fails mid-walk ends pagination; channels gathered so far are still
stored.
"""

from __future__ import annotations

import re
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

import structlog

from streamer_discovery.core.exceptions import PlatformFetchError
from streamer_discovery.core.records import CategoryRecord, Platform, StreamerRecord
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms.base import parse_timestamp
from streamer_discovery.platforms.chzzk.client import ChzzkClient
from streamer_discovery.platforms.chzzk.config import CHZZK_CHANNEL_URL, DEFAULT_LIVE_LIMIT
from streamer_discovery.platforms.summary import DiscoverySummary, SeenIds

logger = structlog.get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ChzzkDiscoveryOptions:
    """Per-run switches for :class:`ChzzkDiscovery`."""

    limit: int = DEFAULT_LIVE_LIMIT
    skip_mapping: bool = False
    seed_seen: bool = False


def live_to_record(live: dict[str, Any]) -> StreamerRecord:
    """Build the record for one entry of the live-channel list."""
    channel = live.get("channel") or {}
    channel_id = channel.get("channelId") or live.get("channelId")
    name = channel.get("channelName") or live.get("channelName") or ""
    return StreamerRecord(
        platform=Platform.CHZZK,
        platform_id=channel_id,
        name=name,
        display_name=name,
        channel_url=CHZZK_CHANNEL_URL.format(channel_id=channel_id),
        profile_image_url=channel.get("channelImageUrl") or "",
        popularity=int(live.get("concurrentUserCount") or 0),
        last_active_at=parse_timestamp(_to_iso(live.get("openDate"))),
    )


def live_to_category(live: dict[str, Any]) -> CategoryRecord | None:
    """Derive the category of a live, or ``None`` when it has none.

    The category name is the lower-cased ``liveCategory`` with whitespace
    removed; the display name is ``liveCategoryValue``.
    """
    category_id = live.get("liveCategory")
    if not category_id:
        return None
    return CategoryRecord(
        platform=Platform.CHZZK,
        name=_WHITESPACE.sub("", category_id).lower(),
        display_name=live.get("liveCategoryValue") or category_id,
        platform_id=category_id,
    )


def _to_iso(value: str | None) -> str | None:
    # Chzzk sends "2024-05-01 21:03:11" in KST
    if value and "T" not in value and " " in value:
        return value.replace(" ", "T") + "+09:00"
    return value


class ChzzkDiscovery:
    """Live-list discovery for Chzzk.

    Args:
        client: Chzzk service API client.
        writer: Persistence for streamers, categories and links.
    """

    def __init__(self, client: ChzzkClient, writer: StreamerWriter) -> None:
        self._client = client
        self._writer = writer

    async def _collect(self, limit: int, summary: DiscoverySummary) -> list[dict[str, Any]]:
        lives: list[dict[str, Any]] = []
        try:
            async with aclosing(self._client.iter_live_pages()) as pages:
                async for page in pages:
                    summary.searches += 1
                    lives.extend(page)
                    if len(lives) >= limit:
                        break
        except PlatformFetchError as exc:
            summary.failures += 1
            logger.warning(
                "chzzk_pagination_stopped", collected=len(lives), error=str(exc)
            )
        return lives[:limit]

    async def run(self, options: ChzzkDiscoveryOptions | None = None) -> DiscoverySummary:
        """Store up to ``options.limit`` live broadcasters.

        Raises:
            PlatformAuthError: If the API rejects the client credentials.
        """
        options = options or ChzzkDiscoveryOptions()
        summary = DiscoverySummary(platform=Platform.CHZZK.value)
        seen = await SeenIds.load(self._writer, Platform.CHZZK, seed=options.seed_seen)
        lives = await self._collect(options.limit, summary)
        logger.info("chzzk_discovery_started", lives=len(lives), skip_mapping=options.skip_mapping)

        for live in lives:
            summary.discovered += 1
            channel = live.get("channel") or {}
            if not (channel.get("channelId") or live.get("channelId")):
                summary.skipped += 1
                continue

            record = live_to_record(live)
            streamer_id = await self._writer.upsert_streamer(record)
            if streamer_id is None:
                summary.failures += 1
                continue
            if record.platform_id in seen:
                summary.updated_streamers += 1
            else:
                summary.new_streamers += 1
                seen.add(record.platform_id)
            logger.info(
                "chzzk_streamer_saved",
                streamer=record.display_name,
                category=live.get("liveCategoryValue"),
                viewers=record.popularity,
            )

            if options.skip_mapping:
                continue
            category = live_to_category(live)
            if category is None:
                continue
            category_id = await self._writer.get_or_create_category(category)
            if category_id is None:
                summary.failures += 1
                continue
            summary.count_link(
                await self._writer.link_streamer_to_category(
                    Platform.CHZZK,
                    streamer_id,
                    category_id,
                    label=f"{record.display_name} -> {category.display_name}",
                )
            )

        summary.log()
        return summary
