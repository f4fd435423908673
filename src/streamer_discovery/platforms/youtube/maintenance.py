"""Maintenance jobs for stored YouTube streamers.

- :func:`update_youtube_streamers` refreshes profile data of stored
  channels, least recently refreshed first.
- :func:`check_inactive_streamers` flips ``is_active`` by upload recency.
- :func:`link_youtube_categories` re-links stored channels to categories by
  name/description keyword matching.

None of these jobs re-check language or game category; they only look at
channel facts that change over time.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

from streamer_discovery.config.game_keywords import GAME_DETECTION_KEYWORDS
from streamer_discovery.core.records import Platform
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms.summary import DiscoverySummary
from streamer_discovery.platforms.youtube.config import INACTIVE_AFTER_DAYS
from streamer_discovery.platforms.youtube.filters import CandidateFilter

logger = structlog.get_logger(__name__)

DEFAULT_UPDATE_LIMIT = 50
_CALL_DELAY_SECONDS = 0.5


class InactivityMode(str, enum.Enum):
    BOTH = "both"
    INACTIVE_ONLY = "inactive-only"
    REACTIVE_ONLY = "reactive-only"


async def update_youtube_streamers(
    writer: StreamerWriter,
    candidate_filter: CandidateFilter,
    *,
    limit: int = DEFAULT_UPDATE_LIMIT,
    categories: list[str] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    delay_seconds: float = _CALL_DELAY_SECONDS,
) -> DiscoverySummary:
    """Refresh description, avatar, subscribers and latest upload.

    Channels that no longer pass the subscriber / activity checks are
    counted as failures and left untouched.

    Args:
        writer: Persistence layer.
        candidate_filter: Fetches and checks channel details.
        limit: Maximum channels refreshed in this run.
        categories: Only refresh channels mapped to these category names.
        sleep: Pause between channels; injectable for tests.
        delay_seconds: Length of that pause.
    """
    summary = DiscoverySummary(platform=Platform.YOUTUBE.value)
    streamers = await writer.youtube_streamers_for_refresh(limit, categories)
    logger.info("youtube_update_started", count=len(streamers), categories=categories)

    for index, streamer in enumerate(streamers):
        if index and delay_seconds > 0:
            await sleep(delay_seconds)
        summary.discovered += 1
        result = await candidate_filter.channel_details(streamer.youtube_channel_id)
        if not result.accepted or result.details is None:
            summary.failures += 1
            logger.info(
                "youtube_update_skipped", channel=streamer.name, reason=result.message
            )
            continue

        details = result.details
        ok = await writer.update_youtube_streamer(
            streamer.id,
            {
                "description": details.description,
                "profile_image_url": details.profile_image_url,
                "subscribers": details.subscribers,
                "latest_uploaded_at": details.latest_upload_at,
            },
            label=streamer.name,
        )
        if ok:
            summary.updated_streamers += 1
            logger.info(
                "youtube_streamer_refreshed",
                channel=streamer.name,
                subscribers=details.subscribers,
            )
        else:
            summary.failures += 1

    summary.log("youtube_update_finished")
    return summary


async def check_inactive_streamers(
    writer: StreamerWriter,
    candidate_filter: CandidateFilter,
    *,
    mode: InactivityMode = InactivityMode.BOTH,
    now: datetime | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    delay_seconds: float = _CALL_DELAY_SECONDS,
) -> dict[str, int]:
    """Deactivate silent channels and reactivate recovered ones.

    A channel goes inactive once its stored latest upload is more than
    seven days old.  An inactive channel comes back when its live details
    pass the activity check again (newest upload within 30 days); its
    subscribers and latest upload are refreshed at the same time.

    Returns:
        ``{"deactivated": n, "reactivated": m, "checked": k}``.

    Raises:
        StorageError: If the bulk deactivation fails.
    """
    now = now or datetime.now(timezone.utc)
    counts = {"deactivated": 0, "reactivated": 0, "checked": 0}

    if mode is not InactivityMode.REACTIVE_ONLY:
        cutoff = now - timedelta(days=INACTIVE_AFTER_DAYS)
        deactivated = await writer.deactivate_stale_youtube_streamers(cutoff)
        counts["deactivated"] = len(deactivated)
        for name, uploaded_at in deactivated:
            logger.info("youtube_streamer_deactivated", channel=name, latest_upload=str(uploaded_at))

    if mode is not InactivityMode.INACTIVE_ONLY:
        inactive = await writer.all_youtube_streamers(active=False)
        for index, streamer in enumerate(inactive):
            if index and delay_seconds > 0:
                await sleep(delay_seconds)
            counts["checked"] += 1
            result = await candidate_filter.channel_details(streamer.youtube_channel_id)
            if not result.accepted or result.details is None:
                logger.debug(
                    "youtube_streamer_still_inactive",
                    channel=streamer.name,
                    reason=result.message,
                )
                continue
            ok = await writer.update_youtube_streamer(
                streamer.id,
                {
                    "is_active": True,
                    "latest_uploaded_at": result.details.latest_upload_at,
                    "subscribers": result.details.subscribers,
                },
                label=streamer.name,
            )
            if ok:
                counts["reactivated"] += 1
                logger.info("youtube_streamer_reactivated", channel=streamer.name)

    logger.info("inactivity_check_finished", mode=mode.value, **counts)
    return counts


def match_categories(
    text: str, category_names: list[str]
) -> list[str]:
    """Return the category names whose detection keywords occur in *text*.

    Matching is case-insensitive substring search; a category without an
    entry in :data:`GAME_DETECTION_KEYWORDS` matches on its own name.
    """
    haystack = text.lower()
    matched = []
    for name in category_names:
        needles = GAME_DETECTION_KEYWORDS.get(name) or [name.lower()]
        if any(needle in haystack for needle in needles):
            matched.append(name)
    return matched


async def link_youtube_categories(writer: StreamerWriter) -> DiscoverySummary:
    """Link every stored channel to the categories its name or description mention."""
    summary = DiscoverySummary(platform=Platform.YOUTUBE.value)
    categories = {c.name: c.id for c in await writer.list_categories(Platform.YOUTUBE)}
    if not categories:
        logger.warning("youtube_relink_no_categories")
        return summary

    for streamer in await writer.all_youtube_streamers():
        summary.discovered += 1
        names = match_categories(
            f"{streamer.name} {streamer.description or ''}", list(categories)
        )
        if not names:
            summary.skipped += 1
            logger.debug("youtube_relink_no_match", channel=streamer.name)
            continue
        for name in names:
            summary.count_link(
                await writer.link_streamer_to_category(
                    Platform.YOUTUBE,
                    streamer.id,
                    categories[name],
                    label=f"{streamer.name} -> {name}",
                )
            )

    summary.log("youtube_relink_finished")
    return summary
