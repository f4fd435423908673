"""Platform-independent maintenance jobs."""

from __future__ import annotations

import uuid

import structlog

from streamer_discovery.config.game_keywords import (
    GAME_TYPE_TO_KEYWORD,
    KEYWORD_TYPE_GAME_TITLE,
)
from streamer_discovery.core.records import Platform
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms.summary import DiscoverySummary

logger = structlog.get_logger(__name__)


async def truncate_tables(writer: StreamerWriter, platform: Platform | str) -> dict[str, int]:
    """Empty the mapping, streamer and category tables of one platform.

    Raises:
        StorageError: If the delete fails; the tables are left unchanged.
    """
    return await writer.truncate_platform(Platform(platform))


async def link_streamers_to_keywords(writer: StreamerWriter) -> DiscoverySummary:
    """Tag every legacy streamer with the keyword of its ``game_type``.

    Streamers whose ``game_type`` is missing or unknown are skipped.
    Keywords are created on first use with ``type = "game_title"``.
    """
    summary = DiscoverySummary(platform="legacy")
    keyword_ids: dict[str, uuid.UUID] = {}

    for streamer in await writer.legacy_streamers():
        summary.discovered += 1
        keyword_name = GAME_TYPE_TO_KEYWORD.get(streamer.game_type or "")
        if keyword_name is None:
            summary.skipped += 1
            logger.warning(
                "keyword_unmapped", streamer=streamer.name, game_type=streamer.game_type
            )
            continue

        keyword_id = keyword_ids.get(keyword_name)
        if keyword_id is None:
            keyword_id = await writer.get_or_create_keyword(
                keyword_name, KEYWORD_TYPE_GAME_TITLE
            )
            if keyword_id is None:
                summary.failures += 1
                continue
            keyword_ids[keyword_name] = keyword_id

        summary.count_link(
            await writer.link_streamer_to_keyword(
                streamer.id, keyword_id, label=f"{streamer.name} -> {keyword_name}"
            )
        )

    summary.log("keyword_linking_finished")
    return summary
