"""Per-platform table descriptors.

The three platforms store streamers, categories and mappings in
isomorphic tables that differ only in names and a few columns.  A
:class:`PlatformTables` bundles the models for one platform together with
the functions that turn neutral records into column values, so the writer
and the catalog routes can stay platform-agnostic.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from streamer_discovery.core.models import (
    ChzzkGameCategory,
    ChzzkStreamer,
    ChzzkStreamerCategory,
    TwitchGameCategory,
    TwitchStreamer,
    TwitchStreamerCategory,
    YouTubeGameCategory,
    YouTubeStreamer,
    YouTubeStreamerCategory,
)
from streamer_discovery.core.records import CategoryRecord, Platform, StreamerRecord


@dataclass(frozen=True)
class PlatformTables:
    """Models and column mapping for one platform.

    Attributes:
        platform: The platform described.
        streamer: Streamer ORM model.
        streamer_key: Natural-key column name on the streamer table.
        category: Game category ORM model.
        category_key: Natural-key column name on the category table.
        mapping: Streamer ↔ category join model.
        streamer_values: Builds the streamer column dict from a record.
        streamer_sort: Column name catalog listings sort by (descending).
    """

    platform: Platform
    streamer: type
    streamer_key: str
    category: type
    category_key: str
    mapping: type
    streamer_values: Callable[[StreamerRecord], dict[str, Any]]
    streamer_sort: str

    def category_values(self, record: CategoryRecord) -> dict[str, Any]:
        values: dict[str, Any] = {
            "name": record.name,
            "display_name": record.display_name,
            "box_art_url": record.box_art_url,
            "sort_order": 0,
        }
        values[self.category_key] = record.natural_key
        return values

    @property
    def table_names(self) -> tuple[str, str, str]:
        """(mapping, streamer, category) table names in deletion order."""
        return (
            self.mapping.__tablename__,
            self.streamer.__tablename__,
            self.category.__tablename__,
        )


def _youtube_values(record: StreamerRecord) -> dict[str, Any]:
    return {
        "youtube_channel_id": record.platform_id,
        "name": record.name,
        "description": record.description,
        "profile_image_url": record.profile_image_url,
        "channel_url": record.channel_url,
        "subscribers": record.popularity,
        "latest_uploaded_at": record.last_active_at,
    }


def _live_values(key: str) -> Callable[[StreamerRecord], dict[str, Any]]:
    def build(record: StreamerRecord) -> dict[str, Any]:
        return {
            key: record.platform_id,
            "login_name": record.name,
            "display_name": record.display_name,
            "description": record.description,
            "profile_image_url": record.profile_image_url,
            "channel_url": record.channel_url,
            "viewer_count": record.popularity,
            "started_at": record.last_active_at,
        }

    return build


PLATFORM_TABLES: dict[Platform, PlatformTables] = {
    Platform.YOUTUBE: PlatformTables(
        platform=Platform.YOUTUBE,
        streamer=YouTubeStreamer,
        streamer_key="youtube_channel_id",
        category=YouTubeGameCategory,
        category_key="name",
        mapping=YouTubeStreamerCategory,
        streamer_values=_youtube_values,
        streamer_sort="subscribers",
    ),
    Platform.TWITCH: PlatformTables(
        platform=Platform.TWITCH,
        streamer=TwitchStreamer,
        streamer_key="twitch_id",
        category=TwitchGameCategory,
        category_key="twitch_game_id",
        mapping=TwitchStreamerCategory,
        streamer_values=_live_values("twitch_id"),
        streamer_sort="viewer_count",
    ),
    Platform.CHZZK: PlatformTables(
        platform=Platform.CHZZK,
        streamer=ChzzkStreamer,
        streamer_key="chzzk_id",
        category=ChzzkGameCategory,
        category_key="chzzk_game_id",
        mapping=ChzzkStreamerCategory,
        streamer_values=_live_values("chzzk_id"),
        streamer_sort="viewer_count",
    ),
}
"""Descriptor per platform, keyed by :class:`Platform`."""


def tables_for(platform: Platform | str) -> PlatformTables:
    """Return the descriptor for *platform* (enum or its string value)."""
    return PLATFORM_TABLES[Platform(platform)]
