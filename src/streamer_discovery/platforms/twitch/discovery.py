"""Twitch streamer discovery.

Two strategies feed the same store step:

- ``top-games``: the N most-watched games right now, then up to 50 live
  streams per game in the requested language.  Every streamer is mapped to
  the game it was found under.
- ``live-streams``: the most-watched live streams in the language across
  all games.  Every streamer is mapped to the game of its own stream.

Stream records only carry the broadcaster ID, so users are resolved in
batches of 100 before anything is written.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from streamer_discovery.core.exceptions import PlatformFetchError
from streamer_discovery.core.records import CategoryRecord, Platform, StreamerRecord
from streamer_discovery.core.writer import StreamerWriter
from streamer_discovery.platforms.base import parse_timestamp
from streamer_discovery.platforms.summary import DiscoverySummary, SeenIds
from streamer_discovery.platforms.twitch.client import TwitchClient
from streamer_discovery.platforms.twitch.config import (
    DEFAULT_LANGUAGE,
    DEFAULT_TOP_GAMES,
    MAX_PAGE_SIZE,
    STREAMS_PER_GAME,
    TWITCH_CHANNEL_URL,
)

logger = structlog.get_logger(__name__)


class TwitchStrategy(str, enum.Enum):
    TOP_GAMES = "top-games"
    LIVE_STREAMS = "live-streams"


@dataclass
class TwitchDiscoveryOptions:
    """Per-run switches for :class:`TwitchDiscovery`.

    Attributes:
        strategy: Which sweep to run.
        top: Number of top games swept by ``top-games``.
        limit: Live streams fetched by ``live-streams``.
        language: Broadcast language filter.
        skip_mapping: Store streamers without writing category links.
        seed_seen: Count already stored streamers as updated, not new.
    """

    strategy: TwitchStrategy = TwitchStrategy.TOP_GAMES
    top: int = DEFAULT_TOP_GAMES
    limit: int = MAX_PAGE_SIZE
    language: str = DEFAULT_LANGUAGE
    skip_mapping: bool = False
    seed_seen: bool = True


def stream_to_record(user: dict[str, Any], stream: dict[str, Any] | None) -> StreamerRecord:
    """Build the record for a Helix user, enriched with its live stream."""
    stream = stream or {}
    login = user.get("login") or ""
    return StreamerRecord(
        platform=Platform.TWITCH,
        platform_id=user["id"],
        name=login,
        display_name=user.get("display_name") or login,
        channel_url=TWITCH_CHANNEL_URL.format(login=login),
        description=user.get("description") or "",
        profile_image_url=user.get("profile_image_url") or "",
        popularity=int(stream.get("viewer_count") or 0),
        last_active_at=parse_timestamp(stream.get("started_at")),
    )


class TwitchDiscovery:
    """Live-stream based discovery for Twitch.

    Args:
        client: Twitch Helix client.
        writer: Persistence for streamers, categories and links.
    """

    def __init__(self, client: TwitchClient, writer: StreamerWriter) -> None:
        self._client = client
        self._writer = writer

    async def run(self, options: TwitchDiscoveryOptions | None = None) -> DiscoverySummary:
        """Run one sweep with the configured strategy.

        Raises:
            PlatformAuthError: If the token request or a Helix call is
                rejected; the run stops.
        """
        options = options or TwitchDiscoveryOptions()
        summary = DiscoverySummary(platform=Platform.TWITCH.value)
        seen = await SeenIds.load(self._writer, Platform.TWITCH, seed=options.seed_seen)
        logger.info(
            "twitch_discovery_started",
            strategy=options.strategy.value,
            language=options.language,
            skip_mapping=options.skip_mapping,
        )

        if options.strategy is TwitchStrategy.TOP_GAMES:
            await self._top_games(options, seen, summary)
        else:
            await self._live_streams(options, seen, summary)

        summary.log()
        return summary

    async def _top_games(
        self, options: TwitchDiscoveryOptions, seen: SeenIds, summary: DiscoverySummary
    ) -> None:
        try:
            games = await self._client.get_top_games(options.top)
        except PlatformFetchError as exc:
            summary.failures += 1
            logger.error("twitch_top_games_failed", error=str(exc))
            return

        for game in games:
            game_name = game.get("name") or game.get("id", "")
            category_id = await self._writer.get_or_create_category(
                CategoryRecord(
                    platform=Platform.TWITCH,
                    name=game_name,
                    display_name=game_name,
                    platform_id=game["id"],
                    box_art_url=game.get("box_art_url"),
                )
            )
            if category_id is None:
                summary.failures += 1
                logger.warning("twitch_game_skipped", game=game_name)
                continue

            summary.searches += 1
            try:
                streams = await self._client.get_streams(
                    game_id=game["id"], language=options.language, limit=STREAMS_PER_GAME
                )
            except PlatformFetchError as exc:
                summary.failures += 1
                logger.warning("twitch_streams_failed", game=game_name, error=str(exc))
                continue
            if not streams:
                logger.info("twitch_game_empty", game=game_name, language=options.language)
                continue

            await self._store_streams(
                streams, lambda _stream, cid=category_id: cid, options, seen, summary
            )

    async def _live_streams(
        self, options: TwitchDiscoveryOptions, seen: SeenIds, summary: DiscoverySummary
    ) -> None:
        summary.searches += 1
        try:
            streams = await self._client.get_streams(
                language=options.language, limit=options.limit
            )
        except PlatformFetchError as exc:
            summary.failures += 1
            logger.error("twitch_streams_failed", error=str(exc))
            return

        categories: dict[str, uuid.UUID | None] = {}
        if not options.skip_mapping:
            for stream in streams:
                game_id = stream.get("game_id")
                if not game_id or game_id in categories:
                    continue
                game_name = stream.get("game_name") or game_id
                categories[game_id] = await self._writer.get_or_create_category(
                    CategoryRecord(
                        platform=Platform.TWITCH,
                        name=game_name,
                        display_name=game_name,
                        platform_id=game_id,
                    )
                )

        await self._store_streams(
            streams,
            lambda stream: categories.get(stream.get("game_id") or ""),
            options,
            seen,
            summary,
        )

    async def _store_streams(
        self,
        streams: list[dict[str, Any]],
        category_for: Callable[[dict[str, Any]], uuid.UUID | None],
        options: TwitchDiscoveryOptions,
        seen: SeenIds,
        summary: DiscoverySummary,
    ) -> None:
        summary.discovered += len(streams)
        user_ids = list(dict.fromkeys(s["user_id"] for s in streams if s.get("user_id")))
        try:
            users = {u["id"]: u for u in await self._client.get_users_by_ids(user_ids)}
        except PlatformFetchError as exc:
            summary.failures += 1
            logger.warning("twitch_users_failed", count=len(user_ids), error=str(exc))
            return

        for stream in streams:
            user = users.get(stream.get("user_id") or "")
            if user is None:
                summary.skipped += 1
                logger.info("twitch_user_missing", streamer=stream.get("user_name"))
                continue

            record = stream_to_record(user, stream)
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
                "twitch_streamer_saved",
                streamer=record.display_name,
                game=stream.get("game_name"),
                viewers=record.popularity,
            )

            if options.skip_mapping:
                continue
            category_id = category_for(stream)
            if category_id is None:
                continue
            summary.count_link(
                await self._writer.link_streamer_to_category(
                    Platform.TWITCH,
                    streamer_id,
                    category_id,
                    label=f"{record.display_name} -> {stream.get('game_name')}",
                )
            )
