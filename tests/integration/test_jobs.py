"""Tests for the job entry points shared by the CLI, Celery and cron routes."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from streamer_discovery.core import jobs
from streamer_discovery.core.exceptions import MissingCredentialError
from streamer_discovery.core.records import Platform, StreamerRecord
from streamer_discovery.platforms.summary import DiscoverySummary


def _old_twitch_streamer() -> StreamerRecord:
    return StreamerRecord(
        platform=Platform.TWITCH,
        platform_id="old",
        name="old",
        display_name="Old",
        channel_url="https://twitch.tv/old",
    )


def _as_context_manager(client: MagicMock) -> MagicMock:
    client.__aenter__.return_value = client
    return client


def _fake_twitch() -> MagicMock:
    client = _as_context_manager(MagicMock())
    client.get_top_games = AsyncMock(return_value=[{"id": "21779", "name": "League of Legends"}])
    client.get_streams = AsyncMock(
        return_value=[{"user_id": "1", "game_id": "21779", "game_name": "League of Legends"}]
    )
    client.get_users_by_ids = AsyncMock(return_value=[{"id": "1", "login": "new"}])
    return client


@pytest.mark.asyncio
class TestTwitchCollect:
    async def test_truncates_then_discovers(self, writer, session_factory, settings) -> None:
        await writer.upsert_streamer(_old_twitch_streamer())

        with patch.object(jobs.TwitchClient, "from_settings", return_value=_fake_twitch()):
            result = await jobs.twitch_collect(settings=settings, session_factory=session_factory)

        assert result["deleted"]["twitch_streamers"] == 1
        assert result["new_streamers"] == 1
        assert result["mappings_created"] == 1
        assert await writer.existing_streamer_ids(Platform.TWITCH) == {"1"}

    async def test_missing_credentials_leave_tables_alone(
        self, writer, session_factory, settings
    ) -> None:
        await writer.upsert_streamer(_old_twitch_streamer())
        no_secret = settings.model_copy(update={"twitch_client_secret": None})

        with pytest.raises(MissingCredentialError):
            await jobs.twitch_collect(settings=no_secret, session_factory=session_factory)

        assert await writer.existing_streamer_ids(Platform.TWITCH) == {"old"}


@pytest.mark.asyncio
class TestCollectStreamers:
    async def test_mirrors_legacy_then_links_keywords(
        self, writer, session_factory, settings
    ) -> None:
        record = StreamerRecord(
            platform=Platform.YOUTUBE,
            platform_id="UC1",
            name="롤하는 형",
            display_name="롤하는 형",
            channel_url="https://www.youtube.com/channel/UC1",
        )
        await writer.upsert_legacy_streamer(record, "롤")
        discovery = MagicMock()
        discovery.return_value.run = AsyncMock(return_value=DiscoverySummary(platform="youtube"))

        with (
            patch.object(jobs.YouTubeClient, "from_settings", return_value=_as_context_manager(MagicMock())),
            patch.object(jobs, "YouTubeDiscovery", discovery),
        ):
            result = await jobs.collect_streamers(
                settings=settings, session_factory=session_factory
            )

        options = discovery.return_value.run.await_args.args[0]
        assert options.mirror_legacy is True
        assert options.search_delay_seconds == 0
        assert result["platform"] == "youtube"
        assert result["keyword_links_created"] == 1


@pytest.mark.asyncio
async def test_truncate_job(writer, session_factory) -> None:
    await writer.upsert_streamer(_old_twitch_streamer())

    counts = await jobs.truncate(Platform.TWITCH, session_factory=session_factory)

    assert counts["twitch_streamers"] == 1
