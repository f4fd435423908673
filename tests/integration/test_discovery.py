"""Integration tests for the three discovery orchestrators.

Platform clients are mocked; persistence goes through the real
StreamerWriter on in-memory SQLite.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from streamer_discovery.core.exceptions import PlatformAuthError, PlatformFetchError
from streamer_discovery.core.records import Platform
from streamer_discovery.platforms.chzzk.discovery import (
    ChzzkDiscovery,
    ChzzkDiscoveryOptions,
    _to_iso,
    live_to_category,
    live_to_record,
)
from streamer_discovery.platforms.twitch.discovery import (
    TwitchDiscovery,
    TwitchDiscoveryOptions,
    TwitchStrategy,
    stream_to_record,
)
from streamer_discovery.platforms.youtube.discovery import (
    YouTubeDiscovery,
    YouTubeDiscoveryOptions,
)
from streamer_discovery.platforms.youtube.filters import (
    ChannelDetails,
    FilterResult,
    RejectionReason,
)

# ---------------------------------------------------------------------------
# YouTube
# ---------------------------------------------------------------------------


def _hit(channel_id: str, title: str) -> dict[str, Any]:
    return {"id": {"channelId": channel_id}, "snippet": {"title": title, "description": ""}}


def _accepted(channel_id: str, title: str, subscribers: int = 5000) -> FilterResult:
    return FilterResult(
        details=ChannelDetails(
            channel_id=channel_id,
            title=title,
            description="롤 방송합니다",
            profile_image_url="https://yt3.example/p.jpg",
            subscribers=subscribers,
            uploads_playlist_id=f"UU{channel_id}",
            latest_upload_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            latest_video_id="vid1",
        )
    )


def _youtube_run(client: MagicMock, writer, verdicts: dict[str, FilterResult]):
    candidate_filter = MagicMock()
    candidate_filter.evaluate = AsyncMock(
        side_effect=lambda channel_id, _title, _desc: verdicts[channel_id]
    )
    sleep = AsyncMock()
    discovery = YouTubeDiscovery(client, writer, candidate_filter=candidate_filter, sleep=sleep)
    return discovery, candidate_filter, sleep


def _lol_only(**overrides) -> YouTubeDiscoveryOptions:
    options = YouTubeDiscoveryOptions(
        games=["롤"], keywords=["롤 스트리머"], search_delay_seconds=0
    )
    for key, value in overrides.items():
        setattr(options, key, value)
    return options


@pytest.mark.asyncio
class TestYouTubeDiscovery:
    async def test_accepts_stores_and_maps(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(
            return_value=[_hit("UC1", "롤하는 형"), _hit("UC2", "english only")]
        )
        discovery, _, _ = _youtube_run(
            client,
            writer,
            {
                "UC1": _accepted("UC1", "롤하는 형"),
                "UC2": FilterResult.reject(RejectionReason.NOT_KOREAN),
            },
        )

        summary = await discovery.run(_lol_only())

        client.search_channels.assert_awaited_once_with("롤 스트리머")
        assert summary.searches == 1
        assert summary.discovered == 2
        assert summary.new_streamers == 1
        assert summary.skipped == 1
        assert summary.mappings_created == 1
        assert await writer.existing_streamer_ids(Platform.YOUTUBE) == {"UC1"}

    async def test_empty_category_table_is_seeded(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(return_value=[])
        discovery, _, _ = _youtube_run(client, writer, {})

        await discovery.run(_lol_only())

        names = {c.name for c in await writer.list_categories(Platform.YOUTUBE)}
        assert {"롤", "배틀그라운드", "발로란트"} <= names

    async def test_stored_channels_are_not_refiltered(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(return_value=[_hit("UC1", "롤하는 형")])
        discovery, candidate_filter, _ = _youtube_run(
            client, writer, {"UC1": _accepted("UC1", "롤하는 형")}
        )
        await discovery.run(_lol_only())

        summary = await discovery.run(_lol_only())

        assert candidate_filter.evaluate.await_count == 1
        assert summary.skipped == 1
        assert summary.new_streamers == 0

    async def test_fetch_failure_counts_and_retries_within_run(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(return_value=[_hit("UC9", "롤")])
        discovery, candidate_filter, _ = _youtube_run(
            client,
            writer,
            {"UC9": FilterResult.reject(RejectionReason.FETCH_FAILED, "HTTP 500")},
        )

        summary = await discovery.run(
            _lol_only(keywords=["롤 스트리머", "롤 유튜버"])
        )

        assert summary.failures == 2
        assert candidate_filter.evaluate.await_count == 2

    async def test_search_failure_does_not_stop_run(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(
            side_effect=[PlatformFetchError("boom", platform="youtube"), [_hit("UC1", "롤")]]
        )
        discovery, _, _ = _youtube_run(client, writer, {"UC1": _accepted("UC1", "롤")})

        summary = await discovery.run(_lol_only(keywords=["롤 스트리머", "롤 유튜버"]))

        assert summary.searches == 2
        assert summary.failures == 1
        assert summary.new_streamers == 1

    async def test_rejected_key_aborts_run(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(
            side_effect=PlatformAuthError("bad key", platform="youtube")
        )
        discovery, _, _ = _youtube_run(client, writer, {})

        with pytest.raises(PlatformAuthError):
            await discovery.run(_lol_only())

    async def test_skip_mapping_and_legacy_mirror(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(return_value=[_hit("UC1", "롤하는 형")])
        discovery, _, _ = _youtube_run(client, writer, {"UC1": _accepted("UC1", "롤하는 형")})

        summary = await discovery.run(_lol_only(skip_mapping=True, mirror_legacy=True))

        assert summary.mappings_created == 0
        legacy = await writer.legacy_streamers()
        assert [(s.id, s.game_type) for s in legacy] == [("UC1", "롤")]

    async def test_pause_after_every_search(self, writer) -> None:
        client = MagicMock()
        client.search_channels = AsyncMock(return_value=[])
        discovery, _, sleep = _youtube_run(client, writer, {})

        await discovery.run(
            _lol_only(keywords=["롤 스트리머", "롤 유튜버"], search_delay_seconds=0.5)
        )

        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)


# ---------------------------------------------------------------------------
# Twitch
# ---------------------------------------------------------------------------


def _stream(user_id: str, game_id: str, game_name: str, viewers: int) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "user_name": f"User{user_id}",
        "game_id": game_id,
        "game_name": game_name,
        "viewer_count": viewers,
        "started_at": "2024-05-01T12:00:00Z",
    }


def _user(user_id: str) -> dict[str, Any]:
    return {
        "id": user_id,
        "login": f"user{user_id}",
        "display_name": f"User{user_id}",
        "description": "",
        "profile_image_url": f"https://img.example/{user_id}.png",
    }


def _twitch_client(streams: list[dict], users: list[dict]) -> MagicMock:
    client = MagicMock()
    client.get_top_games = AsyncMock(
        return_value=[
            {
                "id": "21779",
                "name": "League of Legends",
                "box_art_url": "https://static-cdn.jtvnw.net/ttv-boxart/21779-{width}x{height}.jpg",
            }
        ]
    )
    client.get_streams = AsyncMock(return_value=streams)
    client.get_users_by_ids = AsyncMock(return_value=users)
    return client


def test_stream_to_record_maps_helix_fields() -> None:
    record = stream_to_record(_user("7"), _stream("7", "1", "VALORANT", 42))

    assert record.platform_id == "7"
    assert record.name == "user7"
    assert record.display_name == "User7"
    assert record.channel_url == "https://twitch.tv/user7"
    assert record.popularity == 42
    assert record.last_active_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


@pytest.mark.asyncio
class TestTwitchDiscovery:
    async def test_top_games_maps_to_swept_game(self, writer) -> None:
        client = _twitch_client(
            [
                _stream("1", "21779", "League of Legends", 500),
                _stream("2", "21779", "League of Legends", 300),
            ],
            [_user("1")],
        )

        summary = await TwitchDiscovery(client, writer).run(
            TwitchDiscoveryOptions(top=1)
        )

        client.get_top_games.assert_awaited_once_with(1)
        client.get_streams.assert_awaited_once_with(
            game_id="21779", language="ko", limit=50
        )
        assert summary.new_streamers == 1
        assert summary.skipped == 1
        assert summary.mappings_created == 1
        categories = await writer.list_categories(Platform.TWITCH)
        assert [c.twitch_game_id for c in categories] == ["21779"]

    async def test_live_streams_maps_each_stream_to_its_own_game(self, writer) -> None:
        client = _twitch_client(
            [
                _stream("1", "21779", "League of Legends", 500),
                _stream("2", "516575", "VALORANT", 300),
            ],
            [_user("1"), _user("2")],
        )

        summary = await TwitchDiscovery(client, writer).run(
            TwitchDiscoveryOptions(strategy=TwitchStrategy.LIVE_STREAMS, limit=20)
        )

        client.get_streams.assert_awaited_once_with(language="ko", limit=20)
        assert summary.new_streamers == 2
        assert summary.mappings_created == 2
        names = sorted(c.name for c in await writer.list_categories(Platform.TWITCH))
        assert names == ["League of Legends", "VALORANT"]

    async def test_known_streamers_count_as_updated(self, writer) -> None:
        client = _twitch_client([_stream("1", "21779", "League of Legends", 10)], [_user("1")])
        await TwitchDiscovery(client, writer).run()

        summary = await TwitchDiscovery(client, writer).run()

        assert summary.updated_streamers == 1
        assert summary.new_streamers == 0
        assert summary.mappings_created == 0

    async def test_top_games_failure_ends_run_quietly(self, writer) -> None:
        client = _twitch_client([], [])
        client.get_top_games.side_effect = PlatformFetchError("down", platform="twitch")

        summary = await TwitchDiscovery(client, writer).run()

        assert summary.failures == 1
        client.get_streams.assert_not_awaited()

    async def test_skip_mapping_creates_no_categories(self, writer) -> None:
        client = _twitch_client([_stream("1", "21779", "League of Legends", 10)], [_user("1")])

        await TwitchDiscovery(client, writer).run(
            TwitchDiscoveryOptions(strategy=TwitchStrategy.LIVE_STREAMS, skip_mapping=True)
        )

        assert await writer.list_categories(Platform.TWITCH) == []
        assert await writer.existing_streamer_ids(Platform.TWITCH) == {"1"}


# ---------------------------------------------------------------------------
# Chzzk
# ---------------------------------------------------------------------------


def _live(channel_id: str | None, category: str | None = "League_of_Legends") -> dict[str, Any]:
    live: dict[str, Any] = {
        "liveId": 1,
        "concurrentUserCount": 300,
        "openDate": "2024-05-01 21:03:11",
        "liveCategory": category,
        "liveCategoryValue": "리그 오브 레전드" if category else "",
        "channel": {"channelName": "치지직 방송인", "channelImageUrl": "https://img.example/c.png"},
    }
    if channel_id:
        live["channel"]["channelId"] = channel_id
    return live


class FakeChzzkClient:
    def __init__(self, pages: list[list[dict]], error: Exception | None = None) -> None:
        self._pages = pages
        self._error = error

    async def iter_live_pages(self):
        for page in self._pages:
            yield page
        if self._error is not None:
            raise self._error


class TestChzzkMapping:
    def test_open_date_is_kst(self) -> None:
        assert _to_iso("2024-05-01 21:03:11") == "2024-05-01T21:03:11+09:00"
        assert _to_iso("2024-05-01T12:03:11Z") == "2024-05-01T12:03:11Z"
        assert _to_iso(None) is None

    def test_live_to_record(self) -> None:
        record = live_to_record(_live("c1"))

        assert record.platform_id == "c1"
        assert record.channel_url == "https://chzzk.naver.com/live/c1"
        assert record.popularity == 300
        assert record.last_active_at == datetime(2024, 5, 1, 12, 3, 11, tzinfo=timezone.utc)

    def test_category_name_is_normalised(self) -> None:
        category = live_to_category(_live("c1", "Grand Theft Auto V"))

        assert category is not None
        assert category.name == "grandtheftautov"
        assert category.platform_id == "Grand Theft Auto V"
        assert live_to_category(_live("c1", None)) is None


@pytest.mark.asyncio
class TestChzzkDiscovery:
    async def test_pagination_failure_keeps_collected_lives(self, writer) -> None:
        client = FakeChzzkClient(
            [[_live("c1"), _live("c2")]],
            error=PlatformFetchError("code=500", platform="chzzk"),
        )

        summary = await ChzzkDiscovery(client, writer).run(ChzzkDiscoveryOptions(limit=10))

        assert summary.failures == 1
        assert summary.new_streamers == 2
        assert summary.mappings_created == 2
        assert await writer.existing_streamer_ids(Platform.CHZZK) == {"c1", "c2"}

    async def test_limit_and_missing_fields(self, writer) -> None:
        client = FakeChzzkClient(
            [[_live("c1", None), _live(None)], [_live("c3"), _live("c4")]]
        )

        summary = await ChzzkDiscovery(client, writer).run(ChzzkDiscoveryOptions(limit=3))

        assert summary.discovered == 3
        assert summary.skipped == 1
        assert summary.new_streamers == 2
        assert summary.mappings_created == 1
        assert await writer.existing_streamer_ids(Platform.CHZZK) == {"c1", "c3"}

    async def test_without_seeding_every_streamer_is_new(self, writer) -> None:
        client = FakeChzzkClient([[_live("c1")]])
        await ChzzkDiscovery(client, writer).run()

        summary = await ChzzkDiscovery(client, writer).run()

        assert summary.new_streamers == 1
        assert summary.mappings_created == 0
