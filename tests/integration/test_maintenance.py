"""Integration tests for the YouTube maintenance jobs and keyword linking."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from streamer_discovery.core.records import CategoryRecord, LinkResult, Platform, StreamerRecord
from streamer_discovery.platforms.maintenance import (
    link_streamers_to_keywords,
    truncate_tables,
)
from streamer_discovery.platforms.youtube.filters import (
    ChannelDetails,
    FilterResult,
    RejectionReason,
)
from streamer_discovery.platforms.youtube.maintenance import (
    InactivityMode,
    check_inactive_streamers,
    link_youtube_categories,
    match_categories,
    update_youtube_streamers,
)

NOW = datetime(2024, 5, 20, tzinfo=timezone.utc)


def _record(channel_id: str, name: str, *, description: str = "", uploaded: datetime | None = None):
    return StreamerRecord(
        platform=Platform.YOUTUBE,
        platform_id=channel_id,
        name=name,
        display_name=name,
        channel_url=f"https://www.youtube.com/channel/{channel_id}",
        description=description,
        popularity=2000,
        last_active_at=uploaded,
    )


def _details(channel_id: str, subscribers: int, uploaded: datetime) -> FilterResult:
    return FilterResult(
        details=ChannelDetails(
            channel_id=channel_id,
            title="",
            description="새 소개글",
            profile_image_url="https://yt3.example/new.jpg",
            subscribers=subscribers,
            uploads_playlist_id=f"UU{channel_id}",
            latest_upload_at=uploaded,
            latest_video_id="v",
        )
    )


def _filter(verdicts: dict[str, FilterResult]) -> MagicMock:
    candidate_filter = MagicMock()
    candidate_filter.channel_details = AsyncMock(side_effect=lambda cid: verdicts[cid])
    return candidate_filter


@pytest.mark.asyncio
class TestUpdateYouTubeStreamers:
    async def test_refreshes_passing_channels_only(self, writer) -> None:
        await writer.upsert_streamer(_record("UC1", "가"))
        await writer.upsert_streamer(_record("UC2", "나"))
        candidate_filter = _filter(
            {
                "UC1": _details("UC1", 12_000, NOW - timedelta(days=1)),
                "UC2": FilterResult.reject(RejectionReason.TOO_FEW_SUBSCRIBERS),
            }
        )
        sleep = AsyncMock()

        summary = await update_youtube_streamers(
            writer, candidate_filter, limit=10, sleep=sleep
        )

        assert summary.updated_streamers == 1
        assert summary.failures == 1
        sleep.assert_awaited_once_with(0.5)
        stored = {s.youtube_channel_id: s for s in await writer.all_youtube_streamers()}
        assert stored["UC1"].subscribers == 12_000
        assert stored["UC1"].description == "새 소개글"
        assert stored["UC2"].subscribers == 2000

    async def test_category_filter_limits_candidates(self, writer) -> None:
        lol = await writer.get_or_create_category(
            CategoryRecord(platform=Platform.YOUTUBE, name="롤", display_name="롤")
        )
        mapped = await writer.upsert_streamer(_record("UC1", "가"))
        await writer.upsert_streamer(_record("UC2", "나"))
        await writer.link_streamer_to_category(Platform.YOUTUBE, mapped, lol)
        candidate_filter = _filter({"UC1": _details("UC1", 5000, NOW)})

        summary = await update_youtube_streamers(
            writer, candidate_filter, categories=["롤"], delay_seconds=0
        )

        assert summary.discovered == 1
        candidate_filter.channel_details.assert_awaited_once_with("UC1")


@pytest.mark.asyncio
class TestCheckInactiveStreamers:
    async def _seed(self, writer) -> None:
        await writer.upsert_streamer(_record("UC-old", "조용함", uploaded=NOW - timedelta(days=10)))
        await writer.upsert_streamer(_record("UC-fresh", "활발함", uploaded=NOW - timedelta(days=1)))
        back = await writer.upsert_streamer(_record("UC-back", "복귀", uploaded=NOW - timedelta(days=40)))
        await writer.update_youtube_streamer(back, {"is_active": False})

    async def test_both_modes(self, writer) -> None:
        await self._seed(writer)
        candidate_filter = _filter(
            {
                "UC-old": FilterResult.reject(RejectionReason.STALE_UPLOADS),
                "UC-back": _details("UC-back", 7777, NOW - timedelta(days=2)),
            }
        )

        counts = await check_inactive_streamers(
            writer, candidate_filter, now=NOW, delay_seconds=0
        )

        assert counts == {"deactivated": 1, "reactivated": 1, "checked": 2}
        active = {s.youtube_channel_id for s in await writer.all_youtube_streamers(active=True)}
        assert active == {"UC-fresh", "UC-back"}

    async def test_inactive_only_never_calls_api(self, writer) -> None:
        await self._seed(writer)
        candidate_filter = _filter({})

        counts = await check_inactive_streamers(
            writer, candidate_filter, mode=InactivityMode.INACTIVE_ONLY, now=NOW
        )

        assert counts["deactivated"] == 1
        assert counts["checked"] == 0
        candidate_filter.channel_details.assert_not_awaited()

    async def test_reactive_only_leaves_stale_active_channels(self, writer) -> None:
        await self._seed(writer)
        candidate_filter = _filter(
            {"UC-back": FilterResult.reject(RejectionReason.STALE_UPLOADS)}
        )

        counts = await check_inactive_streamers(
            writer,
            candidate_filter,
            mode=InactivityMode.REACTIVE_ONLY,
            now=NOW,
            delay_seconds=0,
        )

        assert counts == {"deactivated": 0, "reactivated": 0, "checked": 1}


class TestMatchCategories:
    def test_detection_keywords_are_case_insensitive(self) -> None:
        assert match_categories("League of Legends 하이라이트", ["롤", "발로란트"]) == ["롤"]

    def test_unknown_category_matches_its_own_name(self) -> None:
        assert match_categories("Tekken 8 ranked", ["tekken"]) == ["tekken"]
        assert match_categories("요리 채널", ["롤"]) == []


@pytest.mark.asyncio
class TestLinkYouTubeCategories:
    async def test_links_by_name_and_description(self, writer) -> None:
        for name in ("롤", "발로란트"):
            await writer.get_or_create_category(
                CategoryRecord(platform=Platform.YOUTUBE, name=name, display_name=name)
            )
        await writer.upsert_streamer(_record("UC1", "발로 장인", description="valorant clips"))
        await writer.upsert_streamer(_record("UC2", "요리 채널", description="맛있는 요리"))

        summary = await link_youtube_categories(writer)

        assert summary.discovered == 2
        assert summary.mappings_created == 1
        assert summary.skipped == 1

        again = await link_youtube_categories(writer)
        assert again.mappings_created == 0

    async def test_without_categories_nothing_happens(self, writer) -> None:
        await writer.upsert_streamer(_record("UC1", "롤 장인"))

        summary = await link_youtube_categories(writer)

        assert summary.discovered == 0


@pytest.mark.asyncio
class TestKeywordLinking:
    async def test_game_types_map_to_keywords(self, writer) -> None:
        await writer.upsert_legacy_streamer(_record("UC1", "가"), "롤")
        await writer.upsert_legacy_streamer(_record("UC2", "나"), "롤")
        await writer.upsert_legacy_streamer(_record("UC3", "다"), "종겜")
        await writer.upsert_legacy_streamer(_record("UC4", "라"), "테트리스")
        await writer.upsert_legacy_streamer(_record("UC5", "마"), None)

        summary = await link_streamers_to_keywords(writer)

        assert summary.discovered == 5
        assert summary.mappings_created == 3
        assert summary.skipped == 2
        lol = await writer.get_or_create_keyword("LOL", "game_title")
        assert await writer.link_streamer_to_keyword("UC1", lol) is LinkResult.EXISTING
        general = await writer.get_or_create_keyword("게임 방송", "game_title")
        assert await writer.link_streamer_to_keyword("UC3", general) is LinkResult.EXISTING


@pytest.mark.asyncio
async def test_truncate_tables_accepts_platform_name(writer) -> None:
    counts = await truncate_tables(writer, "chzzk")
    assert set(counts) == {
        "chzzk_streamer_categories",
        "chzzk_streamers",
        "chzzk_game_categories",
    }
