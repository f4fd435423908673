"""Tests for the YouTube Data API client (respx-mocked)."""

from __future__ import annotations

import httpx
import pytest
import respx

from streamer_discovery.core.exceptions import (
    MissingCredentialError,
    PlatformAuthError,
    PlatformFetchError,
    PlatformRateLimitError,
)
from streamer_discovery.platforms.youtube.client import YouTubeClient
from streamer_discovery.platforms.youtube.config import YOUTUBE_API_BASE_URL
from streamer_discovery.platforms.youtube.filters import CandidateFilter, RejectionReason


def _quota_error(reason: str) -> dict:
    return {"error": {"code": 403, "errors": [{"reason": reason}]}}


def test_missing_key_raises() -> None:
    with pytest.raises(MissingCredentialError):
        YouTubeClient(None)


@pytest.mark.asyncio
class TestYouTubeClient:
    async def test_search_sends_key_and_channel_type(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            route = mock.get("/search").respond(
                200, json={"items": [{"id": {"channelId": "UC1"}, "snippet": {"title": "롤"}}]}
            )
            async with YouTubeClient("k-123") as client:
                items = await client.search_channels("롤 스트리머")

        assert items[0]["id"]["channelId"] == "UC1"
        params = route.calls.last.request.url.params
        assert params["key"] == "k-123"
        assert params["type"] == "channel"
        assert params["q"] == "롤 스트리머"

    async def test_get_channels_batches_fifty_ids(self) -> None:
        ids = [f"UC{i}" for i in range(120)]
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            route = mock.get("/channels").respond(200, json={"items": [{"id": "x"}]})
            async with YouTubeClient("k") as client:
                channels = await client.get_channels(ids)

        assert route.call_count == 3
        assert len(channels) == 3
        first_batch = route.calls[0].request.url.params["id"].split(",")
        assert len(first_batch) == 50

    async def test_get_video_missing_returns_none(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/videos").respond(200, json={"items": []})
            async with YouTubeClient("k") as client:
                assert await client.get_video("nope") is None

    async def test_quota_exceeded_is_rate_limit(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/search").respond(403, json=_quota_error("quotaExceeded"))
            async with YouTubeClient("k") as client:
                with pytest.raises(PlatformRateLimitError):
                    await client.search_channels("롤")

    async def test_forbidden_key_is_auth_error(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/search").respond(403, json=_quota_error("forbidden"))
            async with YouTubeClient("k") as client:
                with pytest.raises(PlatformAuthError):
                    await client.search_channels("롤")

    async def test_server_error_is_fetch_error(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/playlistItems").respond(500)
            async with YouTubeClient("k") as client:
                with pytest.raises(PlatformFetchError) as exc_info:
                    await client.get_latest_playlist_items("UU1")
        assert exc_info.value.status_code == 500

    async def test_connection_error_is_fetch_error(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/search").mock(side_effect=httpx.ConnectError("refused"))
            async with YouTubeClient("k") as client:
                with pytest.raises(PlatformFetchError):
                    await client.search_channels("롤")

    async def test_health_check_reports_down(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/videoCategories").respond(500)
            async with YouTubeClient("k") as client:
                health = await client.health_check()
        assert health["status"] == "down"
        assert health["platform"] == "youtube"


def _not_found(reason: str) -> dict:
    return {"error": {"code": 404, "errors": [{"reason": reason}]}}


@pytest.mark.asyncio
class TestMissingUploadsPlaylist:
    async def test_playlist_not_found_is_no_items(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/playlistItems").respond(404, json=_not_found("playlistNotFound"))
            async with YouTubeClient("k") as client:
                assert await client.get_latest_playlist_items("UUempty") == []

    async def test_other_not_found_still_raises_with_reason(self) -> None:
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/playlistItems").respond(404, json=_not_found("videoNotFound"))
            async with YouTubeClient("k") as client:
                with pytest.raises(PlatformFetchError) as exc_info:
                    await client.get_latest_playlist_items("UU1")
        assert exc_info.value.status_code == 404
        assert exc_info.value.reason == "videoNotFound"

    async def test_filter_rejects_channel_without_uploads(self) -> None:
        channel = {
            "id": "UCnew",
            "snippet": {"title": "새내기", "description": "", "thumbnails": {}},
            "statistics": {"subscriberCount": "5000", "hiddenSubscriberCount": False},
            "contentDetails": {"relatedPlaylists": {"uploads": "UUnew"}},
        }
        with respx.mock(base_url=YOUTUBE_API_BASE_URL) as mock:
            mock.get("/channels").respond(200, json={"items": [channel]})
            mock.get("/playlistItems").respond(404, json=_not_found("playlistNotFound"))
            async with YouTubeClient("k") as client:
                result = await CandidateFilter(client).channel_details("UCnew")

        assert result.reason is RejectionReason.NO_UPLOADS
