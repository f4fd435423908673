"""Tests for the cron-triggered collection routes."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from streamer_discovery.core.exceptions import PlatformAuthError, StorageError

TWITCH_COLLECT = "/api/cron/twitch-collect"
COLLECT_STREAMERS = "/api/cron/collect-streamers"


@pytest.mark.asyncio
class TestCronAuthorisation:
    @pytest.mark.parametrize("url", [TWITCH_COLLECT, COLLECT_STREAMERS])
    async def test_missing_token_is_401(self, client, url) -> None:
        with patch("streamer_discovery.core.jobs.twitch_collect", new=AsyncMock()) as job:
            response = await client.get(url)

        assert response.status_code == 401
        job.assert_not_awaited()

    async def test_wrong_token_is_401(self, client) -> None:
        response = await client.get(TWITCH_COLLECT, params={"token": "nope"})
        assert response.status_code == 401

    async def test_no_secret_configured_allows_any_caller(self, client, settings) -> None:
        settings.cron_secret = None
        with patch(
            "streamer_discovery.core.jobs.twitch_collect",
            new=AsyncMock(return_value={"new_streamers": 0}),
        ):
            response = await client.get(TWITCH_COLLECT)

        assert response.status_code == 200


@pytest.mark.asyncio
class TestTwitchCollectRoute:
    async def test_success_returns_summary(self, client, settings) -> None:
        summary = {"deleted": {"twitch_streamers": 3}, "new_streamers": 12}
        with patch(
            "streamer_discovery.core.jobs.twitch_collect",
            new=AsyncMock(return_value=summary),
        ) as job:
            response = await client.get(TWITCH_COLLECT, params={"token": "cron-secret"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["summary"] == summary
        job.assert_awaited_once_with(settings=settings)

    async def test_job_failure_is_500(self, client) -> None:
        with patch(
            "streamer_discovery.core.jobs.twitch_collect",
            new=AsyncMock(side_effect=StorageError("truncate failed")),
        ):
            response = await client.get(TWITCH_COLLECT, params={"token": "cron-secret"})

        assert response.status_code == 500
        assert response.json()["details"] == "truncate failed"


@pytest.mark.asyncio
class TestCollectStreamersRoute:
    async def test_success(self, client) -> None:
        with patch(
            "streamer_discovery.core.jobs.collect_streamers",
            new=AsyncMock(return_value={"keyword_links_created": 4}),
        ):
            response = await client.get(COLLECT_STREAMERS, params={"token": "cron-secret"})

        assert response.status_code == 200
        assert response.json()["summary"]["keyword_links_created"] == 4

    async def test_rejected_key_is_500(self, client) -> None:
        with patch(
            "streamer_discovery.core.jobs.collect_streamers",
            new=AsyncMock(side_effect=PlatformAuthError("bad key", platform="youtube")),
        ):
            response = await client.get(COLLECT_STREAMERS, params={"token": "cron-secret"})

        assert response.status_code == 500
        assert response.json()["error"] == "streamer collection failed"
