"""Tests for the streamer card union and the live-status wire schema."""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from streamer_discovery.core.schemas import (
    ChzzkLiveStatusRequest,
    LiveStatus,
    TwitchLiveStatusRequest,
    TwitchStreamerCard,
    YouTubeStreamerCard,
    streamer_card_adapter,
)


class TestStreamerCardUnion:
    def test_platform_tag_selects_variant(self) -> None:
        card = streamer_card_adapter.validate_python(
            {
                "platform": "twitch",
                "id": str(uuid.uuid4()),
                "channel_url": "https://twitch.tv/faker",
                "twitch_id": "123",
                "login_name": "faker",
                "display_name": "Faker",
                "viewer_count": 5000,
            }
        )
        assert isinstance(card, TwitchStreamerCard)
        assert card.viewer_count == 5000

    def test_youtube_variant_requires_its_own_fields(self) -> None:
        with pytest.raises(ValidationError):
            streamer_card_adapter.validate_python(
                {
                    "platform": "youtube",
                    "id": str(uuid.uuid4()),
                    "channel_url": "https://www.youtube.com/channel/UC1",
                    "login_name": "not-a-youtube-field",
                }
            )

    def test_unknown_platform_rejected(self) -> None:
        with pytest.raises(ValidationError):
            streamer_card_adapter.validate_python(
                {"platform": "afreeca", "id": str(uuid.uuid4()), "channel_url": "x"}
            )

    def test_youtube_defaults(self) -> None:
        card = YouTubeStreamerCard(
            id=uuid.uuid4(),
            channel_url="https://www.youtube.com/channel/UC1",
            youtube_channel_id="UC1",
            name="김겜돌",
        )
        assert card.platform == "youtube"
        assert card.is_active is True
        assert card.subscribers == 0


class TestLiveStatusSchema:
    def test_wire_uses_camel_case(self) -> None:
        wire = LiveStatus(is_live=True, viewer_count=3).to_wire()
        assert wire["isLive"] is True
        assert wire["viewerCount"] == 3
        assert "error" not in wire

    def test_error_kept_on_wire_when_set(self) -> None:
        assert LiveStatus.offline(error="lookup failed").to_wire()["error"] == "lookup failed"

    def test_parses_wire_names(self) -> None:
        status = LiveStatus.model_validate({"isLive": True, "gameName": "VALORANT"})
        assert status.game_name == "VALORANT"

    @pytest.mark.parametrize("body", [{}, {"twitchIds": []}, {"twitchIds": "123"}])
    def test_twitch_request_rejects_bad_id_lists(self, body: dict) -> None:
        with pytest.raises(ValidationError):
            TwitchLiveStatusRequest.model_validate(body)

    def test_chzzk_request_accepts_ids(self) -> None:
        request = ChzzkLiveStatusRequest.model_validate({"chzzkIds": ["a", "b"]})
        assert request.chzzk_ids == ["a", "b"]
