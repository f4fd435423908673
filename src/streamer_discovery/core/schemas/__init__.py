"""Pydantic request/response schemas."""

from __future__ import annotations

from streamer_discovery.core.schemas.catalog import JobResult, KeywordRead, NoticeRead
from streamer_discovery.core.schemas.live_status import (
    ChzzkLiveStatusRequest,
    LiveStatus,
    TwitchLiveStatusRequest,
)
from streamer_discovery.core.schemas.streamers import (
    ChzzkStreamerCard,
    GameCategoryRead,
    StreamerCard,
    StreamerListResponse,
    TwitchStreamerCard,
    YouTubeStreamerCard,
    streamer_card_adapter,
    streamer_card_from_row,
)

__all__ = [
    "ChzzkLiveStatusRequest",
    "ChzzkStreamerCard",
    "GameCategoryRead",
    "JobResult",
    "KeywordRead",
    "LiveStatus",
    "NoticeRead",
    "StreamerCard",
    "StreamerListResponse",
    "TwitchLiveStatusRequest",
    "TwitchStreamerCard",
    "YouTubeStreamerCard",
    "streamer_card_adapter",
    "streamer_card_from_row",
]
