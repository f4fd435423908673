"""SQLAlchemy ORM models for Streamer Discovery.

All models are imported here so that:
1. Alembic autogenerate can discover them via Base.metadata.
2. Application code can do ``from streamer_discovery.core.models import TwitchStreamer``
   without knowing which sub-module a model lives in.
"""

from __future__ import annotations

from streamer_discovery.core.models.base import Base, CreatedAtMixin, TimestampMixin
from streamer_discovery.core.models.chzzk import (
    ChzzkGameCategory,
    ChzzkStreamer,
    ChzzkStreamerCategory,
)
from streamer_discovery.core.models.legacy import (
    Keyword,
    LegacyStreamer,
    StreamerKeyword,
    StreamerPlatform,
)
from streamer_discovery.core.models.notices import Notice
from streamer_discovery.core.models.twitch import (
    TwitchGameCategory,
    TwitchStreamer,
    TwitchStreamerCategory,
)
from streamer_discovery.core.models.youtube import (
    YouTubeGameCategory,
    YouTubeStreamer,
    YouTubeStreamerCategory,
)

__all__ = [
    "Base",
    "ChzzkGameCategory",
    "ChzzkStreamer",
    "ChzzkStreamerCategory",
    "CreatedAtMixin",
    "Keyword",
    "LegacyStreamer",
    "Notice",
    "StreamerKeyword",
    "StreamerPlatform",
    "TimestampMixin",
    "TwitchGameCategory",
    "TwitchStreamer",
    "TwitchStreamerCategory",
    "YouTubeGameCategory",
    "YouTubeStreamer",
    "YouTubeStreamerCategory",
]
