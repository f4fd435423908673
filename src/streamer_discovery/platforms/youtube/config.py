"""Configuration for the YouTube platform integration.

API constants and candidate-filter thresholds used by
:class:`~streamer_discovery.platforms.youtube.client.YouTubeClient` and
:mod:`~streamer_discovery.platforms.youtube.filters`.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# API constants
# ---------------------------------------------------------------------------

YOUTUBE_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"
"""Base URL for all YouTube Data API v3 endpoints."""

YOUTUBE_CHANNEL_URL: str = "https://www.youtube.com/channel/{channel_id}"
"""Public channel URL stored on ``youtube_streamers.channel_url``."""

SEARCH_MAX_RESULTS: int = 20
"""Channels requested per ``search.list`` call."""

MAX_IDS_PER_CHANNELS_REQUEST: int = 50
"""Maximum channel IDs per ``channels.list`` call (API limit)."""

CHANNEL_PARTS: str = "contentDetails,statistics,snippet"
"""``part`` parameter for ``channels.list``."""

# ---------------------------------------------------------------------------
# Candidate filter thresholds
# ---------------------------------------------------------------------------

GAMING_CATEGORY_ID: str = "20"
"""YouTube video category ID for "Gaming"."""

MIN_SUBSCRIBERS: int = 1_000
"""Channels below this subscriber count are rejected."""

MAX_UPLOAD_AGE_DAYS: float = 30.0
"""Channels whose latest upload is older than this are rejected."""

MIN_HANGUL_RATIO: float = 0.2
"""Title + description must contain strictly more Hangul than this share."""

INACTIVE_AFTER_DAYS: float = 7.0
"""Stored channels with no upload for this long are marked inactive."""
