"""Configuration for the Chzzk platform integration."""

from __future__ import annotations

CHZZK_API_BASE: str = "https://api.chzzk.naver.com"
"""Base URL for the Chzzk service API."""

CHZZK_CHANNEL_URL: str = "https://chzzk.naver.com/live/{channel_id}"
"""Public channel URL stored on ``chzzk_streamers.channel_url``."""

CHZZK_BROWSER_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Referer": "https://chzzk.naver.com/",
}
"""Browser-like headers; the service API rejects bare clients."""

LIVES_ENDPOINT: str = "/service/v1/lives"
"""Cursor-paginated list of live channels, most viewers first."""

LIVE_DETAIL_ENDPOINT: str = "/service/v1/channels/{channel_id}/live-detail"
"""Per-channel live detail."""

DEFAULT_LIVE_LIMIT: int = 100
"""Live channels collected per run when ``--limit`` is not given."""

LIVE_STATUS_OPEN: str = "OPEN"
"""``status`` value of a channel that is currently broadcasting."""
