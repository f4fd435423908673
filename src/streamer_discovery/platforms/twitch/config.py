"""Configuration for the Twitch platform integration.

Helix REST API constants used by
:class:`~streamer_discovery.platforms.twitch.client.TwitchClient` and the
app-access-token cache in :mod:`~streamer_discovery.platforms.twitch.auth`.
"""

from __future__ import annotations

TWITCH_API_BASE: str = "https://api.twitch.tv/helix"
"""Base URL for the Twitch Helix REST API."""

TWITCH_TOKEN_URL: str = "https://id.twitch.tv/oauth2/token"
"""OAuth 2.0 token endpoint for the Client Credentials grant."""

TWITCH_CHANNEL_URL: str = "https://twitch.tv/{login}"
"""Public channel URL stored on ``twitch_streamers.channel_url``."""

TOKEN_REFRESH_MARGIN_SECONDS: float = 300.0
"""A cached app token is replaced this long before it expires."""

MAX_PAGE_SIZE: int = 100
"""Maximum ``first`` value and IDs per ``/users`` or ``/streams`` call."""

STREAMS_PER_GAME: int = 50
"""Live streams fetched per game in the top-games strategy."""

DEFAULT_TOP_GAMES: int = 5
"""Games swept by the top-games strategy when ``--top`` is not given."""

DEFAULT_LANGUAGE: str = "ko"
"""Broadcast language filter sent as the ``language`` query parameter."""
