"""YouTube Data API v3 client.

Thin wrappers over the four endpoints discovery needs:

- :meth:`YouTubeClient.search_channels`: one ``search.list`` call (type=channel).
- :meth:`YouTubeClient.get_channels`: ``channels.list`` in batches of 50.
- :meth:`YouTubeClient.get_latest_playlist_items`: newest uploads of a channel.
- :meth:`YouTubeClient.get_video`: ``videos.list`` for one video's snippet.

The API key travels as the ``key`` query parameter.  A 403 whose reason is
a quota reason raises :class:`PlatformRateLimitError`; any other 401 / 403
raises :class:`PlatformAuthError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from streamer_discovery.config.settings import Settings
from streamer_discovery.core.exceptions import (
    MissingCredentialError,
    PlatformAuthError,
    PlatformFetchError,
    PlatformRateLimitError,
)
from streamer_discovery.core.records import Platform
from streamer_discovery.platforms.base import (
    DEFAULT_TIMEOUT_SECONDS,
    PlatformClient,
    chunked,
)
from streamer_discovery.platforms.youtube.config import (
    CHANNEL_PARTS,
    MAX_IDS_PER_CHANNELS_REQUEST,
    SEARCH_MAX_RESULTS,
    YOUTUBE_API_BASE_URL,
)

logger = logging.getLogger(__name__)

_QUOTA_REASONS = frozenset({"quotaExceeded", "rateLimitExceeded", "userRateLimitExceeded"})
PLAYLIST_NOT_FOUND_REASON = "playlistNotFound"


def extract_error_reason(response: httpx.Response) -> str:
    """Extract the ``reason`` field from a YouTube API error response body.

    Args:
        response: The error response.

    Returns:
        The ``reason`` string (e.g. ``"quotaExceeded"``), or ``"unknown"``
        if the body cannot be parsed.
    """
    try:
        errors = response.json().get("error", {}).get("errors", [])
    except (ValueError, AttributeError):
        return "unknown"
    if errors and isinstance(errors[0], dict):
        return str(errors[0].get("reason", "unknown"))
    return "unknown"


class YouTubeClient(PlatformClient):
    """Async client for the YouTube Data API v3.

    Args:
        api_key: YouTube Data API key.
        http_client: Optional injected :class:`httpx.AsyncClient` for testing.
        timeout: Per-request timeout in seconds.

    Raises:
        MissingCredentialError: If *api_key* is empty.
    """

    platform = Platform.YOUTUBE

    def __init__(
        self,
        api_key: str | None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise MissingCredentialError("youtube", "youtube_api_key")
        super().__init__(http_client=http_client, timeout=timeout)
        self._api_key = api_key

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> YouTubeClient:
        return cls(
            settings.youtube_api_key,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    async def _call(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        return await self._get_json(
            f"{YOUTUBE_API_BASE_URL}/{endpoint}",
            endpoint=endpoint,
            params={**params, "key": self._api_key},
        )

    def _error_reason(self, response: httpx.Response) -> str | None:
        return extract_error_reason(response)

    def _auth_failure(self, response: httpx.Response, endpoint: str) -> None:
        reason = extract_error_reason(response)
        if response.status_code == 403 and reason in _QUOTA_REASONS:
            raise PlatformRateLimitError(
                f"youtube: {reason} on '{endpoint}'",
                retry_after=3600.0,
                platform="youtube",
                endpoint=endpoint,
                status_code=403,
            )
        raise PlatformAuthError(
            f"youtube: HTTP {response.status_code} (reason={reason}) on '{endpoint}'",
            platform="youtube",
        )

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def search_channels(
        self, query: str, max_results: int = SEARCH_MAX_RESULTS
    ) -> list[dict[str, Any]]:
        """Search for channels matching *query*.

        Returns:
            ``search.list`` items; each carries ``id.channelId`` and a
            ``snippet`` with ``title`` / ``description``.
        """
        data = await self._call(
            "search",
            {
                "part": "snippet",
                "q": query,
                "type": "channel",
                "maxResults": max_results,
            },
        )
        items = data.get("items") or []
        logger.info("youtube: search '%s' returned %d channels", query, len(items))
        return items

    async def get_channels(self, channel_ids: list[str]) -> list[dict[str, Any]]:
        """Fetch full channel resources, 50 IDs per request.

        Channels the API does not return (deleted, terminated) are simply
        absent from the result.
        """
        channels: list[dict[str, Any]] = []
        for batch in chunked(channel_ids, MAX_IDS_PER_CHANNELS_REQUEST):
            data = await self._call(
                "channels", {"part": CHANNEL_PARTS, "id": ",".join(batch)}
            )
            channels.extend(data.get("items") or [])
        return channels

    async def get_channel(self, channel_id: str) -> dict[str, Any] | None:
        """Fetch one channel resource, or ``None`` if it does not exist."""
        channels = await self.get_channels([channel_id])
        return channels[0] if channels else None

    async def get_latest_playlist_items(
        self, playlist_id: str, max_results: int = 1
    ) -> list[dict[str, Any]]:
        """Return the newest items of a playlist (a channel's uploads).

        YouTube answers 404 ``playlistNotFound`` for the uploads playlist of
        a channel that never uploaded; that is returned as no items.
        """
        try:
            data = await self._call(
                "playlistItems",
                {
                    "part": "snippet,contentDetails",
                    "playlistId": playlist_id,
                    "maxResults": max_results,
                },
            )
        except PlatformFetchError as exc:
            if exc.status_code == 404 and exc.reason == PLAYLIST_NOT_FOUND_REASON:
                logger.debug("youtube: playlist %s not found; no uploads", playlist_id)
                return []
            raise
        return data.get("items") or []

    async def get_video(self, video_id: str) -> dict[str, Any] | None:
        """Return one video resource (``snippet`` part), or ``None``."""
        data = await self._call("videos", {"part": "snippet", "id": video_id})
        items = data.get("items") or []
        return items[0] if items else None

    async def _probe(self) -> None:
        await self._call("videoCategories", {"part": "snippet", "regionCode": "KR"})
