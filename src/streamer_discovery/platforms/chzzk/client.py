"""Chzzk service API client.

Chzzk wraps every payload as ``{"code": 200, "message": ..., "content": ...}``
and can answer HTTP 200 with a non-200 ``code``; :meth:`ChzzkClient.iter_live_pages`
treats that as a fetch failure, while :meth:`ChzzkClient.get_live_detail`
treats it as "no live detail".
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from streamer_discovery.config.settings import Settings
from streamer_discovery.core.exceptions import MissingCredentialError, PlatformFetchError
from streamer_discovery.core.records import Platform
from streamer_discovery.platforms.base import DEFAULT_TIMEOUT_SECONDS, PlatformClient
from streamer_discovery.platforms.chzzk.config import (
    CHZZK_API_BASE,
    CHZZK_BROWSER_HEADERS,
    LIVE_DETAIL_ENDPOINT,
    LIVES_ENDPOINT,
)

logger = logging.getLogger(__name__)


class ChzzkClient(PlatformClient):
    """Async client for the Chzzk live endpoints.

    Args:
        client_id: Naver client ID (``x-naver-client-id``).
        client_secret: Naver client secret (``x-naver-client-secret``).
        http_client: Optional injected :class:`httpx.AsyncClient` for testing.
        timeout: Per-request timeout in seconds.

    Raises:
        MissingCredentialError: If the client ID or secret is empty.
    """

    platform = Platform.CHZZK

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not client_id:
            raise MissingCredentialError("chzzk", "chzzk_client_id")
        if not client_secret:
            raise MissingCredentialError("chzzk", "chzzk_client_secret")
        super().__init__(http_client=http_client, timeout=timeout)
        self._headers = {
            **CHZZK_BROWSER_HEADERS,
            "x-naver-client-id": client_id,
            "x-naver-client-secret": client_secret,
        }

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> ChzzkClient:
        return cls(
            settings.chzzk_client_id,
            settings.chzzk_client_secret,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    async def _service(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self._get_json(
            f"{CHZZK_API_BASE}{endpoint}",
            endpoint=endpoint,
            params=params,
            headers=self._headers,
        )

    # ------------------------------------------------------------------
    # Live channel list
    # ------------------------------------------------------------------

    async def iter_live_pages(self) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield pages of live channels, most viewers first.

        The cursor is the ``concurrentUserCount`` / ``liveId`` pair from
        ``content.page.next``.  Iteration ends on an empty page or when the
        response has no next cursor; callers stop early by breaking out.

        Raises:
            PlatformFetchError: On HTTP failure or a body ``code`` other
                than 200.
        """
        cursor: dict[str, Any] | None = None
        while True:
            params: dict[str, Any] = {}
            if cursor:
                params["concurrentUserCount"] = cursor.get("concurrentUserCount")
                params["liveId"] = cursor.get("liveId")
            body = await self._service(LIVES_ENDPOINT, params)
            if body.get("code") != 200:
                raise PlatformFetchError(
                    f"chzzk: '{LIVES_ENDPOINT}' returned code={body.get('code')} "
                    f"message={body.get('message')!r}",
                    platform="chzzk",
                    endpoint=LIVES_ENDPOINT,
                )
            content = body.get("content") or {}
            page = content.get("data") or []
            if page:
                yield page
            cursor = (content.get("page") or {}).get("next")
            if not page or not cursor:
                return

    async def list_live_channels(self, limit: int) -> list[dict[str, Any]]:
        """Return up to *limit* live channels across pages."""
        lives: list[dict[str, Any]] = []
        async with aclosing(self.iter_live_pages()) as pages:
            async for page in pages:
                lives.extend(page)
                if len(lives) >= limit:
                    break
        logger.info("chzzk: fetched %d live channels", min(len(lives), limit))
        return lives[:limit]

    # ------------------------------------------------------------------
    # Per-channel detail
    # ------------------------------------------------------------------

    async def get_live_detail(self, channel_id: str) -> dict[str, Any] | None:
        """Return the live-detail ``content`` of a channel.

        Returns:
            The content dict, or ``None`` when the body ``code`` is not 200
            or carries no content (channel offline or unknown).

        Raises:
            PlatformFetchError: On HTTP or transport failure.
        """
        body = await self._service(LIVE_DETAIL_ENDPOINT.format(channel_id=channel_id))
        if body.get("code") != 200:
            return None
        content = body.get("content")
        return content if isinstance(content, dict) else None

    async def _probe(self) -> None:
        async with aclosing(self.iter_live_pages()) as pages:
            async for _page in pages:
                break
