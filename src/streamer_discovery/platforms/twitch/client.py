"""Twitch Helix API client.

Every Helix call carries ``Authorization: Bearer <app token>`` and
``Client-Id``.  A 401 drops the cached token before the
:class:`PlatformAuthError` propagates, so the next run starts with a fresh
token.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from streamer_discovery.config.settings import Settings
from streamer_discovery.core.exceptions import MissingCredentialError, PlatformAuthError
from streamer_discovery.core.records import Platform
from streamer_discovery.platforms.base import (
    DEFAULT_TIMEOUT_SECONDS,
    PlatformClient,
    chunked,
)
from streamer_discovery.platforms.twitch.auth import TwitchTokenProvider
from streamer_discovery.platforms.twitch.config import MAX_PAGE_SIZE, TWITCH_API_BASE

logger = logging.getLogger(__name__)


class TwitchClient(PlatformClient):
    """Async client for the Helix endpoints discovery and live status use.

    Args:
        client_id: Twitch application client ID.
        client_secret: Twitch application secret.
        http_client: Optional injected :class:`httpx.AsyncClient` for testing.
        timeout: Per-request timeout in seconds.
        token_provider: Optional pre-built token cache (shared between
            clients, or stubbed in tests).

    Raises:
        MissingCredentialError: If the client ID or secret is empty.
    """

    platform = Platform.TWITCH

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token_provider: TwitchTokenProvider | None = None,
    ) -> None:
        if not client_id:
            raise MissingCredentialError("twitch", "twitch_client_id")
        if not client_secret:
            raise MissingCredentialError("twitch", "twitch_client_secret")
        super().__init__(http_client=http_client, timeout=timeout)
        self._client_id = client_id
        self._tokens = token_provider or TwitchTokenProvider(
            client_id, client_secret, self.http
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> TwitchClient:
        return cls(
            settings.twitch_client_id,
            settings.twitch_client_secret,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    async def _helix(self, endpoint: str, params: Any = None) -> dict[str, Any]:
        token = await self._tokens.get_token()
        try:
            return await self._get_json(
                f"{TWITCH_API_BASE}{endpoint}",
                endpoint=endpoint,
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Client-Id": self._client_id,
                },
            )
        except PlatformAuthError:
            self._tokens.invalidate()
            raise

    async def _paginate(
        self, endpoint: str, params: list[tuple[str, Any]], limit: int
    ) -> list[dict[str, Any]]:
        """Follow ``pagination.cursor`` until *limit* rows are gathered."""
        rows: list[dict[str, Any]] = []
        cursor: str | None = None
        while len(rows) < limit:
            page_params = [*params, ("first", min(MAX_PAGE_SIZE, limit - len(rows)))]
            if cursor:
                page_params.append(("after", cursor))
            data = await self._helix(endpoint, page_params)
            batch = data.get("data") or []
            rows.extend(batch)
            cursor = (data.get("pagination") or {}).get("cursor")
            if not batch or not cursor:
                break
        return rows[:limit]

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_top_games(self, limit: int) -> list[dict[str, Any]]:
        """Return the *limit* games with the most viewers right now."""
        games = await self._paginate("/games/top", [], limit)
        logger.info("twitch: fetched %d top games", len(games))
        return games

    async def get_streams(
        self,
        *,
        game_id: str | None = None,
        language: str | None = None,
        limit: int = MAX_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Return up to *limit* live streams, most viewers first.

        Args:
            game_id: Restrict to one game.
            language: Restrict to one broadcast language (e.g. ``"ko"``).
            limit: Maximum number of streams; pagination stops there.
        """
        params: list[tuple[str, Any]] = []
        if game_id:
            params.append(("game_id", game_id))
        if language:
            params.append(("language", language))
        return await self._paginate("/streams", params, limit)

    async def get_streams_by_user_ids(self, user_ids: list[str]) -> list[dict[str, Any]]:
        """Return the live streams of the given broadcasters.

        Broadcasters who are offline are absent from the result.  Up to 100
        IDs go out in a single request.
        """
        streams: list[dict[str, Any]] = []
        for batch in chunked(user_ids, MAX_PAGE_SIZE):
            params = [("user_id", user_id) for user_id in batch]
            params.append(("first", MAX_PAGE_SIZE))
            data = await self._helix("/streams", params)
            streams.extend(data.get("data") or [])
        return streams

    async def get_users_by_ids(self, user_ids: list[str]) -> list[dict[str, Any]]:
        """Resolve user records in chunks of at most 100 IDs."""
        users: list[dict[str, Any]] = []
        for batch in chunked(user_ids, MAX_PAGE_SIZE):
            data = await self._helix("/users", [("id", user_id) for user_id in batch])
            users.extend(data.get("data") or [])
        return users

    async def _probe(self) -> None:
        await self._helix("/games/top", [("first", 1)])
