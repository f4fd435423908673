"""Twitch app access token cache (OAuth client-credentials grant)."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from streamer_discovery.core.exceptions import PlatformAuthError
from streamer_discovery.platforms.twitch.config import (
    TOKEN_REFRESH_MARGIN_SECONDS,
    TWITCH_TOKEN_URL,
)

logger = logging.getLogger(__name__)


class TwitchTokenProvider:
    """Obtain and cache a Twitch app access token.

    The token is reused until ``expires_in`` minus
    :data:`TOKEN_REFRESH_MARGIN_SECONDS` has elapsed, then fetched again on
    the next call.  Concurrent callers share one token request.

    Args:
        client_id: Twitch application client ID.
        client_secret: Twitch application secret.
        http_client: Client used for the token request.
        clock: Monotonic clock in seconds; injectable for tests.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._http_client = http_client
        self._clock = clock
        self._token: str | None = None
        self._refresh_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def client_id(self) -> str:
        return self._client_id

    def invalidate(self) -> None:
        """Forget the cached token so the next call fetches a new one."""
        self._token = None
        self._refresh_at = 0.0

    async def get_token(self) -> str:
        """Return a valid app access token.

        Raises:
            PlatformAuthError: If the token endpoint rejects the credentials,
                is unreachable, or returns no ``access_token``.
        """
        async with self._lock:
            if self._token is not None and self._clock() < self._refresh_at:
                return self._token
            return await self._fetch()

    async def _fetch(self) -> str:
        try:
            response = await self._http_client.post(
                TWITCH_TOKEN_URL,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "client_credentials",
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise PlatformAuthError(
                f"twitch: token request failed with HTTP {exc.response.status_code}",
                platform="twitch",
            ) from exc
        except (httpx.RequestError, ValueError) as exc:
            raise PlatformAuthError(
                f"twitch: token request failed: {exc}", platform="twitch"
            ) from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise PlatformAuthError(
                "twitch: token response has no access_token", platform="twitch"
            )
        expires_in = float(payload.get("expires_in") or 0)
        self._token = token
        self._refresh_at = self._clock() + expires_in - TOKEN_REFRESH_MARGIN_SECONDS
        logger.info("twitch: obtained app access token (expires_in=%ds)", expires_in)
        return token
