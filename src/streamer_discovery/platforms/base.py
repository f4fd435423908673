"""Shared HTTP plumbing for the platform API clients.

Every client wraps one :class:`httpx.AsyncClient` (injectable for tests)
and maps transport and HTTP failures onto the application exceptions:

- transport errors, non-2xx statuses and non-object JSON bodies raise
  :class:`~streamer_discovery.core.exceptions.PlatformFetchError`;
- HTTP 429 raises
  :class:`~streamer_discovery.core.exceptions.PlatformRateLimitError`;
- HTTP 401 / 403 raise
  :class:`~streamer_discovery.core.exceptions.PlatformAuthError` unless a
  subclass overrides :meth:`PlatformClient._auth_failure`.

Nothing here retries.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from streamer_discovery.core.exceptions import (
    PlatformAuthError,
    PlatformFetchError,
    PlatformRateLimitError,
    StreamerDiscoveryError,
)
from streamer_discovery.core.records import Platform

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: float = 15.0


class PlatformClient:
    """Base class for the YouTube, Twitch and Chzzk clients.

    Use as an async context manager, or call :meth:`aclose` when done.  A
    client passed in via ``http_client`` is never closed by this class.

    Args:
        http_client: Optional injected :class:`httpx.AsyncClient`.
        timeout: Per-request timeout in seconds for the owned client.
    """

    platform: Platform

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    async def __aenter__(self) -> PlatformClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        url: str,
        *,
        endpoint: str,
        params: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET *url* and return its JSON object body.

        Args:
            url: Absolute request URL.
            endpoint: Short endpoint name used in error messages.
            params: Query parameters (mapping or list of pairs).
            headers: Extra request headers.

        Returns:
            The parsed JSON object.

        Raises:
            PlatformAuthError: On HTTP 401 / 403.
            PlatformRateLimitError: On HTTP 429.
            PlatformFetchError: On any other failure.
        """
        return await self._request_json(
            "GET", url, endpoint=endpoint, params=params, headers=headers
        )

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        endpoint: str,
        params: Any = None,
        headers: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        name = self.platform.value
        try:
            response = await self.http.request(
                method, url, params=params, headers=headers, data=data
            )
        except httpx.RequestError as exc:
            raise PlatformFetchError(
                f"{name}: connection error on '{endpoint}': {exc}",
                platform=name,
                endpoint=endpoint,
            ) from exc

        status = response.status_code
        if status == 429:
            retry_after = _retry_after(response)
            raise PlatformRateLimitError(
                f"{name}: rate limited on '{endpoint}'; retry_after={retry_after}s",
                retry_after=retry_after,
                platform=name,
                endpoint=endpoint,
                status_code=status,
            )
        if status in (401, 403):
            self._auth_failure(response, endpoint)
        if not response.is_success:
            raise PlatformFetchError(
                f"{name}: HTTP {status} on '{endpoint}'",
                platform=name,
                endpoint=endpoint,
                status_code=status,
                reason=self._error_reason(response),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise PlatformFetchError(
                f"{name}: malformed JSON body on '{endpoint}'",
                platform=name,
                endpoint=endpoint,
                status_code=status,
            ) from exc
        if not isinstance(body, dict):
            raise PlatformFetchError(
                f"{name}: expected a JSON object on '{endpoint}', "
                f"got {type(body).__name__}",
                platform=name,
                endpoint=endpoint,
                status_code=status,
            )
        return body

    def _error_reason(self, response: httpx.Response) -> str | None:
        """Return the platform's error reason from a failed response, if any."""
        return None

    def _auth_failure(self, response: httpx.Response, endpoint: str) -> None:
        """Raise for an HTTP 401 / 403 response.

        Subclasses override this when some 403s are not credential
        problems (YouTube reports quota exhaustion as 403).
        """
        raise PlatformAuthError(
            f"{self.platform.value}: HTTP {response.status_code} on '{endpoint}'",
            platform=self.platform.value,
        )

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def _probe(self) -> None:
        """Make the cheapest authenticated call the platform offers."""
        raise NotImplementedError

    async def health_check(self) -> dict[str, Any]:
        """Verify that the platform API is reachable with our credentials.

        Returns:
            Dict with ``platform``, ``status`` (``"ok"`` | ``"down"``),
            ``checked_at`` and, when down, ``detail``.
        """
        base: dict[str, Any] = {
            "platform": self.platform.value,
            "checked_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self._probe()
        except StreamerDiscoveryError as exc:
            logger.warning("%s: health check failed: %s", self.platform.value, exc)
            return {**base, "status": "down", "detail": str(exc)}
        return {**base, "status": "ok"}


def _retry_after(response: httpx.Response) -> float:
    try:
        return float(response.headers.get("Retry-After", "60"))
    except ValueError:
        return 60.0


def chunked(items: list[str], size: int) -> list[list[str]]:
    """Split *items* into consecutive lists of at most *size* elements."""
    return [items[i : i + size] for i in range(0, len(items), size)]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp such as ``2024-05-01T12:00:00Z``.

    Returns ``None`` for empty or malformed values; naive results are
    taken to be UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
