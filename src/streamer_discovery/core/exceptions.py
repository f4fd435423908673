"""Application-wide exception hierarchy for Streamer Discovery.

All custom exceptions subclass ``StreamerDiscoveryError``, enabling
consistent error handling and structured logging across the application.

Hierarchy::

    StreamerDiscoveryError
    ├── PlatformFetchError        (per item: logged, skipped)
    │   └── PlatformRateLimitError    (retry_after: float)
    ├── PlatformAuthError         (aborts the current run)
    ├── MissingCredentialError
    ├── InvalidRequestError       (HTTP 400)
    └── StorageError

``PlatformAuthError`` does not derive from
``PlatformFetchError``: orchestrators catch fetch failures per channel,
and an authentication failure must escape those handlers.
"""

from __future__ import annotations


class StreamerDiscoveryError(Exception):
    """Base class for all Streamer Discovery exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Platform exceptions
# ---------------------------------------------------------------------------


class PlatformFetchError(StreamerDiscoveryError):
    """Raised when a platform API call fails or returns a malformed body.

    Args:
        message: Human-readable description of the failure.
        platform: Platform identifier (``"youtube"``, ``"twitch"``, ``"chzzk"``).
        endpoint: API endpoint that failed (e.g. ``"search"``).
        status_code: HTTP status code, when the failure was an HTTP response.
        reason: Platform error reason from the response body, if any
            (YouTube: ``"playlistNotFound"``, ...).
    """

    def __init__(
        self,
        message: str,
        platform: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.platform = platform
        self.endpoint = endpoint
        self.status_code = status_code
        self.reason = reason


class PlatformRateLimitError(PlatformFetchError):
    """Raised when a platform rejects a call for quota or rate reasons.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds the platform asked us to wait. Defaults to 60.
        platform: Platform identifier.
        endpoint: API endpoint that was rate-limited.
        status_code: HTTP status code of the rejection.
    """

    def __init__(
        self,
        message: str,
        retry_after: float = 60.0,
        platform: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message, platform=platform, endpoint=endpoint, status_code=status_code
        )
        self.retry_after = retry_after


class PlatformAuthError(StreamerDiscoveryError):
    """Raised when a platform rejects our credentials or token.

    Propagates out of discovery runs instead of being handled per item.

    Args:
        message: Human-readable description of the failure.
        platform: Platform identifier.
    """

    def __init__(self, message: str, platform: str | None = None) -> None:
        super().__init__(message)
        self.platform = platform


class MissingCredentialError(StreamerDiscoveryError):
    """Raised when a platform client is built without its credentials.

    Args:
        platform: Platform identifier.
        setting: Name of the missing settings field.
    """

    def __init__(self, platform: str, setting: str) -> None:
        super().__init__(
            f"{platform}: missing credential '{setting.upper()}' in the environment"
        )
        self.platform = platform
        self.setting = setting


class InvalidRequestError(StreamerDiscoveryError):
    """Raised when an API request body is malformed; answered with HTTP 400."""


# ---------------------------------------------------------------------------
# Storage exceptions
# ---------------------------------------------------------------------------


class StorageError(StreamerDiscoveryError):
    """Raised when a storage operation that must not be skipped fails.

    Per-row upsert failures are logged and counted instead; this is for
    bulk operations such as truncating a platform's tables.
    """
