"""Candidate filter for YouTube channels.

Decides whether a channel found by keyword search qualifies as a Korean
gaming streamer.  Checks run cheapest first and stop at the first failure:

1. Language: title + description must be more than 20 % Hangul syllables.
2. Channel: subscriber count visible and at least 1,000; uploads playlist
   present.
3. Activity: the newest upload exists, has a publish date and is at most
   30 days old.
4. Category: the newest upload is in the Gaming category (ID ``"20"``).

The pure helpers (:func:`hangul_ratio`, :func:`is_korean_text`,
:func:`check_channel`, :func:`check_latest_upload`) hold the rules;
:class:`CandidateFilter` adds the two or three API calls they need.

Rejections are values, not exceptions: a failed auxiliary call yields a
``FETCH_FAILED`` rejection.  Only :class:`PlatformAuthError` escapes.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from streamer_discovery.core.exceptions import PlatformFetchError
from streamer_discovery.platforms.base import parse_timestamp
from streamer_discovery.platforms.youtube.client import YouTubeClient
from streamer_discovery.platforms.youtube.config import (
    GAMING_CATEGORY_ID,
    MAX_UPLOAD_AGE_DAYS,
    MIN_HANGUL_RATIO,
    MIN_SUBSCRIBERS,
)

logger = logging.getLogger(__name__)

_HANGUL_SYLLABLE = re.compile("[가-힯]")
_SECONDS_PER_DAY = 86_400.0


class RejectionReason(str, enum.Enum):
    NOT_KOREAN = "not_korean"
    CHANNEL_NOT_FOUND = "channel_not_found"
    SUBSCRIBERS_HIDDEN = "subscribers_hidden"
    TOO_FEW_SUBSCRIBERS = "too_few_subscribers"
    NO_UPLOADS_PLAYLIST = "no_uploads_playlist"
    NO_UPLOADS = "no_uploads"
    NO_PUBLISH_DATE = "no_publish_date"
    STALE_UPLOADS = "stale_uploads"
    NOT_GAMING = "not_gaming"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class ChannelDetails:
    """Channel facts gathered while filtering, ready to be stored.

    Attributes:
        channel_id: YouTube channel ID.
        title: Channel title.
        description: Channel description.
        profile_image_url: Best available avatar (high, medium, default).
        subscribers: Public subscriber count.
        uploads_playlist_id: The channel's uploads playlist.
        latest_upload_at: Publish time of the newest upload.
        latest_video_id: ID of the newest upload, when known.
    """

    channel_id: str
    title: str
    description: str
    profile_image_url: str
    subscribers: int
    uploads_playlist_id: str
    latest_upload_at: datetime | None = None
    latest_video_id: str | None = None


@dataclass(frozen=True)
class FilterResult:
    """Outcome of filtering one channel."""

    reason: RejectionReason | None = None
    details: ChannelDetails | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def reject(cls, reason: RejectionReason, message: str = "") -> FilterResult:
        return cls(reason=reason, message=message or reason.value)


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------


def hangul_ratio(text: str) -> float:
    """Return the share of Hangul syllables (U+AC00–U+D7AF) in *text*."""
    if not text:
        return 0.0
    return len(_HANGUL_SYLLABLE.findall(text)) / len(text)


def is_korean_text(text: str) -> bool:
    """Return True when *text* is strictly more than 20 % Hangul syllables."""
    return hangul_ratio(text) > MIN_HANGUL_RATIO


def pick_thumbnail(snippet: dict[str, Any]) -> str:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def check_channel(
    channel: dict[str, Any], min_subscribers: int = MIN_SUBSCRIBERS
) -> FilterResult:
    """Apply the subscriber and uploads-playlist rules to a channel resource.

    Returns:
        An accepted result whose ``details`` lack upload data, or a
        rejection.
    """
    statistics = channel.get("statistics") or {}
    if statistics.get("hiddenSubscriberCount"):
        return FilterResult.reject(RejectionReason.SUBSCRIBERS_HIDDEN)

    try:
        subscribers = int(statistics.get("subscriberCount") or 0)
    except (TypeError, ValueError):
        subscribers = 0
    if subscribers < min_subscribers:
        return FilterResult.reject(
            RejectionReason.TOO_FEW_SUBSCRIBERS, f"only {subscribers} subscribers"
        )

    uploads = (
        (channel.get("contentDetails") or {}).get("relatedPlaylists") or {}
    ).get("uploads")
    if not uploads:
        return FilterResult.reject(RejectionReason.NO_UPLOADS_PLAYLIST)

    snippet = channel.get("snippet") or {}
    return FilterResult(
        details=ChannelDetails(
            channel_id=channel.get("id", ""),
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            profile_image_url=pick_thumbnail(snippet),
            subscribers=subscribers,
            uploads_playlist_id=uploads,
        )
    )


def check_latest_upload(
    items: list[dict[str, Any]],
    now: datetime,
    max_age_days: float = MAX_UPLOAD_AGE_DAYS,
) -> tuple[FilterResult, datetime | None, str | None]:
    """Apply the recent-activity rule to a channel's newest playlist items.

    Args:
        items: ``playlistItems.list`` items, newest first.
        now: Reference time for the age computation.
        max_age_days: Oldest accepted age; an upload exactly this old passes.

    Returns:
        Tuple of (result, publish time, video ID).
    """
    if not items:
        return FilterResult.reject(RejectionReason.NO_UPLOADS), None, None

    latest = items[0]
    snippet = latest.get("snippet") or {}
    video_id = (latest.get("contentDetails") or {}).get("videoId") or (
        snippet.get("resourceId") or {}
    ).get("videoId")
    published_at = parse_timestamp(snippet.get("publishedAt"))
    if published_at is None:
        return FilterResult.reject(RejectionReason.NO_PUBLISH_DATE), None, video_id

    age_days = (now - published_at).total_seconds() / _SECONDS_PER_DAY
    if age_days > max_age_days:
        return (
            FilterResult.reject(
                RejectionReason.STALE_UPLOADS, f"latest upload {age_days:.1f} days old"
            ),
            published_at,
            video_id,
        )
    return FilterResult(), published_at, video_id


def is_gaming_video(video: dict[str, Any] | None) -> bool:
    return bool(video) and (video.get("snippet") or {}).get("categoryId") == GAMING_CATEGORY_ID


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateFilter:
    """Run the filter rules against live YouTube data.

    Args:
        client: YouTube API client for the auxiliary calls.
        clock: Returns the current UTC time; injectable for tests.
        min_subscribers: Subscriber floor.
        max_upload_age_days: Newest-upload age ceiling.
    """

    def __init__(
        self,
        client: YouTubeClient,
        clock: Callable[[], datetime] = _utcnow,
        min_subscribers: int = MIN_SUBSCRIBERS,
        max_upload_age_days: float = MAX_UPLOAD_AGE_DAYS,
    ) -> None:
        self._client = client
        self._clock = clock
        self._min_subscribers = min_subscribers
        self._max_upload_age_days = max_upload_age_days

    async def channel_details(self, channel_id: str) -> FilterResult:
        """Fetch a channel and its newest upload and apply rules 2 and 3.

        Used on its own by the maintenance jobs, which refresh stored
        channels without re-checking language or category.
        """
        try:
            channel = await self._client.get_channel(channel_id)
            if channel is None:
                return FilterResult.reject(RejectionReason.CHANNEL_NOT_FOUND)
            result = check_channel(channel, self._min_subscribers)
            if not result.accepted or result.details is None:
                return result
            items = await self._client.get_latest_playlist_items(
                result.details.uploads_playlist_id
            )
        except PlatformFetchError as exc:
            return FilterResult.reject(RejectionReason.FETCH_FAILED, str(exc))

        upload, published_at, video_id = check_latest_upload(
            items, self._clock(), self._max_upload_age_days
        )
        if not upload.accepted:
            return upload

        details = result.details
        return FilterResult(
            details=ChannelDetails(
                channel_id=details.channel_id or channel_id,
                title=details.title,
                description=details.description,
                profile_image_url=details.profile_image_url,
                subscribers=details.subscribers,
                uploads_playlist_id=details.uploads_playlist_id,
                latest_upload_at=published_at,
                latest_video_id=video_id,
            )
        )

    async def evaluate(
        self, channel_id: str, title: str, description: str
    ) -> FilterResult:
        """Apply every rule to a search hit.

        Args:
            channel_id: Channel ID from the search result.
            title: Channel title from the search snippet.
            description: Channel description from the search snippet.

        Returns:
            An accepted result carrying :class:`ChannelDetails`, or the
            first rejection.

        Raises:
            PlatformAuthError: If the API rejects our key.
        """
        if not is_korean_text(f"{title}{description}"):
            return FilterResult.reject(RejectionReason.NOT_KOREAN)

        result = await self.channel_details(channel_id)
        if not result.accepted or result.details is None:
            return result

        video_id = result.details.latest_video_id
        if not video_id:
            return FilterResult.reject(RejectionReason.NOT_GAMING, "latest upload has no video id")
        try:
            video = await self._client.get_video(video_id)
        except PlatformFetchError as exc:
            return FilterResult.reject(RejectionReason.FETCH_FAILED, str(exc))
        if not is_gaming_video(video):
            return FilterResult.reject(RejectionReason.NOT_GAMING)
        return result
