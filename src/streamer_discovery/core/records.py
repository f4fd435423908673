"""Platform-neutral records passed from discovery code to the writer.

Clients return raw platform JSON; each platform's discovery module turns
that JSON into these records so the writer never sees platform payloads.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime


class Platform(str, enum.Enum):
    """Streaming platforms with their own streamer / category / mapping tables."""

    YOUTUBE = "youtube"
    TWITCH = "twitch"
    CHZZK = "chzzk"


class LinkResult(str, enum.Enum):
    """Outcome of linking a streamer to a category or keyword."""

    CREATED = "created"
    EXISTING = "existing"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not LinkResult.FAILED


@dataclass(frozen=True)
class StreamerRecord:
    """One streamer as seen on a platform.

    Attributes:
        platform: Platform the streamer belongs to.
        platform_id: Platform-native channel / user ID (the natural key).
        name: YouTube channel title, or the login name on Twitch / Chzzk.
        display_name: Human-readable name.  Equal to ``name`` on YouTube
            and Chzzk.
        description: Channel description; empty when the platform has none.
        profile_image_url: Avatar URL; empty when unknown.
        channel_url: Public URL of the channel.
        popularity: Subscribers (YouTube) or concurrent viewers.
        last_active_at: Latest upload (YouTube) or stream start time.
    """

    platform: Platform
    platform_id: str
    name: str
    display_name: str
    channel_url: str
    description: str = ""
    profile_image_url: str = ""
    popularity: int = 0
    last_active_at: datetime | None = None


@dataclass(frozen=True)
class CategoryRecord:
    """A game category as seen on a platform.

    ``platform_id`` is ``None`` for YouTube, whose categories are keyed by
    ``name``.
    """

    platform: Platform
    name: str
    display_name: str
    platform_id: str | None = None
    box_art_url: str | None = None

    @property
    def natural_key(self) -> str:
        return self.platform_id if self.platform_id is not None else self.name
