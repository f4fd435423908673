"""Streamer and category response schemas.

A streamer listed by the catalog routes is one of three variants, tagged
by ``platform``.  YouTube channels carry subscriber and upload data; Twitch
and Chzzk broadcasters carry login / display names, a viewer count and the
start time of their last stream.  :data:`StreamerCard` is the discriminated
union of the three, so every consumer switches on ``platform`` instead of
probing for optional fields.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _StreamerBase(BaseModel):
    """Fields every streamer variant shares."""

    id: uuid.UUID
    description: str = ""
    profile_image_url: str = ""
    channel_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class YouTubeStreamerCard(_StreamerBase):
    platform: Literal["youtube"] = "youtube"
    youtube_channel_id: str
    name: str
    subscribers: int = 0
    latest_uploaded_at: Optional[datetime] = None
    is_active: bool = True


class TwitchStreamerCard(_StreamerBase):
    platform: Literal["twitch"] = "twitch"
    twitch_id: str
    login_name: str
    display_name: str
    viewer_count: Optional[int] = None
    started_at: Optional[datetime] = None


class ChzzkStreamerCard(_StreamerBase):
    platform: Literal["chzzk"] = "chzzk"
    chzzk_id: str
    login_name: str
    display_name: str
    viewer_count: Optional[int] = None
    started_at: Optional[datetime] = None


StreamerCard = Annotated[
    Union[YouTubeStreamerCard, TwitchStreamerCard, ChzzkStreamerCard],
    Field(discriminator="platform"),
]
"""A streamer of any platform, discriminated on ``platform``."""

_CARD_TYPES: dict[str, type[_StreamerBase]] = {
    "youtube": YouTubeStreamerCard,
    "twitch": TwitchStreamerCard,
    "chzzk": ChzzkStreamerCard,
}

streamer_card_adapter: TypeAdapter = TypeAdapter(StreamerCard)


def streamer_card_from_row(platform: str, row: object) -> _StreamerBase:
    """Build the variant for *platform* from an ORM row."""
    return _CARD_TYPES[platform].model_validate(row)


class GameCategoryRead(BaseModel):
    """A game category of any platform.

    Attributes:
        platform_game_id: Twitch / Chzzk category ID; ``None`` on YouTube.
    """

    id: uuid.UUID
    name: str
    display_name: str
    box_art_url: Optional[str] = None
    sort_order: int = 0
    platform_game_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StreamerListResponse(BaseModel):
    platform: str
    category: Optional[str] = None
    count: int
    streamers: list[StreamerCard]
