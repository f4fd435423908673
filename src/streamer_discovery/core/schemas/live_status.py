"""Live-status request and response schemas.

Responses keep the camelCase field names the frontend polls with
(``isLive``, ``viewerCount``, ...); the Python attributes are snake_case
and the aliases are used on the wire.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LiveStatus(BaseModel):
    """Live status of one channel.

    A channel that is not live has every field except ``is_live`` set to
    ``None``.  ``error`` is only present when the per-channel lookup failed.
    """

    is_live: bool = Field(False, alias="isLive")
    viewer_count: Optional[int] = Field(None, alias="viewerCount")
    title: Optional[str] = None
    game_name: Optional[str] = Field(None, alias="gameName")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    started_at: Optional[str] = Field(None, alias="startedAt")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def offline(cls, error: str | None = None) -> LiveStatus:
        return cls(is_live=False, error=error)

    def to_wire(self) -> dict:
        """Serialise with aliases, omitting ``error`` when unset."""
        data = self.model_dump(by_alias=True)
        if data.get("error") is None:
            data.pop("error", None)
        return data


class TwitchLiveStatusRequest(BaseModel):
    twitch_ids: list[str] = Field(..., alias="twitchIds", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class ChzzkLiveStatusRequest(BaseModel):
    chzzk_ids: list[str] = Field(..., alias="chzzkIds", min_length=1)

    model_config = ConfigDict(populate_by_name=True)
