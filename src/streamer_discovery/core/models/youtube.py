"""YouTube streamer ORM models.

Covers:
- YouTubeStreamer: a Korean gaming channel that passed the candidate filter.
- YouTubeGameCategory: a game swept by keyword search; keyed by ``name``
  because YouTube has no game IDs.
- YouTubeStreamerCategory: the streamer ↔ category join.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from streamer_discovery.core.models.base import (
    Base,
    CreatedAtMixin,
    TimestampMixin,
    surrogate_pk,
)


class YouTubeStreamer(TimestampMixin, Base):
    """A YouTube channel, unique on ``youtube_channel_id``.

    ``is_active`` is cleared by the inactivity check once the latest upload
    is more than a week old and set again when the channel recovers.
    """

    __tablename__ = "youtube_streamers"

    id: Mapped[uuid.UUID] = surrogate_pk()
    youtube_channel_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    profile_image_url: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    channel_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    subscribers: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    latest_uploaded_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true()
    )

    __table_args__ = (
        sa.UniqueConstraint("youtube_channel_id", name="uq_youtube_streamers_channel_id"),
    )

    def __repr__(self) -> str:
        return f"<YouTubeStreamer id={self.id} channel={self.youtube_channel_id!r}>"


class YouTubeGameCategory(CreatedAtMixin, Base):
    """A game category for YouTube discovery, ordered by ``sort_order``."""

    __tablename__ = "youtube_game_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    box_art_url: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        sa.UniqueConstraint("name", name="uq_youtube_game_categories_name"),
    )

    def __repr__(self) -> str:
        return f"<YouTubeGameCategory name={self.name!r}>"


class YouTubeStreamerCategory(CreatedAtMixin, Base):
    __tablename__ = "youtube_streamer_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    streamer_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("youtube_streamers.id"), nullable=False, index=True
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("youtube_game_categories.id"), nullable=False, index=True
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "streamer_id", "category_id", name="uq_youtube_streamer_categories_pair"
        ),
    )
