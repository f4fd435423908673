"""Twitch streamer ORM models.

Covers:
- TwitchStreamer: a broadcaster seen live in a Korean-language sweep.
- TwitchGameCategory: a Helix game, keyed by ``twitch_game_id``.
- TwitchStreamerCategory: the streamer ↔ category join.
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


class TwitchStreamer(TimestampMixin, Base):
    """A Twitch broadcaster, unique on ``twitch_id``.

    ``viewer_count`` and ``started_at`` describe the stream during which the
    broadcaster was last seen.
    """

    __tablename__ = "twitch_streamers"

    id: Mapped[uuid.UUID] = surrogate_pk()
    twitch_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    login_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    profile_image_url: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    channel_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    viewer_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    started_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        sa.UniqueConstraint("twitch_id", name="uq_twitch_streamers_twitch_id"),
    )

    def __repr__(self) -> str:
        return f"<TwitchStreamer id={self.id} login={self.login_name!r}>"


class TwitchGameCategory(CreatedAtMixin, Base):
    __tablename__ = "twitch_game_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    twitch_game_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    box_art_url: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        sa.UniqueConstraint("twitch_game_id", name="uq_twitch_game_categories_game_id"),
    )

    def __repr__(self) -> str:
        return f"<TwitchGameCategory game_id={self.twitch_game_id!r} name={self.name!r}>"


class TwitchStreamerCategory(CreatedAtMixin, Base):
    __tablename__ = "twitch_streamer_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    streamer_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("twitch_streamers.id"), nullable=False, index=True
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("twitch_game_categories.id"), nullable=False, index=True
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "streamer_id", "category_id", name="uq_twitch_streamer_categories_pair"
        ),
    )
