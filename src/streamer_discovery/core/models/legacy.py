"""Legacy keyword-tagged streamer models.

The first collection pipeline stored YouTube channels in a flat
``streamers`` table keyed by the channel ID itself, tagged them with a
``game_type`` string and linked them to free-form ``keywords``.  The
keyword linker and the ``collect-streamers`` cron route still maintain
these tables alongside the per-platform ones.
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


class LegacyStreamer(TimestampMixin, Base):
    """A streamer in the legacy model; ``id`` is the platform channel ID."""

    __tablename__ = "streamers"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    platform: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="youtube")
    gender: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="unknown")
    profile_image_url: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    channel_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    subscribers: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    game_type: Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    latest_uploaded_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<LegacyStreamer id={self.id!r} game_type={self.game_type!r}>"


class StreamerPlatform(CreatedAtMixin, Base):
    """A platform account attached to a legacy streamer."""

    __tablename__ = "streamer_platforms"

    id: Mapped[uuid.UUID] = surrogate_pk()
    streamer_id: Mapped[str] = mapped_column(
        sa.ForeignKey("streamers.id"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    platform_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    channel_url: Mapped[str] = mapped_column(sa.Text, nullable=False)

    __table_args__ = (
        sa.UniqueConstraint("platform", "platform_id", name="uq_streamer_platforms_account"),
    )


class Keyword(CreatedAtMixin, Base):
    """A flat tag; ``type`` distinguishes game titles from other tags."""

    __tablename__ = "keywords"

    id: Mapped[uuid.UUID] = surrogate_pk()
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    type: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    sort_order: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (sa.UniqueConstraint("name", name="uq_keywords_name"),)

    def __repr__(self) -> str:
        return f"<Keyword name={self.name!r} type={self.type!r}>"


class StreamerKeyword(CreatedAtMixin, Base):
    __tablename__ = "streamer_keywords"

    id: Mapped[uuid.UUID] = surrogate_pk()
    streamer_id: Mapped[str] = mapped_column(
        sa.ForeignKey("streamers.id"), nullable=False, index=True
    )
    keyword_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("keywords.id"), nullable=False, index=True
    )

    __table_args__ = (
        sa.UniqueConstraint("streamer_id", "keyword_id", name="uq_streamer_keywords_pair"),
    )
