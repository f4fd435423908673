"""Chzzk streamer ORM models.

Chzzk exposes only a channel name, so ``login_name`` and ``display_name``
both carry it.  Categories are keyed by the live's ``liveCategory`` code.
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


class ChzzkStreamer(TimestampMixin, Base):
    __tablename__ = "chzzk_streamers"

    id: Mapped[uuid.UUID] = surrogate_pk()
    chzzk_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    login_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    profile_image_url: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    channel_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    viewer_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    started_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        sa.UniqueConstraint("chzzk_id", name="uq_chzzk_streamers_chzzk_id"),
    )

    def __repr__(self) -> str:
        return f"<ChzzkStreamer id={self.id} chzzk_id={self.chzzk_id!r}>"


class ChzzkGameCategory(CreatedAtMixin, Base):
    __tablename__ = "chzzk_game_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    chzzk_game_id: Mapped[str] = mapped_column(sa.String(128), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    box_art_url: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        sa.UniqueConstraint("chzzk_game_id", name="uq_chzzk_game_categories_game_id"),
    )


class ChzzkStreamerCategory(CreatedAtMixin, Base):
    __tablename__ = "chzzk_streamer_categories"

    id: Mapped[uuid.UUID] = surrogate_pk()
    streamer_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("chzzk_streamers.id"), nullable=False, index=True
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        sa.ForeignKey("chzzk_game_categories.id"), nullable=False, index=True
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "streamer_id", "category_id", name="uq_chzzk_streamer_categories_pair"
        ),
    )
