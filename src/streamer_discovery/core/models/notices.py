"""Site notice ORM model (read-only from this service)."""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from streamer_discovery.core.models.base import Base, TimestampMixin, surrogate_pk


class Notice(TimestampMixin, Base):
    __tablename__ = "notices"

    id: Mapped[uuid.UUID] = surrogate_pk()
    title: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    is_important: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False, server_default=sa.false()
    )

    def __repr__(self) -> str:
        return f"<Notice id={self.id} title={self.title!r}>"
