"""SQLAlchemy declarative base and shared mixins for all ORM models.

Provides:
- Base: the DeclarativeBase subclass all models inherit from
- CreatedAtMixin: created_at column with a database-side default
- TimestampMixin: created_at / updated_at columns

Column types are the generic SQLAlchemy ones (``sa.Uuid``,
``sa.DateTime(timezone=True)``) so the same models run on PostgreSQL in
production and SQLite in the test suite.
"""

from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all Streamer Discovery models."""

    type_annotation_map = {
        uuid.UUID: sa.Uuid(as_uuid=True),
        datetime: sa.DateTime(timezone=True),
    }


def surrogate_pk() -> Mapped[uuid.UUID]:
    """Return the surrogate UUID primary key column used by every join."""
    return mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class CreatedAtMixin:
    """Adds a created_at column that is set once, on INSERT."""

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


class TimestampMixin(CreatedAtMixin):
    """Adds created_at and updated_at columns.

    The writer sets ``updated_at`` explicitly on every upsert; the server
    default only fires on INSERT.
    """

    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )
