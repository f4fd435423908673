"""Initial schema: per-platform streamer tables, legacy tables and notices.

Creates, in FK-dependency order:

1. youtube_streamers / youtube_game_categories / youtube_streamer_categories
2. twitch_streamers / twitch_game_categories / twitch_streamer_categories
3. chzzk_streamers / chzzk_game_categories / chzzk_streamer_categories
4. streamers, streamer_platforms, keywords, streamer_keywords (legacy)
5. notices

Every platform triple carries the same unique constraints the writer's
``ON CONFLICT`` clauses target: the platform channel ID on streamers, the
category key on categories and ``(streamer_id, category_id)`` on mappings.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def _live_streamer_table(platform: str) -> None:
    """Twitch and Chzzk streamers share one shape."""
    key = f"{platform}_id"
    op.create_table(
        f"{platform}_streamers",
        _id(),
        sa.Column(key, sa.String(64), nullable=False),
        sa.Column("login_name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("profile_image_url", sa.Text(), nullable=False),
        sa.Column("channel_url", sa.Text(), nullable=False),
        sa.Column("viewer_count", sa.Integer(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint(key, name=f"uq_{platform}_streamers_{key}"),
    )


def _category_table(platform: str, key_column: sa.Column | None, unique_name: str) -> None:
    columns = [_id()]
    if key_column is not None:
        columns.append(key_column)
    op.create_table(
        f"{platform}_game_categories",
        *columns,
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("box_art_url", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        sa.UniqueConstraint(
            key_column.name if key_column is not None else "name", name=unique_name
        ),
    )


def _mapping_table(platform: str) -> None:
    table = f"{platform}_streamer_categories"
    op.create_table(
        table,
        _id(),
        sa.Column(
            "streamer_id", sa.Uuid(), sa.ForeignKey(f"{platform}_streamers.id"), nullable=False
        ),
        sa.Column(
            "category_id",
            sa.Uuid(),
            sa.ForeignKey(f"{platform}_game_categories.id"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("streamer_id", "category_id", name=f"uq_{table}_pair"),
    )
    op.create_index(f"ix_{table}_streamer_id", table, ["streamer_id"])
    op.create_index(f"ix_{table}_category_id", table, ["category_id"])


# ---------------------------------------------------------------------------
# Upgrade
# ---------------------------------------------------------------------------

def upgrade() -> None:
    # 1. YouTube
    op.create_table(
        "youtube_streamers",
        _id(),
        sa.Column("youtube_channel_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("profile_image_url", sa.Text(), nullable=False),
        sa.Column("channel_url", sa.Text(), nullable=False),
        sa.Column("subscribers", sa.Integer(), nullable=False),
        sa.Column("latest_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("youtube_channel_id", name="uq_youtube_streamers_channel_id"),
    )
    _category_table("youtube", None, "uq_youtube_game_categories_name")
    _mapping_table("youtube")

    # 2. Twitch
    _live_streamer_table("twitch")
    _category_table(
        "twitch",
        sa.Column("twitch_game_id", sa.String(64), nullable=False),
        "uq_twitch_game_categories_game_id",
    )
    _mapping_table("twitch")

    # 3. Chzzk
    _live_streamer_table("chzzk")
    _category_table(
        "chzzk",
        sa.Column("chzzk_game_id", sa.String(128), nullable=False),
        "uq_chzzk_game_categories_game_id",
    )
    _mapping_table("chzzk")

    # 4. Legacy keyword model
    op.create_table(
        "streamers",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False),
        sa.Column("gender", sa.String(16), nullable=False),
        sa.Column("profile_image_url", sa.Text(), nullable=False),
        sa.Column("channel_url", sa.Text(), nullable=False),
        sa.Column("subscribers", sa.Integer(), nullable=False),
        sa.Column("game_type", sa.String(64), nullable=True),
        sa.Column("latest_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "streamer_platforms",
        _id(),
        sa.Column("streamer_id", sa.String(64), sa.ForeignKey("streamers.id"), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False),
        sa.Column("platform_id", sa.String(64), nullable=False),
        sa.Column("channel_url", sa.Text(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("platform", "platform_id", name="uq_streamer_platforms_account"),
    )
    op.create_index("ix_streamer_platforms_streamer_id", "streamer_platforms", ["streamer_id"])
    op.create_table(
        "keywords",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        sa.UniqueConstraint("name", name="uq_keywords_name"),
    )
    op.create_table(
        "streamer_keywords",
        _id(),
        sa.Column("streamer_id", sa.String(64), sa.ForeignKey("streamers.id"), nullable=False),
        sa.Column("keyword_id", sa.Uuid(), sa.ForeignKey("keywords.id"), nullable=False),
        _created_at(),
        sa.UniqueConstraint("streamer_id", "keyword_id", name="uq_streamer_keywords_pair"),
    )
    op.create_index("ix_streamer_keywords_streamer_id", "streamer_keywords", ["streamer_id"])
    op.create_index("ix_streamer_keywords_keyword_id", "streamer_keywords", ["keyword_id"])

    # 5. Notices
    op.create_table(
        "notices",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_important", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
    )


# ---------------------------------------------------------------------------
# Downgrade
# ---------------------------------------------------------------------------

def downgrade() -> None:
    op.drop_table("notices")
    op.drop_table("streamer_keywords")
    op.drop_table("keywords")
    op.drop_table("streamer_platforms")
    op.drop_table("streamers")
    for platform in ("chzzk", "twitch", "youtube"):
        op.drop_table(f"{platform}_streamer_categories")
        op.drop_table(f"{platform}_game_categories")
        op.drop_table(f"{platform}_streamers")
