"""Read-only catalog routes backing the streamer browser.

``GET /api/{platform}/categories``   categories by ``sort_order``
``GET /api/{platform}/streamers``    streamers, most popular first
                                     (``?category=<name>``, ``?limit=``)
``GET /api/keywords``                legacy keyword tags
``GET /api/notices``                 notices, important ones first
``GET /api/notices/{notice_id}``     one notice
"""

from __future__ import annotations

import uuid
from typing import Annotated, Optional

import sqlalchemy as sa
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamer_discovery.core.database import get_db
from streamer_discovery.core.models import Keyword, Notice
from streamer_discovery.core.platform_tables import PlatformTables, tables_for
from streamer_discovery.core.records import Platform
from streamer_discovery.core.schemas import (
    GameCategoryRead,
    KeywordRead,
    NoticeRead,
    StreamerListResponse,
    streamer_card_from_row,
)

router = APIRouter(prefix="/api", tags=["catalog"])

DbSession = Annotated[AsyncSession, Depends(get_db)]


def _tables(platform: str) -> PlatformTables:
    try:
        return tables_for(platform)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown platform '{platform}'.",
        ) from None


# ---------------------------------------------------------------------------
# Platform catalog
# ---------------------------------------------------------------------------


@router.get("/{platform}/categories", response_model=list[GameCategoryRead])
async def list_categories(platform: str, db: DbSession) -> list[GameCategoryRead]:
    tables = _tables(platform)
    model = tables.category
    result = await db.execute(sa.select(model).order_by(model.sort_order, model.name))
    categories = []
    for row in result.scalars().all():
        item = GameCategoryRead.model_validate(row)
        if tables.category_key != "name":
            item.platform_game_id = getattr(row, tables.category_key)
        categories.append(item)
    return categories


@router.get("/{platform}/streamers", response_model=StreamerListResponse)
async def list_streamers(
    platform: str,
    db: DbSession,
    category: Annotated[Optional[str], Query(description="Category name")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> StreamerListResponse:
    """List streamers of one platform, most subscribers / viewers first."""
    tables = _tables(platform)
    model = tables.streamer
    stmt = sa.select(model)
    if category:
        stmt = (
            stmt.join(tables.mapping, tables.mapping.streamer_id == model.id)
            .join(tables.category, tables.category.id == tables.mapping.category_id)
            .where(tables.category.name == category)
        )
    if tables.platform is Platform.YOUTUBE:
        stmt = stmt.where(model.is_active.is_(True))
    sort_column = getattr(model, tables.streamer_sort)
    stmt = stmt.order_by(sort_column.desc().nulls_last(), model.id).limit(limit)

    rows = (await db.execute(stmt)).scalars().all()
    streamers = [streamer_card_from_row(tables.platform.value, row) for row in rows]
    return StreamerListResponse(
        platform=tables.platform.value,
        category=category,
        count=len(streamers),
        streamers=streamers,
    )


# ---------------------------------------------------------------------------
# Keywords and notices
# ---------------------------------------------------------------------------


@router.get("/keywords", response_model=list[KeywordRead])
async def list_keywords(db: DbSession) -> list[Keyword]:
    result = await db.execute(sa.select(Keyword).order_by(Keyword.sort_order, Keyword.name))
    return list(result.scalars().all())


@router.get("/notices", response_model=list[NoticeRead])
async def list_notices(db: DbSession) -> list[Notice]:
    result = await db.execute(
        sa.select(Notice).order_by(Notice.is_important.desc(), Notice.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/notices/{notice_id}", response_model=NoticeRead)
async def get_notice(notice_id: uuid.UUID, db: DbSession) -> Notice:
    notice = await db.get(Notice, notice_id)
    if notice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notice not found.")
    return notice
