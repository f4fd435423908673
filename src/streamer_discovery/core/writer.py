"""Upsert and mapping writer shared by every discovery and maintenance job.

Each public method opens its own session and transaction, so one failed
write never poisons the next.  Write failures are logged with the
human-readable entity name and reported as ``None`` / ``LinkResult.FAILED``;
only :meth:`StreamerWriter.truncate_platform` raises.

All writes are keyed by natural platform IDs:

- streamers: ``INSERT .. ON CONFLICT (<natural id>) DO UPDATE``; the
  ``created_at`` column is never part of the update set.
- categories: lookup by natural key, then ``INSERT .. ON CONFLICT DO
  NOTHING`` with a re-read when a concurrent writer won the race.
- mappings: ``INSERT .. ON CONFLICT (streamer_id, category_id) DO
  NOTHING RETURNING id``; a returned row means the link was created.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
import structlog
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from streamer_discovery.core.exceptions import StorageError
from streamer_discovery.core.models import (
    Keyword,
    LegacyStreamer,
    StreamerKeyword,
    StreamerPlatform,
    YouTubeGameCategory,
    YouTubeStreamer,
    YouTubeStreamerCategory,
)
from streamer_discovery.core.platform_tables import tables_for
from streamer_discovery.core.records import (
    CategoryRecord,
    LinkResult,
    Platform,
    StreamerRecord,
)

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _insert(session: AsyncSession, model: Any) -> Any:
    """Return a dialect-specific INSERT supporting ``on_conflict_*``."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


class StreamerWriter:
    """Persist streamers, categories and their links.

    Args:
        session_factory: Factory for the sessions each write runs in.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Streamers
    # ------------------------------------------------------------------

    async def upsert_streamer(self, record: StreamerRecord) -> uuid.UUID | None:
        """Insert or refresh a streamer keyed by its platform-native ID.

        Args:
            record: The streamer to persist.

        Returns:
            The streamer's surrogate ID, or ``None`` if the write failed.
        """
        tables = tables_for(record.platform)
        model = tables.streamer
        now = utcnow()
        values = tables.streamer_values(record)
        if record.platform is Platform.YOUTUBE:
            values["is_active"] = True

        try:
            async with self._session_factory() as session, session.begin():
                stmt = _insert(session, model).values(
                    id=uuid.uuid4(), updated_at=now, **values
                )
                update_set = {
                    column: stmt.excluded[column]
                    for column in values
                    if column != tables.streamer_key
                }
                update_set["updated_at"] = now
                stmt = stmt.on_conflict_do_update(
                    index_elements=[tables.streamer_key],
                    set_=update_set,
                ).returning(model.id)
                result = await session.execute(stmt)
                streamer_id = result.scalar_one()
        except SQLAlchemyError as exc:
            logger.warning(
                "streamer_upsert_failed",
                platform=record.platform.value,
                name=record.display_name,
                platform_id=record.platform_id,
                error=str(exc),
            )
            return None

        logger.debug(
            "streamer_upserted",
            platform=record.platform.value,
            name=record.display_name,
        )
        return streamer_id

    async def existing_streamer_ids(self, platform: Platform) -> set[str]:
        """Return every stored platform-native streamer ID for *platform*."""
        tables = tables_for(platform)
        column = getattr(tables.streamer, tables.streamer_key)
        async with self._session_factory() as session:
            result = await session.execute(sa.select(column))
            return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_or_create_category(self, record: CategoryRecord) -> uuid.UUID | None:
        """Return the category's surrogate ID, inserting it if absent.

        New categories get ``sort_order = 0``.

        Args:
            record: Category to look up by its natural key.

        Returns:
            The category ID, or ``None`` if the lookup or insert failed.
        """
        tables = tables_for(record.platform)
        model = tables.category
        key_column = getattr(model, tables.category_key)
        lookup = sa.select(model.id).where(key_column == record.natural_key)

        try:
            async with self._session_factory() as session, session.begin():
                existing = (await session.execute(lookup)).scalar_one_or_none()
                if existing is not None:
                    return existing

                stmt = (
                    _insert(session, model)
                    .values(id=uuid.uuid4(), **tables.category_values(record))
                    .on_conflict_do_nothing(index_elements=[tables.category_key])
                    .returning(model.id)
                )
                created = (await session.execute(stmt)).scalar_one_or_none()
                if created is None:
                    created = (await session.execute(lookup)).scalar_one()
        except SQLAlchemyError as exc:
            logger.warning(
                "category_create_failed",
                platform=record.platform.value,
                name=record.display_name,
                error=str(exc),
            )
            return None

        logger.info(
            "category_created",
            platform=record.platform.value,
            name=record.display_name,
        )
        return created

    async def list_categories(self, platform: Platform) -> list[Any]:
        """Return every category row of *platform*, by ``sort_order`` then name."""
        model = tables_for(platform).category
        async with self._session_factory() as session:
            result = await session.execute(
                sa.select(model).order_by(model.sort_order, model.name)
            )
            return list(result.scalars().all())

    async def find_category_by_name(
        self, platform: Platform, name: str
    ) -> uuid.UUID | None:
        """Return the ID of the category called *name*, or ``None``."""
        model = tables_for(platform).category
        async with self._session_factory() as session:
            result = await session.execute(
                sa.select(model.id).where(model.name == name).limit(1)
            )
            return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Streamer ↔ category mappings
    # ------------------------------------------------------------------

    async def link_streamer_to_category(
        self,
        platform: Platform,
        streamer_id: uuid.UUID,
        category_id: uuid.UUID,
        *,
        label: str | None = None,
    ) -> LinkResult:
        """Link a streamer to a category once.

        Args:
            platform: Platform whose mapping table is written.
            streamer_id: Surrogate streamer ID.
            category_id: Surrogate category ID.
            label: Human-readable "streamer → category" text for logs.

        Returns:
            ``CREATED`` for a new row, ``EXISTING`` if the pair was already
            linked, ``FAILED`` on a write error.
        """
        model = tables_for(platform).mapping
        return await self._link(
            model,
            {"streamer_id": streamer_id, "category_id": category_id},
            ["streamer_id", "category_id"],
            platform=platform.value,
            label=label or f"{streamer_id} -> {category_id}",
        )

    async def _link(
        self,
        model: Any,
        values: dict[str, Any],
        conflict_columns: list[str],
        *,
        platform: str,
        label: str,
    ) -> LinkResult:
        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    _insert(session, model)
                    .values(id=uuid.uuid4(), **values)
                    .on_conflict_do_nothing(index_elements=conflict_columns)
                    .returning(model.id)
                )
                created = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.warning(
                "mapping_failed",
                platform=platform,
                table=model.__tablename__,
                mapping=label,
                error=str(exc),
            )
            return LinkResult.FAILED
        return LinkResult.CREATED if created is not None else LinkResult.EXISTING

    # ------------------------------------------------------------------
    # Legacy keyword model
    # ------------------------------------------------------------------

    async def upsert_legacy_streamer(
        self, record: StreamerRecord, game_type: str | None
    ) -> str | None:
        """Mirror a streamer into ``streamers`` / ``streamer_platforms``.

        Returns:
            The legacy streamer ID (the platform channel ID), or ``None``.
        """
        now = utcnow()
        values = {
            "name": record.name,
            "description": record.description,
            "platform": record.platform.value,
            "gender": "unknown",
            "profile_image_url": record.profile_image_url,
            "channel_url": record.channel_url,
            "subscribers": record.popularity,
            "game_type": game_type,
            "latest_uploaded_at": record.last_active_at,
        }
        try:
            async with self._session_factory() as session, session.begin():
                stmt = _insert(session, LegacyStreamer).values(
                    id=record.platform_id, updated_at=now, **values
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["id"],
                    set_={**{k: stmt.excluded[k] for k in values}, "updated_at": now},
                )
                await session.execute(stmt)

                account = (
                    _insert(session, StreamerPlatform)
                    .values(
                        id=uuid.uuid4(),
                        streamer_id=record.platform_id,
                        platform=record.platform.value,
                        platform_id=record.platform_id,
                        channel_url=record.channel_url,
                    )
                    .on_conflict_do_nothing(index_elements=["platform", "platform_id"])
                )
                await session.execute(account)
        except SQLAlchemyError as exc:
            logger.warning(
                "legacy_streamer_upsert_failed",
                name=record.display_name,
                game_type=game_type,
                error=str(exc),
            )
            return None
        return record.platform_id

    async def get_or_create_keyword(
        self, name: str, keyword_type: str
    ) -> uuid.UUID | None:
        """Return the ID of keyword *name*, inserting it with *keyword_type*."""
        lookup = sa.select(Keyword.id).where(Keyword.name == name)
        try:
            async with self._session_factory() as session, session.begin():
                existing = (await session.execute(lookup)).scalar_one_or_none()
                if existing is not None:
                    return existing
                stmt = (
                    _insert(session, Keyword)
                    .values(id=uuid.uuid4(), name=name, type=keyword_type)
                    .on_conflict_do_nothing(index_elements=["name"])
                    .returning(Keyword.id)
                )
                created = (await session.execute(stmt)).scalar_one_or_none()
                if created is None:
                    created = (await session.execute(lookup)).scalar_one()
        except SQLAlchemyError as exc:
            logger.warning("keyword_create_failed", keyword=name, error=str(exc))
            return None
        logger.info("keyword_created", keyword=name, type=keyword_type)
        return created

    async def link_streamer_to_keyword(
        self, streamer_id: str, keyword_id: uuid.UUID, *, label: str | None = None
    ) -> LinkResult:
        """Link a legacy streamer to a keyword once."""
        return await self._link(
            StreamerKeyword,
            {"streamer_id": streamer_id, "keyword_id": keyword_id},
            ["streamer_id", "keyword_id"],
            platform="legacy",
            label=label or f"{streamer_id} -> {keyword_id}",
        )

    # ------------------------------------------------------------------
    # YouTube maintenance
    # ------------------------------------------------------------------

    async def youtube_streamers_for_refresh(
        self, limit: int, category_names: list[str] | None = None
    ) -> list[YouTubeStreamer]:
        """Return stored channels, least recently refreshed first.

        Args:
            limit: Maximum number of channels.
            category_names: Only channels mapped to one of these categories.
        """
        stmt = sa.select(YouTubeStreamer)
        if category_names:
            stmt = stmt.where(
                YouTubeStreamer.id.in_(
                    sa.select(YouTubeStreamerCategory.streamer_id)
                    .join(
                        YouTubeGameCategory,
                        YouTubeGameCategory.id == YouTubeStreamerCategory.category_id,
                    )
                    .where(YouTubeGameCategory.name.in_(category_names))
                )
            )
        stmt = stmt.order_by(
            YouTubeStreamer.updated_at.asc().nulls_first(), YouTubeStreamer.name
        ).limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def all_youtube_streamers(self, *, active: bool | None = None) -> list[YouTubeStreamer]:
        stmt = sa.select(YouTubeStreamer).order_by(YouTubeStreamer.name)
        if active is not None:
            stmt = stmt.where(YouTubeStreamer.is_active.is_(active))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update_youtube_streamer(
        self, streamer_id: uuid.UUID, values: dict[str, Any], *, label: str = ""
    ) -> bool:
        """Apply *values* to one stored channel and bump ``updated_at``."""
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    sa.update(YouTubeStreamer)
                    .where(YouTubeStreamer.id == streamer_id)
                    .values(**values, updated_at=utcnow())
                )
        except SQLAlchemyError as exc:
            logger.warning(
                "streamer_update_failed", platform="youtube", name=label, error=str(exc)
            )
            return False
        return True

    async def deactivate_stale_youtube_streamers(
        self, cutoff: datetime
    ) -> list[tuple[str, datetime | None]]:
        """Mark active channels whose latest upload predates *cutoff* inactive.

        Channels with no recorded upload are left alone.

        Returns:
            ``(name, latest_uploaded_at)`` of every channel deactivated.

        Raises:
            StorageError: If the update fails.
        """
        condition = sa.and_(
            YouTubeStreamer.is_active.is_(True),
            YouTubeStreamer.latest_uploaded_at < cutoff,
        )
        try:
            async with self._session_factory() as session, session.begin():
                rows = (
                    await session.execute(
                        sa.select(
                            YouTubeStreamer.name, YouTubeStreamer.latest_uploaded_at
                        ).where(condition)
                    )
                ).all()
                if rows:
                    await session.execute(
                        sa.update(YouTubeStreamer).where(condition).values(is_active=False)
                    )
        except SQLAlchemyError as exc:
            logger.error("deactivate_failed", platform="youtube", error=str(exc))
            raise StorageError(f"youtube: failed to deactivate streamers: {exc}") from exc
        return [(row[0], row[1]) for row in rows]

    async def legacy_streamers(self) -> list[LegacyStreamer]:
        async with self._session_factory() as session:
            result = await session.execute(
                sa.select(LegacyStreamer).order_by(LegacyStreamer.name)
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Bulk maintenance
    # ------------------------------------------------------------------

    async def truncate_platform(self, platform: Platform) -> dict[str, int]:
        """Delete every mapping, streamer and category row of *platform*.

        Tables are cleared in foreign-key order (mapping, streamers,
        categories) inside one transaction.

        Returns:
            Deleted row count per table name.

        Raises:
            StorageError: If any delete fails; nothing is deleted then.
        """
        tables = tables_for(platform)
        counts: dict[str, int] = {}
        try:
            async with self._session_factory() as session, session.begin():
                for model in (tables.mapping, tables.streamer, tables.category):
                    result = await session.execute(sa.delete(model))
                    counts[model.__tablename__] = result.rowcount or 0
        except SQLAlchemyError as exc:
            logger.error(
                "truncate_failed", platform=platform.value, error=str(exc)
            )
            raise StorageError(
                f"{platform.value}: failed to truncate tables: {exc}"
            ) from exc

        logger.info("tables_truncated", platform=platform.value, deleted=counts)
        return counts
