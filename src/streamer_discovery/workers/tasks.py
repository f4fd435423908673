"""Celery tasks driven by the Beat schedule in ``workers/beat_schedule.py``.

- ``twitch_collect``: empty the Twitch tables, then rediscover.
- ``discover_chzzk``: upsert channels that are live on Chzzk right now.
- ``collect_streamers``: YouTube keyword sweep mirrored to the legacy tables,
  then legacy keyword links.
- ``check_inactive_streamers``: flip YouTube ``is_active`` by upload age.
- ``update_youtube_streamers``: refresh the least recently updated channels.

Every task is a synchronous wrapper around one coroutine from
:mod:`streamer_discovery.core.jobs`, run with ``asyncio.run()``.  Arguments
and return values are plain JSON types.

Error handling policy: a task logs any failure at ERROR level and returns
``{"error": ...}`` instead of re-raising; the next scheduled run is the retry.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from streamer_discovery.core import jobs
from streamer_discovery.core.database import dispose_engine
from streamer_discovery.platforms.chzzk.discovery import ChzzkDiscoveryOptions
from streamer_discovery.platforms.youtube.maintenance import (
    DEFAULT_UPDATE_LIMIT,
    InactivityMode,
)
from streamer_discovery.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def _run_then_dispose(job: Awaitable[Any]) -> Any:  # noqa: ANN401
    try:
        return await job
    finally:
        await dispose_engine()


def _run_job(task_name: str, job: Callable[[], Awaitable[Any]]) -> dict[str, Any]:
    log = logger.bind(task=task_name)
    log.info("task_started")
    started = time.perf_counter()
    try:
        result = asyncio.run(_run_then_dispose(job()))
    except Exception as exc:
        log.error("task_failed", error=str(exc), exc_info=True)
        return {"error": str(exc)}

    if hasattr(result, "as_dict"):
        result = result.as_dict()
    log.info("task_finished", duration_seconds=round(time.perf_counter() - started, 2))
    return result


@celery_app.task(name="streamer_discovery.workers.tasks.twitch_collect")
def twitch_collect() -> dict[str, Any]:
    """Rebuild the Twitch tables from the current top games."""
    return _run_job("twitch_collect", jobs.twitch_collect)


@celery_app.task(name="streamer_discovery.workers.tasks.discover_chzzk")
def discover_chzzk(limit: int = 100, skip_mapping: bool = False) -> dict[str, Any]:
    """Upsert channels that are live on Chzzk right now."""
    options = ChzzkDiscoveryOptions(limit=limit, skip_mapping=skip_mapping)
    return _run_job("discover_chzzk", lambda: jobs.discover_chzzk(options))


@celery_app.task(name="streamer_discovery.workers.tasks.collect_streamers")
def collect_streamers() -> dict[str, Any]:
    """Sweep YouTube search and refresh the legacy keyword links."""
    return _run_job("collect_streamers", jobs.collect_streamers)


@celery_app.task(name="streamer_discovery.workers.tasks.check_inactive_streamers")
def check_inactive_streamers(mode: str = InactivityMode.BOTH.value) -> dict[str, Any]:
    """Deactivate stale YouTube channels and reactivate ones that uploaded again.

    Args:
        mode: ``"both"``, ``"inactive-only"`` or ``"reactive-only"``.

    Returns:
        Dict with ``deactivated``, ``reactivated`` and ``checked`` counts.
    """
    return _run_job(
        "check_inactive_streamers", lambda: jobs.check_inactive(InactivityMode(mode))
    )


@celery_app.task(name="streamer_discovery.workers.tasks.update_youtube_streamers")
def update_youtube_streamers(
    limit: int = DEFAULT_UPDATE_LIMIT, categories: list[str] | None = None
) -> dict[str, Any]:
    """Refresh statistics of the least recently updated YouTube channels."""
    return _run_job(
        "update_youtube_streamers", lambda: jobs.update_youtube(limit, categories)
    )
