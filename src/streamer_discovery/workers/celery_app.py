"""Celery application for scheduled streamer collection.

Broker, result backend and timezone come from ``Settings``; the periodic
schedule lives in ``workers/beat_schedule.py``.

Usage (starting a worker)::

    celery -A streamer_discovery.workers.celery_app worker --loglevel=info

Usage (starting the Beat scheduler)::

    celery -A streamer_discovery.workers.celery_app beat --loglevel=info
"""

from __future__ import annotations

import logging

from celery import Celery
from celery.signals import task_postrun, worker_process_init
from dotenv import load_dotenv

from streamer_discovery.config.settings import get_settings
from streamer_discovery.core.logging_config import configure_logging

_logger = logging.getLogger(__name__)

# Platform credentials are read from .env when the worker is started by hand.
load_dotenv()

settings = get_settings()
configure_logging(settings.log_level)

#: The global Celery application instance.
celery_app = Celery(
    "streamer_discovery",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["streamer_discovery.workers.tasks"],
)

# ---------------------------------------------------------------------------
# Core configuration
# ---------------------------------------------------------------------------

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # Beat crontabs are written in Korean local time.
    timezone="Asia/Seoul",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=86_400,
    # A full YouTube sweep with the default search delay takes well under this.
    task_soft_time_limit=3_600,
    task_time_limit=5_400,
    beat_schedule_filename="celerybeat-schedule",
)

from streamer_discovery.workers.beat_schedule import beat_schedule  # noqa: E402

celery_app.conf.beat_schedule = beat_schedule


# ---------------------------------------------------------------------------
# Engine disposal: asyncpg connections are bound to the loop that opened them
# ---------------------------------------------------------------------------


def _forget_engine() -> None:
    from streamer_discovery.core import database as _db  # noqa: PLC0415

    if _db.get_engine.cache_info().currsize:
        _db.get_engine().sync_engine.dispose(close=False)
    _db.get_session_factory.cache_clear()
    _db.get_engine.cache_clear()


@worker_process_init.connect
def _dispose_engine_on_fork(**kwargs: object) -> None:  # noqa: ARG001
    """Drop the engine inherited from the parent process after a fork."""
    _forget_engine()


@task_postrun.connect
def _dispose_engine_after_task(**kwargs: object) -> None:  # noqa: ARG001
    """Drop the pooled connections left behind by the task's ``asyncio.run``."""
    try:
        _forget_engine()
    except Exception:  # noqa: BLE001
        _logger.warning("Engine disposal after task failed", exc_info=True)
