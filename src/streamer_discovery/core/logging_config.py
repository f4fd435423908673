"""Structured logging configuration using structlog.

Call ``configure_logging()`` once per process: the FastAPI app does it in
``api/main.py``, the CLI in ``cli.main`` and Celery workers in
``workers/celery_app.py``.  Modules then log through either API:

Stdlib usage::

    import logging
    logger = logging.getLogger(__name__)
    logger.info("youtube: search '%s' returned %d channels", keyword, count)

Structlog usage (key/value context)::

    import structlog
    logger = structlog.get_logger(__name__)
    logger.warning("streamer_upsert_failed", platform="twitch", name=name)

Two context variables are merged into every record when set: ``request_id``
(bound by the HTTP middleware) and ``run_id`` (bound by
:func:`bind_run_context` at the start of a discovery or maintenance job).
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

# ---------------------------------------------------------------------------
# Context variables
# ---------------------------------------------------------------------------

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
"""Per-request ID set by the HTTP middleware."""

run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
"""Per-job ID set when a discovery or maintenance run starts."""


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "api_key",
    "client_secret",
    "secret",
    "token",
    "password",
    "bearer",
    "authorization",
    "x-naver-client-secret",
})
"""Lower-cased substrings that identify log event-dict keys whose values
must be redacted before the record reaches any renderer."""


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace values of secret-bearing keys with a redaction marker.

    Top-level keys and the keys of nested ``dict`` values (one level, e.g.
    ``headers={...}``) are matched case-insensitively against
    :data:`_SECRET_SUBSTRINGS`.

    Args:
        logger: The wrapped logger instance (unused).
        method_name: The log method name (unused).
        event_dict: Mutable event dictionary being assembled.

    Returns:
        The event dict with sensitive values replaced by ``"[REDACTED]"``.
    """
    redacted = "[REDACTED]"
    for key in list(event_dict.keys()):
        if _is_secret(key):
            event_dict[key] = redacted
            continue
        val = event_dict[key]
        if isinstance(val, dict):
            for nested_key in list(val.keys()):
                if isinstance(nested_key, str) and _is_secret(nested_key):
                    val[nested_key] = redacted
    return event_dict


def _is_secret(key: str) -> bool:
    key_lower = key.lower()
    return any(secret in key_lower for secret in _SECRET_SUBSTRINGS)


def _inject_context_ids(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Copy ``request_id`` and ``run_id`` from their context variables.

    Runs after ``merge_contextvars`` and never overwrites a value that was
    bound explicitly.

    Args:
        logger: The wrapped logger instance (unused).
        method_name: The log method name (unused).
        event_dict: Mutable event dictionary being assembled.

    Returns:
        The event dict, possibly with ``request_id`` / ``run_id`` added.
    """
    for name, var in (("request_id", request_id_var), ("run_id", run_id_var)):
        value = var.get()
        if value is not None and name not in event_dict:
            event_dict[name] = value
    return event_dict


# ---------------------------------------------------------------------------
# Public entry-points
# ---------------------------------------------------------------------------


def bind_run_context(job: str, platform: str | None = None) -> str:
    """Start a logging context for one collection job.

    Args:
        job: Job name (e.g. ``"discover"``, ``"check-inactive"``).
        platform: Platform the job targets, when it targets one.

    Returns:
        The generated run ID.
    """
    run_id = uuid.uuid4().hex[:12]
    run_id_var.set(run_id)
    structlog.contextvars.bind_contextvars(job=job)
    if platform is not None:
        structlog.contextvars.bind_contextvars(platform=platform)
    return run_id


_QUIET_LOGGERS: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")
"""Libraries held at WARNING outside DEBUG.  httpx logs every request URL at
INFO, and YouTube URLs carry the API key."""


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _inject_context_ids,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _stdout_handler(renderer: structlog.types.Processor) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib logging through it.

    Records are newline-delimited JSON unless *log_level* is ``"DEBUG"``,
    which switches to structlog's coloured console renderer.  Each record
    carries ``timestamp``, ``level``, ``logger``, ``event`` and, when set,
    ``request_id`` / ``run_id``.  Calling this again replaces the previous
    configuration.

    Args:
        log_level: Standard level name, case-insensitive.  Unknown names
            fall back to INFO.
    """
    level_name = log_level.upper()
    debug = level_name == "DEBUG"
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer(ensure_ascii=False)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stdout_handler(renderer))
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if debug else logging.WARNING)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
