"""Unit tests for the structured logging configuration.

Verifies that ``configure_logging()`` emits one JSON object per record,
that ``request_id`` / ``run_id`` are merged in from their context
variables and that secret-bearing keys are redacted.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from io import StringIO

import pytest
import structlog

from streamer_discovery.core.logging_config import (
    bind_run_context,
    configure_logging,
    request_id_var,
    run_id_var,
)


@pytest.fixture(autouse=True)
def _clean_context() -> Iterator[None]:
    structlog.contextvars.clear_contextvars()
    request_id_var.set(None)
    run_id_var.set(None)
    yield
    structlog.contextvars.clear_contextvars()
    request_id_var.set(None)
    run_id_var.set(None)


def _capture(emit: Callable[[], None], log_level: str = "INFO") -> list[dict]:
    """Configure logging, run *emit* and return the JSON records written."""
    configure_logging(log_level)
    buffer = StringIO()
    root = logging.getLogger()
    originals = []
    for handler in root.handlers:
        if hasattr(handler, "stream"):
            originals.append((handler, handler.stream))
            handler.stream = buffer
    try:
        emit()
    finally:
        for handler, stream in originals:
            handler.flush()
            handler.stream = stream
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def _find(records: list[dict], event: str) -> dict:
    target = next((r for r in records if r.get("event") == event), None)
    assert target is not None, f"no record with event={event!r} in {records!r}"
    return target


class TestJsonOutput:
    def test_stdlib_record_is_json_with_required_fields(self) -> None:
        records = _capture(lambda: logging.getLogger("test.logging").info("stdlib_event"))
        target = _find(records, "stdlib_event")
        assert target["level"] == "info"
        assert target["logger"] == "test.logging"
        assert "timestamp" in target

    def test_structlog_keys_are_kept(self) -> None:
        records = _capture(
            lambda: structlog.get_logger("test.logging").info(
                "streamer_saved", streamer="김겜돌", viewers=12
            )
        )
        target = _find(records, "streamer_saved")
        assert target["streamer"] == "김겜돌"
        assert target["viewers"] == 12

    def test_calling_twice_keeps_one_handler(self) -> None:
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(logging.getLogger().handlers) == 1


class TestContextIds:
    def test_request_id_merged(self) -> None:
        request_id_var.set("req-1234")
        records = _capture(lambda: logging.getLogger("test").info("with_request"))
        assert _find(records, "with_request")["request_id"] == "req-1234"

    def test_no_request_id_when_unset(self) -> None:
        records = _capture(lambda: logging.getLogger("test").info("without_request"))
        assert "request_id" not in _find(records, "without_request")

    def test_bind_run_context_adds_run_id_job_and_platform(self) -> None:
        run_id = bind_run_context("discover", "twitch")
        records = _capture(lambda: structlog.get_logger("test").info("in_run"))
        target = _find(records, "in_run")
        assert target["run_id"] == run_id
        assert target["job"] == "discover"
        assert target["platform"] == "twitch"


class TestRedaction:
    def test_secret_keys_redacted(self) -> None:
        records = _capture(
            lambda: structlog.get_logger("test").info(
                "calling_api",
                api_key="AIza-secret",
                client_secret="shh",
                keyword="롤 스트리머",
            )
        )
        target = _find(records, "calling_api")
        assert target["api_key"] == "[REDACTED]"
        assert target["client_secret"] == "[REDACTED]"
        assert target["keyword"] == "롤 스트리머"

    def test_nested_header_keys_redacted(self) -> None:
        records = _capture(
            lambda: structlog.get_logger("test").info(
                "request_headers",
                headers={"Authorization": "Bearer abc", "x-naver-client-secret": "s", "Accept": "json"},
            )
        )
        headers = _find(records, "request_headers")["headers"]
        assert headers["Authorization"] == "[REDACTED]"
        assert headers["x-naver-client-secret"] == "[REDACTED]"
        assert headers["Accept"] == "json"
