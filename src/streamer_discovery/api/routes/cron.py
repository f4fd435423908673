"""Cron-triggered collection routes.

``GET /api/cron/twitch-collect?token=...``
    Empty the Twitch tables, then run Twitch discovery.
``GET /api/cron/collect-streamers?token=...``
    Run YouTube discovery (mirrored to the legacy tables), then link legacy
    streamers to keywords.

When ``CRON_SECRET`` is configured the ``token`` query parameter must match
it, otherwise the request is rejected with 401.  Any failure of the job is
reported as 500.  Jobs run inside the request, like the scheduler that
calls these routes expects.
"""

from __future__ import annotations

import hmac
from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from streamer_discovery.api.dependencies import get_app_settings
from streamer_discovery.config.settings import Settings
from streamer_discovery.core import jobs
from streamer_discovery.core.exceptions import StreamerDiscoveryError
from streamer_discovery.core.schemas.catalog import JobResult

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def _authorised(settings: Settings, token: Optional[str]) -> bool:
    if not settings.cron_secret:
        return True
    return token is not None and hmac.compare_digest(token, settings.cron_secret)


@router.get("/twitch-collect")
async def twitch_collect(
    settings: Annotated[Settings, Depends(get_app_settings)],
    token: Annotated[Optional[str], Query()] = None,
) -> JSONResponse:
    """Rebuild the Twitch tables from the current top games."""
    if not _authorised(settings, token):
        return JSONResponse({"error": "unauthorised"}, status_code=401)
    try:
        summary = await jobs.twitch_collect(settings=settings)
    except StreamerDiscoveryError as exc:
        logger.error("cron_job_failed", job="twitch-collect", error=str(exc))
        return JSONResponse(
            {"error": "twitch collection failed", "details": str(exc)}, status_code=500
        )
    return JSONResponse(
        JobResult(success=True, message="twitch collection finished", summary=summary).model_dump()
    )


@router.get("/collect-streamers")
async def collect_streamers(
    settings: Annotated[Settings, Depends(get_app_settings)],
    token: Annotated[Optional[str], Query()] = None,
) -> JSONResponse:
    """Discover YouTube streamers and refresh legacy keyword links."""
    if not _authorised(settings, token):
        return JSONResponse({"error": "unauthorised"}, status_code=401)
    try:
        summary = await jobs.collect_streamers(settings=settings)
    except StreamerDiscoveryError as exc:
        logger.error("cron_job_failed", job="collect-streamers", error=str(exc))
        return JSONResponse(
            {"error": "streamer collection failed", "details": str(exc)}, status_code=500
        )
    return JSONResponse(
        JobResult(success=True, message="streamer collection finished", summary=summary).model_dump()
    )
