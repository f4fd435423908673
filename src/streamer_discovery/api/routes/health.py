"""Health check routes.

``GET /api/health``
    Database connectivity (``SELECT 1``) plus which platform credentials are
    configured.  With ``?deep=true`` every configured platform API is probed
    as well.  Always answers 200; ``status`` is ``"ok"`` or ``"degraded"``.

These endpoints are diagnostic and never raise HTTP 5xx errors.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Annotated

import sqlalchemy as sa
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from streamer_discovery import __version__
from streamer_discovery.api.dependencies import get_app_settings
from streamer_discovery.config.settings import Settings
from streamer_discovery.core.database import get_session_factory
from streamer_discovery.platforms.base import PlatformClient
from streamer_discovery.platforms.chzzk.client import ChzzkClient
from streamer_discovery.platforms.twitch.client import TwitchClient
from streamer_discovery.platforms.youtube.client import YouTubeClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


async def _check_database() -> str:
    """Run ``SELECT 1``; return ``"ok"`` or ``"error"``."""
    try:
        async with get_session_factory()() as session:
            await session.execute(sa.text("SELECT 1"))
        return "ok"
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: database unreachable")
        return "error"


def _configured(settings: Settings) -> dict[str, bool]:
    return {
        "youtube": bool(settings.youtube_api_key),
        "twitch": bool(settings.twitch_client_id and settings.twitch_client_secret),
        "chzzk": bool(settings.chzzk_client_id and settings.chzzk_client_secret),
    }


async def _probe(client: PlatformClient) -> dict:
    async with client:
        return await client.health_check()


@router.get("/api/health")
async def system_health(
    settings: Annotated[Settings, Depends(get_app_settings)],
    deep: Annotated[bool, Query()] = False,
) -> JSONResponse:
    """Return database and platform health."""
    configured = _configured(settings)
    payload: dict = {
        "version": __version__,
        "database": await _check_database(),
        "platforms": configured,
        "timestamp": datetime.now(UTC).isoformat(),
    }

    degraded = payload["database"] != "ok"
    if deep:
        clients: list[PlatformClient] = []
        if configured["youtube"]:
            clients.append(YouTubeClient.from_settings(settings))
        if configured["twitch"]:
            clients.append(TwitchClient.from_settings(settings))
        if configured["chzzk"]:
            clients.append(ChzzkClient.from_settings(settings))
        results = await asyncio.gather(*(_probe(c) for c in clients))
        payload["probes"] = {r["platform"]: r for r in results}
        degraded = degraded or any(r["status"] != "ok" for r in results)

    payload["status"] = "degraded" if degraded else "ok"
    logger.info("system_health_check", extra={"health": payload})
    return JSONResponse(payload)
