"""Live-status routes polled by the frontend.

``POST /api/twitch/live-status``  body ``{"twitchIds": ["123", ...]}``
``POST /api/chzzk/live-status``   body ``{"chzzkIds": ["abc", ...]}``

Both answer with a map from every requested ID to its status::

    {"123": {"isLive": true, "viewerCount": 812, "title": "...",
             "gameName": "VALORANT", "thumbnailUrl": "...",
             "startedAt": "2024-05-01T12:00:00Z"}}

A missing, empty or non-array ID list is a 400.  An upstream failure of the
whole batch is a 500; a failed Chzzk lookup of a single ID only marks that
entry with ``error``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from streamer_discovery.api.dependencies import get_chzzk_poller, get_twitch_poller
from streamer_discovery.core.exceptions import InvalidRequestError, StreamerDiscoveryError
from streamer_discovery.core.live_status import LiveStatusPoller
from streamer_discovery.core.schemas.live_status import (
    ChzzkLiveStatusRequest,
    TwitchLiveStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live-status"])


async def _parse_ids(request: Request, model: type[BaseModel], field: str) -> list[str]:
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        parsed = model.model_validate(body if isinstance(body, dict) else {})
    except ValidationError:
        raise InvalidRequestError(f"'{field}' must be a non-empty array of IDs") from None
    (ids,) = parsed.model_dump().values()
    return ids


async def twitch_ids(request: Request) -> list[str]:
    return await _parse_ids(request, TwitchLiveStatusRequest, "twitchIds")


async def chzzk_ids(request: Request) -> list[str]:
    return await _parse_ids(request, ChzzkLiveStatusRequest, "chzzkIds")


async def _respond(poller: LiveStatusPoller, ids: list[str]) -> JSONResponse:
    try:
        statuses = await poller.get_statuses(ids)
    except StreamerDiscoveryError as exc:
        logger.error("%s: live-status lookup failed: %s", poller.platform, exc)
        return JSONResponse(
            {"error": f"{poller.platform} live-status lookup failed"}, status_code=500
        )
    return JSONResponse({cid: status.to_wire() for cid, status in statuses.items()})


# IDs must stay the first dependency: a bad body fails before the poller
# builds its platform client.


@router.post("/api/twitch/live-status")
async def twitch_live_status(
    ids: Annotated[list[str], Depends(twitch_ids)],
    poller: Annotated[LiveStatusPoller, Depends(get_twitch_poller)],
) -> JSONResponse:
    """Return the live status of the given Twitch user IDs."""
    return await _respond(poller, ids)


@router.post("/api/chzzk/live-status")
async def chzzk_live_status(
    ids: Annotated[list[str], Depends(chzzk_ids)],
    poller: Annotated[LiveStatusPoller, Depends(get_chzzk_poller)],
) -> JSONResponse:
    """Return the live status of the given Chzzk channel IDs."""
    return await _respond(poller, ids)
