"""Cached live-status lookups for Twitch and Chzzk channels.

The frontend polls the live status of the channels on screen every few
seconds.  :class:`LiveStatusPoller` answers those polls from a TTL cache
keyed by the requested ID set, so one upstream lookup serves every poll of
the same set for ``LIVE_STATUS_TTL_SECONDS``:

1. The key is the sorted, de-duplicated IDs joined by ``","``.
2. A fresh cache entry is returned as stored, without an upstream call.
3. Concurrent misses for the same key share one in-flight lookup.
4. Every requested ID is present in the result; IDs the platform does not
   report come back as not live.
5. The result is cached with the current time.  A failed lookup of the
   whole batch is not cached and propagates to the caller.

Two cache backends are provided: :class:`MemoryTTLCache` (per process)
and :class:`RedisTTLCache` (shared between processes and hosts).
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from streamer_discovery.core.exceptions import PlatformFetchError
from streamer_discovery.core.schemas.live_status import LiveStatus
from streamer_discovery.platforms.chzzk.client import ChzzkClient
from streamer_discovery.platforms.chzzk.config import LIVE_STATUS_OPEN
from streamer_discovery.platforms.twitch.client import TwitchClient

logger = logging.getLogger(__name__)

StatusMap = dict[str, LiveStatus]
Fetcher = Callable[[list[str]], Awaitable[StatusMap]]

# ---------------------------------------------------------------------------
# Cache backends
# ---------------------------------------------------------------------------


class StatusCache(Protocol):
    async def get(self, key: str) -> StatusMap | None: ...

    async def set(self, key: str, value: StatusMap) -> None: ...

    async def aclose(self) -> None: ...


class MemoryTTLCache:
    """In-process cache; entries expire *ttl_seconds* after they were stored.

    Expired entries are dropped when read and on every write, so keys that
    are never requested again do not accumulate.

    Args:
        ttl_seconds: Entry lifetime.
        clock: Monotonic clock in seconds; injectable for tests.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, StatusMap]] = {}

    async def get(self, key: str) -> StatusMap | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: StatusMap) -> None:
        now = self._clock()
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self._ttl]
        for k in expired:
            del self._entries[k]
        self._entries[key] = (now, value)

    async def aclose(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisTTLCache:
    """Redis-backed cache shared by every process using the same Redis.

    Values are stored as JSON with the wire (camelCase) field names and
    expire through Redis ``SETEX``.  Redis errors are logged and treated as
    a cache miss so that polling keeps working without the cache.

    Args:
        client: A ``redis.asyncio`` client created with
            ``decode_responses=True``.
        ttl_seconds: Entry lifetime.
        prefix: Key prefix, e.g. ``"live-status:twitch:"``.
    """

    def __init__(
        self, client: aioredis.Redis, ttl_seconds: float, prefix: str = "live-status:"
    ) -> None:
        self._redis = client
        self._ttl = max(1, math.ceil(ttl_seconds))
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: float, prefix: str = "live-status:") -> RedisTTLCache:
        client: aioredis.Redis = aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
        )
        return cls(client, ttl_seconds, prefix)

    async def get(self, key: str) -> StatusMap | None:
        try:
            raw = await self._redis.get(self._prefix + key)
        except RedisError as exc:
            logger.warning("live-status cache read failed for '%s': %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        return {channel_id: LiveStatus.model_validate(v) for channel_id, v in data.items()}

    async def set(self, key: str, value: StatusMap) -> None:
        payload = json.dumps(
            {channel_id: status.to_wire() for channel_id, status in value.items()},
            ensure_ascii=False,
        )
        try:
            await self._redis.setex(self._prefix + key, self._ttl, payload)
        except RedisError as exc:
            logger.warning("live-status cache write failed for '%s': %s", key, exc)

    async def aclose(self) -> None:
        await self._redis.aclose()


# ---------------------------------------------------------------------------
# Poller
# ---------------------------------------------------------------------------


def cache_key(channel_ids: list[str]) -> str:
    """Return the cache key of a request: sorted unique IDs joined by ``,``."""
    return ",".join(sorted(set(channel_ids)))


class LiveStatusPoller:
    """Cache-fronted live-status lookup for one platform.

    Args:
        platform: Platform name, used in log messages.
        fetcher: Looks up the statuses of a list of IDs upstream.
        cache: Where results are kept between polls.
    """

    def __init__(self, platform: str, fetcher: Fetcher, cache: StatusCache) -> None:
        self.platform = platform
        self._fetch = fetcher
        self._cache = cache
        self._inflight: dict[str, asyncio.Future[StatusMap]] = {}

    async def aclose(self) -> None:
        """Release the cache backend (the Redis connection pool, if any)."""
        await self._cache.aclose()

    async def get_statuses(self, channel_ids: list[str]) -> StatusMap:
        """Return the live status of every ID in *channel_ids*.

        Raises:
            PlatformFetchError: If the upstream lookup of the whole batch
                fails.
            PlatformAuthError: If the platform rejects our credentials.
        """
        unique = sorted(set(channel_ids))
        key = cache_key(unique)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("%s: live-status cache hit for %d ids", self.platform, len(cached))
            return cached

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._refresh(key, unique))
            self._inflight[key] = pending
            pending.add_done_callback(lambda _f: self._inflight.pop(key, None))
        return await asyncio.shield(pending)

    async def _refresh(self, key: str, channel_ids: list[str]) -> StatusMap:
        statuses = await self._fetch(channel_ids)
        result = {cid: statuses.get(cid) or LiveStatus.offline() for cid in channel_ids}
        await self._cache.set(key, result)
        logger.info(
            "%s: live status refreshed (%d ids, %d live)",
            self.platform,
            len(result),
            sum(1 for s in result.values() if s.is_live),
        )
        return result


# ---------------------------------------------------------------------------
# Platform fetchers
# ---------------------------------------------------------------------------


def twitch_stream_status(stream: dict[str, Any] | None) -> LiveStatus:
    if not stream:
        return LiveStatus.offline()
    return LiveStatus(
        is_live=True,
        viewer_count=stream.get("viewer_count"),
        title=stream.get("title") or None,
        game_name=stream.get("game_name") or None,
        thumbnail_url=stream.get("thumbnail_url") or None,
        started_at=stream.get("started_at") or None,
    )


def chzzk_detail_status(content: dict[str, Any] | None) -> LiveStatus:
    """Map a Chzzk live-detail ``content`` to a status.

    Only ``status == "OPEN"`` counts as live; anything else is reported as
    offline with every other field ``None``.
    """
    if not content or content.get("status") != LIVE_STATUS_OPEN:
        return LiveStatus.offline()
    return LiveStatus(
        is_live=True,
        viewer_count=content.get("concurrentUserCount") or 0,
        title=content.get("liveTitle") or None,
        game_name=(content.get("liveCategory") or {}).get("categoryName") or None,
        thumbnail_url=(content.get("thumbnail") or {}).get("thumbnailImageUrl") or None,
        started_at=content.get("openDate") or None,
    )


def twitch_fetcher(client: TwitchClient) -> Fetcher:
    """Look up all IDs with one ``/streams`` call (chunked past 100 IDs)."""

    async def fetch(channel_ids: list[str]) -> StatusMap:
        streams = await client.get_streams_by_user_ids(channel_ids)
        by_user = {s.get("user_id"): s for s in streams}
        return {cid: twitch_stream_status(by_user.get(cid)) for cid in channel_ids}

    return fetch


def chzzk_fetcher(client: ChzzkClient) -> Fetcher:
    """Look up IDs one by one; a failed lookup yields an ``error`` entry."""

    async def fetch(channel_ids: list[str]) -> StatusMap:
        result: StatusMap = {}
        for cid in channel_ids:
            try:
                result[cid] = chzzk_detail_status(await client.get_live_detail(cid))
            except PlatformFetchError as exc:
                logger.warning("chzzk: live-detail lookup failed for %s: %s", cid, exc)
                result[cid] = LiveStatus.offline(error="lookup failed")
        return result

    return fetch


def build_cache(
    ttl_seconds: float, redis_url: str | None, platform: str
) -> MemoryTTLCache | RedisTTLCache:
    """Return a Redis cache when *redis_url* is set, else an in-memory one."""
    if redis_url:
        return RedisTTLCache.from_url(redis_url, ttl_seconds, prefix=f"live-status:{platform}:")
    return MemoryTTLCache(ttl_seconds)
