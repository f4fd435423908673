"""FastAPI dependency providers.

Live-status pollers and their platform clients are process-wide singletons:
the poller's cache is only useful if every request sees the same one.  They
are built on first use, so importing the app never requires platform
credentials.  Tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from streamer_discovery.config.settings import Settings, get_settings
from streamer_discovery.core.live_status import (
    LiveStatusPoller,
    build_cache,
    chzzk_fetcher,
    twitch_fetcher,
)
from streamer_discovery.platforms.chzzk.client import ChzzkClient
from streamer_discovery.platforms.twitch.client import TwitchClient


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache
def _twitch_client() -> TwitchClient:
    return TwitchClient.from_settings(get_settings())


@lru_cache
def _chzzk_client() -> ChzzkClient:
    return ChzzkClient.from_settings(get_settings())


@lru_cache
def get_twitch_poller() -> LiveStatusPoller:
    """Return the process-wide Twitch live-status poller.

    Raises:
        MissingCredentialError: If Twitch credentials are not configured.
    """
    settings = get_settings()
    return LiveStatusPoller(
        "twitch",
        twitch_fetcher(_twitch_client()),
        build_cache(settings.live_status_ttl_seconds, settings.live_status_cache_url, "twitch"),
    )


@lru_cache
def get_chzzk_poller() -> LiveStatusPoller:
    """Return the process-wide Chzzk live-status poller.

    Raises:
        MissingCredentialError: If Chzzk credentials are not configured.
    """
    settings = get_settings()
    return LiveStatusPoller(
        "chzzk",
        chzzk_fetcher(_chzzk_client()),
        build_cache(settings.live_status_ttl_seconds, settings.live_status_cache_url, "chzzk"),
    )


async def close_platform_clients() -> None:
    """Close the shared pollers and HTTP clients; called on application shutdown."""
    for poller_factory in (get_twitch_poller, get_chzzk_poller):
        if poller_factory.cache_info().currsize:
            await poller_factory().aclose()
        poller_factory.cache_clear()
    for factory in (_twitch_client, _chzzk_client):
        if factory.cache_info().currsize:
            await factory().aclose()
        factory.cache_clear()
