"""Configuration package for Streamer Discovery.

Re-exports the most commonly used configuration symbols so that
callers can write::

    from streamer_discovery.config import get_settings, GAME_KEYWORDS
"""

from __future__ import annotations

from streamer_discovery.config.game_keywords import (
    GAME_KEYWORDS,
    GAME_TYPE_TO_KEYWORD,
    default_keywords_for,
)
from streamer_discovery.config.settings import Settings, get_settings

__all__ = [
    "GAME_KEYWORDS",
    "GAME_TYPE_TO_KEYWORD",
    "Settings",
    "default_keywords_for",
    "get_settings",
]
