"""Built-in game → search keyword tables.

YouTube discovery has no platform category ID to sweep, so it searches for
channels with Korean keyword phrases per game.  The tables here are the
defaults; the ``youtube_game_categories`` table decides which games are
swept, and any game missing from :data:`GAME_KEYWORDS` falls back to the
phrases produced by :func:`default_keywords_for`.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# YouTube category discovery
# ---------------------------------------------------------------------------

GAME_KEYWORDS: dict[str, list[str]] = {
    "롤": ["롤 스트리머", "리그오브레전드 방송", "롤 유튜버"],
    "배틀그라운드": ["배그 스트리머", "배틀그라운드 방송", "PUBG 유튜버"],
    "발로란트": ["발로란트 스트리머", "발로 유튜버", "발로란트 방송"],
    "마인크래프트": ["마크 스트리머", "마인크래프트 방송", "마크 유튜버"],
    "로스트아크": ["로아 스트리머", "로스트아크 방송", "로아 유튜버"],
}
"""Search phrases per game category name, tried in order."""

GAME_DETECTION_KEYWORDS: dict[str, list[str]] = {
    "롤": ["롤", "리그오브레전드", "league of legends", "lol"],
    "배틀그라운드": ["배틀그라운드", "배그", "pubg", "battlegrounds"],
    "발로란트": ["발로란트", "발로", "valorant"],
    "마인크래프트": ["마인크래프트", "마크", "minecraft"],
    "로스트아크": ["로스트아크", "로아", "lost ark"],
}
"""Lower-cased substrings that tie a stored channel's name or description
to a category when existing YouTube streamers are re-linked."""

# ---------------------------------------------------------------------------
# Legacy keyword model (``streamers`` / ``keywords``)
# ---------------------------------------------------------------------------

LEGACY_GAME_KEYWORDS: dict[str, list[str]] = {
    "종겜": ["게임 스트리머", "종합게임 스트리머", "게임 방송"],
    **GAME_KEYWORDS,
    "피파": ["피파 스트리머", "피파 유튜버", "피파 방송"],
    "오버워치": ["오버워치 스트리머", "옵치 방송", "오버워치 유튜버"],
    "스타크래프트": ["스타 스트리머", "스타크래프트 방송", "스타 유튜버"],
    "서든어택": ["서든 스트리머", "서든어택 방송", "서든 유튜버"],
    "GTA": ["GTA 스트리머", "GTA 방송", "지티에이 유튜버"],
    "모바일게임": ["모바일게임 스트리머", "리니지M 방송", "오딘 방송"],
    "디아블로": ["디아블로 스트리머", "디아4 방송", "디아블로 유튜버"],
}
"""The wider game list swept by the legacy ``streamers`` collection."""

GAME_TYPE_TO_KEYWORD: dict[str, str] = {
    "종겜": "게임 방송",
    "롤": "LOL",
    "피파": "피파",
    "발로란트": "발로란트",
    "배틀그라운드": "배틀그라운드",
    "오버워치": "오버워치",
    "스타크래프트": "스타크래프트",
    "서든어택": "서든어택",
    "GTA": "GTA",
    "마인크래프트": "마인크래프트",
    "모바일게임": "모바일게임",
    "디아블로": "디아블로",
    "로스트아크": "로스트아크",
}
"""Legacy ``streamers.game_type`` → ``keywords.name`` used when linking."""

KEYWORD_TYPE_GAME_TITLE: str = "game_title"
"""``keywords.type`` discriminator for game-title tags."""


def default_keywords_for(name: str, display_name: str | None = None) -> list[str]:
    """Return the search phrases for a category that has no curated list.

    Args:
        name: Category name (Korean game title).
        display_name: Display name used for the English phrase.  Falls back
            to *name*.

    Returns:
        The curated phrases when the game has them, otherwise four
        generated phrases.
    """
    if name in GAME_KEYWORDS:
        return list(GAME_KEYWORDS[name])
    shown = display_name or name
    return [
        f"{name} 스트리머",
        f"{name} 방송",
        f"{name} 유튜버",
        f"{shown} streamer",
    ]
