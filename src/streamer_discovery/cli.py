"""Command-line front-end for the discovery and maintenance jobs.

Usage::

    streamer-discovery discover-youtube --game=lol,valorant
    streamer-discovery discover-twitch --strategy=live-streams --limit=100
    streamer-discovery discover-chzzk --skip-mapping
    streamer-discovery update-youtube --limit=50 --category=lol
    streamer-discovery check-inactive --mode=inactive-only
    streamer-discovery truncate twitch

Every command prints its summary as JSON on stdout.  The exit status is 1
when the job aborts with a :class:`StreamerDiscoveryError`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from dotenv import load_dotenv

from streamer_discovery.config.settings import get_settings
from streamer_discovery.core import jobs
from streamer_discovery.core.database import dispose_engine
from streamer_discovery.core.exceptions import StreamerDiscoveryError
from streamer_discovery.core.logging_config import configure_logging
from streamer_discovery.core.records import Platform
from streamer_discovery.platforms.chzzk.discovery import ChzzkDiscoveryOptions
from streamer_discovery.platforms.twitch.discovery import (
    TwitchDiscoveryOptions,
    TwitchStrategy,
)
from streamer_discovery.platforms.youtube.discovery import YouTubeDiscoveryOptions
from streamer_discovery.platforms.youtube.maintenance import (
    DEFAULT_UPDATE_LIMIT,
    InactivityMode,
)

logger = structlog.get_logger(__name__)


def _csv(value: str) -> list[str]:
    """Split a comma-separated flag value, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamer-discovery",
        description="Discover Korean game streamers on YouTube, Twitch and Chzzk.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    youtube = commands.add_parser("discover-youtube", help="Keyword sweep of YouTube search")
    youtube.add_argument("--game", type=_csv, default=None, help="Categories to sweep (a,b)")
    youtube.add_argument("--keywords", type=_csv, default=None, help="Search phrases (a,b)")
    youtube.add_argument("--skip-mapping", action="store_true")
    youtube.add_argument(
        "--mirror-legacy",
        action="store_true",
        help="Also write accepted channels to the legacy streamers table",
    )
    youtube.add_argument(
        "--seed-seen", action=argparse.BooleanOptionalAction, default=True
    )

    twitch = commands.add_parser("discover-twitch", help="Top games or live streams on Twitch")
    twitch.add_argument(
        "--strategy",
        type=TwitchStrategy,
        choices=list(TwitchStrategy),
        default=TwitchStrategy.TOP_GAMES,
    )
    twitch.add_argument("--top", type=int, default=TwitchDiscoveryOptions.top)
    twitch.add_argument("--limit", type=int, default=TwitchDiscoveryOptions.limit)
    twitch.add_argument("--language", default=TwitchDiscoveryOptions.language)
    twitch.add_argument("--skip-mapping", action="store_true")
    twitch.add_argument(
        "--seed-seen", action=argparse.BooleanOptionalAction, default=True
    )

    chzzk = commands.add_parser("discover-chzzk", help="Channels live on Chzzk now")
    chzzk.add_argument("--limit", type=int, default=ChzzkDiscoveryOptions.limit)
    chzzk.add_argument("--skip-mapping", action="store_true")
    chzzk.add_argument(
        "--seed-seen", action=argparse.BooleanOptionalAction, default=False
    )

    update = commands.add_parser("update-youtube", help="Refresh stored YouTube channels")
    update.add_argument("--limit", type=int, default=DEFAULT_UPDATE_LIMIT)
    update.add_argument("--category", type=_csv, default=None, help="Categories (a,b)")

    inactive = commands.add_parser("check-inactive", help="Flip YouTube activity flags")
    inactive.add_argument(
        "--mode",
        type=InactivityMode,
        choices=list(InactivityMode),
        default=InactivityMode.BOTH,
    )

    commands.add_parser("link-categories", help="Link YouTube streamers to categories by text")
    commands.add_parser("link-keywords", help="Link legacy streamers to keywords")

    truncate = commands.add_parser("truncate", help="Empty one platform's tables")
    truncate.add_argument("platform", type=Platform, choices=list(Platform))

    commands.add_parser("twitch-collect", help="Truncate Twitch tables, then rediscover")
    commands.add_parser(
        "collect-streamers", help="YouTube sweep with legacy mirror, then keyword links"
    )
    return parser


def _job_for(args: argparse.Namespace) -> Callable[[], Awaitable[Any]]:
    command = args.command
    if command == "discover-youtube":
        options = YouTubeDiscoveryOptions(
            games=args.game,
            keywords=args.keywords,
            skip_mapping=args.skip_mapping,
            mirror_legacy=args.mirror_legacy,
            seed_seen=args.seed_seen,
            search_delay_seconds=get_settings().youtube_search_delay_seconds,
        )
        return lambda: jobs.discover_youtube(options)
    if command == "discover-twitch":
        return lambda: jobs.discover_twitch(
            TwitchDiscoveryOptions(
                strategy=args.strategy,
                top=args.top,
                limit=args.limit,
                language=args.language,
                skip_mapping=args.skip_mapping,
                seed_seen=args.seed_seen,
            )
        )
    if command == "discover-chzzk":
        return lambda: jobs.discover_chzzk(
            ChzzkDiscoveryOptions(
                limit=args.limit, skip_mapping=args.skip_mapping, seed_seen=args.seed_seen
            )
        )
    if command == "update-youtube":
        return lambda: jobs.update_youtube(args.limit, args.category)
    if command == "check-inactive":
        return lambda: jobs.check_inactive(args.mode)
    if command == "link-categories":
        return jobs.link_youtube_categories
    if command == "link-keywords":
        return jobs.link_keywords
    if command == "truncate":
        return lambda: jobs.truncate(args.platform)
    if command == "twitch-collect":
        return jobs.twitch_collect
    if command == "collect-streamers":
        return jobs.collect_streamers
    raise ValueError(f"unknown command {command!r}")


async def _run(job: Callable[[], Awaitable[Any]]) -> Any:  # noqa: ANN401
    try:
        return await job()
    finally:
        await dispose_engine()


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv``, run one job and print its summary.

    Returns:
        The process exit status.
    """
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    try:
        result = asyncio.run(_run(_job_for(args)))
    except StreamerDiscoveryError as exc:
        logger.error("job_aborted", command=args.command, error=str(exc))
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if hasattr(result, "as_dict"):
        result = result.as_dict()
    print(json.dumps(result, ensure_ascii=False, default=str, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
