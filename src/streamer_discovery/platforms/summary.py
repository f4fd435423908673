"""Run bookkeeping shared by the discovery orchestrators."""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from streamer_discovery.core.records import LinkResult, Platform
from streamer_discovery.core.writer import StreamerWriter

logger = structlog.get_logger(__name__)


@dataclass
class DiscoverySummary:
    """Counters reported at the end of a discovery or maintenance run.

    ``new_streamers`` is derived from the run's seen-ID set and is only as
    accurate as that set's seeding; ``updated_streamers`` counts upserts of
    IDs the run already knew about.
    """

    platform: str
    searches: int = 0
    discovered: int = 0
    new_streamers: int = 0
    updated_streamers: int = 0
    mappings_created: int = 0
    skipped: int = 0
    failures: int = 0
    started_at: float = field(default_factory=time.monotonic, repr=False)

    def count_link(self, result: LinkResult) -> None:
        if result is LinkResult.CREATED:
            self.mappings_created += 1
        elif result is LinkResult.FAILED:
            self.failures += 1

    @property
    def elapsed_seconds(self) -> float:
        return round(time.monotonic() - self.started_at, 2)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("started_at")
        data["elapsed_seconds"] = self.elapsed_seconds
        return data

    def log(self, event: str = "discovery_finished") -> None:
        logger.info(event, **self.as_dict())


class SeenIds:
    """Platform IDs already handled (or stored) during one run."""

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(initial)

    @classmethod
    async def load(
        cls, writer: StreamerWriter, platform: Platform, *, seed: bool
    ) -> SeenIds:
        """Build the set, seeded from the streamer table when *seed* is true."""
        if not seed:
            return cls()
        ids = await writer.existing_streamer_ids(platform)
        logger.info("seen_ids_seeded", platform=platform.value, count=len(ids))
        return cls(ids)

    def __contains__(self, platform_id: object) -> bool:
        return platform_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, platform_id: str) -> None:
        self._ids.add(platform_id)
