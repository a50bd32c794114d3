from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable

import httpx

from jobsieve.config import USER_AGENT
from jobsieve.filters import is_excluded_title, is_location_acceptable
from jobsieve.log import get_logger
from jobsieve.models import RawJob, SkipCounts

log = get_logger(__name__)

HTTP_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

ClientFactory = Callable[[], httpx.AsyncClient]


def default_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=HTTP_TIMEOUT,
    )


_TAG_RE = re.compile(r"<[^>]+>")
_SALARY_K_RE = re.compile(r"\$(\d+)[kK]")


def parse_salary(raw: str | None) -> tuple[int | None, int | None]:
    """Parse "$155k - $205k" / "$120k+" style text into a (min, max) pair."""
    if not raw:
        return None, None
    values = [int(v) * 1000 for v in _SALARY_K_RE.findall(_TAG_RE.sub("", raw))]
    if not values:
        return None, None
    return values[0], values[1] if len(values) > 1 else None


def to_iso(value: str | None) -> str | None:
    """Normalize a timestamp string to ISO-8601 UTC; None when unparseable."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


class JobSourceBase(ABC):
    """One external job board.

    ``scrape`` takes no arguments: URLs, categories and page limits are
    class-level configuration. It returns listings that already passed the
    shared title/location filters; ``skipped`` holds the counts of those
    that did not, for the most recent call.
    """

    name: str = "base"

    def __init__(self) -> None:
        self.skipped = SkipCounts()

    @abstractmethod
    async def scrape(self) -> list[RawJob]:
        pass

    def _reset_counts(self) -> None:
        self.skipped = SkipCounts()

    def _passes_filters(
        self, title: str, location: str | None, location_type: str | None = None
    ) -> bool:
        if is_excluded_title(title):
            self.skipped.title += 1
            return False
        if not is_location_acceptable(location, location_type):
            self.skipped.location += 1
            return False
        return True

    def _log_summary(self, kept: int) -> None:
        parts = [f"{self.skipped.title} by title", f"{self.skipped.location} non-US/non-remote"]
        if self.skipped.seniority:
            parts.insert(0, f"{self.skipped.seniority} by seniority code")
        log.info("[%s] Scrape complete. %d jobs kept (skipped: %s)", self.name, kept, ", ".join(parts))

    async def _pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
