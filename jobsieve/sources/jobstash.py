"""JobStash — public JSON API, filtered to BD / product classifications."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jobsieve.log import get_logger
from jobsieve.models import RawJob
from jobsieve.sources.base import ClientFactory, JobSourceBase, default_http_client

log = get_logger(__name__)

API_URL = "https://middleware.jobstash.xyz/public/jobs/list"
PAGE_LIMIT = 20
MAX_PAGES = 100
PAGE_DELAY_S = 0.5

TARGET_CLASSIFICATIONS: list[str] = [
    "product",
    "product_management",
    "bizdev",
    "partnerships",
    "growth",
    "devrel",
    "management",
]

# Seniority code 1 is intern/junior.
MIN_SENIORITY = 2


def _seniority_code(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _posted_at(timestamp: Any) -> str | None:
    if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool) or timestamp <= 0:
        return None
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).isoformat()


def _page_items(data: Any) -> list[dict]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("data") or []
    return []


class JobStashSource(JobSourceBase):
    name = "jobstash"

    def __init__(self, client_factory: ClientFactory = default_http_client) -> None:
        super().__init__()
        self._client_factory = client_factory

    async def scrape(self) -> list[RawJob]:
        self._reset_counts()
        all_jobs: list[RawJob] = []
        params = {"limit": PAGE_LIMIT, "classifications": ",".join(TARGET_CLASSIFICATIONS)}

        async with self._client_factory() as client:
            for page in range(1, MAX_PAGES + 1):
                log.info("[%s] Fetching page %d...", self.name, page)
                response = await client.get(API_URL, params={"page": page, **params})

                if not response.is_success:
                    log.error("[%s] HTTP %d on page %d", self.name, response.status_code, page)
                    break

                jobs = _page_items(response.json())
                if not jobs:
                    log.info("[%s] No more jobs on page %d, done.", self.name, page)
                    break

                for hit in jobs:
                    job = self._to_raw_job(hit)
                    if job is not None:
                        all_jobs.append(job)

                log.info("[%s] Page %d: %d fetched, %d kept", self.name, page, len(jobs), len(all_jobs))

                if len(jobs) < PAGE_LIMIT:
                    break
                await self._pause(PAGE_DELAY_S)

        self._log_summary(len(all_jobs))
        return all_jobs

    def _to_raw_job(self, hit: dict) -> RawJob | None:
        # Checked before the shared filters: the API knows the level outright.
        seniority = _seniority_code(hit.get("seniority"))
        if seniority is not None and seniority < MIN_SENIORITY:
            self.skipped.seniority += 1
            return None

        title = hit.get("title") or ""
        if not self._passes_filters(title, hit.get("location"), hit.get("locationType")):
            return None

        organization = hit.get("organization") or {}
        company = organization.get("name")
        source_id = hit.get("shortUUID") or hit.get("id") or f"{title}-{company}"

        return RawJob(
            source_id=str(source_id),
            url=hit.get("url"),
            title=title,
            company=company,
            description=hit.get("summary") or hit.get("description"),
            location=hit.get("location"),
            location_type=hit.get("locationType"),
            seniority=None if hit.get("seniority") is None else str(hit.get("seniority")),
            category=hit.get("classification"),
            salary_min=_int_or_none(hit.get("minimumSalary")),
            salary_max=_int_or_none(hit.get("maximumSalary")),
            tags=[t["name"] for t in hit.get("tags") or [] if isinstance(t, dict) and t.get("name")],
            chains=[str(c) for c in hit.get("chains") or []],
            posted_at=_posted_at(hit.get("timestamp")),
            raw_data=dict(hit),
        )


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
