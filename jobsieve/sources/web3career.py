"""web3.career — server-rendered HTML tables, paginated per category.

Rows are pulled out of the raw markup with regular expressions. This is a
best-effort extractor: a row missing its job id or title is skipped rather
than failing the page.
"""
from __future__ import annotations

import html as html_lib
import re
from dataclasses import asdict, dataclass

from jobsieve.log import get_logger
from jobsieve.models import RawJob
from jobsieve.sources.base import (
    ClientFactory,
    JobSourceBase,
    default_http_client,
    parse_salary,
    to_iso,
)

log = get_logger(__name__)

BASE_URL = "https://web3.career"
CATEGORY_PAGES: list[str] = [
    "business-development-jobs",
    "product-jobs",
    "growth-jobs",
    "devrel-jobs",
    "management-jobs",
]
MAX_PAGES = 10
PAGE_DELAY_S = 0.5

_ROW_RE = re.compile(r"<tr[^>]*table_row[^>]*>(.*?)</tr>", re.DOTALL)
_ID_RE = re.compile(r"data-jobid=[\"']?(\d+)")
_TITLE_RE = re.compile(r"<h2[^>]*>(.*?)</h2>", re.DOTALL)
_COMPANY_RE = re.compile(r"<h3[^>]*>(.*?)</h3>", re.DOTALL)
_URL_RE = re.compile(r"href=\"(/[^\"]+/\d+)\"")
_LOCATION_RE = re.compile(r"web3-jobs-[^\"]+[\"'][^>]*>([^<]+)")
_SALARY_RE = re.compile(r"text-salary[^>]*>(.*?)</p>", re.DOTALL)
_TIME_RE = re.compile(r"<time[^>]*datetime=\"([^\"]+)\"")
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class ListingRow:
    id: str
    title: str
    company: str
    url: str
    location: str
    salary: str
    posted_at: str


def _text(fragment: str) -> str:
    return html_lib.unescape(_TAG_RE.sub("", fragment)).strip()


def parse_rows(page_html: str) -> list[ListingRow]:
    rows: list[ListingRow] = []
    for match in _ROW_RE.finditer(page_html):
        row = match.group(1)
        id_match = _ID_RE.search(row)
        title_match = _TITLE_RE.search(row)
        if not id_match or not title_match:
            continue
        title = _text(title_match.group(1))
        if not title:
            continue

        company_match = _COMPANY_RE.search(row)
        url_match = _URL_RE.search(row)
        salary_match = _SALARY_RE.search(row)
        time_match = _TIME_RE.search(row)
        rows.append(
            ListingRow(
                id=id_match.group(1),
                title=title,
                company=_text(company_match.group(1)) if company_match else "",
                url=f"{BASE_URL}{url_match.group(1)}" if url_match else "",
                location=", ".join(
                    html_lib.unescape(m.group(1)).strip() for m in _LOCATION_RE.finditer(row)
                ),
                salary=salary_match.group(1) if salary_match else "",
                posted_at=time_match.group(1) if time_match else "",
            )
        )
    return rows


def has_next_page(page_html: str, page: int) -> bool:
    return f"page={page + 1}" in page_html


class Web3CareerSource(JobSourceBase):
    name = "web3career"

    def __init__(self, client_factory: ClientFactory = default_http_client) -> None:
        super().__init__()
        self._client_factory = client_factory

    async def scrape(self) -> list[RawJob]:
        self._reset_counts()
        all_jobs: list[RawJob] = []
        seen_ids: set[str] = set()

        async with self._client_factory() as client:
            for category in CATEGORY_PAGES:
                for page in range(1, MAX_PAGES + 1):
                    url = f"{BASE_URL}/{category}"
                    log.info("[%s] Fetching %s page %d...", self.name, category, page)
                    response = await client.get(url, params={"page": page})

                    if not response.is_success:
                        log.error("[%s] HTTP %d on %s", self.name, response.status_code, response.url)
                        break

                    page_html = response.text
                    rows = parse_rows(page_html)
                    if not rows:
                        log.info("[%s] No more jobs for %s on page %d", self.name, category, page)
                        break

                    for row in rows:
                        if row.id in seen_ids:
                            continue
                        seen_ids.add(row.id)
                        job = self._to_raw_job(row, category)
                        if job is not None:
                            all_jobs.append(job)

                    log.info(
                        "[%s] %s page %d: %d fetched, %d total kept",
                        self.name, category, page, len(rows), len(all_jobs),
                    )

                    if not has_next_page(page_html, page):
                        break
                    await self._pause(PAGE_DELAY_S)

        self._log_summary(len(all_jobs))
        return all_jobs

    def _to_raw_job(self, row: ListingRow, category: str) -> RawJob | None:
        if not self._passes_filters(row.title, row.location):
            return None
        salary_min, salary_max = parse_salary(row.salary)
        return RawJob(
            source_id=row.id,
            url=row.url or None,
            title=row.title,
            company=row.company or None,
            location=row.location or None,
            category=category,
            salary_min=salary_min,
            salary_max=salary_max,
            posted_at=to_iso(row.posted_at),
            raw_data=asdict(row),
        )
