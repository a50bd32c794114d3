"""Safary — client-rendered job board on a single infinite-scroll page."""
from __future__ import annotations

from typing import Any, Callable

from jobsieve.log import get_logger
from jobsieve.models import RawJob
from jobsieve.sources.base import JobSourceBase, parse_salary
from jobsieve.sources.browser import (
    BrowserUnavailable,
    browser_context,
    scroll_to_bottom,
    wait_for_selector,
)

log = get_logger(__name__)

SAFARY_URL = "https://jobs.safary.club/jobs"
NAVIGATION_TIMEOUT_MS = 30_000
HYDRATION_WAIT_MS = 10_000
MAX_SCROLLS = 20
SCROLL_PAUSE_MS = 1_000
JOB_SELECTORS = '[class*="job"], [class*="Job"], a[href*="/jobs/"], tr, .card'

# Runs in the page. Job-detail links first; generic table/grid rows when the
# markup has no such links.
EXTRACT_JS = r"""
() => {
  const results = [];
  const seen = new Set();
  for (const link of document.querySelectorAll('a[href*="/jobs/"], a[href*="/job/"]')) {
    const href = link.href;
    if (seen.has(href)) continue;
    seen.add(href);
    const text = (link.innerText || '').trim();
    if (!text || text.length < 5) continue;
    const lines = text.split('\n').map(l => l.trim()).filter(Boolean);
    if (lines.length === 0) continue;
    results.push({
      title: lines[0] || '',
      company: lines[1] || '',
      location: lines.find(l => /remote|onsite|hybrid|city|state/i.test(l)) || '',
      url: href,
      seniority: lines.find(l => /senior|junior|lead|staff|principal|intern|entry/i.test(l)) || '',
      category: lines.find(l => /engineer|design|product|market|sales|operations|business/i.test(l)) || '',
      salary: lines.find(l => /\$|salary|compensation|k\b/i.test(l)) || '',
    });
  }
  if (results.length === 0) {
    for (const row of document.querySelectorAll('tr, [role="row"]')) {
      const cells = row.querySelectorAll('td, [role="cell"]');
      if (cells.length < 2) continue;
      const title = (cells[0].textContent || '').trim();
      if (!title || title.length < 3) continue;
      const rowLink = row.querySelector('a');
      results.push({
        title,
        company: (cells[1] && cells[1].textContent || '').trim(),
        location: (cells[2] && cells[2].textContent || '').trim(),
        url: rowLink ? rowLink.href : '',
        seniority: '',
        category: '',
        salary: '',
      });
    }
  }
  return results;
}
"""


class SafarySource(JobSourceBase):
    name = "safary"

    def __init__(self, browser_factory: Callable[..., Any] = browser_context) -> None:
        super().__init__()
        self._browser_factory = browser_factory

    async def scrape(self) -> list[RawJob]:
        self._reset_counts()
        log.info("[%s] Launching browser...", self.name)
        try:
            async with self._browser_factory() as context:
                listings = await self._load_listings(context)
        except BrowserUnavailable as exc:
            log.error("[%s] Browser unavailable: %s", self.name, exc)
            return []

        log.info("[%s] Extracted %d job listings", self.name, len(listings))
        jobs = self._to_raw_jobs(listings)
        self._log_summary(len(jobs))
        return jobs

    async def _load_listings(self, context) -> list[dict]:
        page = await context.new_page()
        try:
            log.info("[%s] Navigating to job board...", self.name)
            await page.goto(SAFARY_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)

            if not await wait_for_selector(page, JOB_SELECTORS, timeout_ms=HYDRATION_WAIT_MS):
                log.info("[%s] No standard job selectors found, trying scroll approach...", self.name)

            await scroll_to_bottom(page, max_iterations=MAX_SCROLLS, pause_ms=SCROLL_PAUSE_MS)
            return await page.evaluate(EXTRACT_JS)
        finally:
            await page.close()

    def _to_raw_jobs(self, listings: list[dict]) -> list[RawJob]:
        jobs: list[RawJob] = []
        seen: set[str] = set()
        for i, listing in enumerate(listings):
            title = (listing.get("title") or "").strip()
            if len(title) <= 2:
                continue
            url = listing.get("url") or ""
            source_id = url or f"safary-{i}-{title[:30]}"
            if source_id in seen:
                continue
            seen.add(source_id)

            location = listing.get("location") or None
            if not self._passes_filters(title, location):
                continue

            salary_min, salary_max = parse_salary(listing.get("salary"))
            jobs.append(
                RawJob(
                    source_id=source_id,
                    url=url or None,
                    title=title,
                    company=listing.get("company") or None,
                    location=location,
                    seniority=listing.get("seniority") or None,
                    category=listing.get("category") or None,
                    salary_min=salary_min,
                    salary_max=salary_max,
                    raw_data=dict(listing),
                )
            )
        return jobs
