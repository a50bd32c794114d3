"""CryptoJobsList — browser-rendered board behind a Cloudflare challenge.

Each category page lazy-loads its listings, so every page is scrolled until
its height stops growing before the job links are read.
"""
from __future__ import annotations

from typing import Any, Callable

from jobsieve.log import get_logger
from jobsieve.models import RawJob
from jobsieve.sources.base import JobSourceBase
from jobsieve.sources.browser import (
    BrowserUnavailable,
    browser_context,
    scroll_to_bottom,
    wait_for_selector,
)

log = get_logger(__name__)

BASE_URL = "https://cryptojobslist.com"
CATEGORY_PATHS: list[str] = [
    "/business-development",
    "/product",
    "/growth",
    "/marketing",
    "/operations",
]
JOB_LINK_SELECTOR = 'a[href*="/jobs/"]'

NAVIGATION_TIMEOUT_MS = 45_000
CHALLENGE_WAIT_MS = 15_000
CHALLENGE_GRACE_MS = 5_000
MAX_SCROLLS = 15
SCROLL_PAUSE_MS = 1_500
CATEGORY_DELAY_S = 3.0

# Runs in the page. Line 0 of a card is the title, line 1 the company.
EXTRACT_JS = r"""
(baseDomain) => {
  const results = [];
  const seen = new Set();
  const locationRe = /remote|onsite|hybrid|usa|us|new york|san francisco|london|berlin|singapore|global|worldwide/i;
  for (const link of document.querySelectorAll('a[href*="/jobs/"]')) {
    const href = link.href;
    if (seen.has(href)) continue;
    seen.add(href);
    const text = (link.innerText || '').trim();
    if (!text || text.length < 5) continue;
    const lines = text.split('\n').map(l => l.trim()).filter(Boolean);
    if (lines.length === 0) continue;
    const tags = [];
    link.querySelectorAll('span, [class*="tag"], [class*="badge"]').forEach(t => {
      const tagText = (t.textContent || '').trim();
      if (tagText && tagText.length < 30) tags.push(tagText);
    });
    results.push({
      title: lines[0] || '',
      company: lines[1] || '',
      location: lines.find(l => locationRe.test(l)) || '',
      url: href.startsWith('http') ? href : `${baseDomain}${href}`,
      tags,
    });
  }
  return results;
}
"""


class CryptoJobsListSource(JobSourceBase):
    name = "cryptojobslist"

    def __init__(self, browser_factory: Callable[..., Any] = browser_context) -> None:
        super().__init__()
        self._browser_factory = browser_factory

    async def scrape(self) -> list[RawJob]:
        self._reset_counts()
        all_jobs: list[RawJob] = []
        seen_urls: set[str] = set()

        log.info("[%s] Launching browser...", self.name)
        try:
            async with self._browser_factory() as context:
                for i, category_path in enumerate(CATEGORY_PATHS):
                    if i:
                        await self._pause(CATEGORY_DELAY_S)
                    listings = await self._scrape_category(context, category_path)
                    if listings is None:
                        continue
                    category = category_path.lstrip("/")
                    for listing in listings:
                        job = self._to_raw_job(listing, category, seen_urls)
                        if job is not None:
                            all_jobs.append(job)
        except BrowserUnavailable as exc:
            log.error("[%s] Browser unavailable: %s", self.name, exc)
            return []

        self._log_summary(len(all_jobs))
        return all_jobs

    async def _scrape_category(self, context, category_path: str) -> list[dict] | None:
        """Listings from one category page, or None when the page could not be read."""
        url = f"{BASE_URL}{category_path}"
        log.info("[%s] Navigating to %s...", self.name, url)
        page = await context.new_page()
        try:
            # networkidle never settles on the Cloudflare interstitial.
            await page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)

            if not await wait_for_selector(page, JOB_LINK_SELECTOR, timeout_ms=CHALLENGE_WAIT_MS):
                log.info("[%s] Waiting for Cloudflare on %s...", self.name, category_path)
                await page.wait_for_timeout(CHALLENGE_GRACE_MS)
                if await page.query_selector(JOB_LINK_SELECTOR) is None:
                    log.warning("[%s] Skipping %s — could not get past Cloudflare", self.name, category_path)
                    return None

            await scroll_to_bottom(page, max_iterations=MAX_SCROLLS, pause_ms=SCROLL_PAUSE_MS)
            listings = await page.evaluate(EXTRACT_JS, BASE_URL)
            log.info("[%s] Extracted %d listings from %s", self.name, len(listings), category_path)
            return listings
        except Exception as exc:
            log.error("[%s] Failed on %s: %s", self.name, category_path, str(exc).split("\n")[0])
            return None
        finally:
            await page.close()

    def _to_raw_job(self, listing: dict, category: str, seen_urls: set[str]) -> RawJob | None:
        title = (listing.get("title") or "").strip()
        if len(title) <= 2:
            return None
        url = listing.get("url") or ""
        if url in seen_urls:
            return None
        seen_urls.add(url)

        location = listing.get("location") or None
        if not self._passes_filters(title, location):
            return None

        return RawJob(
            source_id=url or f"cjl-{title[:30]}",
            url=url or None,
            title=title,
            company=listing.get("company") or None,
            location=location,
            category=category,
            tags=list(listing.get("tags") or []),
            raw_data=dict(listing),
        )
