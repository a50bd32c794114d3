"""
Scrape orchestrator.

Runs one source (or every registered source, one after another), persists
what the adapter returns through the store, and records a scrape run row
for each source with its outcome.
"""
from __future__ import annotations

from typing import Callable

from jobsieve import store
from jobsieve.log import get_logger
from jobsieve.models import ScrapeResult
from jobsieve.sources import SOURCES, JobSourceBase, get_source

log = get_logger(__name__)

Registry = dict[str, Callable[[], JobSourceBase]]


async def run_one(source: str, *, registry: Registry | None = None) -> ScrapeResult:
    """Scrape and persist one source; re-raises adapter failures after recording them."""
    adapter = get_source(source, registry)
    run_id = store.start_scrape_run(source)

    try:
        log.info("[runner] Starting scrape for %s...", source)
        raw_jobs = await adapter.scrape()

        jobs_new = 0
        for raw in raw_jobs:
            if store.upsert_job(source, raw).is_new:
                jobs_new += 1
    except Exception as exc:
        message = str(exc) or exc.__class__.__name__
        store.complete_scrape_run(run_id, "failed", 0, 0, error=message)
        log.error("[runner] %s failed: %s", source, message)
        raise

    store.complete_scrape_run(run_id, "completed", len(raw_jobs), jobs_new)
    log.info("[runner] %s complete: %d found, %d new", source, len(raw_jobs), jobs_new)
    return ScrapeResult(jobs_found=len(raw_jobs), jobs_new=jobs_new, skipped=adapter.skipped)


async def run_all(*, registry: Registry | None = None) -> dict[str, ScrapeResult]:
    """Run every registered source sequentially; one failure never stops the rest."""
    registry = SOURCES if registry is None else registry
    results: dict[str, ScrapeResult] = {}

    for source in registry:
        try:
            results[source] = await run_one(source, registry=registry)
        except Exception as exc:
            log.error("[runner] Skipping %s due to error: %s", source, exc)
            results[source] = ScrapeResult()

    total_found = sum(r.jobs_found for r in results.values())
    total_new = sum(r.jobs_new for r in results.values())
    log.info("[runner] All sources done: found=%d, new=%d", total_found, total_new)
    return results
