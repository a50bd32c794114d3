"""Headless browser plumbing shared by the browser-rendered boards.

Playwright is imported lazily so the HTTP-only sources keep working on
machines where it (or its chromium build) is not installed.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from jobsieve.config import USER_AGENT, run_headless
from jobsieve.errors import JobSieveError
from jobsieve.log import get_logger

log = get_logger(__name__)

SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"
SCROLL_DOWN_JS = "() => window.scrollTo(0, document.body.scrollHeight)"


class BrowserUnavailable(JobSieveError):
    """Playwright or its browser build cannot be used on this machine."""


def _async_playwright():
    _pw = os.environ.get("PLAYWRIGHT_BROWSERS_PATH", "")
    if _pw and not Path(_pw).exists():
        os.environ.pop("PLAYWRIGHT_BROWSERS_PATH", None)
    try:
        from playwright.async_api import async_playwright
    except ImportError as exc:
        raise BrowserUnavailable(
            "Playwright not installed — `pip install playwright && playwright install chromium`"
        ) from exc
    return async_playwright


@asynccontextmanager
async def browser_context(
    *, user_agent: str = USER_AGENT, headless: bool | None = None
) -> AsyncIterator[Any]:
    """Launch chromium, yield one browsing context, always close the browser."""
    async_playwright = _async_playwright()
    from playwright.async_api import Error as PlaywrightError

    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(
                headless=run_headless() if headless is None else headless
            )
        except PlaywrightError as exc:
            raise BrowserUnavailable(str(exc).split("\n")[0]) from exc
        try:
            context = await browser.new_context(
                viewport={"width": 1280, "height": 900},
                user_agent=user_agent,
            )
            yield context
        finally:
            await browser.close()
            log.debug("Browser closed")


async def wait_for_selector(page, selector: str, *, timeout_ms: int) -> bool:
    """Wait for ``selector``; False on timeout instead of raising."""
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError

    try:
        await page.wait_for_selector(selector, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        return False


async def scroll_to_bottom(page, *, max_iterations: int, pause_ms: int) -> int:
    """Scroll until the page stops growing; returns the number of scrolls made."""
    previous_height = 0
    scrolls = 0
    for _ in range(max_iterations):
        current_height = await page.evaluate(SCROLL_HEIGHT_JS)
        if current_height == previous_height:
            break
        previous_height = current_height
        await page.evaluate(SCROLL_DOWN_JS)
        await page.wait_for_timeout(pause_ms)
        scrolls += 1
    return scrolls
