import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from jobsieve.sources import browser
from jobsieve.sources.browser import (
    SCROLL_DOWN_JS,
    SCROLL_HEIGHT_JS,
    BrowserUnavailable,
    browser_context,
    scroll_to_bottom,
)


def _fake_playwright(monkeypatch, launch):
    @asynccontextmanager
    async def async_playwright():
        yield SimpleNamespace(chromium=SimpleNamespace(launch=launch))

    monkeypatch.setattr(browser, "_async_playwright", lambda: async_playwright)


def _fake_browser():
    context = SimpleNamespace(name="context")
    return SimpleNamespace(new_context=AsyncMock(return_value=context), close=AsyncMock()), context


def test_browser_closed_when_body_raises(monkeypatch):
    fake, context = _fake_browser()
    launch = AsyncMock(return_value=fake)
    _fake_playwright(monkeypatch, launch)

    async def use_browser():
        async with browser_context(headless=True) as ctx:
            assert ctx is context
            raise RuntimeError("navigation failed")

    with pytest.raises(RuntimeError, match="navigation failed"):
        asyncio.run(use_browser())

    launch.assert_awaited_once_with(headless=True)
    fake.close.assert_awaited_once()


def test_browser_closed_on_normal_exit(monkeypatch):
    fake, _ = _fake_browser()
    _fake_playwright(monkeypatch, AsyncMock(return_value=fake))

    async def use_browser():
        async with browser_context(user_agent="test-agent", headless=True):
            pass

    asyncio.run(use_browser())

    fake.new_context.assert_awaited_once()
    assert fake.new_context.await_args.kwargs["user_agent"] == "test-agent"
    fake.close.assert_awaited_once()


def test_launch_failure_becomes_browser_unavailable(monkeypatch):
    launch = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist at /ms-playwright\nrun install"))
    _fake_playwright(monkeypatch, launch)

    async def use_browser():
        async with browser_context(headless=True):
            pass

    with pytest.raises(BrowserUnavailable, match="Executable doesn't exist"):
        asyncio.run(use_browser())


class GrowingPage:
    """Reports the next height from ``heights`` on each height query."""

    def __init__(self, heights):
        self.heights = list(heights)
        self.scrolls = 0
        self.waits = []

    async def evaluate(self, script):
        if script == SCROLL_HEIGHT_JS:
            return self.heights.pop(0) if len(self.heights) > 1 else self.heights[0]
        if script == SCROLL_DOWN_JS:
            self.scrolls += 1
        return None

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)


def test_scroll_stops_when_height_stops_growing():
    page = GrowingPage([1000, 2000, 2000])

    scrolls = asyncio.run(scroll_to_bottom(page, max_iterations=10, pause_ms=250))

    assert scrolls == 2
    assert page.scrolls == 2
    assert page.waits == [250, 250]


def test_scroll_is_bounded_by_max_iterations():
    page = GrowingPage(range(1000, 100000, 1000))

    scrolls = asyncio.run(scroll_to_bottom(page, max_iterations=5, pause_ms=0))

    assert scrolls == 5
    assert page.scrolls == 5
