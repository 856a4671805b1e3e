from __future__ import annotations

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from results_scraper.core.browser_session import BrowserSession
from results_scraper.core.config import ScraperConfig
from results_scraper.core.errors import (
    MachineryFault,
    NavigationError,
    NavigationTimeout,
    SelectorTimeout,
    SoftTierError,
)


class FakeBrowserPage:
    def __init__(self, goto_error=None, selector_error=None) -> None:
        self.goto_error = goto_error
        self.selector_error = selector_error
        self.goto_calls = []
        self.selector_calls = []
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector, state=None, timeout=None):
        self.selector_calls.append((selector, state, timeout))
        if self.selector_error is not None:
            raise self.selector_error

    async def content(self):
        return "<html><table><tr><td>1</td></tr></table></html>"

    async def title(self):
        return "Live results"

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, page) -> None:
        self.page = page
        self.init_scripts = []
        self.closed = False

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, context) -> None:
        self.context = context
        self.context_kwargs = None
        self.closed = False

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self.context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser, launch_error=None) -> None:
        self.browser = browser
        self.launch_error = launch_error
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium) -> None:
        self.chromium = chromium
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakePlaywrightManager:
    def __init__(self, playwright) -> None:
        self.playwright = playwright

    async def start(self):
        return self.playwright


def _driver(page=None, launch_error=None):
    page = page or FakeBrowserPage()
    context = FakeContext(page)
    browser = FakeBrowser(context)
    chromium = FakeChromium(browser, launch_error)
    playwright = FakePlaywright(chromium)
    return playwright, lambda: FakePlaywrightManager(playwright)


def _session(factory, fake_clock, **overrides) -> BrowserSession:
    return BrowserSession(config=ScraperConfig().with_overrides(**overrides), clock=fake_clock, playwright_factory=factory)


def test_open_waits_for_network_idle_and_content(fake_clock) -> None:
    playwright, factory = _driver()

    async def scenario():
        async with _session(factory, fake_clock, navigation_timeout=20) as session:
            found = await session.open("https://live.example.org/")
            return session, found, await session.content(), await session.title()

    session, found, html, title = asyncio.run(scenario())
    browser = playwright.chromium.browser
    page = browser.context.page

    assert found is True
    assert page.goto_calls == [("https://live.example.org/", "networkidle", 20000)]
    assert page.selector_calls[0][1] == "visible"
    assert "<table>" in html
    assert title == "Live results"
    assert browser.context_kwargs["viewport"] == {"width": 1920, "height": 1080}
    assert browser.context_kwargs["ignore_https_errors"] is True
    assert playwright.chromium.launch_kwargs["headless"] is True
    assert "webdriver" in browser.context.init_scripts[0]
    assert page.closed and browser.context.closed and browser.closed and playwright.stopped
    assert fake_clock.sleeps == []


def test_missing_content_uses_grace_period(fake_clock) -> None:
    page = FakeBrowserPage(selector_error=PlaywrightTimeoutError("Timeout 10000ms exceeded"))
    _, factory = _driver(page)

    async def scenario():
        async with _session(factory, fake_clock, content_grace_period=5) as session:
            return await session.open("https://live.example.org/")

    assert asyncio.run(scenario()) is False
    assert fake_clock.sleeps == [5]


def test_navigation_timeout_is_soft_and_tears_down(fake_clock) -> None:
    page = FakeBrowserPage(goto_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
    playwright, factory = _driver(page)

    async def scenario():
        async with _session(factory, fake_clock) as session:
            await session.open("https://slow.example.org/")

    with pytest.raises(NavigationTimeout):
        asyncio.run(scenario())

    assert page.closed is True
    assert playwright.chromium.browser.closed is True
    assert playwright.stopped is True


def test_launch_failure_is_a_machinery_fault(fake_clock) -> None:
    playwright, factory = _driver(launch_error=RuntimeError("Executable doesn't exist"))

    async def scenario():
        async with _session(factory, fake_clock):
            pass

    with pytest.raises(MachineryFault):
        asyncio.run(scenario())

    assert playwright.stopped is True


def test_session_is_single_use(fake_clock) -> None:
    _, factory = _driver()

    async def scenario():
        async with _session(factory, fake_clock) as session:
            await session.open("https://live.example.org/")
            await session.open("https://live.example.org/other")

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


def test_close_is_idempotent(fake_clock) -> None:
    playwright, factory = _driver()
    session = _session(factory, fake_clock)

    async def scenario():
        await session.launch()
        await session.close()
        await session.close()

    asyncio.run(scenario())

    assert session.page is None
    assert playwright.stopped is True


def test_wait_for_selector_raises_selector_timeout(fake_clock) -> None:
    page = FakeBrowserPage(selector_error=PlaywrightTimeoutError("Timeout 3000ms exceeded"))
    _, factory = _driver(page)

    async def scenario():
        async with _session(factory, fake_clock) as session:
            await session.wait_for_selector(".mat-mdc-row", 3)

    with pytest.raises(SelectorTimeout):
        asyncio.run(scenario())

    assert page.selector_calls == [(".mat-mdc-row", "visible", 3000)]


def test_unresolvable_host_is_a_soft_navigation_error(fake_clock) -> None:
    page = FakeBrowserPage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://nowhere.invalid/"))
    playwright, factory = _driver(page)

    async def scenario():
        async with _session(factory, fake_clock) as session:
            await session.open("https://nowhere.invalid/")

    with pytest.raises(NavigationError) as excinfo:
        asyncio.run(scenario())

    assert isinstance(excinfo.value, SoftTierError)
    assert "ERR_NAME_NOT_RESOLVED" in str(excinfo.value)
    assert playwright.stopped is True
