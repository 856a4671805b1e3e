"""
Browser Session Driver using Playwright (Async)
Launch, navigate, wait for rendered content, guaranteed teardown
"""

import logging
from typing import Any, Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import ScraperConfig
from .errors import MachineryFault, NavigationError, NavigationTimeout, SelectorTimeout
from .selectors import DEFAULT_SELECTORS, SelectorTable
from .timing import SYSTEM_CLOCK, Clock

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--no-sandbox',
]

# Minimal automation mask; results sites rarely fingerprint harder than this
INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', {
    get: () => undefined,
    configurable: true
});
"""


class BrowserSession:
    """
    One browser, one context, one page, one URL.

    Owned by a single acquisition and closed before its result is
    returned; use as ``async with BrowserSession(...) as session``.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        selectors: Optional[SelectorTable] = None,
        clock: Clock = SYSTEM_CLOCK,
        playwright_factory: Optional[Callable[[], Any]] = None
    ):
        """
        Initialize Browser Session

        Args:
            config: Timeouts, viewport and user agent
            selectors: Content-ready selector priority list
            clock: Time source for the grace period
            playwright_factory: Callable returning an async_playwright() manager
        """
        self.config = config or ScraperConfig()
        self.selectors = selectors or DEFAULT_SELECTORS
        self.clock = clock
        self.playwright_factory = playwright_factory or async_playwright

        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None
        self.url: Optional[str] = None
        self.content_found = False
        self._opened = False
        self._closed = False

    async def __aenter__(self) -> 'BrowserSession':
        try:
            await self.launch()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def launch(self) -> None:
        """Start Chromium with a fixed viewport and desktop user agent"""
        logger.info("Launching browser...")
        try:
            self.playwright = await self.playwright_factory().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.config.headless,
                args=LAUNCH_ARGS
            )
            self.context = await self.browser.new_context(
                ignore_https_errors=True,
                viewport={
                    'width': self.config.viewport_width,
                    'height': self.config.viewport_height
                },
                user_agent=self.config.user_agent
            )
            await self.context.add_init_script(INIT_SCRIPT)
            self.page = await self.context.new_page()
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            raise MachineryFault(f"Failed to launch browser: {e}") from e

        logger.info("Browser launched successfully")

    async def open(self, url: str) -> bool:
        """
        Navigate to url and wait for table content

        Args:
            url: Target page

        Returns:
            True if a content-ready selector appeared, False if the grace
            period was used instead

        Raises:
            NavigationTimeout: network never went quiet within navigation_timeout
            NavigationError: the page could not be loaded at all
        """
        if self._opened:
            raise RuntimeError("BrowserSession is single-use; create a new session per request")
        if self.page is None:
            raise RuntimeError("BrowserSession used before launch; use 'async with'")
        self._opened = True
        self.url = url

        logger.info(f"Navigating to: {url}")
        try:
            await self.page.goto(
                url,
                wait_until='networkidle',
                timeout=self.config.navigation_timeout * 1000
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Navigation to {url} timed out after {self.config.navigation_timeout}s"
            ) from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

        self.content_found = await self.wait_for_content()
        return self.content_found

    async def wait_for_content(self) -> bool:
        """
        Wait for any content-ready selector; absence is not fatal

        Returns:
            True if content appeared before content_timeout
        """
        query = SelectorTable.union(self.selectors.content_ready)
        try:
            await self.wait_for_selector(query, self.config.content_timeout)
            logger.info("Table content found")
            return True
        except SelectorTimeout:
            logger.info(
                f"No table found after {self.config.content_timeout}s, "
                f"waiting {self.config.content_grace_period}s and proceeding anyway"
            )
            await self.clock.sleep(self.config.content_grace_period)
            return False

    async def wait_for_selector(self, selector: str, timeout: float) -> None:
        """
        Wait until selector matches a visible element

        Raises:
            SelectorTimeout: nothing matched within timeout seconds
        """
        try:
            await self.page.wait_for_selector(selector, state='visible', timeout=timeout * 1000)
        except PlaywrightTimeoutError as e:
            raise SelectorTimeout(f"Selector did not appear within {timeout}s") from e

    async def content(self) -> str:
        return await self.page.content()

    async def title(self) -> str:
        try:
            return await self.page.title()
        except Exception as e:
            logger.debug(f"Could not read page title: {e}")
            return ''

    async def close(self) -> None:
        """Release page, context, browser and driver; safe to call repeatedly"""
        if self._closed:
            return
        self._closed = True

        for name in ('page', 'context', 'browser'):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing {name}: {e}")
            setattr(self, name, None)

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.debug(f"Ignoring error while stopping playwright: {e}")
            self.playwright = None

        logger.info("Browser closed")
