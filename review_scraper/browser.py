import logging
from typing import Optional

from playwright.async_api import async_playwright, Error as PlaywrightError
# Asynchronous Playwright API: the browser is driven with async/await.

from review_scraper.config import NAVIGATION_TIMEOUT_MS
from review_scraper.errors import NavigationError

logger = logging.getLogger(__name__)


CHROME_ARGS = [
    "--disable-blink-features=AutomationControlled",
    # Stops Chromium from advertising automation
    # (navigator.webdriver is not forced to true by the flag set).

    "--no-sandbox",
    # Needed inside Docker / CI where the sandbox cannot be set up.

    "--disable-dev-shm-usage",
    # /dev/shm is tiny in containers and Chromium crashes without this.
]


UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/133.0.0.0 Safari/537.36"
)
# Desktop Chrome User-Agent. Playwright's default one is easy to spot.


HIDE_WEBDRIVER_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
"""
# Runs before any page script, so widget bot checks see a regular browser.


async def open_page(headless: bool = True, storage_state: Optional[str] = None):
    """
    Starts Playwright, launches Chromium, creates a context and opens a page.
    Returns all four objects so the caller can close them later.
    """

    pw = await async_playwright().start()

    try:
        browser = await pw.chromium.launch(headless=headless, args=CHROME_ARGS)
        # headless=False shows the window, useful when a widget misbehaves.

        context = await browser.new_context(
            storage_state=storage_state if storage_state else None,
            # Saved cookies / localStorage, e.g. an accepted consent banner.

            user_agent=UA,

            viewport={"width": 1366, "height": 900}
            # Review widgets switch to a mobile layout on narrow viewports,
            # which changes the card markup.
        )
        await context.add_init_script(HIDE_WEBDRIVER_JS)

        page = await context.new_page()
    except BaseException:
        await pw.stop()
        raise

    return pw, browser, context, page


async def close_page(pw, browser, context):
    """
    Closes context, browser and the Playwright driver, in that order.
    Leaving any of them open leaks a Chromium or Node process.
    """

    await context.close()
    await browser.close()
    await pw.stop()


class PageSession:
    """
    Owns one browser page for the length of a run.

        async with PageSession(headless=True) as session:
            await session.goto(url)
            ...

    The browser is closed when the block exits, whether it raised or not.
    """

    def __init__(self, headless: bool = True, storage_state: Optional[str] = None,
                 navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS):
        self.headless = headless
        self.storage_state = storage_state
        self.navigation_timeout_ms = navigation_timeout_ms
        self._pw = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def page(self):
        if self._page is None:
            raise RuntimeError("PageSession is not open")
        return self._page

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def open(self) -> "PageSession":
        if self.is_open:
            return self
        self._pw, self._browser, self._context, self._page = await open_page(
            headless=self.headless,
            storage_state=self.storage_state,
        )
        logger.debug("Browser session opened (headless=%s)", self.headless)
        return self

    async def close(self):
        if self._pw is None:
            return
        try:
            await close_page(self._pw, self._browser, self._context)
        finally:
            self._pw = self._browser = self._context = self._page = None
            logger.debug("Browser session closed")

    async def goto(self, url: str):
        """Load url and wait for network idle. Any failure here is fatal."""
        try:
            await self.page.goto(url, wait_until="networkidle",
                                 timeout=self.navigation_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(url, e.message) from e
        logger.info("[OK] Loaded %s", url)

    async def __aenter__(self) -> "PageSession":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
