import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set, Tuple

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


class LookupOutcome(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"          # timed out: the control is gone, pagination is over
    LOOKUP_ERROR = "lookup_error"    # driver fault (detached node, closed page, failed click...)


class StopReason(str, Enum):
    EXHAUSTED = "exhausted"
    BUDGET = "budget"
    ERROR = "error"


@dataclass
class PaginationResult:
    clicks: int
    stop_reason: StopReason
    error: Optional[str] = None


class RequestTracker:
    """
    Counts the page's in-flight requests while attached.

    Playwright's own "networkidle" is a load state, reached once per
    navigation; after that it no longer waits. Clicks that fetch more cards
    need their own idle check, so this listens to request events directly.

        with RequestTracker(page) as tracker:
            await button.click()
            await tracker.wait_idle(idle_ms=1000, timeout_ms=15000)
    """

    EVENTS = ("request", "requestfinished", "requestfailed")

    def __init__(self, page):
        self.page = page
        self.pending: Set[object] = set()
        self.last_activity = 0.0

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    def _on_request(self, request):
        self.pending.add(request)
        self.last_activity = self._now()

    def _on_done(self, request):
        self.pending.discard(request)
        self.last_activity = self._now()

    def __enter__(self) -> "RequestTracker":
        self.last_activity = self._now()
        self.page.on("request", self._on_request)
        self.page.on("requestfinished", self._on_done)
        self.page.on("requestfailed", self._on_done)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.page.remove_listener("request", self._on_request)
        self.page.remove_listener("requestfinished", self._on_done)
        self.page.remove_listener("requestfailed", self._on_done)

    async def wait_idle(self, idle_ms: int = 1000, timeout_ms: int = 15000, poll_ms: int = 50) -> bool:
        """
        Returns True once no request has been pending for idle_ms,
        False if that did not happen within timeout_ms.
        """
        deadline = self._now() + timeout_ms / 1000
        while True:
            now = self._now()
            if not self.pending and now - self.last_activity >= idle_ms / 1000:
                return True
            if now >= deadline:
                return False
            await asyncio.sleep(poll_ms / 1000)


async def find_control(page, selector: str, timeout_ms: int) -> Tuple[LookupOutcome, object]:
    """
    Looks for the control once.
    Returns (outcome, handle) on FOUND and (outcome, error message) otherwise.
    """
    try:
        handle = await page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        return LookupOutcome.NOT_FOUND, None
    except PlaywrightError as e:
        return LookupOutcome.LOOKUP_ERROR, e.message
    if handle is None:
        return LookupOutcome.NOT_FOUND, None
    return LookupOutcome.FOUND, handle


async def click_load_more(
    page,
    selector: str,
    *,
    max_clicks: int = 20,
    lookup_timeout_ms: int = 5000,
    idle_ms: int = 1000,
    idle_timeout_ms: int = 15000,
    settle_ms: int = 1500,
) -> PaginationResult:
    """
    Clicks the "Load More" control until it stops showing up, but never more
    than max_clicks times. After every click waits until no request has been
    in flight for idle_ms (at most idle_timeout_ms), then settle_ms more, so
    the new cards are in the DOM before the next lookup.
    """
    clicks = 0

    while clicks < max_clicks:
        outcome, found = await find_control(page, selector, lookup_timeout_ms)

        if outcome is LookupOutcome.NOT_FOUND:
            logger.info('No more "Load More" button found after %d clicks', clicks)
            return PaginationResult(clicks, StopReason.EXHAUSTED)

        if outcome is LookupOutcome.LOOKUP_ERROR:
            logger.warning('[WARN] "Load More" lookup failed after %d clicks: %s', clicks, found)
            return PaginationResult(clicks, StopReason.ERROR, error=found)

        # Listen before clicking so the requests the click starts are counted.
        with RequestTracker(page) as tracker:
            try:
                await found.click()
            except PlaywrightError as e:
                logger.warning('[WARN] "Load More" click failed after %d clicks: %s', clicks, e.message)
                return PaginationResult(clicks, StopReason.ERROR, error=e.message)

            clicks += 1
            logger.info('Clicked "Load More" (%d times)', clicks)

            if not await tracker.wait_idle(idle_ms=idle_ms, timeout_ms=idle_timeout_ms):
                logger.debug("Network did not go idle within %d ms (%d pending), continuing",
                             idle_timeout_ms, len(tracker.pending))

        await page.wait_for_timeout(settle_ms)

    logger.info('[DONE] Click budget reached (%d clicks)', clicks)
    return PaginationResult(clicks, StopReason.BUDGET)
