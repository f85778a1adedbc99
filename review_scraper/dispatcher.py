import logging
from dataclasses import dataclass
from typing import Dict, List

from review_scraper.browser import PageSession
# PageSession owns Playwright + browser + context + page and closes them on exit.

from review_scraper.adapters.base import Review, ReviewWidgetAdapter
from review_scraper.adapters.vitals import VitalsAdapter
# Concrete widget adapters. Each one only declares selectors.

from review_scraper.config import ScrapeConfig
from review_scraper.extract import extract_reviews
from review_scraper.utils.pagination import PaginationResult, click_load_more
from review_scraper.utils.settle import SettleResult, settle_content

logger = logging.getLogger(__name__)


# Registered adapters, looked up by name (--widget on the command line).
ADAPTERS: Dict[str, ReviewWidgetAdapter] = {
    a.name: a for a in [
        VitalsAdapter(),
    ]
}


def pick_adapter(name: str) -> ReviewWidgetAdapter:
    """
    Returns the adapter registered under name ("vitals" -> VitalsAdapter).
    """
    try:
        return ADAPTERS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(ADAPTERS))
        raise ValueError(f"No adapter registered for widget: {name} (known: {known})") from None


@dataclass
class CrawlResult:
    reviews: List[Review]
    pagination: PaginationResult
    settle: SettleResult


async def crawl_reviews(config: ScrapeConfig) -> CrawlResult:
    """
    High-level crawl.
    Steps:
        1. Pick the adapter for the configured widget.
        2. Open a browser session.
        3. Load the product page (fatal on failure).
        4. Click "Load More" until it is gone or the budget is spent.
        5. Scroll through the page so lazy content renders.
        6. Snapshot every review card.
        7. Close the browser (always, even on error).
    """
    adapter = pick_adapter(config.widget)

    async with PageSession(headless=config.headless, storage_state=config.storage_state) as session:
        await adapter.navigate(session, config.url)
        page = session.page

        pagination = await click_load_more(
            page,
            adapter.LOAD_MORE,
            max_clicks=config.max_clicks,
            lookup_timeout_ms=config.lookup_timeout_ms,
            idle_ms=config.network_idle_ms,
            idle_timeout_ms=config.network_idle_timeout_ms,
            settle_ms=config.click_settle_ms,
        )

        settle = await settle_content(
            page,
            step_px=config.scroll_step_px,
            interval_ms=config.scroll_interval_ms,
            stable_samples=config.scroll_stable_samples,
            max_steps=config.scroll_max_steps,
            final_delay_ms=config.final_delay_ms,
        )

        reviews = await extract_reviews(page, adapter)

    return CrawlResult(reviews=reviews, pagination=pagination, settle=settle)
