import logging
from dataclasses import dataclass, asdict                    # dataclass keeps records light and JSON friendly
from typing import Any, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)


@dataclass
class Review:                                                # One review card scraped from the widget
    author: str                                              # Display name, placeholder when the card has none
    body: str                                                # Review text, may be empty
    image_url: Optional[str] = None                          # Photo attached to the review (remote)
    image_path: Optional[str] = None                         # Local copy, set by the downloader

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ReviewWidgetAdapter:                                   # Selectors + navigation for one review widget
    name: str = "base"

    CARD: str = ""                                           # One element per review
    AUTHOR: str = ""                                         # Relative to CARD
    BODY: str = ""
    IMAGE: str = ""                                          # <img>, src is taken
    LOAD_MORE: str = ""                                      # "Show more reviews" control
    CONSENT_BUTTONS: List[str] = []                          # Cookie banners that can cover LOAD_MORE

    async def navigate(self, session, url: str):
        """Load the product page, then get consent banners out of the way."""
        await session.goto(url)
        await self.dismiss_banners(session.page)

    async def dismiss_banners(self, page, timeout_ms: int = 1500):
        for sel in self.CONSENT_BUTTONS:
            try:
                await page.click(sel, timeout=timeout_ms)
                logger.debug("Dismissed banner via %s", sel)
                return
            except PlaywrightError:
                continue                                     # banner not shown on this page
