import logging
from typing import Any, Dict, List, Optional

from review_scraper.adapters.base import Review, ReviewWidgetAdapter
from review_scraper.config import DEFAULT_AUTHOR

logger = logging.getLogger(__name__)


# Runs in the page. Sub-selectors are passed in so one script serves every adapter.
PROJECT_CARDS_JS = """
(cards, sel) => cards.map((card) => {
    const text = (s) => {
        const el = s ? card.querySelector(s) : null;
        return el && el.textContent ? el.textContent.trim() : null;
    };
    const img = sel.image ? card.querySelector(sel.image) : null;
    return {
        author: text(sel.author),
        body: text(sel.body),
        image_url: img ? (img.currentSrc || img.src || null) : null,
    };
})
"""


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def build_review(raw: Dict[str, Any], default_author: str = DEFAULT_AUTHOR) -> Review:
    """Turns one projected card into a Review. Missing fields fall back, never raise."""
    return Review(
        author=_clean(raw.get("author")) or default_author,
        body=_clean(raw.get("body")) or "",
        image_url=_clean(raw.get("image_url")),
    )


async def extract_reviews(page, adapter: ReviewWidgetAdapter,
                          default_author: str = DEFAULT_AUTHOR) -> List[Review]:
    """
    Snapshot of every card currently in the DOM, one Review per card, in
    document order.
    """
    selectors = {"author": adapter.AUTHOR, "body": adapter.BODY, "image": adapter.IMAGE}
    raw_cards = await page.eval_on_selector_all(adapter.CARD, PROJECT_CARDS_JS, selectors)

    reviews = [build_review(raw or {}, default_author) for raw in raw_cards]
    with_photo = sum(1 for r in reviews if r.image_url)
    logger.info("[OK] Extracted %d reviews (%d with photos)", len(reviews), with_photo)
    return reviews
