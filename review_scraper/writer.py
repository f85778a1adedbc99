"""
Output writers: JSON with the scraped records, CSV in a review-import layout.

The CSV layout wants a rating, a date and a few more columns that the widget
cards do not expose. Those are synthesized here (random rating from {4, 5},
random date within a window, constants) so the file can be imported as-is.
They carry no information about the real reviews.
"""

import csv
import json
import logging
import random
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from review_scraper.adapters.base import Review
from review_scraper.config import CSV_DATE_WINDOW, CSV_RATING_WEIGHTS

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "product_handle",
    "rating",
    "author",
    "email",
    "body",
    "created_at",
    "photo_url",
    "verified_purchase",
]

VERIFIED_PURCHASE = "TRUE"


def write_json(reviews: List[Review], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in reviews], f, ensure_ascii=False, indent=2)
    logger.info("[OK] Saved %d reviews -> %s", len(reviews), path)
    return path


def random_rating(rng: random.Random, weights: Dict[int, float] = CSV_RATING_WEIGHTS) -> int:
    ratings = list(weights)
    return rng.choices(ratings, weights=[weights[r] for r in ratings], k=1)[0]


def random_date(rng: random.Random, window: Tuple[date, date] = CSV_DATE_WINDOW) -> date:
    start, end = window
    return start + timedelta(days=rng.randint(0, (end - start).days))


def synthesize_row(review: Review, product_handle: str, rng: random.Random,
                   date_window: Tuple[date, date] = CSV_DATE_WINDOW,
                   rating_weights: Dict[int, float] = CSV_RATING_WEIGHTS) -> Dict[str, object]:
    return {
        "product_handle": product_handle,
        "rating": random_rating(rng, rating_weights),
        "author": review.author,
        "email": "",
        "body": review.body,
        "created_at": random_date(rng, date_window).isoformat(),
        "photo_url": review.image_url or "",
        "verified_purchase": VERIFIED_PURCHASE,
    }


def write_csv(
    reviews: List[Review],
    path: Union[str, Path],
    *,
    product_handle: str,
    rng: Optional[random.Random] = None,
    date_window: Tuple[date, date] = CSV_DATE_WINDOW,
    rating_weights: Dict[int, float] = CSV_RATING_WEIGHTS,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rng = rng or random.Random()

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for review in reviews:
            writer.writerow(synthesize_row(review, product_handle, rng, date_window, rating_weights))

    logger.warning("[WARN] %s: rating, created_at, email and verified_purchase are synthesized, not scraped", path)
    logger.info("[OK] Saved %d rows -> %s", len(reviews), path)
    return path
