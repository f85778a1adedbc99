"""
Default settings for the review scraper.

Every value here can be overridden per run through ScrapeConfig (the CLI in
runner.py builds one from its arguments).
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

# Target page
DEFAULT_URL = "https://boostedrider.com/products/showroom-1-0"
DEFAULT_WIDGET = "vitals"

# Navigation
NAVIGATION_TIMEOUT_MS = 60_000

# Pagination ("Load More")
MAX_CLICKS = 20                # safety limit, the control may never disappear
LOOKUP_TIMEOUT_MS = 5_000      # how long to look for the control each round
NETWORK_IDLE_MS = 1_000        # no request in flight for this long -> idle
NETWORK_IDLE_TIMEOUT_MS = 15_000
CLICK_SETTLE_MS = 1_500        # fixed delay after network idle

# Lazy-load settling
SCROLL_STEP_PX = 500
SCROLL_INTERVAL_MS = 500
SCROLL_STABLE_SAMPLES = 3      # height unchanged this many samples in a row -> done
SCROLL_MAX_STEPS = 400
FINAL_DELAY_MS = 2_000

# Extraction
DEFAULT_AUTHOR = "Anonymous"

# Outputs
OUT_JSON = "reviews.json"
OUT_CSV = None                 # CSV is opt-in
DOWNLOAD_DIR = "review_images"

# CSV synthesized fields (not scraped)
CSV_DATE_WINDOW: Tuple[date, date] = (date(2023, 1, 1), date(2024, 12, 31))
CSV_RATING_WEIGHTS: Dict[int, float] = {5: 0.8, 4: 0.2}

# Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def product_handle_from_url(url: str) -> str:
    """'https://shop/products/showroom-1-0?x=1' -> 'showroom-1-0'"""
    path = urlparse(url).path.rstrip("/")
    return path.rsplit("/", 1)[-1] if path else ""


@dataclass
class ScrapeConfig:
    url: str = DEFAULT_URL
    widget: str = DEFAULT_WIDGET
    headless: bool = False
    storage_state: Optional[str] = None

    max_clicks: int = MAX_CLICKS
    lookup_timeout_ms: int = LOOKUP_TIMEOUT_MS
    network_idle_ms: int = NETWORK_IDLE_MS
    network_idle_timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS
    click_settle_ms: int = CLICK_SETTLE_MS

    scroll_step_px: int = SCROLL_STEP_PX
    scroll_interval_ms: int = SCROLL_INTERVAL_MS
    scroll_stable_samples: int = SCROLL_STABLE_SAMPLES
    scroll_max_steps: int = SCROLL_MAX_STEPS
    final_delay_ms: int = FINAL_DELAY_MS

    out_json: Optional[str] = OUT_JSON
    out_csv: Optional[str] = OUT_CSV
    download_dir: Optional[str] = DOWNLOAD_DIR

    product_handle: Optional[str] = None
    seed: Optional[int] = None
    date_window: Tuple[date, date] = CSV_DATE_WINDOW
    rating_weights: Dict[int, float] = field(default_factory=lambda: dict(CSV_RATING_WEIGHTS))

    def __post_init__(self):
        if self.max_clicks < 0:
            raise ValueError(f"max_clicks must be >= 0, got {self.max_clicks}")
        if self.date_window[0] > self.date_window[1]:
            raise ValueError(f"Empty date window: {self.date_window}")
        if self.product_handle is None:
            self.product_handle = product_handle_from_url(self.url)

    @property
    def image_dir(self) -> Optional[Path]:
        return Path(self.download_dir) if self.download_dir else None
