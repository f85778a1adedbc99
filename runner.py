import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional

from review_scraper import config as settings
from review_scraper.config import ScrapeConfig
from review_scraper.dispatcher import ADAPTERS, crawl_reviews
from review_scraper.errors import NavigationError
from review_scraper.utils.download import download_review_images
from review_scraper.writer import write_csv, write_json

logger = logging.getLogger("review_scraper")


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Product review scraper (author, text, photo)")
    p.add_argument("--url", default=settings.DEFAULT_URL, help="Product page URL")
    p.add_argument("--widget", default=settings.DEFAULT_WIDGET, choices=sorted(ADAPTERS),
                   help="Review widget adapter name")
    p.add_argument("--max-clicks", type=int, default=settings.MAX_CLICKS,
                   help="Max 'Load More' clicks")
    p.add_argument("--headless", action="store_true", help="Run headless browser")
    p.add_argument("--storage-state", type=str, default=None,
                   help="Playwright storage_state json (cookies, consent)")
    p.add_argument("--out-json", type=str, default=settings.OUT_JSON, help="Output JSON path")
    p.add_argument("--out-csv", type=str, default=settings.OUT_CSV,
                   help="If set, also writes an import CSV (rating/date are synthesized)")
    p.add_argument("--download-dir", type=str, default=settings.DOWNLOAD_DIR,
                   help="Folder for review photos")
    p.add_argument("--no-download", action="store_true", help="Skip downloading photos")
    p.add_argument("--product-handle", type=str, default=None,
                   help="CSV product_handle (default: last path segment of --url)")
    p.add_argument("--seed", type=int, default=None, help="Seed for synthesized CSV fields")
    p.add_argument("--log-level", default=settings.LOG_LEVEL,
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def config_from_args(args) -> ScrapeConfig:
    return ScrapeConfig(
        url=args.url,
        widget=args.widget,
        headless=args.headless,
        storage_state=args.storage_state,
        max_clicks=args.max_clicks,
        out_json=args.out_json,
        out_csv=args.out_csv,
        download_dir=None if args.no_download else args.download_dir,
        product_handle=args.product_handle,
        seed=args.seed,
    )


async def run(config: ScrapeConfig) -> int:
    try:
        result = await crawl_reviews(config)
    except NavigationError as e:
        logger.error("[ERR ] %s", e)
        return 1

    reviews = result.reviews
    # Per-step summaries are logged by the steps themselves.
    logger.info("[DONE] Pagination stopped (%s) after %d clicks",
                result.pagination.stop_reason.value, result.pagination.clicks)

    if config.image_dir is not None:
        await download_review_images(reviews, config.image_dir)

    if config.out_json:
        write_json(reviews, config.out_json)

    if config.out_csv:
        write_csv(
            reviews,
            config.out_csv,
            product_handle=config.product_handle,
            rng=random.Random(config.seed),
            date_window=config.date_window,
            rating_weights=config.rating_weights,
        )

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT)
    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("[ERR ] %s", e)
        return 2
    return asyncio.run(run(config))


if __name__ == "__main__":
    sys.exit(main())
