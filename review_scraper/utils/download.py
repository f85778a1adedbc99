import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import aiohttp

from review_scraper.adapters.base import Review
from review_scraper.browser import UA

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=60, connect=15, sock_read=30)


@dataclass
class DownloadStats:
    attempted: int = 0
    saved: int = 0
    failed: int = 0


def image_filename(index: int) -> str:
    """0-based position -> 'image_1.jpg'"""
    return f"image_{index + 1}.jpg"


def clear_previous_images(out_dir: Path) -> int:
    """Removes image_*.jpg (and leftover .part files) written by an earlier run."""
    removed = 0
    for path in list(out_dir.glob("image_*.jpg")) + list(out_dir.glob("image_*.jpg.part")):
        path.unlink(missing_ok=True)
        removed += 1
    return removed


async def fetch_to_file(session: aiohttp.ClientSession, url: str, dest: Path) -> int:
    """
    Streams url into dest and returns the number of bytes written.
    The body goes to dest + '.part' first; dest only appears once the whole
    body is on disk. Raises on any failure, leaving nothing behind.
    """
    part = dest.with_name(dest.name + ".part")
    written = 0
    try:
        async with session.get(url) as resp:
            resp.raise_for_status()
            with open(part, "wb") as f:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)
                    written += len(chunk)
        if written == 0:
            raise ValueError("empty response body")
        part.replace(dest)
    except BaseException:
        part.unlink(missing_ok=True)
        raise
    return written


async def download_review_images(
    reviews: List[Review],
    out_dir: Union[str, Path],
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> DownloadStats:
    """
    Downloads the photo of every review that has one, one at a time, and sets
    review.image_path. A failed download only affects its own review:
    image_path stays None and the loop moves on.
    Files from an earlier run in out_dir are removed first, so every
    image_N.jpg left afterwards belongs to this run.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    removed = clear_previous_images(out_dir)
    if removed:
        logger.debug("Removed %d images from an earlier run in %s", removed, out_dir)
    stats = DownloadStats()

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession(timeout=DEFAULT_TIMEOUT, headers={"User-Agent": UA})

    try:
        for index, review in enumerate(reviews):
            review.image_path = None
            if not review.image_url:
                continue

            stats.attempted += 1
            dest = out_dir / image_filename(index)
            try:
                size = await fetch_to_file(session, review.image_url, dest)
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
                stats.failed += 1
                dest.unlink(missing_ok=True)
                logger.error("[ERR ] Failed to download image for review %d: %s", index + 1, str(e) or type(e).__name__)
                continue

            review.image_path = str(dest)
            stats.saved += 1
            logger.info("Downloaded image: %s (%d bytes)", dest, size)
    finally:
        if own_session:
            await session.close()

    logger.info("[OK] Images saved: %d, failed: %d", stats.saved, stats.failed)
    return stats
