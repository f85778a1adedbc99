import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class SettleResult:
    steps: int
    height: int
    stable: bool         # False when max_steps ran out while the page was still growing


async def settle_content(
    page,
    *,
    step_px: int = 500,
    interval_ms: int = 500,
    stable_samples: int = 3,
    max_steps: int = 400,
    final_delay_ms: int = 2000,
) -> SettleResult:
    """
    Scrolls from the top to the bottom in step_px increments so lazy-loaded
    cards and photos get rendered.

    Stops once the scrolled distance has reached the document height and the
    height stayed the same for stable_samples samples in a row. Then waits
    final_delay_ms once.
    """
    await page.evaluate("() => window.scrollTo(0, 0)")

    scrolled = 0
    last_height = -1
    unchanged = 0
    stable = False
    height = 0
    steps = 0

    for steps in range(1, max_steps + 1):
        height = int(await page.evaluate("() => document.body.scrollHeight") or 0)

        if height == last_height and scrolled >= height:
            unchanged += 1
        else:
            unchanged = 0
        last_height = height

        if unchanged >= stable_samples:
            stable = True
            break

        await page.evaluate("(y) => window.scrollBy(0, y)", step_px)
        scrolled += step_px
        await page.wait_for_timeout(interval_ms)

    if not stable:
        logger.warning("[WARN] Page still growing after %d scroll steps (height %d)", steps, height)
    else:
        logger.debug("Page settled at height %d after %d steps", height, steps)

    await page.wait_for_timeout(final_delay_ms)
    return SettleResult(steps=steps, height=height, stable=stable)
