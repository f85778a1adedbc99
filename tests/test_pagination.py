"""
Tests for the "Load More" pagination loop.

The Playwright page is replaced by a MagicMock whose wait_for_selector
returns a fake button or raises the errors Playwright would raise. Request
events are fired by hand through a small listener registry.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from review_scraper.utils.pagination import (
    LookupOutcome,
    RequestTracker,
    StopReason,
    click_load_more,
    find_control,
)

SELECTOR = "button.show-more"

# Short idle window so the loop does not sleep a second per click.
FAST = {"idle_ms": 20, "idle_timeout_ms": 1000}


def make_button():
    button = MagicMock()
    button.click = AsyncMock()
    return button


def make_page(lookups=None, button=None):
    page = MagicMock()
    if button is not None:
        page.wait_for_selector = AsyncMock(return_value=button)
    else:
        page.wait_for_selector = AsyncMock(side_effect=lookups)
    page.wait_for_timeout = AsyncMock()

    page.listeners = {}
    page.on = lambda event, fn: page.listeners.setdefault(event, []).append(fn)
    page.remove_listener = lambda event, fn: page.listeners[event].remove(fn)

    def emit(event, request):
        for fn in list(page.listeners.get(event, [])):
            fn(request)
    page.emit = emit
    return page


def run(coro):
    return asyncio.run(coro)


def test_stops_when_control_disappears():
    button = make_button()
    page = make_page([button, button, PlaywrightTimeoutError("Timeout 5000ms exceeded")])

    result = run(click_load_more(page, SELECTOR, max_clicks=20, settle_ms=1500, **FAST))

    assert result.clicks == 2
    assert result.stop_reason is StopReason.EXHAUSTED
    assert result.error is None
    assert button.click.await_count == 2
    assert page.wait_for_timeout.await_count == 2
    page.wait_for_timeout.assert_awaited_with(1500)
    assert all(not fns for fns in page.listeners.values())


def test_waits_for_requests_started_by_the_click():
    button = make_button()
    page = make_page([button, PlaywrightTimeoutError("Timeout 5000ms exceeded")])
    request = object()
    timeline = {}

    async def click():
        loop = asyncio.get_running_loop()
        timeline["clicked"] = loop.time()
        page.emit("request", request)

        def finish():
            timeline["finished"] = loop.time()
            page.emit("requestfinished", request)
        loop.call_later(0.3, finish)

    button.click.side_effect = click

    async def scenario():
        async def settle(ms):
            timeline["settled"] = asyncio.get_running_loop().time()
        page.wait_for_timeout.side_effect = settle
        return await click_load_more(page, SELECTOR, idle_ms=100, idle_timeout_ms=5000)

    result = run(scenario())

    assert result.clicks == 1
    assert timeline["settled"] >= timeline["finished"] + 0.1
    assert timeline["settled"] - timeline["clicked"] >= 0.4


def test_failed_request_also_counts_as_done():
    page = make_page()
    request = object()

    async def scenario():
        with RequestTracker(page) as tracker:
            page.emit("request", request)
            assert tracker.pending == {request}
            asyncio.get_running_loop().call_later(0.05, page.emit, "requestfailed", request)
            return await tracker.wait_idle(idle_ms=20, timeout_ms=1000)

    assert run(scenario()) is True


def test_idle_wait_gives_up_after_timeout_and_loop_continues():
    button = make_button()
    page = make_page([button, PlaywrightTimeoutError("Timeout 5000ms exceeded")])
    button.click.side_effect = lambda: page.emit("request", object())   # never finishes

    result = run(click_load_more(page, SELECTOR, settle_ms=10, idle_ms=20, idle_timeout_ms=100))

    assert result.clicks == 1
    assert result.stop_reason is StopReason.EXHAUSTED
    page.wait_for_timeout.assert_awaited_once_with(10)


def test_click_budget_bounds_loop_when_control_never_disappears():
    button = make_button()
    page = make_page(button=button)

    result = run(click_load_more(page, SELECTOR, max_clicks=3, **FAST))

    assert result.clicks == 3
    assert result.stop_reason is StopReason.BUDGET
    assert page.wait_for_selector.await_count == 3
    assert button.click.await_count == 3


def test_zero_budget_never_looks_up_control():
    page = make_page(button=make_button())

    result = run(click_load_more(page, SELECTOR, max_clicks=0))

    assert result.clicks == 0
    assert result.stop_reason is StopReason.BUDGET
    page.wait_for_selector.assert_not_awaited()


def test_lookup_error_is_distinguished_from_end_of_pagination():
    button = make_button()
    page = make_page([button, PlaywrightError("Target page, context or browser has been closed")])

    result = run(click_load_more(page, SELECTOR, **FAST))

    assert result.clicks == 1
    assert result.stop_reason is StopReason.ERROR
    assert "closed" in result.error


def test_failed_click_ends_loop_as_error():
    button = make_button()
    button.click.side_effect = PlaywrightError("Element is not attached to the DOM")
    page = make_page(button=button)

    result = run(click_load_more(page, SELECTOR, **FAST))

    assert result.clicks == 0
    assert result.stop_reason is StopReason.ERROR
    page.wait_for_timeout.assert_not_awaited()
    assert all(not fns for fns in page.listeners.values())


def test_find_control_outcomes():
    button = make_button()
    page = make_page([button, PlaywrightTimeoutError("timeout"), None, PlaywrightError("boom")])

    assert run(find_control(page, SELECTOR, 100)) == (LookupOutcome.FOUND, button)
    assert run(find_control(page, SELECTOR, 100)) == (LookupOutcome.NOT_FOUND, None)
    assert run(find_control(page, SELECTOR, 100)) == (LookupOutcome.NOT_FOUND, None)
    assert run(find_control(page, SELECTOR, 100)) == (LookupOutcome.LOOKUP_ERROR, "boom")
    page.wait_for_selector.assert_awaited_with(SELECTOR, state="visible", timeout=100)
