import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from review_scraper.browser import CHROME_ARGS, PageSession
from review_scraper.errors import NavigationError


def fake_playwright():
    """async_playwright() replacement plus the objects it hands out."""
    page = MagicMock()
    page.goto = AsyncMock()
    context = MagicMock()
    context.add_init_script = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    pw.stop = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    return MagicMock(return_value=starter), pw, browser, context, page


def test_session_opens_with_stealth_settings_and_closes():
    factory, pw, browser, context, page = fake_playwright()

    async def scenario():
        async with PageSession(headless=True, storage_state="state.json") as session:
            assert session.is_open
            assert session.page is page
            await session.goto("https://shop.example/products/x")
        assert not session.is_open

    with patch("review_scraper.browser.async_playwright", factory):
        asyncio.run(scenario())

    pw.chromium.launch.assert_awaited_once_with(headless=True, args=CHROME_ARGS)
    kwargs = browser.new_context.await_args.kwargs
    assert kwargs["storage_state"] == "state.json"
    assert kwargs["viewport"] == {"width": 1366, "height": 900}
    assert "webdriver" in context.add_init_script.await_args.args[0]
    page.goto.assert_awaited_once_with("https://shop.example/products/x",
                                       wait_until="networkidle", timeout=60000)
    context.close.assert_awaited_once()
    browser.close.assert_awaited_once()
    pw.stop.assert_awaited_once()


def test_navigation_failure_is_fatal_and_still_closes_browser():
    factory, pw, browser, context, page = fake_playwright()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 60000ms exceeded.")

    async def scenario():
        async with PageSession() as session:
            await session.goto("https://shop.example/products/x")

    with patch("review_scraper.browser.async_playwright", factory):
        with pytest.raises(NavigationError) as exc_info:
            asyncio.run(scenario())

    assert exc_info.value.url == "https://shop.example/products/x"
    assert "Timeout" in str(exc_info.value)
    context.close.assert_awaited_once()
    browser.close.assert_awaited_once()
    pw.stop.assert_awaited_once()


def test_launch_failure_stops_driver():
    factory, pw, browser, context, page = fake_playwright()
    pw.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")

    with patch("review_scraper.browser.async_playwright", factory):
        with pytest.raises(RuntimeError):
            asyncio.run(PageSession().open())

    pw.stop.assert_awaited_once()


def test_page_requires_open_session():
    with pytest.raises(RuntimeError):
        PageSession().page
