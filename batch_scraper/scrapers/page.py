"""Scrape a single URL inside a shared browser."""

from __future__ import annotations

import logging
from datetime import datetime, UTC

from playwright.async_api import Browser, Page, Route, TimeoutError as PlaywrightTimeoutError

from ..errors import NavigationError
from ..models import PRODUCT_KEY, ScrapeOptions, ScrapeResult
from ..utils import error_message
from .extraction import extract_fields, find_embedded_product, parse_html

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; CompeteTracker/1.0)"
VIEWPORT = {"width": 1366, "height": 768}
BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})
SELECTOR_WAIT_TIMEOUT_MS = 3000


async def block_heavy_resources(route: Route) -> None:
    """Abort images, stylesheets, fonts and media; let everything else through."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def _navigate(page: Page, url: str, timeout: int) -> None:
    response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
    if response is None:
        raise NavigationError(url)
    if not response.ok:
        raise NavigationError(url, response.status, response.status_text)


async def _wait_for_selector(page: Page, url: str, selector: str) -> None:
    try:
        await page.wait_for_selector(selector, timeout=SELECTOR_WAIT_TIMEOUT_MS)
    except PlaywrightTimeoutError:
        logger.warning(f"Selector {selector!r} not found on {url} within {SELECTOR_WAIT_TIMEOUT_MS}ms")


async def scrape_url(browser: Browser, url: str, options: ScrapeOptions) -> ScrapeResult:
    """Load one URL in an isolated context and extract its data.

    Never raises: navigation and extraction failures are returned as a
    failed ScrapeResult.
    """
    context = None
    try:
        context = await browser.new_context(user_agent=USER_AGENT, viewport=VIEWPORT)
        page = await context.new_page()
        await page.route("**/*", block_heavy_resources)

        logger.info(f"Scraping: {url}")
        await _navigate(page, url, options.timeout)

        if options.wait_for_selector:
            await _wait_for_selector(page, url, options.wait_for_selector)

        soup = parse_html(await page.content())
        data = extract_fields(soup, page.url or url, options.extract_data)
        data[PRODUCT_KEY] = find_embedded_product(soup)

        return ScrapeResult(url=url, success=True, data=data, scraped_at=datetime.now(UTC))

    except Exception as e:
        logger.error(f"Error scraping {url}: {error_message(e)}")
        return ScrapeResult.failed(url, error_message(e))

    finally:
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing page for {url}: {error_message(e)}")
