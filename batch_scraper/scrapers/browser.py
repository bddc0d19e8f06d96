"""Scoped Playwright browser acquisition.

Each batch launches its own Chromium and closes it when done; browsers
are never shared between requests.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from playwright.async_api import async_playwright, Browser

from ..config import Settings
from ..errors import BrowserLaunchError
from ..utils import error_message

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[], AsyncContextManager[Browser]]

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-extensions",
    "--disable-default-apps",
]


@asynccontextmanager
async def launch_browser(settings: Settings) -> AsyncIterator[Browser]:
    """Launch headless Chromium for the duration of the block.

    Raises BrowserLaunchError when the engine cannot start. Errors while
    closing are logged and not raised.
    """
    try:
        playwright = await async_playwright().start()
    except Exception as e:
        raise BrowserLaunchError(error_message(e)) from e

    try:
        launch_kwargs: dict[str, object] = {
            "headless": True,
            "args": LAUNCH_ARGS,
            "timeout": settings.launch_timeout_ms,
        }
        if settings.executable_path:
            launch_kwargs["executable_path"] = settings.executable_path
        try:
            browser = await playwright.chromium.launch(**launch_kwargs)
        except Exception as e:
            raise BrowserLaunchError(error_message(e)) from e

        try:
            yield browser
        finally:
            try:
                await browser.close()
            except Exception as e:
                logger.error(f"Error closing browser: {error_message(e)}")
    finally:
        try:
            await playwright.stop()
        except Exception as e:
            logger.error(f"Error stopping Playwright: {error_message(e)}")


def browser_factory_for(settings: Settings) -> BrowserFactory:
    """Return a zero-argument factory launching browsers with `settings`."""

    def factory() -> AsyncContextManager[Browser]:
        return launch_browser(settings)

    return factory


async def check_browser(factory: BrowserFactory) -> tuple[bool, str | None]:
    """Launch and immediately close a browser to verify the engine works."""
    try:
        async with factory():
            pass
    except Exception as e:
        logger.error(f"Browser check failed: {error_message(e)}")
        return False, error_message(e)
    return True, None
