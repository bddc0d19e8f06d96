"""Exception types raised by the batch scraper."""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for scraper errors."""


class InvalidInput(ScrapeError):
    """The batch request could not be accepted."""

    def __init__(self, message: str, received: str | None = None):
        super().__init__(message)
        self.received = received


class NavigationError(ScrapeError):
    """Navigation produced no response or a non-2xx response."""

    def __init__(self, url: str, status: int | None = None, status_text: str = ""):
        self.url = url
        self.status = status
        self.status_text = status_text
        if status is None:
            message = f"No response received for {url}"
        else:
            message = f"HTTP {status}: {status_text}" if status_text else f"HTTP {status}"
        super().__init__(message)


class BrowserLaunchError(ScrapeError):
    """The headless browser could not be started."""
