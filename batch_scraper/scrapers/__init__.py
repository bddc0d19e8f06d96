"""Browser-side scraping: engine lifecycle, page loading and DOM extraction."""

from __future__ import annotations

from .browser import BrowserFactory, browser_factory_for, check_browser, launch_browser
from .extraction import extract_fields, find_embedded_product
from .page import scrape_url

__all__ = [
    "BrowserFactory",
    "browser_factory_for",
    "check_browser",
    "extract_fields",
    "find_embedded_product",
    "launch_browser",
    "scrape_url",
]
