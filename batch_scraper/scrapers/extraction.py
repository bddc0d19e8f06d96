"""DOM extraction from rendered page HTML.

The browser renders the page; everything here works on the HTML it
returns, so extraction behaves the same against a live page and a
fixture string.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..models import ImageInfo

logger = logging.getLogger(__name__)

IMAGES_KEY = "images"
IMAGE_SOURCE_ATTRS = ("src", "data-src", "data-lazy-src", "data-original")

_PRODUCT_HINT = re.compile(r"[Pp]roduct")
_VARIANTS_HINT = '"variants"'

_decoder = json.JSONDecoder()


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def _image_source(img, base_url: str) -> str | None:
    for attr in IMAGE_SOURCE_ATTRS:
        value = img.get(attr)
        if value and value.strip():
            return urljoin(base_url, value.strip())
    return None


def extract_images(soup: BeautifulSoup, selector: str, base_url: str) -> list[ImageInfo]:
    """Collect every matching image that has a resolvable source."""
    images = []
    for img in soup.select(selector):
        if not (src := _image_source(img, base_url)):
            continue
        images.append(ImageInfo(src=src, alt=(img.get("alt") or "").strip()))
    return images


def extract_text(soup: BeautifulSoup, selector: str) -> str:
    """Trimmed text of the first match, or "" when nothing matches."""
    element = soup.select_one(selector)
    if element is None:
        return ""
    return element.get_text().strip()


def extract_fields(
    html: str | BeautifulSoup,
    base_url: str,
    extract_data: Mapping[str, str],
) -> dict[str, Any]:
    """Run a field-name to CSS-selector map against the page.

    A field whose selector fails is logged and left out of the result.
    """
    soup = html if isinstance(html, BeautifulSoup) else parse_html(html)
    data: dict[str, Any] = {}
    for key, selector in extract_data.items():
        try:
            if key == IMAGES_KEY:
                data[key] = extract_images(soup, selector, base_url)
            else:
                data[key] = extract_text(soup, selector)
        except Exception as e:
            logger.error(f"Error extracting {key!r} with selector {selector!r}: {e}")
    return data


def _inline_scripts(soup: BeautifulSoup) -> list[str]:
    return [s.get_text() for s in soup.find_all("script") if not s.get("src")]


def _first_product_object(text: str) -> dict | None:
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, dict) and "variants" in value:
            return value
        start = text.find("{", start + 1)
    return None


def find_embedded_product(html: str | BeautifulSoup) -> dict | None:
    """Find a product JSON object embedded in an inline script.

    Scripts mentioning a product and a "variants" key are scanned for the
    first JSON object literal with a top-level "variants" key. Anything
    that does not decode as JSON is ignored; the result is None when no
    such object exists.
    """
    try:
        soup = html if isinstance(html, BeautifulSoup) else parse_html(html)
        for text in _inline_scripts(soup):
            if _VARIANTS_HINT not in text or not _PRODUCT_HINT.search(text):
                continue
            if (product := _first_product_object(text)) is not None:
                return product
    except Exception as e:
        logger.debug(f"Embedded product scan failed: {e}")
    return None
