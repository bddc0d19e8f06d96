"""Data models for batch scraping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Mapping

from .errors import InvalidInput
from .utils import js_typeof

DEFAULT_CONCURRENCY = 2
MAX_CONCURRENCY = 3
DEFAULT_TIMEOUT_MS = 20000

# Filled in by the page scraper with the embedded product JSON.
PRODUCT_KEY = "productJson"
RESERVED_FIELDS = frozenset({PRODUCT_KEY})


def _optional_int(options: Mapping[str, Any], key: str) -> int | None:
    value = options.get(key)
    if value is None:
        return None
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"options.{key} must be a number", received=js_typeof(value))
    if not math.isfinite(value):
        raise InvalidInput(f"options.{key} must be a finite number", received="number")
    return int(value)


@dataclass(frozen=True)
class ScrapeOptions:
    """Per-request scraping options."""

    concurrency: int | None = None
    timeout: int = DEFAULT_TIMEOUT_MS
    wait_for_selector: str | None = None
    extract_data: dict[str, str] = field(default_factory=dict)

    @property
    def effective_concurrency(self) -> int:
        """Chunk size actually used, capped to protect the shared browser."""
        return max(1, min(self.concurrency or DEFAULT_CONCURRENCY, MAX_CONCURRENCY))

    @classmethod
    def from_dict(cls, options: Mapping[str, Any] | None) -> ScrapeOptions:
        """Parse the `options` object of a scrape request."""
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise InvalidInput("options must be an object", received=js_typeof(options))

        timeout = _optional_int(options, "timeout")

        wait_for = options.get("waitForSelector")
        if wait_for is not None and not isinstance(wait_for, str):
            raise InvalidInput("options.waitForSelector must be a string")

        extract_data = options.get("extractData") or {}
        if not isinstance(extract_data, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in extract_data.items()
        ):
            raise InvalidInput("options.extractData must map field names to CSS selectors")
        if reserved := RESERVED_FIELDS.intersection(extract_data):
            raise InvalidInput(
                f"options.extractData cannot use reserved field {sorted(reserved)[0]!r}",
                received="object",
            )

        return cls(
            concurrency=_optional_int(options, "concurrency"),
            timeout=timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT_MS,
            wait_for_selector=wait_for or None,
            extract_data=dict(extract_data),
        )


@dataclass(frozen=True)
class ImageInfo:
    """An image found by the `images` extraction key."""

    src: str
    alt: str = ""

    def to_dict(self) -> dict:
        return {"src": self.src, "alt": self.alt}


def _serialize(value: Any) -> Any:
    if isinstance(value, ImageInfo):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of scraping a single URL."""

    url: str
    success: bool
    data: dict[str, Any] | None
    scraped_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> ScrapeResult:
        return cls(url=url, success=False, data=None, error=error)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "url": self.url,
            "success": self.success,
            "data": (
                {k: _serialize(v) for k, v in self.data.items()}
                if self.data is not None
                else None
            ),
            "scrapedAt": self.scraped_at.isoformat(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class BatchResponse:
    """Aggregate result of one batch request."""

    success: bool
    total_urls: int
    products: list[ScrapeResult]
    processing_time_ms: int
    processed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None

    @property
    def successful_scrapes(self) -> int:
        return sum(1 for p in self.products if p.success)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "success": self.success,
            "totalUrls": self.total_urls,
            "successfulScrapes": self.successful_scrapes,
            "successfulUrls": self.successful_scrapes,
            "products": [p.to_dict() for p in self.products],
            "processingTimeMs": self.processing_time_ms,
            "processedAt": self.processed_at.isoformat(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result
