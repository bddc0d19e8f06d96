"""Batch orchestration: chunked, bounded-concurrency scraping of URL lists."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Sequence

from playwright.async_api import Browser

from .errors import InvalidInput
from .models import BatchResponse, ScrapeOptions, ScrapeResult
from .scrapers.browser import BrowserFactory
from .scrapers.page import scrape_url
from .utils import chunked, error_message, js_typeof

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_DELAY = 0.5

ScrapeFn = Callable[[Browser, str, ScrapeOptions], Awaitable[ScrapeResult]]


def validate_urls(urls: Any) -> list[str]:
    """Return urls as a list, or raise InvalidInput."""
    if not isinstance(urls, (list, tuple)):
        raise InvalidInput("URLs array is required", received=js_typeof(urls))
    if not urls:
        raise InvalidInput("URLs array must not be empty", received="object")
    if not all(isinstance(u, str) for u in urls):
        raise InvalidInput("URLs array must contain only strings", received="object")
    return list(urls)


def _elapsed_ms(start: float) -> int:
    return int((perf_counter() - start) * 1000)


async def _run_chunk(
    browser: Browser,
    chunk: list[str],
    options: ScrapeOptions,
    scrape: ScrapeFn,
) -> list[ScrapeResult]:
    """Scrape every URL in the chunk concurrently and wait for all to settle."""
    outcomes = await asyncio.gather(
        *(scrape(browser, url, options) for url in chunk),
        return_exceptions=True,
    )

    results: list[ScrapeResult] = []
    for url, outcome in zip(chunk, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(f"Failed to scrape {url}: {error_message(outcome)}")
            results.append(ScrapeResult.failed(url, error_message(outcome)))
        else:
            results.append(outcome)
    return results


async def run_batch(
    urls: Sequence[str],
    options: ScrapeOptions | None = None,
    *,
    browser_factory: BrowserFactory,
    scrape: ScrapeFn = scrape_url,
    chunk_delay: float = DEFAULT_CHUNK_DELAY,
) -> BatchResponse:
    """Scrape a list of URLs with one shared browser.

    URLs are processed in chunks of the effective concurrency; chunks run
    one after another with `chunk_delay` seconds between them. Results keep
    the input order. A failure to start the browser, or any other error
    outside the per-URL boundary, ends the batch with success=False and
    whatever results were collected so far.

    Raises InvalidInput when `urls` is not a non-empty list of strings.
    """
    url_list = validate_urls(urls)
    options = options or ScrapeOptions()
    concurrency = options.effective_concurrency
    chunks = chunked(url_list, concurrency)

    results: list[ScrapeResult] = []
    start = perf_counter()

    logger.info(f"Starting browser for {len(url_list)} URLs (concurrency {concurrency})")
    try:
        async with browser_factory() as browser:
            for index, chunk in enumerate(chunks):
                if index > 0 and chunk_delay > 0:
                    await asyncio.sleep(chunk_delay)
                results.extend(await _run_chunk(browser, chunk, options, scrape))
    except Exception as e:
        elapsed = _elapsed_ms(start)
        logger.error(f"Batch failed after {elapsed}ms: {error_message(e)}")
        return BatchResponse(
            success=False,
            total_urls=len(url_list),
            products=results,
            processing_time_ms=elapsed,
            error=error_message(e),
        )

    response = BatchResponse(
        success=True,
        total_urls=len(url_list),
        products=results,
        processing_time_ms=_elapsed_ms(start),
    )
    logger.info(
        f"Completed scraping in {response.processing_time_ms}ms: "
        f"{response.successful_scrapes}/{response.total_urls} succeeded"
    )
    return response
