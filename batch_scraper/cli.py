#!/usr/bin/env python3
"""CLI entry point for the batch scraper."""

import argparse
import asyncio
import json
import sys

from .config import get_settings
from .errors import InvalidInput
from .models import BatchResponse, ScrapeOptions
from .orchestrator import run_batch
from .scrapers.browser import browser_factory_for, check_browser
from .webapp.run import configure_logging


def parse_extract(pairs: list[str]) -> dict[str, str]:
    """Turn `key=selector` arguments into an extraction map."""
    extract: dict[str, str] = {}
    for pair in pairs:
        key, sep, selector = pair.partition("=")
        if not sep or not key.strip() or not selector.strip():
            raise InvalidInput(f"Invalid --extract value {pair!r}, expected key=selector")
        extract[key.strip()] = selector.strip()
    return extract


def print_result(result: BatchResponse) -> None:
    """Print batch summary to stderr."""
    print(
        f"\nScraped {result.successful_scrapes}/{result.total_urls} URLs "
        f"in {result.processing_time_ms}ms",
        file=sys.stderr,
    )
    for p in result.products:
        status = "ok" if p.success else f"failed: {p.error}"
        print(f"  - {p.url} [{status}]", file=sys.stderr)


async def run_scrape(urls: list[str], options: ScrapeOptions) -> BatchResponse:
    settings = get_settings()
    return await run_batch(
        urls,
        options,
        browser_factory=browser_factory_for(settings),
        chunk_delay=settings.chunk_delay,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Batch scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m batch_scraper.cli --scrape https://example.com -x title=h1
  python -m batch_scraper.cli --scrape URL1 URL2 --concurrency 3 -x images=img
  python -m batch_scraper.cli --check-browser    # Verify Chromium starts
  python -m batch_scraper.cli --serve            # Run the HTTP service
        """,
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--scrape", "-s", nargs="+", metavar="URL", help="Scrape one or more URLs")
    group.add_argument("--check-browser", action="store_true", help="Launch and close a browser")
    group.add_argument("--serve", action="store_true", help="Run the HTTP service")

    parser.add_argument("--concurrency", "-c", type=int, help="Parallel pages per chunk (max 3)")
    parser.add_argument("--timeout", "-t", type=int, help="Navigation timeout in milliseconds")
    parser.add_argument("--wait-for", help="CSS selector to wait for before extracting")
    parser.add_argument(
        "--extract", "-x", action="append", default=[], metavar="KEY=SELECTOR",
        help="Field to extract (repeatable); use key 'images' to collect images",
    )

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.serve:
        from .webapp.run import main as serve
        serve([])
        return 0

    if args.check_browser:
        ok, error = asyncio.run(check_browser(browser_factory_for(settings)))
        print("Chrome working" if ok else f"Chrome failed: {error}")
        return 0 if ok else 1

    try:
        options = ScrapeOptions.from_dict(
            {
                "concurrency": args.concurrency,
                "timeout": args.timeout,
                "waitForSelector": args.wait_for,
                "extractData": parse_extract(args.extract),
            }
        )
        result = asyncio.run(run_scrape(args.scrape, options))
    except InvalidInput as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    print_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
