import asyncio
import unittest
from unittest import mock

from batch_scraper.errors import InvalidInput
from batch_scraper.models import ScrapeOptions, ScrapeResult
from batch_scraper.orchestrator import run_batch, validate_urls
from batch_scraper.utils import chunked
from tests.fakes import FakeBrowser, FakeBrowserFactory, FakeSite


class ConcurrencyProbe:
    """Scrape function that records how many calls overlap."""

    def __init__(self, delays: dict[str, float] | None = None, failures: set[str] | None = None):
        self.delays = delays or {}
        self.failures = failures or set()
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls: list[str] = []

    async def __call__(self, browser, url, options):
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0.01))
            if url in self.failures:
                raise RuntimeError(f"boom at {url}")
            return ScrapeResult(url=url, success=True, data={"title": url})
        finally:
            self.in_flight -= 1


class TestChunked(unittest.TestCase):
    def test_preserves_order_with_short_last_chunk(self):
        self.assertEqual(chunked(["a", "b", "c", "d", "e"], 2), [["a", "b"], ["c", "d"], ["e"]])

    def test_rejects_non_positive_size(self):
        with self.assertRaises(ValueError):
            chunked(["a"], 0)


class TestValidateUrls(unittest.TestCase):
    def test_rejects_non_list(self):
        with self.assertRaises(InvalidInput) as ctx:
            validate_urls("https://example.com")
        self.assertEqual(ctx.exception.received, "string")

    def test_rejects_empty_list(self):
        with self.assertRaises(InvalidInput):
            validate_urls([])

    def test_rejects_non_string_items(self):
        with self.assertRaises(InvalidInput):
            validate_urls(["https://example.com", 3])


class TestRunBatch(unittest.IsolatedAsyncioTestCase):
    async def test_results_follow_input_order_not_completion_order(self):
        urls = [f"https://example.com/{i}" for i in range(7)]
        # Earlier URLs in each chunk finish last.
        probe = ConcurrencyProbe(delays={u: 0.05 - i * 0.005 for i, u in enumerate(urls)})
        factory = FakeBrowserFactory()

        result = await run_batch(
            urls, ScrapeOptions(concurrency=3), browser_factory=factory, scrape=probe, chunk_delay=0
        )

        self.assertTrue(result.success)
        self.assertEqual([p.url for p in result.products], urls)
        self.assertEqual(result.total_urls, 7)
        self.assertEqual(result.successful_scrapes, 7)

    async def test_concurrency_is_capped_at_three(self):
        urls = [f"https://example.com/{i}" for i in range(10)]
        probe = ConcurrencyProbe()

        result = await run_batch(
            urls,
            ScrapeOptions(concurrency=100),
            browser_factory=FakeBrowserFactory(),
            scrape=probe,
            chunk_delay=0,
        )

        self.assertEqual(len(result.products), 10)
        self.assertEqual(probe.max_in_flight, 3)

    async def test_default_concurrency_is_two(self):
        urls = [f"https://example.com/{i}" for i in range(5)]
        probe = ConcurrencyProbe()

        await run_batch(urls, ScrapeOptions(), browser_factory=FakeBrowserFactory(), scrape=probe, chunk_delay=0)

        self.assertEqual(probe.max_in_flight, 2)

    async def test_failed_url_does_not_abort_siblings(self):
        urls = ["https://a.example/", "https://bad.example/", "https://c.example/", "https://d.example/"]
        probe = ConcurrencyProbe(failures={"https://bad.example/"})

        with self.assertLogs("batch_scraper.orchestrator", level="ERROR") as logs:
            result = await run_batch(
                urls, ScrapeOptions(concurrency=2), browser_factory=FakeBrowserFactory(), scrape=probe, chunk_delay=0
            )

        self.assertTrue(result.success)
        self.assertEqual([p.success for p in result.products], [True, False, True, True])
        failed = result.products[1]
        self.assertEqual(failed.url, "https://bad.example/")
        self.assertEqual(failed.error, "boom at https://bad.example/")
        self.assertIsNone(failed.data)
        self.assertEqual(result.successful_scrapes, 3)
        self.assertTrue(any("https://bad.example/" in line for line in logs.output))

    async def test_navigation_timeout_recorded_with_real_page_scraper(self):
        ok_url = "https://ok.example/"
        slow_url = "https://slow.example/"
        browser = FakeBrowser(
            {
                ok_url: FakeSite(html="<h1>Foo</h1>"),
                slow_url: FakeSite(error=TimeoutError("Timeout 20000ms exceeded")),
            }
        )
        factory = FakeBrowserFactory(browser)
        options = ScrapeOptions(concurrency=1, extract_data={"title": "h1"})

        result = await run_batch([slow_url, ok_url], options, browser_factory=factory, chunk_delay=0)

        self.assertTrue(result.success)
        self.assertFalse(result.products[0].success)
        self.assertIn("Timeout", result.products[0].error)
        self.assertTrue(result.products[1].success)
        self.assertEqual(result.products[1].data["title"], "Foo")
        self.assertEqual(factory.launches, 1)
        self.assertEqual(factory.closes, 1)

    async def test_browser_launch_failure_returns_failed_batch(self):
        factory = FakeBrowserFactory(launch_error="Failed to launch chromium")
        probe = ConcurrencyProbe()

        result = await run_batch(["https://a.example/"], browser_factory=factory, scrape=probe, chunk_delay=0)

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Failed to launch chromium")
        self.assertEqual(result.products, [])
        self.assertEqual(probe.calls, [])

    async def test_browser_is_closed_when_batch_is_cancelled(self):
        factory = FakeBrowserFactory()

        async def cancelled_scrape(browser, url, options):
            raise asyncio.CancelledError

        with self.assertRaises(asyncio.CancelledError):
            await run_batch(["https://a.example/"], browser_factory=factory, scrape=cancelled_scrape, chunk_delay=0)

        self.assertEqual(factory.closes, 1)

    async def test_pause_between_chunks_only(self):
        urls = [f"https://example.com/{i}" for i in range(3)]
        sleeps: list[float] = []
        real_sleep = asyncio.sleep

        async def recording_sleep(delay, *args, **kwargs):
            sleeps.append(delay)
            await real_sleep(0)

        probe = ConcurrencyProbe(delays={u: 0 for u in urls})
        with mock.patch("batch_scraper.orchestrator.asyncio.sleep", recording_sleep):
            await run_batch(
                urls, ScrapeOptions(concurrency=1), browser_factory=FakeBrowserFactory(), scrape=probe, chunk_delay=0.5
            )

        self.assertEqual(sleeps.count(0.5), 2)

    async def test_invalid_urls_raise_before_launch(self):
        factory = FakeBrowserFactory()

        with self.assertRaises(InvalidInput):
            await run_batch(None, browser_factory=factory)

        self.assertEqual(factory.launches, 0)
