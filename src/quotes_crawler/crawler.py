# src/quotes_crawler/crawler.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from bs4 import BeautifulSoup

from quotes_crawler.config import CrawlSettings
from quotes_crawler.extractors.base import BaseExtractor, Page, QuoteRecord
from quotes_crawler.extractors.json_api import JsonApiExtractor
from quotes_crawler.extractors.markup import MarkupExtractor
from quotes_crawler.fetchers.http import FetchError, HttpFetcher
from quotes_crawler.fetchers.proxy import ProxyConfiguration
from quotes_crawler.pagination import find_next_page
from quotes_crawler.sinks import RecordSink
from quotes_crawler.state import CrawlState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageTask:
    url: str
    page_no: int = 1


@dataclass
class CrawlSummary:
    """pages_processed counts pages whose records reached the sink, never a failed page."""

    saved: int
    pages_processed: int
    pages_failed: int


class QuoteCrawler:
    """
    Runs PageTasks through a pool of asyncio workers:
    fetch -> extract (JSON first, markup as fallback) -> dedup -> sink -> paginate.
    The run is over when the task queue drains.
    """

    def __init__(
        self,
        settings: CrawlSettings,
        *,
        fetcher: HttpFetcher,
        sink: RecordSink,
        proxies: Optional[ProxyConfiguration] = None,
        extractors: Optional[Sequence[BaseExtractor]] = None,
        state: Optional[CrawlState] = None,
    ) -> None:
        self.settings = settings
        self.state = state or CrawlState(settings.results_wanted)
        self._fetcher = fetcher
        self._sink = sink
        self._proxies = proxies
        self._extractors: List[BaseExtractor] = list(
            extractors if extractors is not None
            else (JsonApiExtractor(fetcher, proxies), MarkupExtractor())
        )
        self._queue: Optional[asyncio.Queue] = None
        self._enqueued: Set[str] = set()
        self._pages_processed = 0
        self._pages_failed = 0

    async def run(self, start_urls: Optional[Iterable[str]] = None) -> CrawlSummary:
        self._queue = asyncio.Queue()
        for url in start_urls if start_urls is not None else self.settings.start_urls:
            self._enqueue(PageTask(url, 1))

        workers = [
            asyncio.create_task(self._worker(i))
            for i in range(max(1, self.settings.max_concurrency))
        ]
        try:
            await self._queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        logger.info("Finished. Saved %d quotes", self.state.saved)
        return CrawlSummary(
            saved=self.state.saved,
            pages_processed=self._pages_processed,
            pages_failed=self._pages_failed,
        )

    def _enqueue(self, task: PageTask) -> bool:
        # like a request queue: each URL is crawled at most once per run
        if task.url in self._enqueued:
            logger.debug("Skipping already enqueued URL: %s", task.url)
            return False
        self._enqueued.add(task.url)
        self._queue.put_nowait(task)
        return True

    async def _worker(self, worker_id: int) -> None:
        while True:
            task = await self._queue.get()
            try:
                await asyncio.wait_for(self.process(task), timeout=self.settings.task_timeout_seconds)
            except asyncio.TimeoutError:
                self._pages_failed += 1
                logger.error("[worker-%d] Page %d timed out: %s", worker_id, task.page_no, task.url)
            except Exception as e:
                self._pages_failed += 1
                logger.error("[worker-%d] Page %d failed: %s (%s)", worker_id, task.page_no, task.url, e)
            finally:
                self._queue.task_done()

    def _proxy_url(self) -> Optional[str]:
        return self._proxies.new_url() if self._proxies else None

    async def extract(self, page: Page) -> List[QuoteRecord]:
        """Output of the first extractor that can handle the page."""
        for extractor in self._extractors:
            records = await extractor.extract(page)
            if records is not None:
                logger.info("%s returned %d quotes", extractor.name, len(records))
                return records
            logger.info("%s unavailable for %s", extractor.name, page.url)
        return []

    async def process(self, task: PageTask) -> None:
        max_pages = self.settings.max_pages
        if task.page_no > max_pages:
            logger.info("Skipping page %d beyond max_pages=%d: %s", task.page_no, max_pages, task.url)
            return
        if self.state.is_full():
            logger.info("Reached desired quote count, stopping")
            return

        logger.info("Processing page %d: %s", task.page_no, task.url)
        resp = await self._fetcher.fetch_text(task.url, proxy=self._proxy_url())
        if resp.status >= 400:
            raise FetchError(resp.status, task.url)

        soup = BeautifulSoup(resp.text, "lxml")
        records = await self.extract(Page(url=task.url, page_no=task.page_no, soup=soup))
        logger.info("Extracted %d quotes from page %d", len(records), task.page_no)

        accepted = await self.state.admit(records)
        if accepted:
            await self._sink.push_data(accepted)
            logger.info("Saved %d new quotes (total: %d)", len(accepted), self.state.saved)
        self._pages_processed += 1

        if self.state.remaining_capacity() > 0 and task.page_no < max_pages:
            next_url = find_next_page(soup, task.url)
            if next_url:
                if self._enqueue(PageTask(next_url, task.page_no + 1)):
                    logger.info(
                        "Enqueueing next page: %s (current saved: %d, page: %d)",
                        next_url, self.state.saved, task.page_no,
                    )
            else:
                logger.info("No next page found for %s (saved: %d, page: %d)", task.url, self.state.saved, task.page_no)
        else:
            logger.info(
                "Stopping pagination (saved: %d/%d, page: %d/%d)",
                self.state.saved, self.settings.results_wanted, task.page_no, max_pages,
            )
