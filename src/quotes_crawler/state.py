# src/quotes_crawler/state.py
from __future__ import annotations

import asyncio
from typing import Iterable, List, Set

from quotes_crawler.extractors.base import QuoteRecord


class CrawlState:
    """
    Dedup keys and saved-count for one crawl run.

    The crawl loop is the only writer. Admission of a page's records goes
    through one lock, so concurrent pages never push the saved count past
    results_wanted.
    """

    def __init__(self, results_wanted: int) -> None:
        if results_wanted < 1:
            raise ValueError("results_wanted must be at least 1")
        self.results_wanted = results_wanted
        self.saved = 0
        self._seen: Set[str] = set()
        self._lock = asyncio.Lock()

    def remaining_capacity(self) -> int:
        return max(0, self.results_wanted - self.saved)

    def is_full(self) -> bool:
        return self.remaining_capacity() == 0

    def try_accept(self, key: str) -> bool:
        """Claim one slot for key. False if full or already seen."""
        if self.is_full() or key in self._seen:
            return False
        self._seen.add(key)
        self.saved += 1
        return True

    async def admit(self, records: Iterable[QuoteRecord]) -> List[QuoteRecord]:
        """Records not seen before, in order, cut off at the quota."""
        accepted = []
        async with self._lock:
            for record in records:
                if self.is_full():
                    break
                if self.try_accept(record.dedup_key):
                    accepted.append(record)
        return accepted
