# src/quotes_crawler/extractors/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

UNKNOWN_AUTHOR = "Unknown"
MIN_QUOTE_LENGTH = 10


@dataclass(frozen=True)
class QuoteRecord:
    """
    The output shape that all extractors return.
    Records are never modified after construction.
    """
    quote: str
    author: str = UNKNOWN_AUTHOR
    tags: Tuple[str, ...] = field(default_factory=tuple)
    likes: int = 0
    book: Optional[str] = None
    url: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        return f"{self.quote}_{self.author}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quote": self.quote,
            "author": self.author,
            "tags": list(self.tags),
            "likes": self.likes,
            "book": self.book,
            "url": self.url,
        }


def build_record(
    *,
    quote: str,
    author: str = "",
    tags: Iterable[str] = (),
    likes: int = 0,
    book: Optional[str] = None,
    url: Optional[str] = None,
) -> Optional[QuoteRecord]:
    """
    Returns None for items too short to be a quote
    (navigation blocks and the like share the quote containers).
    """
    if len(quote) <= MIN_QUOTE_LENGTH:
        return None
    return QuoteRecord(
        quote=quote,
        author=author or UNKNOWN_AUTHOR,
        tags=tuple(tags),
        likes=max(0, likes),
        book=book or None,
        url=url,
    )


@dataclass
class Page:
    """One fetched results page handed to the extractors."""
    url: str
    page_no: int
    soup: BeautifulSoup


class BaseExtractor(ABC):
    """
    Contract for all extractors:
    input: Page
    output: list of QuoteRecord, or None when this strategy is unavailable
    for the page and the next one should be tried.
    """

    name: str = "base"

    @abstractmethod
    async def extract(self, page: Page) -> Optional[List[QuoteRecord]]:
        raise NotImplementedError
