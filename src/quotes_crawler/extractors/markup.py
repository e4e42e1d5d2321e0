# src/quotes_crawler/extractors/markup.py
from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from quotes_crawler.extractors.base import BaseExtractor, Page, QuoteRecord, build_record
from quotes_crawler.text import SITE_ORIGIN, clean_text, strip_quote_marks, to_abs

logger = logging.getLogger(__name__)

# Goodreads has shipped several layouts over the years; any of these marks a quote block.
CONTAINER_SELECTOR = "div.quote, div.quoteDetails, .quote, .quoteDetails"

QUOTE_TEXT_SELECTOR = "div.quoteText"
AUTHOR_SELECTOR = "span.authorOrTitle"
BOOK_SELECTOR = "a.authorOrTitle"
TAG_SELECTOR = 'div.greyText.smallText.left a[href*="/quotes/tag/"]'
LIKES_SELECTOR = "div.right"
QUOTE_LINK_SELECTOR = 'a[href*="/quotes/"]'

_LIKES_RE = re.compile(r"(\d[\d,]*)\s*likes?", re.IGNORECASE)
_QUOTE_PAGE_RE = re.compile(r"^(?:https?://[^/]+)?/quotes/\d+")
_ATTRIBUTION_DASH_RE = re.compile(r"\s*―\s*$")


def _own_text(node: Tag) -> str:
    # text directly inside the node; nested author spans and "(more)" links are skipped
    return "".join(
        str(child) for child in node.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ).strip()


def _full_text(node: Tag) -> str:
    return node.get_text().strip()


QUOTE_TEXT_STRATEGIES: Sequence[Callable[[Tag], str]] = (_own_text, _full_text)


def extract_quote_text(container: Tag) -> str:
    node = container.select_one(QUOTE_TEXT_SELECTOR)
    if node is None:
        return ""
    raw = ""
    for strategy in QUOTE_TEXT_STRATEGIES:
        raw = strategy(node)
        if raw:
            break
    text = _ATTRIBUTION_DASH_RE.sub("", clean_text(raw))
    return strip_quote_marks(text)


def extract_author(container: Tag) -> str:
    node = container.select_one(AUTHOR_SELECTOR)
    if node is None:
        return ""
    author = re.sub(r"^,\s*", "", node.get_text().strip())
    return clean_text(author).rstrip(",").strip()


def extract_book(container: Tag) -> Optional[str]:
    node = container.select_one(BOOK_SELECTOR)
    if node is None:
        return None
    return clean_text(node.get_text()) or None


def extract_tags(container: Tag) -> List[str]:
    tags = []
    for anchor in container.select(TAG_SELECTOR):
        text = anchor.get_text().strip()
        if text:
            tags.append(text)
    return tags


def extract_likes(container: Tag) -> int:
    text = " ".join(node.get_text() for node in container.select(LIKES_SELECTOR))
    match = _LIKES_RE.search(text)
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def extract_quote_url(container: Tag, base_url: str) -> Optional[str]:
    hrefs = [a.get("href") or "" for a in container.select(QUOTE_LINK_SELECTOR)]
    if not hrefs:
        return None
    # prefer the quote's own page over tag and book links
    href = next((h for h in hrefs if _QUOTE_PAGE_RE.match(h)), hrefs[0])
    return to_abs(href, base_url)


class MarkupExtractor(BaseExtractor):
    """
    Extracts quotes from a listing page's HTML:
    - quote text, author, book title
    - tags and like count
    - link to the quote's own page
    Each container is parsed on its own; a broken one is skipped, not fatal.
    """

    name = "markup"

    def parse(self, soup: BeautifulSoup, base_url: str = SITE_ORIGIN) -> List[QuoteRecord]:
        containers = soup.select(CONTAINER_SELECTOR)
        logger.info("Found %d quote containers on page", len(containers))

        records = []
        for container in containers:
            try:
                record = build_record(
                    quote=extract_quote_text(container),
                    author=extract_author(container),
                    tags=extract_tags(container),
                    likes=extract_likes(container),
                    book=extract_book(container),
                    url=extract_quote_url(container, base_url),
                )
            except Exception as e:
                logger.debug("Failed to parse quote element: %s", e)
                continue
            if record:
                records.append(record)

        logger.info("Extracted %d quotes from HTML parsing", len(records))
        return records

    async def extract(self, page: Page) -> Optional[List[QuoteRecord]]:
        return self.parse(page.soup, page.url)
