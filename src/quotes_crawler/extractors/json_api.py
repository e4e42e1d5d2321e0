# src/quotes_crawler/extractors/json_api.py
from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import parse_qs, quote, urlparse

from quotes_crawler.extractors.base import BaseExtractor, Page, QuoteRecord, build_record
from quotes_crawler.fetchers.http import HttpFetcher
from quotes_crawler.fetchers.proxy import ProxyConfiguration
from quotes_crawler.text import clean_text, strip_quote_marks, to_abs

logger = logging.getLogger(__name__)

API_TIMEOUT_SECONDS = 30

_TAG_PATH_RE = re.compile(r"/quotes/tag/([^/?#]+)")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")

# alternate spellings seen in the JSON payloads, preferred first
QUOTE_FIELDS = ("quoteText", "text")
AUTHOR_FIELDS = ("authorName", "author")
LIKES_FIELDS = ("likesCount", "likes")
URL_FIELDS = ("quoteUrl", "url")


def derive_api_url(url: str, page_no: int) -> Optional[str]:
    """
    Map a listing URL onto its JSON endpoint.
    Returns None for URL shapes that have no JSON counterpart.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    origin = f"{parsed.scheme}://{parsed.netloc}"

    tag_match = _TAG_PATH_RE.search(parsed.path)
    if tag_match:
        return f"{origin}/quotes/tag/{tag_match.group(1)}?format=json&page={page_no}"

    if "/quotes/search" in parsed.path:
        q = (parse_qs(parsed.query).get("q") or [""])[0]
        if q:
            return f"{origin}/quotes/search?format=json&q={quote(q, safe='')}&page={page_no}"
        return None

    if parsed.path.rstrip("/") == "/quotes":
        return f"{origin}/quotes?format=json&page={page_no}"

    return None


def _first_present(item: Dict[str, Any], names: Sequence[str]) -> Any:
    for name in names:
        value = item.get(name)
        if value not in (None, ""):
            return value
    return None


def _parse_likes(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value)) if math.isfinite(value) else 0
    match = _LEADING_INT_RE.match(str(value or ""))
    return int(match.group(1)) if match else 0


def parse_api_item(item: Dict[str, Any], base_url: str) -> Optional[QuoteRecord]:
    raw_tags = item.get("tags")
    tags = [t for t in raw_tags if isinstance(t, str)] if isinstance(raw_tags, list) else []
    book = item.get("bookTitle")
    return build_record(
        quote=strip_quote_marks(clean_text(_first_present(item, QUOTE_FIELDS))),
        author=clean_text(_first_present(item, AUTHOR_FIELDS)),
        tags=tags,
        likes=_parse_likes(_first_present(item, LIKES_FIELDS)),
        book=book if isinstance(book, str) else None,
        url=to_abs(_first_present(item, URL_FIELDS), base_url),
    )


class JsonApiExtractor(BaseExtractor):
    """
    Asks the site's JSON endpoint for the page's quotes.
    Returns None whenever that is not possible, so the caller falls back
    to parsing the markup it already has.
    """

    name = "json_api"

    def __init__(
        self,
        fetcher: HttpFetcher,
        proxies: Optional[ProxyConfiguration] = None,
        *,
        timeout_seconds: float = API_TIMEOUT_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._proxies = proxies
        self._timeout_seconds = timeout_seconds

    async def extract(self, page: Page) -> Optional[List[QuoteRecord]]:
        api_url = derive_api_url(page.url, page.page_no)
        if not api_url:
            return None

        try:
            proxy = self._proxies.new_url() if self._proxies else None
            # one deadline across all retry attempts
            body = await asyncio.wait_for(
                self._fetcher.fetch_json(api_url, proxy=proxy, timeout_seconds=self._timeout_seconds),
                timeout=self._timeout_seconds,
            )
        except Exception as e:
            logger.debug("JSON API failed for %s page %d: %s", page.url, page.page_no, e)
            return None

        items = body.get("quotes") if isinstance(body, dict) else None
        if not isinstance(items, list):
            logger.debug("JSON API response for %s has no quotes list", api_url)
            return None

        records = []
        for item in items:
            if not isinstance(item, dict):
                continue
            record = parse_api_item(item, page.url)
            if record:
                records.append(record)
        return records
