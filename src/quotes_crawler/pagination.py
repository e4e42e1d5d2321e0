# src/quotes_crawler/pagination.py
from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from bs4 import BeautifulSoup

from quotes_crawler.text import to_abs

logger = logging.getLogger(__name__)

NEXT_LINK_SELECTORS = ("a.next_page", "div.pagination a.next_page", 'a[rel="next"]')
PAGINATION_LINK_SELECTOR = "div.pagination a"

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _page_number(value: Optional[str]) -> int:
    match = _LEADING_INT_RE.match(value or "")
    return int(match.group(1)) if match else 1


def bump_page_param(url: str) -> Optional[str]:
    """Same URL with its `page` query parameter (default 1) incremented."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None

    params = parse_qsl(parsed.query, keep_blank_values=True)
    positions = [i for i, (k, _) in enumerate(params) if k == "page"]
    current = _page_number(params[positions[0]][1] if positions else None)

    # keep the parameter where it was so the URL only differs in the number
    updated = [(k, v) for k, v in params if k != "page"]
    updated.insert(positions[0] if positions else len(updated), ("page", str(current + 1)))
    next_url = urlunparse(parsed._replace(query=urlencode(updated)))
    logger.debug("Constructed next page URL: %s (from page %d to %d)", next_url, current, current + 1)
    return next_url


def find_next_page(soup: BeautifulSoup, current_url: str) -> Optional[str]:
    """
    Work out the URL of the following results page:
    1. an explicit "next" link
    2. the last link of the pagination block
    3. the current URL with ?page= bumped by one
    None means there is nowhere to go.
    """
    for selector in NEXT_LINK_SELECTORS:
        node = soup.select_one(selector)
        href = node.get("href") if node else None
        if href:
            logger.debug("Found next page link: %s", href)
            return to_abs(href, current_url)

    links = soup.select(PAGINATION_LINK_SELECTOR)
    if links:
        last = links[-1].get("href") or ""
        if last and "#" not in last and "javascript:" not in last:
            logger.debug("Using last pagination link: %s", last)
            return to_abs(last, current_url)

    return bump_page_param(current_url)
