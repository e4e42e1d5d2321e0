# src/quotes_crawler/config.py
"""Crawl input: seed URLs, limits and plumbing options."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional
from urllib.parse import quote, urlencode

from quotes_crawler.text import SITE_ORIGIN

DEFAULT_RESULTS_WANTED = 100
DEFAULT_MAX_PAGES = 20
UNBOUNDED_RESULTS = sys.maxsize
UNBOUNDED_PAGES = 999
DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_OUTPUT_PATH = Path("storage/quotes.jsonl")


def build_start_url(tag: str = "", author: str = "", search: str = "") -> str:
    """Seed URL from the search inputs; search wins over author, author over tag."""
    search = str(search or "").strip()
    author = str(author or "").strip()
    tag = str(tag or "").strip()
    if search:
        return f"{SITE_ORIGIN}/quotes/search?{urlencode({'q': search})}"
    if author:
        return f"{SITE_ORIGIN}/quotes/search?q={quote(author, safe='')}"
    if tag:
        return f"{SITE_ORIGIN}/quotes/tag/{quote(tag, safe='')}"
    return f"{SITE_ORIGIN}/quotes"


def _as_url(entry: Any) -> Optional[str]:
    # startUrls entries come either as plain strings or as {"url": ...} objects
    if isinstance(entry, Mapping):
        entry = entry.get("url")
    if isinstance(entry, str) and entry.strip():
        return entry.strip()
    return None


def collect_start_urls(data: Mapping[str, Any]) -> List[str]:
    urls: List[str] = []
    start_urls = data.get("startUrls")
    if isinstance(start_urls, list):
        urls.extend(u for u in map(_as_url, start_urls) if u)
    for key in ("startUrl", "url"):
        u = _as_url(data.get(key))
        if u:
            urls.append(u)
    if not urls:
        urls.append(build_start_url(data.get("tag", ""), data.get("author", ""), data.get("search", "")))
    return urls


def parse_limit(raw: Any, default: int, unbounded: int) -> int:
    """
    Positive integer limit. Missing -> default, anything that is not a finite
    number -> unbounded, otherwise at least 1.
    """
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return unbounded
    if not math.isfinite(value):
        return unbounded
    return max(1, int(value))


@dataclass
class CrawlSettings:
    start_urls: List[str] = field(default_factory=lambda: [build_start_url()])
    results_wanted: int = DEFAULT_RESULTS_WANTED
    max_pages: int = DEFAULT_MAX_PAGES
    proxy_configuration: Any = None
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    task_timeout_seconds: float = 60.0
    request_timeout_seconds: float = 30.0
    output_path: Path = DEFAULT_OUTPUT_PATH

    @classmethod
    def from_input(cls, data: Optional[Mapping[str, Any]]) -> "CrawlSettings":
        data = data or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Crawl input must be a JSON object, got {type(data).__name__}")
        return cls(
            start_urls=collect_start_urls(data),
            results_wanted=parse_limit(data.get("results_wanted"), DEFAULT_RESULTS_WANTED, UNBOUNDED_RESULTS),
            max_pages=parse_limit(data.get("max_pages"), DEFAULT_MAX_PAGES, UNBOUNDED_PAGES),
            proxy_configuration=data.get("proxyConfiguration"),
            max_concurrency=parse_limit(data.get("maxConcurrency"), DEFAULT_MAX_CONCURRENCY, DEFAULT_MAX_CONCURRENCY),
            output_path=Path(data.get("outputPath") or DEFAULT_OUTPUT_PATH),
        )
