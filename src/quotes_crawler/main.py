# src/quotes_crawler/main.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from quotes_crawler.config import CrawlSettings
from quotes_crawler.crawler import CrawlSummary, QuoteCrawler
from quotes_crawler.fetchers.http import HttpFetcher
from quotes_crawler.fetchers.proxy import ProxyConfiguration
from quotes_crawler.logging import setup_logger
from quotes_crawler.sinks import JsonlSink

logger = logging.getLogger(__name__)


def load_input(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot read input file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Input file {path} must contain a JSON object")
    return data


def merge_cli_args(data: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Command-line flags win over the input file."""
    merged = dict(data)
    overrides = {
        "tag": args.tag,
        "author": args.author,
        "search": args.search,
        "results_wanted": args.results_wanted,
        "max_pages": args.max_pages,
        "maxConcurrency": args.max_concurrency,
        "outputPath": args.output,
    }
    merged.update({k: v for k, v in overrides.items() if v is not None})
    if args.start_url:
        merged["startUrls"] = list(args.start_url)
        merged.pop("startUrl", None)
        merged.pop("url", None)
    if args.proxy_url:
        merged["proxyConfiguration"] = {"proxyUrls": list(args.proxy_url)}
    return merged


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl Goodreads quotes into a JSON Lines file")
    parser.add_argument("--input", help="JSON file with crawl input (tag, search, startUrls, results_wanted, ...)")
    parser.add_argument("--tag", help="Quote tag to crawl, e.g. life")
    parser.add_argument("--author", help="Author name to search quotes for")
    parser.add_argument("--search", help="Free text quote search (takes priority over --author)")
    parser.add_argument("--start-url", action="append", help="Explicit start URL (repeatable)")
    parser.add_argument("--results-wanted", help="Stop after this many quotes")
    parser.add_argument("--max-pages", help="Maximum page number to follow")
    parser.add_argument("--max-concurrency", help="Pages fetched at the same time")
    parser.add_argument("--proxy-url", action="append", help="Proxy URL (repeatable, used round-robin)")
    parser.add_argument("--output", help="Output JSONL path")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


async def run(settings: CrawlSettings) -> CrawlSummary:
    proxies = ProxyConfiguration.from_input(settings.proxy_configuration)
    sink = JsonlSink(settings.output_path)

    logger.info(
        "Starting crawl: %d start URL(s), results_wanted=%d, max_pages=%d",
        len(settings.start_urls), settings.results_wanted, settings.max_pages,
    )
    async with HttpFetcher(
        timeout_seconds=settings.request_timeout_seconds,
        max_concurrency=settings.max_concurrency,
    ) as fetcher:
        crawler = QuoteCrawler(settings, fetcher=fetcher, sink=sink, proxies=proxies)
        summary = await crawler.run()

    logger.info("Quotes written to %s", settings.output_path)
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(getattr(logging, args.log_level))

    try:
        settings = CrawlSettings.from_input(merge_cli_args(load_input(args.input), args))
        asyncio.run(run(settings))
    except Exception as e:
        print(f"Crawl failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
