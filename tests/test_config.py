import logging
from pathlib import Path

import pytest

from quotes_crawler.config import (
    DEFAULT_MAX_PAGES,
    DEFAULT_RESULTS_WANTED,
    UNBOUNDED_PAGES,
    UNBOUNDED_RESULTS,
    CrawlSettings,
    build_start_url,
    collect_start_urls,
    parse_limit,
)
from quotes_crawler.fetchers.proxy import ProxyConfiguration


def test_build_start_url_priority():
    assert build_start_url() == "https://www.goodreads.com/quotes"
    assert build_start_url(tag="life") == "https://www.goodreads.com/quotes/tag/life"
    assert build_start_url(tag="life", author="Jane Austen") == (
        "https://www.goodreads.com/quotes/search?q=Jane%20Austen"
    )
    assert build_start_url(tag="life", author="Jane Austen", search=" hope ") == (
        "https://www.goodreads.com/quotes/search?q=hope"
    )


def test_explicit_start_urls_override_derived_seed():
    urls = collect_start_urls({
        "tag": "life",
        "startUrls": ["https://www.goodreads.com/quotes/tag/love", {"url": "https://www.goodreads.com/quotes"}, "", 5],
        "startUrl": "https://www.goodreads.com/quotes/tag/hope",
        "url": "https://www.goodreads.com/quotes/tag/art",
    })
    assert urls == [
        "https://www.goodreads.com/quotes/tag/love",
        "https://www.goodreads.com/quotes",
        "https://www.goodreads.com/quotes/tag/hope",
        "https://www.goodreads.com/quotes/tag/art",
    ]


def test_derived_seed_when_no_explicit_urls():
    assert collect_start_urls({"tag": "life", "startUrls": []}) == ["https://www.goodreads.com/quotes/tag/life"]


@pytest.mark.parametrize("raw, expected", [
    (None, 7),
    ("", 7),
    (5, 5),
    ("12", 12),
    (0, 1),
    (-3, 1),
    (2.9, 2),
    ("many", 999),
    (float("inf"), 999),
    (float("nan"), 999),
])
def test_parse_limit(raw, expected):
    assert parse_limit(raw, 7, 999) == expected


def test_settings_from_input_defaults():
    settings = CrawlSettings.from_input({})
    assert settings.start_urls == ["https://www.goodreads.com/quotes"]
    assert settings.results_wanted == DEFAULT_RESULTS_WANTED
    assert settings.max_pages == DEFAULT_MAX_PAGES
    assert settings.max_concurrency == 5
    assert settings.task_timeout_seconds == 60


def test_settings_from_input_values():
    settings = CrawlSettings.from_input({
        "search": "courage",
        "results_wanted": "abc",
        "max_pages": float("inf"),
        "maxConcurrency": 2,
        "outputPath": "out/q.jsonl",
        "proxyConfiguration": {"proxyUrls": ["http://p:1"]},
    })
    assert settings.start_urls == ["https://www.goodreads.com/quotes/search?q=courage"]
    assert settings.results_wanted == UNBOUNDED_RESULTS
    assert settings.max_pages == UNBOUNDED_PAGES
    assert settings.max_concurrency == 2
    assert settings.output_path == Path("out/q.jsonl")
    assert settings.proxy_configuration == {"proxyUrls": ["http://p:1"]}


def test_settings_reject_non_object_input():
    with pytest.raises(ValueError):
        CrawlSettings.from_input(["not", "an", "object"])


def test_proxy_configuration_round_robin():
    proxies = ProxyConfiguration.from_input({"proxyUrls": ["http://a:1", "http://b:2"]})
    assert [proxies.new_url() for _ in range(3)] == ["http://a:1", "http://b:2", "http://a:1"]


@pytest.mark.parametrize("raw", [None, {}, {"proxyUrls": []}])
def test_proxy_configuration_absent(raw):
    assert ProxyConfiguration.from_input(raw) is None


@pytest.mark.parametrize("raw", [
    "http://just-a-string:1",
    {"proxyUrls": "http://a:1"},
    {"proxyUrls": ["not a url", 42, "ftp://x"]},
    {"useApifyProxy": True},
])
def test_malformed_proxy_configuration_is_ignored(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="quotes_crawler"):
        assert ProxyConfiguration.from_input(raw) is None
    assert caplog.records


def test_malformed_proxy_entries_dropped_individually():
    proxies = ProxyConfiguration.from_input({"proxyUrls": ["nope", "http://ok:3128"]})
    assert proxies.urls == ["http://ok:3128"]
