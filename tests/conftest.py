import asyncio
from pathlib import Path

import pytest

from quotes_crawler.fetchers.http import FetchError, HttpResponse


FIXTURES = Path(__file__).parent / "fixtures"


class FakeFetcher:
    """Stands in for HttpFetcher: serves canned pages and JSON bodies by URL."""

    def __init__(self, pages=None, api=None):
        self.pages = dict(pages or {})
        self.api = dict(api or {})
        self.text_calls = []
        self.json_calls = []

    async def fetch_text(self, url, extra_headers=None, proxy=None):
        self.text_calls.append(url)
        await asyncio.sleep(0)
        if url not in self.pages:
            return HttpResponse(url=url, status=404, text="not found")
        return HttpResponse(url=url, status=200, text=self.pages[url], content_type="text/html")

    async def fetch_json(self, url, extra_headers=None, proxy=None, timeout_seconds=None):
        self.json_calls.append((url, proxy))
        await asyncio.sleep(0)
        body = self.api.get(url, FetchError(404, url))
        if isinstance(body, Exception):
            raise body
        return body


def quote_block(text, author, quote_id, likes=10, tags=("life",)):
    tag_links = ",\n".join(f'<a href="/quotes/tag/{t}">{t}</a>' for t in tags)
    return f"""
    <div class="quote mediumText">
      <div class="quoteText">&ldquo;{text}&rdquo; <br> &#8213; <span class="authorOrTitle">{author}</span></div>
      <div class="quoteFooter">
        <div class="greyText smallText left">tags: {tag_links}</div>
        <div class="right"><a class="smallText" href="/quotes/{quote_id}-q">{likes} likes</a></div>
      </div>
    </div>
    """


def listing_page(quotes, next_href=None):
    """quotes: iterable of (text, author, quote_id)."""
    blocks = "".join(quote_block(text, author, quote_id) for text, author, quote_id in quotes)
    pagination = ""
    if next_href:
        pagination = f'<div class="pagination"><a class="next_page" rel="next" href="{next_href}">next &raquo;</a></div>'
    return f"<html><body><div class='leftContainer'>{blocks}{pagination}</div></body></html>"


def numbered_quotes(prefix, count, start=1):
    return [
        (f"{prefix} quote number {i} is long enough to keep", f"Author {prefix}{i}", start + i)
        for i in range(count)
    ]


@pytest.fixture
def tag_life_html():
    return (FIXTURES / "goodreads_tag_life.html").read_text(encoding="utf-8")


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_listing():
    return listing_page


@pytest.fixture
def make_quotes():
    return numbered_quotes
