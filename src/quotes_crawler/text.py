# src/quotes_crawler/text.py
from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urljoin, urlparse

SITE_ORIGIN = "https://www.goodreads.com"

_WHITESPACE_RE = re.compile(r"\s+")
_QUOTE_MARKS = str.maketrans({
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
})


def clean_text(value: Any) -> str:
    """
    Collapse whitespace, straighten curly quotes and trim.
    None (or any falsy value) gives an empty string.
    """
    if not value:
        return ""
    text = _WHITESPACE_RE.sub(" ", str(value))
    return text.translate(_QUOTE_MARKS).strip()


def strip_quote_marks(text: str) -> str:
    """Drop one leading and one trailing quotation mark."""
    if text[:1] in ('"', "'"):
        text = text[1:]
    if text[-1:] in ('"', "'"):
        text = text[:-1]
    return text.strip()


def to_abs(href: Optional[str], base: str = SITE_ORIGIN) -> Optional[str]:
    """
    Resolve a possibly-relative href against base.
    Returns None instead of raising when the result is not a usable URL.
    """
    if not isinstance(href, str) or not href.strip():
        return None
    try:
        absolute = urljoin(base, href.strip())
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return absolute
