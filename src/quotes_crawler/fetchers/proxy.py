# src/quotes_crawler/fetchers/proxy.py
from __future__ import annotations

import itertools
import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def _is_proxy_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


class ProxyConfiguration:
    """
    Round-robin pool of proxy URLs. Every call to new_url() hands out the
    next proxy, so each request gets its own.
    """

    def __init__(self, proxy_urls: Sequence[str]) -> None:
        if not proxy_urls:
            raise ValueError("ProxyConfiguration needs at least one proxy URL")
        self._urls: List[str] = list(proxy_urls)
        self._cycle = itertools.cycle(self._urls)

    @property
    def urls(self) -> List[str]:
        return list(self._urls)

    def new_url(self) -> str:
        return next(self._cycle)

    @classmethod
    def from_input(cls, raw: Any) -> Optional["ProxyConfiguration"]:
        """
        Build from the `proxyConfiguration` input value: {"proxyUrls": [...]}.
        Anything unusable is logged and ignored; the crawl then goes direct.
        """
        if not raw:
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring proxyConfiguration: expected an object, got %s", type(raw).__name__)
            return None

        if raw.get("useApifyProxy"):
            logger.warning("useApifyProxy is not supported here; use proxyUrls instead")

        urls = raw.get("proxyUrls")
        if urls is None:
            return None
        if not isinstance(urls, list):
            logger.warning("Ignoring proxyConfiguration: proxyUrls must be a list")
            return None

        valid = []
        for url in urls:
            if _is_proxy_url(url):
                valid.append(url.strip())
            else:
                logger.warning("Dropping malformed proxy URL: %r", url)

        if not valid:
            logger.warning("No usable proxy URLs configured, connecting directly")
            return None
        return cls(valid)
