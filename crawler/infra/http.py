"""
Polite HTTP fetching for feed polling: conditional requests, per-host
throttling and bounded retries.
"""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

logger = logging.getLogger(__name__)

FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"
MAX_BACKOFF = 60


class FetchError(RuntimeError):
    """A URL could not be fetched after all retries."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass
class CachedHeaders:
    etag: Optional[str] = None
    last_modified: Optional[str] = None


class HttpFetcher:
    """
    requests.Session wrapper that remembers ETag/Last-Modified per URL and
    spaces out hits to the same host by at least `min_delay` seconds.

    `fetch` returns None when the server answers 304 Not Modified and raises
    FetchError once retries are exhausted. Client errors other than 408/429
    are not retried.
    """

    def __init__(
        self,
        user_agent: str,
        min_delay: float = 1.5,
        max_retries: int = 3,
        timeout: int = 20,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": FEED_ACCEPT,
                "Accept-Language": "ja,en-US;q=0.8,en;q=0.6",
            }
        )
        self.min_delay = min_delay
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self._sleep = sleep
        self._last_hit: Dict[str, float] = {}
        self._cache: Dict[str, CachedHeaders] = {}
        self._lock = threading.RLock()

    def fetch(self, url: str) -> Optional[requests.Response]:
        reason = "no attempt made"
        for attempt in range(self.max_retries):
            self._respect_delay(url)
            try:
                response = self.session.get(url, headers=self._conditional_headers(url), timeout=self.timeout)
            except requests.RequestException as exc:
                reason = f"{type(exc).__name__}: {exc}"
            else:
                if response.status_code == 304:
                    logger.debug("Not modified: %s", url)
                    return None
                if response.status_code < 400:
                    self._remember_headers(url, response)
                    return response
                reason = f"HTTP {response.status_code}"
                if response.status_code < 500 and response.status_code not in (408, 429):
                    break
            logger.warning("Fetch attempt %s/%s failed for %s: %s", attempt + 1, self.max_retries, url, reason)
            if attempt + 1 < self.max_retries:
                self._sleep(min(MAX_BACKOFF, self.min_delay * (2 ** attempt)) + random.random())
        raise FetchError(url, reason)

    def _conditional_headers(self, url: str) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        cached = self._cache.get(url)
        if cached:
            if cached.etag:
                headers["If-None-Match"] = cached.etag
            if cached.last_modified:
                headers["If-Modified-Since"] = cached.last_modified
        return headers

    def _remember_headers(self, url: str, response: requests.Response) -> None:
        cached = self._cache.setdefault(url, CachedHeaders())
        cached.etag = response.headers.get("ETag") or cached.etag
        cached.last_modified = response.headers.get("Last-Modified") or cached.last_modified

    def _respect_delay(self, url: str) -> None:
        host = self._extract_host(url)
        with self._lock:
            last = self._last_hit.get(host)
            now = time.time()
            if last and now - last < self.min_delay:
                self._sleep(self.min_delay - (now - last) + random.random())
            self._last_hit[host] = time.time()

    @staticmethod
    def _extract_host(url: str) -> str:
        return url.split("/")[2] if "://" in url else url
