"""
Shared helpers for RSS ingestion.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import feedparser
from bs4 import BeautifulSoup

from crawler.schemas.models import ArticleItem

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 800
TRACKING_PARAMS = ("utm_", "fbclid", "gclid", "mc_cid", "mc_eid")


def normalize_url(url: str) -> str:
    """Drop tracking parameters and fragments so the same story keys the same."""
    if not url:
        return url
    parts = urlsplit(url.strip())
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if not k.lower().startswith(TRACKING_PARAMS)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), ""))


def html_to_text(markup: Optional[str]) -> str:
    if not markup:
        return ""
    return BeautifulSoup(markup, "lxml").get_text(" ", strip=True)


def parse_feed_entries(feed_content: bytes, source: str, topics: Optional[List[str]] = None) -> List[ArticleItem]:
    """
    Parse a feed body into ArticleItems. Entries without a link or a title are
    dropped; feedparser's bozo flag is logged but never fatal.
    """
    feed = feedparser.parse(feed_content)
    if getattr(feed, "bozo", False):
        logger.debug("Feed %s is malformed: %s", source, getattr(feed, "bozo_exception", ""))
    items: List[ArticleItem] = []
    for entry in getattr(feed, "entries", []):
        title = (getattr(entry, "title", "") or "").strip()
        link = normalize_url(getattr(entry, "link", "") or "")
        if not title or not link:
            continue
        published_at = _parse_datetime(
            getattr(entry, "published_parsed", None) or getattr(entry, "updated_parsed", None)
        )
        summary = html_to_text(getattr(entry, "summary", None) or getattr(entry, "description", None))
        categories = [tag.get("term") for tag in getattr(entry, "tags", []) or [] if tag.get("term")]
        items.append(
            ArticleItem(
                source=source,
                title=title,
                url=link,
                author=getattr(entry, "author", None),
                published_at=published_at,
                summary=summary[:SUMMARY_LIMIT] or None,
                topics=(topics or []) + categories,
                raw={"id": getattr(entry, "id", "")},
            )
        )
    return items


def _parse_datetime(struct_time) -> Optional[datetime]:
    if not struct_time:
        return None
    return datetime(*struct_time[:6], tzinfo=timezone.utc)
