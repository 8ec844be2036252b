"""
Deduplication helpers for crawler outputs.
"""
from __future__ import annotations

import hashlib
from typing import Callable, Hashable, Iterable, List, Sequence, TypeVar

from crawler.ingesters.rss_base import normalize_url
from crawler.schemas.models import ArticleItem

T = TypeVar("T")


def make_digest(parts: Sequence[str]) -> str:
    joined = "|".join(part or "" for part in parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def dedupe_by_key(items: Iterable[T], key_fn: Callable[[T], Hashable]) -> List[T]:
    """Keep the first item per key, preserving order."""
    seen = set()
    result: List[T] = []
    for item in items:
        key = key_fn(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def article_key(article: ArticleItem) -> str:
    # Feeds repeat stories with different tracking params or trailing slashes.
    return normalize_url(article.url).rstrip("/").lower()


def dedupe_articles(articles: Iterable[ArticleItem]) -> List[ArticleItem]:
    return dedupe_by_key(articles, article_key)
