"""
Feed ingestion: poll each crypto feed, normalize new entries and store them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from crawler.infra.http import FetchError, HttpFetcher
from crawler.ingesters.crypto_rss import DEFAULT_FEEDS, FeedSource, fetch_feed, is_crypto_related
from crawler.pipelines.dedupe import dedupe_articles

from buzz.normalizer import normalize_article
from buzz.store import DraftStore

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    source: str
    fetched: int = 0
    new: int = 0
    errors: List[str] = field(default_factory=list)


def ingest_feed(
    store: DraftStore,
    fetcher: HttpFetcher,
    feed: FeedSource,
    crypto_only: bool = False,
    ingested_at: Optional[datetime] = None,
) -> FetchResult:
    result = FetchResult(source=feed.name)
    try:
        articles = fetch_feed(fetcher, feed)
    except FetchError as exc:
        logger.warning("Feed %s failed: %s", feed.name, exc.reason)
        result.errors.append(str(exc))
        return result
    if articles is None:
        return result

    articles = dedupe_articles(articles)
    result.fetched = len(articles)
    for article in articles:
        if crypto_only and not is_crypto_related(f"{article.title} {article.summary or ''}"):
            continue
        if store.upsert_item(normalize_article(article, ingested_at=ingested_at)):
            result.new += 1
    logger.info("Feed %s: fetched=%s new=%s", feed.name, result.fetched, result.new)
    return result


def ingest_feeds(
    store: DraftStore,
    fetcher: HttpFetcher,
    feeds: Optional[Sequence[FeedSource]] = None,
    crypto_only: bool = False,
) -> List[FetchResult]:
    """One FetchResult per feed; a failing feed never stops the others."""
    results: List[FetchResult] = []
    for feed in feeds or DEFAULT_FEEDS:
        try:
            results.append(ingest_feed(store, fetcher, feed, crypto_only=crypto_only))
        except Exception as exc:
            logger.warning("Unexpected failure ingesting %s: %s", feed.name, exc)
            results.append(FetchResult(source=feed.name, errors=[str(exc)]))
    return results
