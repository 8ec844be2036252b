"""
Convert heterogeneous platform payloads into one canonical NormalizedItem.

All functions are pure: the same payload (and the same `ingested_at`) always
yields an identical item.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from crawler.schemas.models import ArticleItem, SocialPostItem, VideoItem

from buzz.models import Author, NormalizedItem, Platform

logger = logging.getLogger(__name__)

JAPANESE_SCRIPT = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]")

Payload = Union[ArticleItem, SocialPostItem, VideoItem, Dict[str, Any]]


def detect_language(text: str) -> str:
    return "ja" if JAPANESE_SCRIPT.search(text or "") else "en"


def _ensure_utc(value: Optional[datetime], fallback: datetime) -> datetime:
    if value is None:
        return fallback
    if not value.tzinfo:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _now(ingested_at: Optional[datetime]) -> datetime:
    return _ensure_utc(ingested_at, datetime.now(timezone.utc))


def normalize_article(article: ArticleItem, *, ingested_at: Optional[datetime] = None) -> NormalizedItem:
    """RSS/news article -> item keyed `rss:<link>`; title and snippet land in `raw`."""
    ingested = _now(ingested_at)
    content = article.summary or ""
    return NormalizedItem(
        external_id=f"rss:{article.url}",
        platform=Platform.NEWS,
        url=article.url,
        published_at=_ensure_utc(article.published_at, ingested),
        ingested_at=ingested,
        language=detect_language(f"{article.title} {content}"),
        text=article.title,
        title=article.title,
        author=Author(name=article.author) if article.author else None,
        metrics={},
        raw={
            "title": article.title,
            "content": content,
            "creator": article.author or "",
            "categories": list(article.topics),
            "source": article.source,
        },
    )


def normalize_social_post(post: SocialPostItem, *, ingested_at: Optional[datetime] = None) -> NormalizedItem:
    ingested = _now(ingested_at)
    text = post.text_snippet or ""
    return NormalizedItem(
        external_id=f"x:{post.post_id}",
        platform=Platform.X,
        url=post.url,
        published_at=_ensure_utc(post.posted_at, ingested),
        ingested_at=ingested,
        language=detect_language(text) if text else None,
        text=text or None,
        title=None,
        author=Author(
            id=post.user_id,
            name=post.user_name,
            handle=post.user_handle.lstrip("@"),
            followers=max(0, post.followers) if post.followers is not None else None,
        ),
        metrics=_counters(post.metrics, ("likes", "retweets", "replies", "views")),
        raw={"title": "", "content": text, "source": post.platform, "topics": list(post.topics)},
    )


def normalize_video(video: VideoItem, *, ingested_at: Optional[datetime] = None) -> NormalizedItem:
    ingested = _now(ingested_at)
    description = video.description or ""
    return NormalizedItem(
        external_id=f"youtube:{video.video_id}",
        platform=Platform.YOUTUBE,
        url=video.url,
        published_at=_ensure_utc(video.published_at, ingested),
        ingested_at=ingested,
        language=detect_language(f"{video.title} {description}"),
        text=description or video.title,
        title=video.title,
        author=Author(
            id=video.channel_id,
            name=video.channel_title,
            followers=max(0, video.subscribers) if video.subscribers is not None else None,
        ),
        metrics=_counters(video.metrics, ("views", "likes", "comments")),
        raw={"title": video.title, "content": description, "source": "youtube"},
    )


def normalize_manual(payload: Dict[str, Any], *, ingested_at: Optional[datetime] = None) -> NormalizedItem:
    ingested = _now(ingested_at)
    title = str(payload.get("title") or "")
    text = str(payload.get("text") or "")
    published = payload.get("published_at")
    if isinstance(published, str):
        try:
            published = datetime.fromisoformat(published.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable published_at %r for manual item; using ingest time", published)
            published = None
    return NormalizedItem(
        external_id=f"manual:{payload.get('id') or payload.get('url') or title}",
        platform=Platform.MANUAL,
        url=str(payload.get("url") or ""),
        published_at=_ensure_utc(published if isinstance(published, datetime) else None, ingested),
        ingested_at=ingested,
        language=detect_language(f"{title} {text}") if (title or text) else None,
        text=text or None,
        title=title or None,
        author=None,
        metrics=_counters(payload.get("metrics") or {}, ()),
        raw={"title": title, "content": text, "source": "manual"},
    )


def normalize(payload: Payload, *, ingested_at: Optional[datetime] = None) -> NormalizedItem:
    if isinstance(payload, ArticleItem):
        return normalize_article(payload, ingested_at=ingested_at)
    if isinstance(payload, SocialPostItem):
        return normalize_social_post(payload, ingested_at=ingested_at)
    if isinstance(payload, VideoItem):
        return normalize_video(payload, ingested_at=ingested_at)
    if isinstance(payload, dict):
        return normalize_manual(payload, ingested_at=ingested_at)
    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def _counters(metrics: Dict[str, Any], expected) -> Dict[str, float]:
    counters: Dict[str, float] = {key: 0.0 for key in expected}
    for key, value in metrics.items():
        try:
            counters[key] = max(0.0, float(value))
        except (TypeError, ValueError):
            continue
    return counters
