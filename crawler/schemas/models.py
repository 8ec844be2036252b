"""
Pydantic models for raw platform payloads, before normalization.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator


def _to_numeric_metrics(value: Any) -> Dict[str, float]:
    cleaned: Dict[str, float] = {}
    for key, raw in (value or {}).items():
        try:
            cleaned[key] = float(raw)
        except (TypeError, ValueError):
            continue
    return cleaned


class ArticleItem(BaseModel):
    source: str
    title: str
    url: str
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    summary: Optional[str] = None
    topics: List[str] = []
    raw: Dict[str, str] = {}

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: str) -> str:
        return (value or "").strip()


class SocialPostItem(BaseModel):
    platform: str
    user_handle: str
    post_id: str
    url: str
    posted_at: Optional[datetime] = None
    text_snippet: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    followers: Optional[int] = None
    metrics: Dict[str, float] = {}
    topics: List[str] = []

    @field_validator("metrics", mode="before")
    @classmethod
    def _numeric_metrics(cls, value: Any) -> Dict[str, float]:
        return _to_numeric_metrics(value)


class VideoItem(BaseModel):
    video_id: str
    url: str
    title: str
    description: Optional[str] = None
    channel_id: Optional[str] = None
    channel_title: Optional[str] = None
    subscribers: Optional[int] = None
    published_at: Optional[datetime] = None
    metrics: Dict[str, float] = {}

    @field_validator("metrics", mode="before")
    @classmethod
    def _numeric_metrics(cls, value: Any) -> Dict[str, float]:
        return _to_numeric_metrics(value)
