"""
Buzz-candidate scoring for normalized items.

The final score is a weighted sum of five sub-scores, each clamped to
[0, 100]. Reasons are an explainability trail only; they never feed back into
the score.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from buzz.models import BuzzCandidateResult, NormalizedItem, Platform, ScoreReason

CANDIDATE_THRESHOLD = 50

WEIGHTS: Dict[str, float] = {
    "engagement": 0.30,
    "recency": 0.20,
    "author_influence": 0.15,
    "content_quality": 0.20,
    "viral_signals": 0.15,
}

# A sub-score above its bar earns a reason entry.
NOTABLE_THRESHOLDS: Dict[str, float] = {
    "engagement": 0,
    "recency": 70,
    "author_influence": 70,
    "content_quality": 60,
    "viral_signals": 50,
}

NEWS_ENGAGEMENT = 50
UNKNOWN_PLATFORM_ENGAGEMENT = 30
RETWEET_RATIO_THRESHOLD = 0.3

RECENCY_STEPS = [(6, 100), (12, 90), (24, 80), (48, 60), (72, 40)]
RECENCY_FLOOR = 20

FOLLOWER_STEPS = [(1_000_000, 100), (100_000, 85), (10_000, 70), (1_000, 50), (100, 30)]
FOLLOWER_FLOOR = 10

HASHTAG = re.compile(r"#\w+", re.ASCII)
NUMERIC_FACT = re.compile(r"\d+%|\$\d+|[0-9]+x|[0-9]+倍")
QUESTION = re.compile(r"\?|？")

URGENCY_PATTERNS = [re.compile(p) for p in (r"速報", r"緊急", r"breaking", r"just in", r"today", r"now", r"今")]
CRYPTO_VIRAL_PATTERNS = [
    re.compile(p)
    for p in (r"moon|ムーン", r"pump|ポンプ", r"100x|1000x", r"whale|クジラ", r"airdrop|エアドロ", r"breaking")
]
EMPHASIS_PATTERNS = [
    re.compile(p)
    for p in (r"!{2,}|！{2,}", r"🚀|💰|🔥|📈|💎", r"amazing|incredible|insane", r"やばい|すごい|神")
]


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _metric(item: NormalizedItem, key: str) -> float:
    try:
        return max(0.0, float((item.metrics or {}).get(key, 0) or 0))
    except (TypeError, ValueError):
        return 0.0


def _hours_since(published_at: Optional[datetime], now: datetime) -> float:
    if not published_at:
        return float("inf")
    if not published_at.tzinfo:
        published_at = published_at.replace(tzinfo=timezone.utc)
    return (now - published_at).total_seconds() / 3600.0


def describe_age(published_at: Optional[datetime], now: datetime) -> str:
    hours = _hours_since(published_at, now)
    if hours == float("inf"):
        return "unknown"
    if hours < 1:
        return "just now"
    if hours < 24:
        return f"{int(hours)}h ago"
    return f"{int(hours // 24)}d ago"


class CandidateScorer:
    def __init__(self, threshold: int = CANDIDATE_THRESHOLD) -> None:
        self.threshold = threshold

    def score(self, item: NormalizedItem, now: Optional[datetime] = None) -> BuzzCandidateResult:
        now = now or datetime.now(timezone.utc)
        subscores = {
            "engagement": self.engagement_score(item),
            "recency": self.recency_score(item, now),
            "author_influence": self.author_score(item),
            "content_quality": self.content_score(item),
            "viral_signals": self.viral_score(item),
        }
        total = sum(subscores[name] * weight for name, weight in WEIGHTS.items())

        features: Dict[str, object] = dict(subscores)
        features["platform"] = item.platform.value if isinstance(item.platform, Platform) else str(item.platform)
        return BuzzCandidateResult(
            score=int(_clamp(math.floor(total + 0.5))),
            reasons=self._reasons(item, subscores, now),
            features=features,
        )

    def is_candidate(self, result: BuzzCandidateResult) -> bool:
        return result.score >= self.threshold

    def _reasons(self, item: NormalizedItem, subscores: Dict[str, float], now: datetime) -> List[ScoreReason]:
        reasons: List[ScoreReason] = []
        if subscores["engagement"] > NOTABLE_THRESHOLDS["engagement"]:
            reasons.append(
                ScoreReason(
                    code="HIGH_ENGAGEMENT",
                    label="High engagement metrics",
                    weight=round(WEIGHTS["engagement"] * 100, 2),
                    detail=f"Engagement score: {subscores['engagement']:.0f}",
                )
            )
        if subscores["recency"] > NOTABLE_THRESHOLDS["recency"]:
            reasons.append(
                ScoreReason(
                    code="RECENT",
                    label="Fresh content",
                    weight=round(WEIGHTS["recency"] * 100, 2),
                    detail=f"Published {describe_age(item.published_at, now)}",
                )
            )
        if subscores["author_influence"] > NOTABLE_THRESHOLDS["author_influence"]:
            followers = item.author.followers if item.author and item.author.followers is not None else "unknown"
            reasons.append(
                ScoreReason(
                    code="INFLUENTIAL_AUTHOR",
                    label="Influential author",
                    weight=round(WEIGHTS["author_influence"] * 100, 2),
                    detail=f"Followers: {followers}",
                )
            )
        if subscores["content_quality"] > NOTABLE_THRESHOLDS["content_quality"]:
            reasons.append(
                ScoreReason(
                    code="QUALITY_CONTENT",
                    label="Quality content signals",
                    weight=round(WEIGHTS["content_quality"] * 100, 2),
                )
            )
        if subscores["viral_signals"] > NOTABLE_THRESHOLDS["viral_signals"]:
            reasons.append(
                ScoreReason(
                    code="VIRAL_SIGNALS",
                    label="Viral pattern detected",
                    weight=round(WEIGHTS["viral_signals"] * 100, 2),
                )
            )
        return reasons

    @staticmethod
    def engagement_score(item: NormalizedItem) -> float:
        if item.platform == Platform.X:
            total = _metric(item, "likes") + _metric(item, "retweets") * 2 + _metric(item, "replies") * 1.5
            return _clamp(math.log10(total + 1) * 25)
        if item.platform == Platform.YOUTUBE:
            views = _metric(item, "views")
            interactions = _metric(item, "likes") + _metric(item, "comments") * 2
            ratio = interactions / max(1.0, views) * 1000
            return _clamp(ratio * 10 + math.log10(views + 1) * 10)
        if item.platform == Platform.NEWS:
            return NEWS_ENGAGEMENT
        return UNKNOWN_PLATFORM_ENGAGEMENT

    @staticmethod
    def recency_score(item: NormalizedItem, now: datetime) -> float:
        hours = _hours_since(item.published_at, now)
        for limit, value in RECENCY_STEPS:
            if hours <= limit:
                return value
        return RECENCY_FLOOR

    @staticmethod
    def author_score(item: NormalizedItem) -> float:
        followers = 0
        if item.author and item.author.followers:
            followers = item.author.followers
        for minimum, value in FOLLOWER_STEPS:
            if followers >= minimum:
                return value
        return FOLLOWER_FLOOR

    @staticmethod
    def content_score(item: NormalizedItem) -> float:
        text = item.text or ""
        score = 50
        if 100 <= len(text) <= 280:
            score += 20
        elif text:
            score += 10
        if HASHTAG.search(text):
            score += 10
        if NUMERIC_FACT.search(text):
            score += 15
        if QUESTION.search(text):
            score += 5
        return _clamp(score)

    @staticmethod
    def viral_score(item: NormalizedItem) -> float:
        text = (item.text or "").lower()
        score = 0
        if any(p.search(text) for p in URGENCY_PATTERNS):
            score += 25
        if any(p.search(text) for p in CRYPTO_VIRAL_PATTERNS):
            score += 30
        if any(p.search(text) for p in EMPHASIS_PATTERNS):
            score += 20
        if item.platform == Platform.X:
            likes = _metric(item, "likes") or 1
            if _metric(item, "retweets") / max(1.0, likes) > RETWEET_RATIO_THRESHOLD:
                score += 25
        return _clamp(score)


_default_scorer = CandidateScorer()


def score_item(item: NormalizedItem, now: Optional[datetime] = None) -> BuzzCandidateResult:
    return _default_scorer.score(item, now=now)


def is_candidate(result: BuzzCandidateResult) -> bool:
    return result.score >= CANDIDATE_THRESHOLD
