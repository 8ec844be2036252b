"""
Core data structures shared by the scoring and draft-generation pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Platform(str, Enum):
    X = "x"
    NEWS = "news"
    YOUTUBE = "youtube"
    MANUAL = "manual"


class LengthTier(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class HookType(str, Enum):
    QUESTION = "question"
    SHOCK = "shock"
    EMPATHY = "empathy"


class TemplateCategory(str, Enum):
    URGENCY = "urgency"
    FOMO = "fomo"
    EDUCATION = "education"
    STORY = "story"
    CONTROVERSY = "controversy"
    DATA = "data"


@dataclass
class Author:
    id: Optional[str] = None
    name: Optional[str] = None
    handle: Optional[str] = None
    followers: Optional[int] = None


@dataclass
class NormalizedItem:
    """
    Canonical representation of one ingested content unit, across platforms.

    `external_id` is the idempotency key (`<platform-prefix>:<id>`); `raw` keeps
    the source payload that title/content analysis reads from.
    """

    external_id: str
    platform: Platform
    url: str
    published_at: datetime
    ingested_at: datetime
    language: Optional[str] = None
    text: Optional[str] = None
    title: Optional[str] = None
    author: Optional[Author] = None
    metrics: Dict[str, float] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def source_title(self) -> str:
        return str(self.raw.get("title") or self.title or self.text or "")

    @property
    def source_content(self) -> str:
        return str(self.raw.get("content") or "")


@dataclass
class ScoreReason:
    code: str
    label: str
    weight: float
    detail: Optional[str] = None


@dataclass
class BuzzCandidateResult:
    score: int
    reasons: List[ScoreReason] = field(default_factory=list)
    features: Dict[str, Union[float, str]] = field(default_factory=dict)


@dataclass(frozen=True)
class TopicFlags:
    is_etf: bool = False
    is_regulation: bool = False
    is_mining: bool = False
    is_hack: bool = False
    is_governance: bool = False
    is_defi: bool = False
    is_stablecoin: bool = False
    is_positive: bool = False
    is_negative: bool = False


@dataclass
class ExtractedDetails:
    entity: Optional[str]
    entity_ja: Optional[str]
    action: str
    numbers: List[str] = field(default_factory=list)
    main_coin: str = "仮想通貨"
    specific_details: List[str] = field(default_factory=list)

    @property
    def primary_number(self) -> str:
        return self.numbers[0] if self.numbers else ""

    @property
    def secondary_number(self) -> str:
        return self.numbers[1] if len(self.numbers) > 1 else ""


@dataclass
class RiskFlags:
    hype_level: str = "low"
    info_certainty: str = "medium"
    notes: str = ""
    length_category: Optional[str] = None


@dataclass
class DraftPayload:
    post_text: str
    template_type: str
    emotion_triggers: List[str] = field(default_factory=list)
    trend_score: int = 0
    risk_flags: RiskFlags = field(default_factory=RiskFlags)
    title: Optional[str] = None
    tier: Optional[LengthTier] = None
    template_code: Optional[str] = None


@dataclass
class AnalysisRisks:
    hype_risk: str = "low"
    certainty: str = "medium"
    scam_suspect: bool = False
    notes: List[str] = field(default_factory=list)


@dataclass
class ViralAnalysis:
    """Upstream viral-pattern analysis consumed by the outline-driven path."""

    detected_template_type: str
    hook_type: HookType
    cta_type: str
    emotion_profile: Dict[str, float] = field(default_factory=dict)
    short_summary: str = ""
    risks: AnalysisRisks = field(default_factory=AnalysisRisks)


@dataclass
class TemplateChoice:
    code: str
    reason: str = ""


@dataclass
class OutlinePlan:
    template_choice: TemplateChoice
    hook_draft: str
    key_points: List[str] = field(default_factory=list)
    cta_draft: str = ""
    emotion_plan: Dict[str, float] = field(default_factory=dict)


@dataclass
class DraftBatch:
    """Output of one strategy run over one item."""

    drafts: List[DraftPayload] = field(default_factory=list)
    skip_reason: Optional[str] = None


@dataclass
class GenerateResult:
    processed: int = 0
    generated: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    skip_reasons: Dict[str, int] = field(default_factory=dict)
    job_id: Optional[int] = None

    def record_skip(self, reason: str) -> None:
        self.skipped += 1
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1


@dataclass
class PipelineOptions:
    dry_run: bool = False
    max_items: int = 200
    from_hours: int = 72
    only_platforms: Optional[List[Platform]] = None


@dataclass
class PipelineStats:
    ingested: int = 0
    candidates: int = 0
    analyzed: int = 0
    outlined: int = 0
    generated: int = 0
    skipped: int = 0
    dry_run: bool = False
    errors: List[str] = field(default_factory=list)
    job_id: Optional[int] = None
