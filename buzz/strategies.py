"""
Draft generation strategies.

Two ways of turning one item into drafts share the DraftGenerationStrategy
interface:

* TierStrategy composes `title + blank line + summary` for each length tier
  and only attaches a template record for classification.
* OutlineStrategy assembles one post from an upstream outline and analysis
  through the template catalog.
"""
from __future__ import annotations

import logging
import random
import re
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from buzz.analyzer import ENGLISH_RATIO_THRESHOLD, latin_ratio
from buzz.generator import generate_draft
from buzz.models import (
    BuzzCandidateResult,
    DraftBatch,
    DraftPayload,
    LengthTier,
    NormalizedItem,
    OutlinePlan,
    RiskFlags,
    ViralAnalysis,
)
from buzz.scoring import score_item
from buzz.summaries import generate_summary
from buzz.templates import RandomSource, Template
from buzz.titles import build_title_candidate, generate_title

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 10
MIN_POST_LENGTH = 150
BASE_KEYWORD_SCORE = 50
MAX_KEYWORD_SCORE = 95
HIGH_HYPE_SCORE = 75

SKIP_TITLE_TOO_SHORT = "title_too_short"
SKIP_NOISE_TITLE = "noise_title"
SKIP_TITLE_TOO_ENGLISH = "title_too_english"
SKIP_POST_TOO_SHORT = "post_too_short"
SKIP_NO_OUTLINE = "no_outline"

# Non-crypto feed noise seen in general-purpose sources.
SKIP_PATTERNS = [
    re.compile(r"best games", re.I),
    re.compile(r"here's what happened", re.I),
    re.compile(r"deep-sea|ocean|marine", re.I),
    re.compile(r"^how .+ adapted", re.I),
]

CATEGORY_RULES: Sequence[Tuple[str, str]] = (
    ("breaking", r"breaking|urgent|just in|alert"),
    ("regulation", r"sec|cftc|regulation|regulatory|government|law|congress|senate"),
    ("technology", r"upgrade|fork|launch|mainnet|protocol|layer|development"),
    ("market", r"price|surge|drop|rally|market|etf|trading|volume|inflow|outflow"),
    ("analysis", r"analysis|report|data|research|forecast|prediction|outlook"),
)
DEFAULT_CATEGORY = "default"

KEYWORD_BOOSTS: Sequence[Tuple[str, int]] = (
    (r"bitcoin|btc", 10),
    (r"ethereum|eth", 8),
    (r"etf", 10),
    (r"breaking|urgent", 15),
    (r"\$[\d]+[BMK]", 5),
    (r"hack|exploit|attack", 10),
    (r"sec|regulation", 8),
)

CATEGORY_TEMPLATE_CODES: Dict[str, Tuple[str, ...]] = {
    "breaking": ("URG_BREAKING", "URG_ALERT"),
    "market": ("DATA_STATS", "FOMO_WAVE"),
    "regulation": ("URG_ALERT", "CONT_TRUTH"),
    "technology": ("EDU_THREAD", "EDU_COMPARE"),
    "analysis": ("DATA_STATS", "DATA_CHART"),
}
DEFAULT_TEMPLATE_CODES = ("URG_BREAKING",)

EMOTION_TRIGGERS: Dict[str, Tuple[str, ...]] = {
    "breaking": ("緊急性", "FOMO", "驚き"),
    "analysis": ("教育", "データ", "分析"),
    "regulation": ("警告", "注意", "影響"),
    "technology": ("技術", "期待", "革新"),
    "market": ("FOMO", "興奮", "データ"),
    "default": ("情報", "ニュース", "共有"),
}

TIER_LABELS: Dict[LengthTier, str] = {
    LengthTier.SHORT: "200-400字",
    LengthTier.MEDIUM: "500-1000字",
    LengthTier.LONG: "1000字以上",
}
TIER_BONUS: Dict[LengthTier, int] = {LengthTier.SHORT: 0, LengthTier.MEDIUM: 3, LengthTier.LONG: 5}
TIERS = (LengthTier.SHORT, LengthTier.MEDIUM, LengthTier.LONG)


def categorize_news(title: str, content: str) -> str:
    text = f"{title} {content}".lower()
    for category, pattern in CATEGORY_RULES:
        if re.search(pattern, text, re.I):
            return category
    return DEFAULT_CATEGORY


def keyword_score(title: str, content: str) -> int:
    text = f"{title} {content}".lower()
    score = BASE_KEYWORD_SCORE
    for pattern, boost in KEYWORD_BOOSTS:
        if re.search(pattern, text, re.I):
            score += boost
    return min(MAX_KEYWORD_SCORE, score)


def should_skip_title(title: str) -> Optional[str]:
    """Skip reason for a source headline, or None when it is usable."""
    if not title or len(title) < MIN_TITLE_LENGTH:
        return SKIP_TITLE_TOO_SHORT
    if any(pattern.search(title) for pattern in SKIP_PATTERNS):
        return SKIP_NOISE_TITLE
    return None


def is_too_english(candidate_title: str) -> bool:
    return latin_ratio(candidate_title) > ENGLISH_RATIO_THRESHOLD


def generate_post_text(title: str, content: str, tier: LengthTier) -> str:
    return f"{generate_title(title, content)}\n\n{generate_summary(title, content, tier)}"


def choose_template(category: str, templates: Sequence[Template], rng: RandomSource) -> Optional[Template]:
    """First stored template whose code the category prefers, else a random one."""
    if not templates:
        return None
    preferred = CATEGORY_TEMPLATE_CODES.get(category, DEFAULT_TEMPLATE_CODES)
    for template in templates:
        if template.code in preferred:
            return template
    return templates[int(rng.random() * len(templates))]


class DraftGenerationStrategy(Protocol):
    name: str

    def generate(self, item: NormalizedItem, candidate: Optional[BuzzCandidateResult] = None) -> DraftBatch:
        ...


class TierStrategy:
    """Three length tiers of title + summary, gated on post length."""

    name = "tier"

    def __init__(self, templates: Sequence[Template], rng: Optional[RandomSource] = None) -> None:
        self.templates = list(templates)
        self.rng = rng or random.Random()

    def generate(self, item: NormalizedItem, candidate: Optional[BuzzCandidateResult] = None) -> DraftBatch:
        title = item.source_title
        content = item.source_content

        reason = should_skip_title(title)
        if reason:
            return DraftBatch(skip_reason=reason)

        candidate_title = build_title_candidate(title, content)
        if is_too_english(candidate_title):
            logger.debug("Skipping %s: title still mostly English (%r)", item.external_id, candidate_title)
            return DraftBatch(skip_reason=SKIP_TITLE_TOO_ENGLISH)
        ja_title = generate_title(title, content)

        category = categorize_news(title, content)
        score = keyword_score(title, content)
        template = choose_template(category, self.templates, self.rng)
        source = item.raw.get("source") or "RSS"

        drafts: List[DraftPayload] = []
        for tier in TIERS:
            post_text = generate_post_text(title, content, tier)
            if len(post_text) < MIN_POST_LENGTH:
                logger.debug("Dropping %s draft for %s: %d chars", tier.value, item.external_id, len(post_text))
                continue
            drafts.append(
                DraftPayload(
                    post_text=post_text,
                    template_type=template.name if template else "",
                    emotion_triggers=list(EMOTION_TRIGGERS.get(category, EMOTION_TRIGGERS[DEFAULT_CATEGORY])),
                    trend_score=score + TIER_BONUS[tier],
                    risk_flags=RiskFlags(
                        hype_level="medium" if score > HIGH_HYPE_SCORE else "low",
                        info_certainty="medium",
                        notes=f"Auto-generated from {source} - {tier.value}",
                        length_category=tier.value,
                    ),
                    title=f"{ja_title}【{TIER_LABELS[tier]}】",
                    tier=tier,
                    template_code=template.code if template else None,
                )
            )
        if not drafts:
            return DraftBatch(skip_reason=SKIP_POST_TOO_SHORT)
        return DraftBatch(drafts=drafts)


OutlineProvider = Callable[
    [NormalizedItem, BuzzCandidateResult], Optional[Tuple[OutlinePlan, ViralAnalysis]]
]


class OutlineStrategy:
    """
    One draft per item, assembled from an outline.

    The outline provider is the upstream analysis step; it may return None
    when it has nothing to say about an item. An outline naming an unknown
    template code raises UnknownTemplateError.
    """

    name = "outline"

    def __init__(self, outline_provider: OutlineProvider) -> None:
        self.outline_provider = outline_provider

    def generate(self, item: NormalizedItem, candidate: Optional[BuzzCandidateResult] = None) -> DraftBatch:
        candidate = candidate or score_item(item)
        planned = self.outline_provider(item, candidate)
        if planned is None:
            return DraftBatch(skip_reason=SKIP_NO_OUTLINE)
        outline, analysis = planned
        original_text = item.text or item.source_title
        draft = generate_draft(outline, analysis, original_text, candidate.score)
        draft.title = generate_title(item.source_title, item.source_content)
        return DraftBatch(drafts=[draft])
