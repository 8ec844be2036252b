"""
Rule-based viral analysis and outline planning.

Stands in for the upstream analysis step when no model-backed analyzer is
wired in: it derives a hook style and emotion profile from the same keyword
signals the scorer uses, picks a template, and drafts the outline lines.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from buzz.analyzer import extract_details
from buzz.models import (
    AnalysisRisks,
    BuzzCandidateResult,
    HookType,
    LengthTier,
    NormalizedItem,
    OutlinePlan,
    TemplateChoice,
    ViralAnalysis,
)
from buzz.scoring import CRYPTO_VIRAL_PATTERNS, EMPHASIS_PATTERNS, QUESTION, URGENCY_PATTERNS
from buzz.summaries import generate_summary
from buzz.templates import RandomSource, select_template
from buzz.titles import generate_title

logger = logging.getLogger(__name__)

HIGH = 0.8
MEDIUM = 0.6
LOW = 0.2
MAX_KEY_POINTS = 3

CURIOSITY = re.compile(r"\b(how|why|what)\b|なぜ|どう", re.I)
SCAM = re.compile(r"scam|rug ?pull|詐欺", re.I)
NUMBER = re.compile(r"\d")


def analyze_item(item: NormalizedItem) -> ViralAnalysis:
    title, content = item.source_title, item.source_content
    text = f"{title} {content}".lower()

    urgent = any(p.search(text) for p in URGENCY_PATTERNS)
    viral = any(p.search(text) for p in CRYPTO_VIRAL_PATTERNS)
    emphatic = any(p.search(text) for p in EMPHASIS_PATTERNS)

    if QUESTION.search(text):
        hook_type = HookType.QUESTION
    elif urgent or viral or NUMBER.search(title):
        hook_type = HookType.SHOCK
    else:
        hook_type = HookType.EMPATHY

    profile: Dict[str, float] = {
        "urgency": HIGH if urgent else LOW,
        "fomo": HIGH if viral else LOW,
        "curiosity": MEDIUM if CURIOSITY.search(text) or hook_type == HookType.QUESTION else LOW,
        "trust": MEDIUM if NUMBER.search(text) else LOW,
    }
    risks = AnalysisRisks(
        hype_risk="medium" if emphatic else "low",
        certainty="medium",
        scam_suspect=bool(SCAM.search(text)),
    )
    return ViralAnalysis(
        detected_template_type="news",
        hook_type=hook_type,
        cta_type="follow",
        emotion_profile=profile,
        short_summary=generate_summary(title, content, LengthTier.SHORT),
        risks=risks,
    )


def _key_points(item: NormalizedItem, analysis: ViralAnalysis) -> List[str]:
    details = extract_details(item.source_title, item.source_content)
    points: List[str] = []
    if details.entity_ja:
        points.append(f"・{details.entity_ja}{'が' + details.action if details.action else 'に注目'}")
    for number in details.numbers[:2]:
        points.append(f"・{number}規模の動き")
    if len(points) < MAX_KEY_POINTS:
        body = [line for line in analysis.short_summary.split("\n\n")[1:] if line.strip()]
        points.extend(body[: MAX_KEY_POINTS - len(points)])
    return points[:MAX_KEY_POINTS]


def build_outline(
    item: NormalizedItem,
    candidate: BuzzCandidateResult,
    rng: Optional[RandomSource] = None,
) -> Tuple[OutlinePlan, ViralAnalysis]:
    analysis = analyze_item(item)
    template = select_template(analysis.hook_type, analysis.emotion_profile, rng=rng)
    outline = OutlinePlan(
        template_choice=TemplateChoice(
            code=template.code,
            reason=f"hook={analysis.hook_type.value} score={candidate.score}",
        ),
        hook_draft=generate_title(item.source_title, item.source_content),
        key_points=_key_points(item, analysis),
        cta_draft=template.structure.cta,
        emotion_plan=dict(analysis.emotion_profile),
    )
    logger.debug("Outline for %s uses %s", item.external_id, template.code)
    return outline, analysis


class HeuristicOutliner:
    """Callable outline provider with a pinned random source."""

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self.rng = rng

    def __call__(
        self, item: NormalizedItem, candidate: BuzzCandidateResult
    ) -> Optional[Tuple[OutlinePlan, ViralAnalysis]]:
        if not item.source_title:
            return None
        return build_outline(item, candidate, rng=self.rng)
