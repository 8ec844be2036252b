"""
Outline-driven post assembly.

Turns an OutlinePlan plus its upstream ViralAnalysis into a DraftPayload:
post text, trend score, emotion triggers and risk flags.
"""
from __future__ import annotations

import math
import re
from typing import List, Mapping

from buzz.models import DraftPayload, HookType, OutlinePlan, RiskFlags, ViralAnalysis
from buzz.templates import Template, require_template

HOOK_BONUS = 5
CTA_BONUS = 5
HYPE_PENALTY = 10
SCAM_PENALTY = 20
EMOTION_TRIGGER_BAR = 0.3
MAX_EMOTION_TRIGGERS = 5

HYPE_PATTERNS = [re.compile(p) for p in (r"100x", r"1000x", r"moon", r"guaranteed", r"確実", r"絶対", r"必ず")]
UNCERTAINTY_PATTERNS = [
    re.compile(r"rumor", re.I),
    re.compile(r"噂"),
    re.compile(r"らしい"),
    re.compile(r"かも"),
    re.compile(r"未確認"),
]
NO_NOTES = "特記事項なし"


def assemble_post(template: Template, outline: OutlinePlan) -> str:
    """Hook, blank line, key points, blank line, CTA."""
    parts: List[str] = [outline.hook_draft]
    if outline.key_points:
        parts.append("")
        parts.extend(outline.key_points)
    parts.append("")
    parts.append(outline.cta_draft)
    return "\n".join(parts)


def calculate_trend_score(candidate_score: float, analysis: ViralAnalysis) -> int:
    score = candidate_score
    if analysis.hook_type == HookType.SHOCK:
        score += HOOK_BONUS
    if analysis.cta_type != "none":
        score += CTA_BONUS
    if analysis.risks.hype_risk == "high":
        score -= HYPE_PENALTY
    if analysis.risks.scam_suspect:
        score -= SCAM_PENALTY
    values = list(analysis.emotion_profile.values())
    average = sum(values) / max(1, len(values))
    score += math.floor(average * 10 + 0.5)
    return int(max(0, min(100, score)))


def extract_emotion_triggers(emotion_profile: Mapping[str, float]) -> List[str]:
    strong = [(key, value) for key, value in emotion_profile.items() if value > EMOTION_TRIGGER_BAR]
    strong.sort(key=lambda pair: pair[1], reverse=True)
    return [key for key, _ in strong[:MAX_EMOTION_TRIGGERS]]


def assess_risk_flags(analysis: ViralAnalysis, original_text: str) -> RiskFlags:
    text = (original_text or "").lower()
    notes: List[str] = []

    hype_level = "low"
    hype_hits = sum(1 for pattern in HYPE_PATTERNS if pattern.search(text))
    if hype_hits >= 2:
        hype_level = "high"
        notes.append("複数の誇大表現を検出")
    elif hype_hits == 1:
        hype_level = "medium"
        notes.append("誇大表現の可能性")

    # The upstream analysis can only raise the level.
    upstream = analysis.risks.hype_risk
    if upstream == "high" or (upstream == "medium" and hype_level == "low"):
        hype_level = upstream

    certainty = analysis.risks.certainty
    if any(pattern.search(text) for pattern in UNCERTAINTY_PATTERNS):
        if certainty == "high":
            certainty = "medium"
        notes.append("情報の確実性に注意")

    if analysis.risks.scam_suspect:
        notes.append("詐欺の疑いあり - 要確認")
    notes.extend(analysis.risks.notes)

    return RiskFlags(hype_level=hype_level, info_certainty=certainty, notes="; ".join(notes) or NO_NOTES)


def generate_draft(
    outline: OutlinePlan,
    analysis: ViralAnalysis,
    original_text: str,
    candidate_score: float,
) -> DraftPayload:
    """
    Raises UnknownTemplateError when the outline names a template code that is
    not in the catalog.
    """
    template = require_template(outline.template_choice.code)
    return DraftPayload(
        post_text=assemble_post(template, outline),
        template_type=template.name,
        emotion_triggers=extract_emotion_triggers(analysis.emotion_profile),
        trend_score=calculate_trend_score(candidate_score, analysis),
        risk_flags=assess_risk_flags(analysis, original_text),
        template_code=template.code,
    )
