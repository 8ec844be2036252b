"""
Prompt and response contract for model-backed post generation.

Only the contract lives here: the system prompt to send and a strict parser
for what comes back. Transport to any particular model API is out of scope.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from pydantic import BaseModel, ValidationError, field_validator

from buzz.models import DraftPayload, RiskFlags

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 100
JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

SYSTEM_PROMPT = """あなたは「X（旧Twitter）で投稿をバズらせる専門エージェント」です。
暗号通貨・ミームコインの最新情報を、Xで拡散されやすい投稿構造に再設計してください。

【絶対ルール】
- 感情70% / 情報30%
- 1行目は必ずフック（問いかけ型/衝撃事実型/共感体験型）
- 「あなた」視点で書く
- 数字（%/時間/日付）を可能な限り入れる
- 改行を多用し、短文中心で読みやすく
- 最後に必ずCTA（RT/いいね/ブクマ/フォロー/続報予告）
- 出力は日本語
- 誇張しすぎや断定しすぎは避け、リスクがある場合はrisk_noteに記載する

【出力フォーマット：JSON】
{
  "post_text": "...",
  "template_type": "...",
  "emotion_triggers": ["..."],
  "trend_score": 0-100,
  "risk_flags": {
    "hype_level": "low|medium|high",
    "info_certainty": "low|medium|high",
    "notes": "..."
  }
}"""


class LLMResponseError(ValueError):
    """The model output could not be turned into a draft."""

    def __init__(self, response: str) -> None:
        super().__init__(f"Failed to parse LLM response: {response[:SNIPPET_LENGTH]}")
        self.snippet = response[:SNIPPET_LENGTH]


class _DraftResponse(BaseModel):
    post_text: str
    template_type: Any = None
    emotion_triggers: Any = None
    trend_score: Any = None
    risk_flags: Any = None

    @field_validator("post_text", mode="before")
    @classmethod
    def _require_text(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("post_text must be a non-empty string")
        return value

    def emotion_list(self) -> List[str]:
        return list(self.emotion_triggers) if isinstance(self.emotion_triggers, list) else []

    def score(self) -> int:
        # bool is an int subclass but never a valid score.
        if isinstance(self.trend_score, (int, float)) and not isinstance(self.trend_score, bool):
            return int(self.trend_score)
        return 50


def get_system_prompt() -> str:
    return SYSTEM_PROMPT


def parse_llm_response(response: str) -> DraftPayload:
    """
    Parse the outermost JSON object in a model reply into a DraftPayload.

    Missing optional fields take defaults; anything else (no JSON, invalid
    JSON, missing or non-string post_text) raises LLMResponseError.
    """
    match = JSON_OBJECT.search(response or "")
    if not match:
        raise LLMResponseError(response or "")
    try:
        parsed = _DraftResponse.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Rejected LLM response: %s", exc)
        raise LLMResponseError(response) from exc

    risk = parsed.risk_flags if isinstance(parsed.risk_flags, dict) else {}
    return DraftPayload(
        post_text=parsed.post_text,
        template_type=str(parsed.template_type or "unknown"),
        emotion_triggers=parsed.emotion_list(),
        trend_score=parsed.score(),
        risk_flags=RiskFlags(
            hype_level=risk.get("hype_level") or "medium",
            info_certainty=risk.get("info_certainty") or "medium",
            notes=str(risk.get("notes") or ""),
        ),
    )
