from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from buzz.analyzer import compute_topic_flags, extract_details
from buzz.models import ExtractedDetails, TopicFlags

OPENERS = (
    "速報です。",
    "注目のニュースが入ってきました。",
    "大きな動きがありました。",
    "市場が反応しています。",
    "要注目の展開です。",
    "重要な発表がありました。",
    "新たな動きが報じられました。",
    "業界を揺るがすニュースです。",
)

CLOSINGS = (
    "続報に注目👀",
    "今後の展開を見守りましょう",
    "要ウォッチです🔔",
    "引き続き追っていきます",
    "詳細が分かり次第お届けします",
    "市場の反応に注目",
    "今後の動向から目が離せません",
    "フォローで最新情報をキャッチ",
)


def title_hash(title: str) -> int:
    """Sum of code points; stable across runs and processes."""
    return sum(ord(char) for char in title)


@dataclass
class SummaryContext:
    title: str
    content: str
    details: ExtractedDetails
    flags: TopicFlags

    @classmethod
    def build(cls, title: str, content: str) -> "SummaryContext":
        return cls(
            title=title,
            content=content,
            details=extract_details(title, content),
            flags=compute_topic_flags(title, content),
        )

    @property
    def num(self) -> str:
        return self.details.primary_number

    @property
    def num2(self) -> str:
        return self.details.secondary_number

    @property
    def entity_ja(self) -> Optional[str]:
        return self.details.entity_ja

    @property
    def action(self) -> str:
        return self.details.action

    @property
    def main_coin(self) -> str:
        return self.details.main_coin

    @property
    def subject(self) -> str:
        return self.entity_ja or self.main_coin

    @property
    def opener(self) -> str:
        return OPENERS[title_hash(self.title) % len(OPENERS)]

    @property
    def closing(self) -> str:
        return CLOSINGS[(title_hash(self.title) + 1) % len(CLOSINGS)]

    def title_has(self, pattern: str) -> bool:
        return re.search(pattern, self.title, re.I) is not None

    def pick(self, choices: Sequence[Tuple[str, str]], default: str) -> str:
        """First label whose pattern matches the headline."""
        for pattern, label in choices:
            if self.title_has(pattern):
                return label
        return default


def paragraphs(*parts: str) -> str:
    return "\n\n".join(parts)
