"""
Structured fact extraction from raw headline/body text.

Every cascade here is an explicit ordered list of (pattern, result) pairs;
the first match wins, so list order is behaviour.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from buzz.models import ExtractedDetails, TopicFlags
from buzz.terms import translate_term

ENGLISH_RATIO_THRESHOLD = 0.3
GENERIC_COIN = "仮想通貨"

LATIN_LETTER = re.compile(r"[a-zA-Z]")

ENTITY_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"\b(Coinbase|Binance|Kraken|Bitfinex|OKX|Bybit|Gemini|Robinhood)\b", re.I),
    re.compile(r"\b(BlackRock|Fidelity|JPMorgan|Goldman Sachs|Morgan Stanley|Grayscale)\b", re.I),
    re.compile(r"\b(MicroStrategy|Tesla|Square|PayPal|Visa|Mastercard)\b", re.I),
    re.compile(r"\b(Ripple|Circle|Tether|Bitmine|CleanSpark|Marathon|Riot)\b", re.I),
    re.compile(r"\b(SEC|CFTC|DOJ|Fed|Treasury)\b", re.I),
    re.compile(r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+)?)\s(?:CEO|CTO|CFO|founder|President)"),
)

# Negative/downward actions are checked before the generic positive ones.
ACTION_RULES: Sequence[Tuple[Pattern[str], str]] = (
    (re.compile(r"sink|drop|fall|crash|plunge|tumble|slide|dip|slump|decline", re.I), "下落"),
    (re.compile(r"freez|frozen", re.I), "凍結"),
    (re.compile(r"block|ban|halt|restrict", re.I), "制限"),
    (re.compile(r"reject|deny", re.I), "却下"),
    (re.compile(r"sell|dump|liquidat", re.I), "売却"),
    (re.compile(r"surge|soar|jump|spike|rally|climb|rise|gain", re.I), "急騰"),
    (re.compile(r"hit|reach|break|top", re.I), "到達"),
    (re.compile(r"buy|purchas|acquir|accumul", re.I), "購入"),
    (re.compile(r"launch|start|begin|open|roll.?out", re.I), "開始"),
    (re.compile(r"stake|staking|deposit", re.I), "ステーキング"),
    (re.compile(r"warn|alert|caut", re.I), "警告"),
    (re.compile(r"approv|green.?light|pass", re.I), "承認"),
    (re.compile(r"reveal|announc|report|disclose", re.I), "発表"),
    (re.compile(r"sue|lawsuit|legal|charge", re.I), "提訴"),
    (re.compile(r"partner|collaborat|team.?up", re.I), "提携"),
    (re.compile(r"invest|fund|back", re.I), "投資"),
    (re.compile(r"upgrade|fork|update", re.I), "アップグレード"),
    (re.compile(r"predict|forecast|expect", re.I), "予想"),
    (re.compile(r"schedule|plan", re.I), "予定"),
    (re.compile(r"name|pick|select|choose", re.I), "選出"),
)

COIN_RULES: Sequence[Tuple[Pattern[str], str]] = (
    (re.compile(r"bitcoin|btc", re.I), "ビットコイン"),
    (re.compile(r"ethereum|eth", re.I), "イーサリアム"),
    (re.compile(r"xrp|ripple", re.I), "XRP"),
    (re.compile(r"solana|sol\b", re.I), "ソラナ"),
)

DOLLAR_AMOUNT = re.compile(r"\$[\d,.]+[BMK]?")
PERCENTAGE = re.compile(r"[\d.]+%")
PRICE_LEVEL = re.compile(r"\$[\d,]+(?:\.\d+)?")
HEADLINE_NUMBER = re.compile(r"\$[\d,.]+[BMK]?|[\d.]+%")

QUOTED_PHRASE = re.compile(r'"([^"]+)"')
MONTH_DAY = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October|November|December)\s+\d{1,2}",
    re.I,
)
PROJECT_NAMES = re.compile(
    r"\b(Aave|Uniswap|Compound|MakerDAO|Lido|Curve|dYdX|GMX|Arbitrum|Optimism|Base|zkSync|StarkNet|Polygon|Avalanche)\b",
    re.I,
)
MAX_SPECIFIC_DETAILS = 6

TOPIC_PATTERNS: Dict[str, Pattern[str]] = {
    "is_etf": re.compile(r"etf", re.I),
    "is_regulation": re.compile(r"sec|cftc|regulation|regulatory", re.I),
    "is_mining": re.compile(r"mining|miner", re.I),
    "is_hack": re.compile(r"hack|exploit|attack|security", re.I),
    "is_governance": re.compile(r"governance|vote|proposal", re.I),
    "is_defi": re.compile(r"defi|tvl|yield|protocol|aave|uniswap", re.I),
    "is_stablecoin": re.compile(r"stablecoin|usdt|usdc|tether", re.I),
    "is_positive": re.compile(r"surge|soar|rise|gain|bullish|high|rally|break", re.I),
    "is_negative": re.compile(r"sink|drop|fall|crash|bearish|low|fear|hack|reject", re.I),
}


def latin_ratio(text: str) -> float:
    if not text:
        return 0.0
    return len(LATIN_LETTER.findall(text)) / len(text)


def is_mostly_japanese(text: str) -> bool:
    return latin_ratio(text) < ENGLISH_RATIO_THRESHOLD


def extract_entity(title: str) -> Optional[str]:
    for pattern in ENTITY_PATTERNS:
        match = pattern.search(title)
        if match:
            return match.group(1)
    return None


def extract_action(title: str) -> str:
    for pattern, label in ACTION_RULES:
        if pattern.search(title):
            return label
    return ""


def detect_main_coin(text: str) -> str:
    for pattern, label in COIN_RULES:
        if pattern.search(text):
            return label
    return GENERIC_COIN


def _unique(values: Sequence[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def extract_key_numbers(title: str, content: str) -> List[str]:
    """Dollar amounts (3), then percentages (2), then price levels (2); first-seen order."""
    text = f"{title} {content}"
    numbers: List[str] = []
    numbers.extend(DOLLAR_AMOUNT.findall(text)[:3])
    numbers.extend(PERCENTAGE.findall(text)[:2])
    numbers.extend(PRICE_LEVEL.findall(text)[:2])
    return _unique(numbers)


def headline_number(title: str, content: str) -> str:
    """First dollar amount or percentage anywhere in title + content."""
    match = HEADLINE_NUMBER.search(f"{title} {content}")
    return match.group(0) if match else ""


def extract_specific_details(text: str) -> List[str]:
    details: List[str] = [quote for quote in QUOTED_PHRASE.findall(text)[:2]]
    date_match = MONTH_DAY.search(text)
    if date_match:
        details.append(date_match.group(0))
    details.extend(_unique(PROJECT_NAMES.findall(text))[:3])
    return details[:MAX_SPECIFIC_DETAILS]


def extract_details(title: str, content: str) -> ExtractedDetails:
    text = f"{title} {content}"
    entity = extract_entity(title)
    return ExtractedDetails(
        entity=entity,
        entity_ja=translate_term(entity),
        action=extract_action(title),
        numbers=extract_key_numbers(title, content),
        main_coin=detect_main_coin(text),
        specific_details=extract_specific_details(text),
    )


def compute_topic_flags(title: str, content: str) -> TopicFlags:
    text = f"{title} {content}".lower()
    return TopicFlags(**{name: bool(pattern.search(text)) for name, pattern in TOPIC_PATTERNS.items()})
