"""
Localized headline generation.

`TITLE_RULES` is an ordered cascade of (name, handler) pairs. Each handler
inspects a `TitleContext` and returns a headline or None to fall through; the
first non-empty result wins. Specific patterns come first, generic
translation-based fallbacks last, and the literal FALLBACK_TITLE terminates
the chain.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from buzz.analyzer import (
    extract_action,
    extract_entity,
    headline_number,
    is_mostly_japanese,
    latin_ratio,
)
from buzz.terms import translate_term, translate_text

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "仮想通貨最新ニュース"
MAX_TITLE_LENGTH = 60

COIN_GROUP = r"(bitcoin|btc|ethereum|eth|xrp|solana)"
EYES_TARGET = re.compile(COIN_GROUP + r"\s+eyes?\s+\$?([\d,.]+[KMB]?)", re.I)
LEVEL_BEFORE_COIN = re.compile(r"\$?(\d[\d,.]*[KMB]?)\s*" + COIN_GROUP, re.I)
COIN_TO_LEVEL = re.compile(COIN_GROUP + r"\s*(?:to|at|hit|reach)?\s*\$?(\d[\d,.]*[KMB]?)", re.I)
PERSON_WITH_ROLE = re.compile(r"([A-Z][a-z]+(?:\s[A-Z][a-z]+)?)\s*(?:,\s*)?(CEO|CTO|CFO|chief|head|president)", re.I)
PERIOD = re.compile(r"(\d+)[\s-]?(month|week|day|year)", re.I)
FORK_PROJECT = re.compile(r"\b(BNB|Ethereum|Bitcoin|Solana|Cardano|Polygon)\b", re.I)
FORK_NAME = re.compile(r"\b([A-Z][a-z]+)\s+(?:hard.?fork|upgrade)", re.I)
TICKERS = re.compile(r"\b(BTC|ETH|XRP|SOL|DOGE|ADA|BNB)\b", re.I)
SEGMENT_SPLIT = re.compile(r"[:\-–—,]")
LONG_LATIN_RUN = re.compile(r"[a-zA-Z]{6,}")
MEDIUM_LATIN_RUN = re.compile(r"[a-zA-Z]{5,}")

PERIOD_UNITS = {"month": "ヶ月", "week": "週間", "year": "年", "day": "日"}


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.I) is not None


def _paren(value: str, prefix: str = "") -> str:
    return f"（{prefix}{value}）" if value else ""


def _year_label(text: str) -> str:
    if "2026" in text:
        return "2026年"
    if "2025" in text:
        return "2025年"
    return ""


@dataclass
class TitleContext:
    title: str
    content: str
    text: str
    number: str
    entity: Optional[str]
    entity_ja: Optional[str]
    action: str

    @classmethod
    def build(cls, title: str, content: str) -> "TitleContext":
        entity = extract_entity(title)
        return cls(
            title=title,
            content=content,
            text=title.lower(),
            number=headline_number(title, content),
            entity=entity,
            entity_ja=translate_term(entity),
            action=extract_action(title),
        )

    @property
    def segment(self) -> str:
        return SEGMENT_SPLIT.split(self.title)[0].strip()

    @property
    def translated_segment(self) -> str:
        return translate_text(self.segment)


def _coin_in_title(title: str) -> str:
    if _has(r"bitcoin|btc", title):
        return "ビットコイン"
    if _has(r"ethereum|eth", title):
        return "イーサリアム"
    if _has(r"xrp", title):
        return "XRP"
    if _has(r"solana", title):
        return "ソラナ"
    return "仮想通貨"


def eyes_price_target(ctx: TitleContext) -> Optional[str]:
    match = EYES_TARGET.search(ctx.title)
    if not match:
        return None
    coin = _coin_in_title(match.group(1))
    return f"{coin}、${match.group(2)}を目指す"


def price_level(ctx: TitleContext) -> Optional[str]:
    if not (LEVEL_BEFORE_COIN.search(ctx.title) or COIN_TO_LEVEL.search(ctx.title)):
        return None
    coin = _coin_in_title(ctx.title)
    price = ctx.number
    if _has(r"no |not |won't|fail|unlikely", ctx.text):
        return f"{coin}、{price}到達せず"
    if _has(r"low|bottom|support", ctx.text):
        return f"{coin}、{price}のサポートライン"
    return f"{coin}{ctx.action}{'、' + price if price else ''}"


def entity_with_amount(ctx: TitleContext) -> Optional[str]:
    if not (ctx.entity_ja and ctx.number):
        return None
    entity, amount, text = ctx.entity_ja, ctx.number, ctx.text
    if _has(r"stake|staking|deposit", text):
        return f"{entity}、{amount}をステーキング"
    if _has(r"buy|purchas|acquir", text):
        return f"{entity}、{amount}を購入"
    if _has(r"sell|dump", text):
        return f"{entity}、{amount}を売却"
    if _has(r"invest|fund", text):
        return f"{entity}、{amount}を投資"
    if _has(r"inflow", text):
        return f"{entity}に{amount}流入"
    if _has(r"outflow", text):
        return f"{entity}から{amount}流出"
    return f"{entity}、{amount}規模の動き"


def entity_with_action(ctx: TitleContext) -> Optional[str]:
    if not (ctx.entity_ja and ctx.action):
        return None
    entity, action, text = ctx.entity_ja, ctx.action, ctx.text
    if _has(r"freeze|frozen|block", text) and _has(r"account|wallet", text):
        return f"{entity}、口座を{action}"
    if _has(r"ceo|chief|head|president", text):
        match = PERSON_WITH_ROLE.search(ctx.title)
        person = _paren(match.group(1)) if match else ""
        if _has(r"warn|red.?line|concern", text):
            return f"{entity}CEO{person}が{action}"
        return f"{entity}CEO{person}が発言"
    if _has(r"launch|start|begin|announce", text):
        return f"{entity}、新サービスを{action}"
    if _has(r"partner|collaborat", text):
        return f"{entity}、新たな{action}を発表"
    return f"{entity}、{action}"


def token_burn(ctx: TitleContext) -> Optional[str]:
    if not _has(r"token burn|burn.*token", ctx.text):
        return None
    label = f"トークンバーン{ctx.action or '提案'}"
    if _has(r"uniswap", ctx.text):
        return f"ユニスワップ、{label}"
    return label


def governance_vote(ctx: TitleContext) -> Optional[str]:
    text = ctx.text
    if not (_has(r"governance.*(vote|proposal|pass|reject)", text) or _has(r"(vote|proposal).*(pass|reject|fail)", text)):
        return None
    # "ends in" style wording means the vote failed even if "pass" also appears.
    rejected = _has(r"reject|rejection|fail|failed|ends? in", text)
    passed = _has(r"pass|passed|approve|approved|backed", text) and not rejected
    for literal, label in (("uniswap", "ユニスワップ"), ("aave", "Aave")):
        if literal in text:
            if passed:
                return f"{label}、ガバナンス提案可決"
            if rejected:
                return f"{label}、ガバナンス提案否決"
            return f"{label}、ガバナンス投票"
    if passed:
        return "DeFiガバナンス提案可決"
    if rejected:
        return "DeFiガバナンス提案否決"
    return None


def etf_flow(ctx: TitleContext) -> Optional[str]:
    text, number, action = ctx.text, ctx.number, ctx.action
    if "etf" not in text:
        return None
    if _has(r"inflow|outflow", text):
        flow = "流入" if "inflow" in text else "流出"
        return f"仮想通貨ETFに{number + 'の' if number else ''}{flow}"
    if _has(r"bitcoin|btc", text):
        return f"ビットコインETF{action or 'に動き'}{_paren(number)}"
    if _has(r"ethereum|eth", text):
        return f"イーサリアムETF{action or 'に動き'}"
    return f"仮想通貨ETF{action or '最新動向'}{_paren(number)}"


def regulation(ctx: TitleContext) -> Optional[str]:
    text, action = ctx.text, ctx.action
    if not _has(r"sec|cftc|regulation|regulatory|government|law", text):
        return None
    if ctx.entity_ja:
        return f"{ctx.entity_ja}に規制当局が動き"
    if "stablecoin" in text:
        return f"ステーブルコイン規制{action or 'に進展'}"
    if _has(r"bitcoin|btc", text):
        return f"ビットコインに規制当局が{action or '注目'}"
    if _has(r"xrp|ripple", text):
        return f"XRP/Ripple訴訟{action or 'に進展'}"
    return f"仮想通貨規制{action or 'に動き'}"


def mining(ctx: TitleContext) -> Optional[str]:
    text, action = ctx.text, ctx.action
    if not _has(r"min(ing|er)", text):
        return None
    if _has(r"bitcoin|btc", text):
        return f"ビットコインマイニング{action}{_paren(ctx.number) or 'に注目'}"
    if ctx.entity_ja:
        return f"{ctx.entity_ja}のマイニング事業{action}"
    return f"仮想通貨マイニング{action or 'に動き'}"


def futures_open_interest(ctx: TitleContext) -> Optional[str]:
    text = ctx.text
    if not _has(r"open interest|futures|options", text):
        return None
    market = "BTC" if _has(r"bitcoin|btc", text) else "仮想通貨"
    period = PERIOD.search(ctx.title)
    if period:
        unit = PERIOD_UNITS[period.group(2).lower()]
        return f"{market}先物、{period.group(1)}{unit}ぶりの水準"
    if "low" in text:
        return f"{market}先物建玉が低水準"
    if "high" in text:
        return f"{market}先物建玉が高水準"
    return None


def security_incident(ctx: TitleContext) -> Optional[str]:
    if not _has(r"hack|exploit|vulnerability|attack|breach", ctx.text):
        return None
    if ctx.entity_ja:
        return f"{ctx.entity_ja}にセキュリティインシデント{_paren(ctx.number)}"
    return f"セキュリティインシデント発生{_paren(ctx.number, '被害額')}"


def annual_review(ctx: TitleContext) -> Optional[str]:
    text = ctx.text
    if not (_has(r"year in (xrp|bitcoin|ethereum|solana|crypto)", text) or _has(r"the year.+20(25|26)", text)):
        return None
    if "xrp" in text:
        coin = "XRP"
    elif _has(r"bitcoin|btc", text):
        coin = "ビットコイン"
    elif _has(r"ethereum|eth", text):
        coin = "イーサリアム"
    elif "solana" in text:
        coin = "ソラナ"
    else:
        coin = "仮想通貨"
    return f"{coin}{_year_label(text)}の総まとめ"


def outlook(ctx: TitleContext) -> Optional[str]:
    text = ctx.text
    if not _has(r"2025|2026|next year|outlook|forecast|prediction", text):
        return None
    year = _year_label(text)
    if _has(r"bitcoin|btc", text):
        return f"ビットコイン{year}{ctx.number or '価格'}予想"
    if _has(r"xrp|ripple", text):
        return f"XRP{year}の動向{'：' + ctx.action if ctx.action else ''}"
    if "regulation" in text:
        return f"仮想通貨規制{year}の展望"
    if _has(r"fintech|pick|top", text) and ctx.entity_ja:
        return f"{ctx.entity_ja}、{year}注目銘柄に選出"
    if ctx.entity_ja:
        return f"{ctx.entity_ja}{year}の見通し"
    return None


def hard_fork(ctx: TitleContext) -> Optional[str]:
    if not _has(r"hard.?fork|upgrade|update", ctx.text):
        return None
    project = FORK_PROJECT.search(ctx.title)
    if not project:
        return None
    project_ja = translate_term(project.group(1))
    fork = FORK_NAME.search(ctx.title)
    scheduled = "予定" if _has(r"schedule|plan", ctx.text) else ""
    label = ctx.action or "アップグレード"
    if fork:
        return f"{project_ja}「{fork.group(1)}」{label}{scheduled}"
    return f"{project_ja}{label}{scheduled}"


def price_prediction_roundup(ctx: TitleContext) -> Optional[str]:
    if "price prediction" not in ctx.text:
        return None
    coins = TICKERS.findall(ctx.title)
    if not coins:
        return None
    return f"{'・'.join(coins[:3])}など価格予想"


def translated_title(ctx: TitleContext) -> Optional[str]:
    translated = translate_text(ctx.title)
    if len(translated) <= 50 and not LONG_LATIN_RUN.search(translated):
        return translated
    return None


def translated_segment(ctx: TitleContext) -> Optional[str]:
    segment = ctx.translated_segment
    if len(segment) <= 35 and not MEDIUM_LATIN_RUN.search(segment):
        return segment + (f"：{ctx.action}" if ctx.action else "")
    return None


def _coin_keyword(pattern: str, label: str, idle: str) -> Callable[[TitleContext], Optional[str]]:
    def rule(ctx: TitleContext) -> Optional[str]:
        if not _has(pattern, ctx.text):
            return None
        return f"{label}{ctx.action}{_paren(ctx.number) or idle}"

    rule.__name__ = f"coin_keyword_{label}"
    return rule


def ai_keyword(ctx: TitleContext) -> Optional[str]:
    if not _has(r"\bai\b|artificial intelligence", ctx.text):
        return None
    return f"AI×ブロックチェーン{ctx.action or 'に新展開'}"


def entity_only(ctx: TitleContext) -> Optional[str]:
    if not ctx.entity_ja:
        return None
    return f"{ctx.entity_ja}{'が' + ctx.action if ctx.action else 'に注目'}"


def number_only(ctx: TitleContext) -> Optional[str]:
    if not ctx.number:
        return None
    return f"仮想通貨市場{ctx.action or 'に動き'}（{ctx.number}）"


def action_only(ctx: TitleContext) -> Optional[str]:
    return f"仮想通貨{ctx.action}" if ctx.action else None


def cleaned_segment(ctx: TitleContext) -> Optional[str]:
    segment = ctx.translated_segment
    if len(segment) <= 5 or latin_ratio(segment) >= 0.3:
        return None
    cleaned = LONG_LATIN_RUN.sub("", segment).strip()
    return cleaned if len(cleaned) > 5 else None


KEYWORD_ELEMENTS: Sequence[Tuple[str, str]] = (
    (r"privacy|プライバシー", "プライバシー"),
    (r"nft", "NFT"),
    (r"tvl", "TVL"),
    (r"token|トークン", "トークン"),
    (r"dex", "DEX"),
    (r"market|マーケット", "市場"),
    (r"year|年", "年間"),
)


def keyword_elements(ctx: TitleContext) -> Optional[str]:
    elements = [label for pattern, label in KEYWORD_ELEMENTS if _has(pattern, ctx.text)]
    if not elements:
        return None
    return f"{'・'.join(elements)}{ctx.action or '動向'}"


TITLE_RULES: Sequence[Tuple[str, Callable[[TitleContext], Optional[str]]]] = (
    ("eyes_price_target", eyes_price_target),
    ("price_level", price_level),
    ("entity_with_amount", entity_with_amount),
    ("entity_with_action", entity_with_action),
    ("token_burn", token_burn),
    ("governance_vote", governance_vote),
    ("etf_flow", etf_flow),
    ("regulation", regulation),
    ("mining", mining),
    ("futures_open_interest", futures_open_interest),
    ("security_incident", security_incident),
    ("annual_review", annual_review),
    ("outlook", outlook),
    ("hard_fork", hard_fork),
    ("price_prediction_roundup", price_prediction_roundup),
    ("translated_title", translated_title),
    ("translated_segment", translated_segment),
    ("bitcoin", _coin_keyword(r"bitcoin|btc", "ビットコイン", "に注目")),
    ("ethereum", _coin_keyword(r"ethereum|eth", "イーサリアム", "に注目")),
    ("xrp", _coin_keyword(r"xrp|ripple", "XRP", "に動き")),
    ("solana", _coin_keyword(r"solana", "ソラナ", "に注目")),
    ("bnb", _coin_keyword(r"bnb|binance chain", "BNBチェーン", "に動き")),
    ("blockchain", _coin_keyword(r"blockchain", "ブロックチェーン", "に注目")),
    ("ai", ai_keyword),
    ("entity_only", entity_only),
    ("number_only", number_only),
    ("action_only", action_only),
    ("cleaned_segment", cleaned_segment),
    ("keyword_elements", keyword_elements),
)


def match_title_rule(title: str, content: str = "") -> Tuple[str, str]:
    """Return (rule name, headline) for the first rule that fires."""
    ctx = TitleContext.build(title or "", content or "")
    for name, rule in TITLE_RULES:
        result = rule(ctx)
        if result:
            return name, result
    return "fallback", FALLBACK_TITLE


def build_title_candidate(title: str, content: str = "") -> str:
    return match_title_rule(title, content)[1]


def generate_title(title: str, content: str = "") -> str:
    """
    Headline for a draft: the cascade result, clipped to MAX_TITLE_LENGTH, or
    FALLBACK_TITLE when the candidate is still mostly Latin script.
    """
    candidate = build_title_candidate(title, content)[:MAX_TITLE_LENGTH].strip()
    if not candidate or not is_mostly_japanese(candidate):
        logger.debug("Title candidate %r rejected; using fallback", candidate)
        return FALLBACK_TITLE
    return candidate


def rule_names() -> List[str]:
    return [name for name, _ in TITLE_RULES]
