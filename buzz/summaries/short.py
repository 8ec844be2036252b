"""Short tier: two or three sentences with a hash-picked opener and closer."""
from __future__ import annotations

from typing import Callable, Dict

from buzz.summaries.context import SummaryContext, paragraphs


def etf(ctx: SummaryContext) -> str:
    flow = ctx.pick((("inflow", "流入"), ("outflow", "流出")), "動き")
    coin = ctx.pick((("bitcoin|btc", "BTC"), ("ethereum|eth", "ETH")), "")
    movement = {"流入": "入ってきています", "流出": "抜けています"}.get(flow, "動いています")
    return paragraphs(
        f"{coin}ETFに{ctx.num + 'の' if ctx.num else ''}{flow}。",
        f"{ctx.opener}機関投資家の資金が{movement}。{f'累計{ctx.num2}規模。' if ctx.num2 else ''}",
        f"ETF市場の資金動向は価格に直結するため、{ctx.closing}",
    )


def hack(ctx: SummaryContext) -> str:
    target = ctx.entity_ja or "プロトコル"
    num = ctx.num
    return paragraphs(
        f"【緊急】{target}でセキュリティ問題発生{f'、{num}規模' if num else ''}",
        f"{target}で異常なトランザクションが検出されました。ユーザーは至急ウォレットを確認してください。",
        f"{f'被害額は{num}と報じられています。' if num else ''}詳細は調査中。",
    )


def governance(ctx: SummaryContext) -> str:
    protocol = ctx.pick(
        (("uniswap", "Uniswap"), ("aave", "Aave"), ("compound", "Compound"), ("maker", "MakerDAO")),
        ctx.entity_ja or "DeFi",
    )
    result = ctx.pick((("reject|fail|denied|ends in", "否決"), ("pass|approve|backed", "可決")), "投票中")
    return paragraphs(
        f"{protocol}のガバナンス提案が{result}。",
        f"コミュニティによる投票の結果、提案は{result}となりました。"
        f"{f'{ctx.num}以上の投票権が行使されました。' if ctx.num else ''}",
        f"DeFiの分散型意思決定、{ctx.closing}",
    )


def positive(ctx: SummaryContext) -> str:
    coin = ctx.subject
    return paragraphs(
        f"{coin}が{ctx.action or '上昇'}{f'、{ctx.num}突破' if ctx.num else ''}！",
        f"{ctx.opener}{f'24時間で{ctx.num2}の上昇。' if ctx.num2 else '強い買いが入っています。'}",
        f"{'BTCの動きにアルト連動の可能性。' if ctx.title_has('bitcoin|btc') else ''}{ctx.closing}",
    )


def negative(ctx: SummaryContext) -> str:
    coin = ctx.subject
    return paragraphs(
        f"{coin}が{ctx.action or '下落'}{f'、{ctx.num}を割り込む' if ctx.num else ''}",
        f"{ctx.opener}{f'{ctx.num2}の下げ幅。' if ctx.num2 else '売り圧力が強まっています。'}",
        f"パニック売りは禁物。{ctx.closing}",
    )


def mining(ctx: SummaryContext) -> str:
    company = ctx.entity_ja or "マイニング企業"
    num = ctx.num
    return paragraphs(
        f"{company}がマイニング事業{ctx.action or 'を展開'}{f'、{num}規模' if num else ''}",
        f"{ctx.opener}{f'{num}の投資/売上が報じられています。' if num else ''}",
        f"マイニング業界の動向は供給に影響。{ctx.closing}",
    )


def regulation(ctx: SummaryContext) -> str:
    target = ctx.entity_ja or "暗号資産"
    regulator = ctx.pick((("sec", "SEC"), ("cftc", "CFTC")), "規制当局")
    return paragraphs(
        f"{regulator}が{target}に{ctx.action or '注目'}",
        f"{ctx.opener}{f'{ctx.num}規模の案件。' if ctx.num else ''}規制の行方は市場に大きく影響します。",
        ctx.closing,
    )


def stablecoin(ctx: SummaryContext) -> str:
    coin = ctx.pick((("usdt|tether", "USDT"), ("usdc", "USDC")), "ステーブルコイン")
    return paragraphs(
        f"{coin}に{ctx.action or '動き'}{f'、{ctx.num}規模' if ctx.num else ''}",
        f"{ctx.opener}ステーブルコインの動向は市場全体の流動性に影響します。",
        ctx.closing,
    )


def default(ctx: SummaryContext) -> str:
    num = ctx.num
    return paragraphs(
        f"{ctx.subject}{f'が{ctx.action}' if ctx.action else 'に注目'}{f'（{num}）' if num else ''}",
        f"{ctx.opener}{f'{num}規模の動きです。' if num else ''}",
        ctx.closing,
    )


BRANCHES: Dict[str, Callable[[SummaryContext], str]] = {
    "etf": etf,
    "hack": hack,
    "governance": governance,
    "positive": positive,
    "negative": negative,
    "mining": mining,
    "regulation": regulation,
    "stablecoin": stablecoin,
}
