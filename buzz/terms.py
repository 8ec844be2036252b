"""
English -> Japanese term table for crypto/finance headlines.

Replacement order is longest key first so that e.g. "bnb chain" wins over
"bnb" and "ethereum" is never split by "eth".
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import List, Mapping, Optional, Pattern, Tuple

_TERMS = {
    "bitcoin": "ビットコイン",
    "btc": "BTC",
    "ethereum": "イーサリアム",
    "eth": "ETH",
    "solana": "ソラナ",
    "ripple": "リップル",
    "xrp": "XRP",
    "cardano": "カルダノ",
    "polygon": "ポリゴン",
    "avalanche": "アバランチ",
    "chainlink": "チェーンリンク",
    "uniswap": "ユニスワップ",
    "aave": "Aave",
    "defi": "DeFi",
    "nft": "NFT",
    "dao": "DAO",
    "etf": "ETF",
    "sec": "SEC",
    "cftc": "CFTC",
    "crypto": "仮想通貨",
    "cryptocurrency": "暗号通貨",
    "blockchain": "ブロックチェーン",
    "stablecoin": "ステーブルコイン",
    "token": "トークン",
    "wallet": "ウォレット",
    "exchange": "取引所",
    "mining": "マイニング",
    "staking": "ステーキング",
    "airdrop": "エアドロップ",
    "whale": "クジラ",
    "bullish": "強気",
    "bearish": "弱気",
    "surge": "急騰",
    "rally": "上昇",
    "crash": "暴落",
    "plunge": "急落",
    "tvl": "TVL",
    "layer 2": "レイヤー2",
    "l2": "L2",
    "mainnet": "メインネット",
    "testnet": "テストネット",
    "hard fork": "ハードフォーク",
    "upgrade": "アップグレード",
    "coinbase": "Coinbase",
    "binance": "Binance",
    "kraken": "Kraken",
    "jpmorgan": "JPモルガン",
    "blackrock": "ブラックロック",
    "microstrategy": "マイクロストラテジー",
    "bnb": "BNB",
    "bnb chain": "BNBチェーン",
    "doge": "DOGE",
    "dogecoin": "ドージコイン",
    "ada": "ADA",
    "bch": "BCH",
    "link": "LINK",
    "sol": "SOL",
    "hype": "HYPE",
    "zcash": "Zcash",
    "usdc": "USDC",
    "usdt": "USDT",
    "usx": "USX",
    "iren": "IREN",
    "bitdeer": "Bitdeer",
    "emerge": "Emerge",
    "ai": "AI",
    "ai-era": "AI時代",
    "santa rally": "サンタラリー",
    "depeg": "ディペッグ",
    "governance": "ガバナンス",
    "liquidity": "流動性",
    "dex": "DEX",
    "privacy": "プライバシー",
    "shielded": "シールド",
    "proof of stake": "PoS",
    "pos": "PoS",
    "burn": "バーン",
    "eyes": "を目指す",
    "target": "目標",
    "trust wallet": "Trust Wallet",
    "tether": "テザー",
    "rwa": "RWA",
    "tokenization": "トークン化",
    "proposal": "提案",
    "vote": "投票",
    "hack": "ハッキング",
    "hacked": "ハッキング",
    "chrome": "Chrome",
    "extension": "拡張機能",
    "bubble": "バブル",
    "sentiment": "センチメント",
    "fear": "恐怖",
    "greed": "貪欲",
    "memecoin": "ミームコイン",
    "memecoins": "ミームコイン",
    "nuclear": "原子力",
    "plant": "発電所",
    "christmas": "クリスマス",
    "trump": "トランプ",
    "musk": "マスク",
}

TERM_TRANSLATIONS: Mapping[str, str] = MappingProxyType(_TERMS)

# Python's sort is stable, so equal-length keys keep table order.
ORDERED_TERMS: Tuple[Tuple[str, str], ...] = tuple(
    sorted(TERM_TRANSLATIONS.items(), key=lambda pair: len(pair[0]), reverse=True)
)

_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(rf"\b{re.escape(eng)}\b", re.IGNORECASE | re.ASCII), ja) for eng, ja in ORDERED_TERMS
]


def translate_term(term: Optional[str]) -> Optional[str]:
    """Localize a single detected name, falling back to the name itself."""
    if not term:
        return None
    return TERM_TRANSLATIONS.get(term.lower(), term)


def translate_text(text: str) -> str:
    result = text
    for pattern, ja in _PATTERNS:
        result = pattern.sub(lambda _m, ja=ja: ja, result)
    return result
