"""
Crypto news RSS feeds (English and Japanese) and the keyword filter used to
keep off-topic entries out of the pipeline.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from crawler.infra.http import HttpFetcher
from crawler.ingesters.rss_base import parse_feed_entries
from crawler.schemas.models import ArticleItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSource:
    name: str
    url: str
    language: str = "en"


DEFAULT_FEEDS: List[FeedSource] = [
    FeedSource("CoinDesk", "https://www.coindesk.com/arc/outboundfeeds/rss/"),
    FeedSource("CoinTelegraph", "https://cointelegraph.com/rss"),
    FeedSource("Decrypt", "https://decrypt.co/feed"),
    FeedSource("The Block", "https://www.theblock.co/rss.xml"),
    FeedSource("CoinGape", "https://coingape.com/feed/"),
    FeedSource("CryptoSlate", "https://cryptoslate.com/feed/"),
    FeedSource("NewsBTC", "https://www.newsbtc.com/feed/"),
    FeedSource("BeInCrypto", "https://beincrypto.com/feed/"),
    FeedSource("Bitcoinist", "https://bitcoinist.com/feed/"),
    FeedSource("U.Today", "https://u.today/rss"),
    FeedSource("AMBCrypto", "https://ambcrypto.com/feed/"),
    FeedSource("CryptoPotato", "https://cryptopotato.com/feed/"),
    FeedSource("DailyHodl", "https://dailyhodl.com/feed/"),
    FeedSource("CryptoNews", "https://cryptonews.com/news/feed/"),
    FeedSource("Blockworks", "https://blockworks.co/feed"),
    FeedSource("DeFi Prime", "https://defiprime.com/feed.xml"),
    FeedSource("The Defiant", "https://thedefiant.io/feed"),
    FeedSource("Crypto Briefing", "https://cryptobriefing.com/feed/"),
    FeedSource("CoinPost", "https://coinpost.jp/?feed=rss2", "ja"),
    FeedSource("CoinTelegraph Japan", "https://jp.cointelegraph.com/rss", "ja"),
    FeedSource("CoinDesk Japan", "https://www.coindeskjapan.com/feed/", "ja"),
    FeedSource("CRYPTO TIMES", "https://crypto-times.jp/feed/", "ja"),
    FeedSource("あたらしい経済", "https://www.neweconomy.jp/feed", "ja"),
]

CRYPTO_KEYWORDS = (
    "bitcoin",
    "btc",
    "ethereum",
    "eth",
    "crypto",
    "blockchain",
    "defi",
    "nft",
    "web3",
    "token",
    "altcoin",
    "solana",
    "sol",
    "binance",
    "coinbase",
    "exchange",
    "wallet",
    "mining",
    "staking",
    "airdrop",
    "仮想通貨",
    "暗号資産",
    "ビットコイン",
    "イーサリアム",
)


def is_crypto_related(text: str) -> bool:
    """Substring match against the keyword list, case-insensitive."""
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in CRYPTO_KEYWORDS)


def feeds_from_config(entries: Iterable[dict]) -> List[FeedSource]:
    feeds: List[FeedSource] = []
    for entry in entries:
        name, url = entry.get("name"), entry.get("url")
        if not name or not url:
            logger.warning("Skipping feed entry without name/url: %s", entry)
            continue
        if entry.get("enabled", True) is False:
            continue
        feeds.append(FeedSource(name=str(name), url=str(url), language=str(entry.get("language") or "en")))
    return feeds


def fetch_feed(fetcher: HttpFetcher, feed: FeedSource) -> Optional[List[ArticleItem]]:
    """
    Fetch and parse one feed. Returns None when the server reports the feed
    unchanged since the last poll; FetchError propagates to the caller.
    """
    response = fetcher.fetch(feed.url)
    if response is None:
        return None
    articles = parse_feed_entries(response.content, source=feed.name)
    logger.info("Parsed %s entries from %s", len(articles), feed.name)
    return articles
