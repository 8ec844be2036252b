"""
Load the feed list from a YAML file with `${ENV}` expansion.

Expected layout::

    feeds:
      - name: CoinDesk
        url: https://www.coindesk.com/arc/outboundfeeds/rss/
      - name: Private feed
        url: ${PRIVATE_FEED_URL}
        enabled: false
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from crawler.ingesters.crypto_rss import DEFAULT_FEEDS, FeedSource, feeds_from_config

logger = logging.getLogger(__name__)


def load_feeds_config(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        logger.warning("Feed config not found at %s", path)
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        logger.warning("Feed config %s is not a mapping; ignoring", path)
        return {}
    return _expand_env(data)


def load_feeds(path: Optional[Path]) -> List[FeedSource]:
    """Configured feeds, or the built-in list when none are configured."""
    entries = load_feeds_config(path).get("feeds") or []
    feeds = feeds_from_config(entry for entry in entries if isinstance(entry, dict))
    return feeds or list(DEFAULT_FEEDS)


def _expand_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def replace(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_key = value[2:-1]
            return os.getenv(env_key, "")
        if isinstance(value, dict):
            return {k: replace(v) for k, v in value.items()}
        if isinstance(value, list):
            return [replace(item) for item in value]
        return value

    return replace(data)  # type: ignore[return-value]
