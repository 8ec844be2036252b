"""
Centralised settings for the buzz pipeline (env-first, code-light).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "BuzzDraftCrawler/1.0 (+rss polling)"


@dataclass
class BuzzSettings:
    db_path: str
    generate_limit: int
    max_items: int
    from_hours: int
    feeds_path: Optional[Path]
    user_agent: str
    fetch_min_delay: float


def _int_from_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value > 0 else default
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _float_from_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
        return value if value >= 0 else default
    except ValueError:
        logger.warning("Invalid float value for %s=%s; using default %s", key, raw, default)
        return default


def load_settings() -> BuzzSettings:
    feeds_path = os.getenv("BUZZ_FEEDS_PATH")
    return BuzzSettings(
        db_path=os.getenv("BUZZ_DB_PATH") or "buzz_data.db",
        generate_limit=_int_from_env("BUZZ_GENERATE_LIMIT", 20),
        max_items=_int_from_env("BUZZ_MAX_ITEMS", 200),
        from_hours=_int_from_env("BUZZ_FROM_HOURS", 72),
        feeds_path=Path(feeds_path) if feeds_path else None,
        user_agent=os.getenv("BUZZ_USER_AGENT") or DEFAULT_USER_AGENT,
        fetch_min_delay=_float_from_env("BUZZ_FETCH_MIN_DELAY", 1.5),
    )
