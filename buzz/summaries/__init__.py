"""
Tiered Japanese summaries.

All three tiers resolve a topic branch through the same precedence order; a
tier that has no dedicated template for the resolved topic falls back to its
default summary.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Union

from buzz.models import LengthTier, TopicFlags
from buzz.summaries import long, medium, short
from buzz.summaries.context import CLOSINGS, OPENERS, SummaryContext, title_hash

BRANCH_ORDER = (
    ("etf", "is_etf"),
    ("hack", "is_hack"),
    ("governance", "is_governance"),
    ("positive", "is_positive"),
    ("negative", "is_negative"),
    ("mining", "is_mining"),
    ("regulation", "is_regulation"),
    ("stablecoin", "is_stablecoin"),
)
DEFAULT_BRANCH = "default"

_TIERS = {
    LengthTier.SHORT: short,
    LengthTier.MEDIUM: medium,
    LengthTier.LONG: long,
}


def resolve_branch(flags: TopicFlags, available: Optional[Iterable[str]] = None) -> str:
    """First set flag in BRANCH_ORDER that `available` knows about."""
    names = set(available) if available is not None else {name for name, _ in BRANCH_ORDER}
    for name, flag in BRANCH_ORDER:
        if name in names and getattr(flags, flag):
            return name
    return DEFAULT_BRANCH


def tier_branches(tier: Union[LengthTier, str]) -> Dict[str, Callable[[SummaryContext], str]]:
    return _TIERS[LengthTier(tier)].BRANCHES


def generate_summary(title: str, content: str, tier: Union[LengthTier, str]) -> str:
    module = _TIERS[LengthTier(tier)]
    ctx = SummaryContext.build(title or "", content or "")
    branch = resolve_branch(ctx.flags, module.BRANCHES)
    handler = module.BRANCHES.get(branch, module.default)
    return handler(ctx)


__all__ = [
    "BRANCH_ORDER",
    "CLOSINGS",
    "OPENERS",
    "SummaryContext",
    "generate_summary",
    "resolve_branch",
    "tier_branches",
    "title_hash",
]
