"""
Public API for the buzz-candidate scoring and draft pipeline.
"""
from __future__ import annotations

from typing import Optional

from buzz.llm import LLMResponseError, get_system_prompt, parse_llm_response
from buzz.models import BuzzCandidateResult, GenerateResult, NormalizedItem, PipelineOptions, PipelineStats
from buzz.pipeline import DraftPipeline
from buzz.scoring import score_item
from buzz.settings import load_settings
from buzz.store import DraftStore


def _pipeline(db_path: Optional[str]) -> DraftPipeline:
    return DraftPipeline(DraftStore(db_path or load_settings().db_path))


def generate_drafts(limit: Optional[int] = None, db_path: Optional[str] = None) -> GenerateResult:
    """Tiered drafts for stored RSS items that have none yet."""
    return _pipeline(db_path).generate_drafts(limit if limit is not None else load_settings().generate_limit)


def run_pipeline(options: Optional[PipelineOptions] = None, db_path: Optional[str] = None) -> PipelineStats:
    return _pipeline(db_path).run(options)


__all__ = [
    "BuzzCandidateResult",
    "LLMResponseError",
    "NormalizedItem",
    "PipelineOptions",
    "generate_drafts",
    "get_system_prompt",
    "parse_llm_response",
    "run_pipeline",
    "score_item",
]
