"""
Batch drivers over the store: the RSS draft job and the scored pipeline run.

Both drivers tally outcomes instead of raising; one bad item is logged and
counted, and the batch carries on with the rest. Every call is recorded as a
job run (running, then success or failed) in the store.
"""
from __future__ import annotations

import logging
import random
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from buzz.models import DraftBatch, GenerateResult, PipelineOptions, PipelineStats, Platform
from buzz.outline import HeuristicOutliner
from buzz.scoring import CandidateScorer
from buzz.store import JOB_FAILED, JOB_SUCCESS, DraftStore
from buzz.strategies import DraftGenerationStrategy, OutlineStrategy, TierStrategy
from buzz.templates import RandomSource

logger = logging.getLogger(__name__)

DEFAULT_GENERATE_LIMIT = 20
MAX_ITEMS_RANGE = (1, 1000)
FROM_HOURS_RANGE = (1, 168)
NO_TEMPLATES = "No templates found"


def _bounded(name: str, value: int, bounds) -> int:
    low, high = bounds
    bounded = min(max(int(value), low), high)
    if bounded != value:
        logger.warning("%s=%s out of range %s..%s; using %s", name, value, low, high, bounded)
    return bounded


def normalize_options(options: Optional[PipelineOptions]) -> PipelineOptions:
    options = options or PipelineOptions()
    return PipelineOptions(
        dry_run=bool(options.dry_run),
        max_items=_bounded("max_items", options.max_items, MAX_ITEMS_RANGE),
        from_hours=_bounded("from_hours", options.from_hours, FROM_HOURS_RANGE),
        only_platforms=list(options.only_platforms) if options.only_platforms else None,
    )


class DraftPipeline:
    def __init__(
        self,
        store: DraftStore,
        strategy: Optional[DraftGenerationStrategy] = None,
        scorer: Optional[CandidateScorer] = None,
        rng: Optional[RandomSource] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.strategy = strategy
        self.scorer = scorer or CandidateScorer()
        self.clock = clock

    def _persist(self, external_id: str, batch: DraftBatch) -> int:
        return sum(1 for draft in batch.drafts if self.store.save_draft(external_id, draft))

    def _tracked(self, job_type: str, params: Dict[str, Any], body: Callable[[], Any]) -> Any:
        """Run `body` under a job-run record; an escaping exception marks the job failed."""
        job_id = self.store.start_job(job_type, params)
        try:
            outcome = body()
        except Exception as exc:
            logger.error("Job %s (%s) failed: %s", job_id, job_type, exc)
            self.store.finish_job(job_id, JOB_FAILED, error=str(exc))
            raise
        stats = {key: value for key, value in asdict(outcome).items() if key != "job_id"}
        # An aborted batch (no templates) is a failed job even though nothing raised.
        error = NO_TEMPLATES if NO_TEMPLATES in stats.get("errors", []) else None
        self.store.finish_job(job_id, JOB_FAILED if error else JOB_SUCCESS, stats=stats, error=error)
        outcome.job_id = job_id
        return outcome

    def generate_drafts(self, limit: int = DEFAULT_GENERATE_LIMIT) -> GenerateResult:
        """Tiered drafts for stored RSS items that have none yet, newest first."""
        return self._tracked("generate_drafts", {"limit": limit}, lambda: self._generate_drafts(limit))

    def _generate_drafts(self, limit: int) -> GenerateResult:
        result = GenerateResult()
        items = self.store.items_without_drafts(prefix="rss:", limit=limit)
        result.processed = len(items)

        templates = self.store.list_templates()
        if not templates:
            logger.warning("Draft generation aborted: template catalog is empty")
            result.errors.append(NO_TEMPLATES)
            return result

        strategy = TierStrategy(templates, rng=self.rng)
        for item in items:
            try:
                batch = strategy.generate(item)
                if batch.skip_reason:
                    result.record_skip(batch.skip_reason)
                    continue
                result.generated += self._persist(item.external_id, batch)
            except Exception as exc:
                logger.warning("Draft generation failed for %s: %s", item.external_id, exc)
                result.skipped += 1
                result.errors.append(f"{item.external_id}: {exc}")
        logger.info(
            "Draft generation done: processed=%s generated=%s skipped=%s",
            result.processed,
            result.generated,
            result.skipped,
        )
        return result

    def run(self, options: Optional[PipelineOptions] = None) -> PipelineStats:
        """
        Score recent items and draft the candidates.

        `dry_run` scores and counts candidates but writes nothing. Items that
        already have drafts are counted as skipped.
        """
        options = normalize_options(options)
        params = {
            "dry_run": options.dry_run,
            "max_items": options.max_items,
            "from_hours": options.from_hours,
            "only_platforms": [Platform(p).value for p in options.only_platforms or list(Platform)],
        }
        return self._tracked("pipeline", params, lambda: self._run(options))

    def _run(self, options: PipelineOptions) -> PipelineStats:
        stats = PipelineStats(dry_run=options.dry_run)
        now = self.clock()
        since = now - timedelta(hours=options.from_hours)
        items = self.store.recent_items(since, platforms=options.only_platforms, limit=options.max_items)
        stats.ingested = len(items)
        strategy = self.strategy or OutlineStrategy(HeuristicOutliner(rng=self.rng))

        for item in items:
            try:
                candidate = self.scorer.score(item, now=now)
                if not self.scorer.is_candidate(candidate):
                    continue
                stats.candidates += 1
                if options.dry_run:
                    continue
                if self.store.has_drafts(item.external_id):
                    stats.skipped += 1
                    continue
                stats.analyzed += 1
                batch = strategy.generate(item, candidate)
                if batch.skip_reason:
                    logger.debug("Skipped %s: %s", item.external_id, batch.skip_reason)
                    stats.skipped += 1
                    continue
                stats.outlined += 1
                stats.generated += self._persist(item.external_id, batch)
            except Exception as exc:
                logger.warning("Pipeline failed for %s: %s", item.external_id, exc)
                stats.skipped += 1
                stats.errors.append(f"{item.external_id}: {exc}")
        logger.info(
            "Pipeline run done: ingested=%s candidates=%s generated=%s skipped=%s dry_run=%s",
            stats.ingested,
            stats.candidates,
            stats.generated,
            stats.skipped,
            stats.dry_run,
        )
        return stats
