import unittest
from datetime import datetime, timedelta, timezone

from buzz.models import DraftBatch, NormalizedItem, PipelineOptions, Platform
from buzz.pipeline import NO_TEMPLATES, DraftPipeline, normalize_options
from buzz.store import JOB_FAILED, JOB_SUCCESS, DraftStore
from buzz.templates import TEMPLATES

NOW = datetime(2025, 6, 1, 12, tzinfo=timezone.utc)

CANDIDATE_TITLE = "BREAKING: Bitcoin surges past $100K as whales pump 🚀"
QUIET_TITLE = "Kraken opens new office in Tokyo"


class ZeroRandom:
    def random(self) -> float:
        return 0.0


def _item(external_id: str, title: str, hours_ago: int = 1) -> NormalizedItem:
    return NormalizedItem(
        external_id=external_id,
        platform=Platform.NEWS,
        url=f"https://example.com/{external_id}",
        published_at=NOW - timedelta(hours=hours_ago),
        ingested_at=NOW,
        text=title,
        title=title,
        raw={"title": title, "content": "", "source": "CoinDesk"},
    )


class ExplodingStrategy:
    name = "exploding"

    def generate(self, item, candidate=None):
        raise RuntimeError("boom")


class GenerateDraftsTests(unittest.TestCase):
    def setUp(self):
        self.store = DraftStore(":memory:")
        self.pipeline = DraftPipeline(self.store, rng=ZeroRandom(), clock=lambda: NOW)

    def test_empty_catalog_is_reported(self):
        self.store.upsert_item(_item("rss:a", CANDIDATE_TITLE))
        result = self.pipeline.generate_drafts(limit=5)
        self.assertEqual(result.errors, [NO_TEMPLATES])
        self.assertEqual(result.processed, 1)
        self.assertEqual(result.generated, 0)

    def test_generates_tiers_and_tallies_skips(self):
        self.store.seed_templates(TEMPLATES)
        self.store.upsert_items(
            [
                _item("rss:good", "Bitcoin eyes $90K after ETF inflows"),
                _item("rss:short", "BTC up"),
                _item("rss:noise", "The best games of the year for crypto fans"),
                _item("x:ignored", CANDIDATE_TITLE),
            ]
        )
        result = self.pipeline.generate_drafts(limit=10)
        self.assertEqual(result.processed, 3)
        self.assertEqual(result.skipped, 2)
        self.assertEqual(result.skip_reasons, {"title_too_short": 1, "noise_title": 1})
        self.assertEqual(result.generated, len(self.store.list_drafts()))
        self.assertGreaterEqual(result.generated, 1)
        self.assertLessEqual(result.generated, 3)

        # Items with drafts are not picked up again.
        again = self.pipeline.generate_drafts(limit=10)
        self.assertEqual(again.generated, 0)
        self.assertEqual(again.processed, 2)

    def test_item_failure_does_not_abort_batch(self):
        self.store.seed_templates(TEMPLATES)
        self.store.upsert_items([_item("rss:a", "Bitcoin eyes $90K after ETF inflows"), _item("rss:b", CANDIDATE_TITLE)])
        original = self.pipeline._persist
        calls = []

        def flaky(external_id, batch):
            calls.append(external_id)
            if len(calls) == 1:
                raise RuntimeError("disk full")
            return original(external_id, batch)

        self.pipeline._persist = flaky
        result = self.pipeline.generate_drafts()
        self.assertEqual(len(calls), 2)
        self.assertEqual(result.skipped, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("disk full", result.errors[0])

    def test_job_runs_are_recorded(self):
        aborted = self.pipeline.generate_drafts(limit=5)
        (failed,) = self.store.list_jobs(status=JOB_FAILED)
        self.assertEqual(failed["id"], aborted.job_id)
        self.assertEqual(failed["job_type"], "generate_drafts")
        self.assertEqual(failed["error"], {"message": NO_TEMPLATES})

        self.store.seed_templates(TEMPLATES)
        self.store.upsert_item(_item("rss:a", "Bitcoin eyes $90K after ETF inflows"))
        result = self.pipeline.generate_drafts(limit=5)
        (done,) = self.store.list_jobs(status=JOB_SUCCESS)
        self.assertEqual(done["id"], result.job_id)
        self.assertEqual(done["stats"]["generated"], result.generated)
        self.assertNotIn("job_id", done["stats"])
        self.assertIsNotNone(done["finished_at"])


class RunTests(unittest.TestCase):
    def setUp(self):
        self.store = DraftStore(":memory:")
        self.store.upsert_items(
            [
                _item("rss:hot", CANDIDATE_TITLE),
                _item("rss:quiet", QUIET_TITLE),
                _item("rss:stale", CANDIDATE_TITLE, hours_ago=200),
            ]
        )

    def test_run_drafts_candidates_only(self):
        pipeline = DraftPipeline(self.store, rng=ZeroRandom(), clock=lambda: NOW)
        stats = pipeline.run(PipelineOptions())
        self.assertEqual(stats.ingested, 2)
        self.assertEqual(stats.candidates, 1)
        self.assertEqual(stats.generated, 1)
        self.assertTrue(self.store.has_drafts("rss:hot"))
        self.assertFalse(self.store.has_drafts("rss:quiet"))

        rerun = pipeline.run(PipelineOptions())
        self.assertEqual(rerun.generated, 0)
        self.assertEqual(rerun.skipped, 1)

    def test_dry_run_never_writes(self):
        pipeline = DraftPipeline(self.store, rng=ZeroRandom(), clock=lambda: NOW)
        stats = pipeline.run(PipelineOptions(dry_run=True))
        self.assertTrue(stats.dry_run)
        self.assertEqual(stats.candidates, 1)
        self.assertEqual(stats.generated, 0)
        self.assertEqual(self.store.list_drafts(), [])

    def test_strategy_failure_is_recorded(self):
        pipeline = DraftPipeline(self.store, strategy=ExplodingStrategy(), clock=lambda: NOW)
        stats = pipeline.run(PipelineOptions())
        self.assertEqual(stats.skipped, 1)
        self.assertEqual(stats.errors, ["rss:hot: boom"])

    def test_run_records_job_and_failures(self):
        pipeline = DraftPipeline(self.store, rng=ZeroRandom(), clock=lambda: NOW)
        stats = pipeline.run(PipelineOptions(dry_run=True, max_items=10))
        (job,) = self.store.list_jobs()
        self.assertEqual(job["id"], stats.job_id)
        self.assertEqual(job["job_type"], "pipeline")
        self.assertEqual(job["status"], JOB_SUCCESS)
        self.assertEqual(job["stats"]["candidates"], 1)
        self.assertTrue(job["stats"]["dry_run"])

        def broken(*args, **kwargs):
            raise RuntimeError("database is locked")

        self.store.recent_items = broken
        with self.assertRaises(RuntimeError):
            pipeline.run(PipelineOptions())
        (failed,) = self.store.list_jobs(status=JOB_FAILED)
        self.assertEqual(failed["error"], {"message": "database is locked"})
        self.assertEqual(failed["stats"]["only_platforms"], ["x", "news", "youtube", "manual"])

    def test_platform_filter(self):
        pipeline = DraftPipeline(self.store, clock=lambda: NOW)
        stats = pipeline.run(PipelineOptions(dry_run=True, only_platforms=[Platform.X]))
        self.assertEqual(stats.ingested, 0)

    def test_options_are_bounded(self):
        options = normalize_options(PipelineOptions(max_items=5000, from_hours=0))
        self.assertEqual(options.max_items, 1000)
        self.assertEqual(options.from_hours, 1)
        self.assertEqual(normalize_options(None), PipelineOptions())

    def test_skip_batch_is_counted(self):
        class SkipAll:
            name = "skip"

            def generate(self, item, candidate=None):
                return DraftBatch(skip_reason="no_outline")

        stats = DraftPipeline(self.store, strategy=SkipAll(), clock=lambda: NOW).run(PipelineOptions())
        self.assertEqual(stats.skipped, 1)
        self.assertEqual(stats.generated, 0)


if __name__ == "__main__":
    unittest.main()
