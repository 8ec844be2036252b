import unittest
from datetime import datetime, timedelta, timezone

from buzz.models import Author, DraftPayload, LengthTier, NormalizedItem, Platform, RiskFlags
from buzz.store import JOB_FAILED, JOB_RUNNING, JOB_SUCCESS, DraftStore
from buzz.templates import TEMPLATES

NOW = datetime(2025, 6, 1, 12, tzinfo=timezone.utc)


def _item(external_id: str, hours_ago: int = 1, platform: Platform = Platform.NEWS) -> NormalizedItem:
    return NormalizedItem(
        external_id=external_id,
        platform=platform,
        url=f"https://example.com/{external_id}",
        published_at=NOW - timedelta(hours=hours_ago),
        ingested_at=NOW,
        language="en",
        text="Bitcoin climbs",
        title="Bitcoin climbs",
        author=Author(name="Reporter"),
        metrics={"likes": 3.0},
        raw={"title": "Bitcoin climbs", "content": "", "source": "CoinDesk"},
    )


def _draft(text: str = "本文" * 100, tier: LengthTier = LengthTier.SHORT, score: int = 60) -> DraftPayload:
    return DraftPayload(
        post_text=text,
        template_type="緊急速報型",
        emotion_triggers=["FOMO"],
        trend_score=score,
        risk_flags=RiskFlags(notes="note", length_category=tier.value),
        title="見出し",
        tier=tier,
        template_code="URG_BREAKING",
    )


class DraftStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = DraftStore(":memory:")

    def test_upsert_is_idempotent_and_round_trips(self):
        item = _item("rss:a")
        self.assertTrue(self.store.upsert_item(item))
        self.assertFalse(self.store.upsert_item(item))
        self.assertTrue(self.store.has_item("rss:a"))
        (loaded,) = self.store.items_without_drafts()
        self.assertEqual(loaded, item)

    def test_items_without_drafts_newest_first_and_prefixed(self):
        self.store.upsert_items([_item("rss:old", 10), _item("rss:new", 1), _item("x:1", 0, Platform.X)])
        self.store.save_draft("rss:new", _draft())
        self.assertEqual([i.external_id for i in self.store.items_without_drafts()], ["rss:old"])
        self.store.upsert_item(_item("rss:newer", 0))
        self.assertEqual(
            [i.external_id for i in self.store.items_without_drafts(limit=1)],
            ["rss:newer"],
        )

    def test_recent_items_filters_by_time_and_platform(self):
        self.store.upsert_items([_item("rss:a", 1), _item("rss:b", 100), _item("x:1", 2, Platform.X)])
        recent = self.store.recent_items(NOW - timedelta(hours=72))
        self.assertEqual([i.external_id for i in recent], ["rss:a", "x:1"])
        only_x = self.store.recent_items(NOW - timedelta(hours=72), platforms=[Platform.X])
        self.assertEqual([i.external_id for i in only_x], ["x:1"])

    def test_templates_seed_and_list(self):
        self.assertEqual(self.store.seed_templates(TEMPLATES), 30)
        self.assertEqual(self.store.seed_templates(TEMPLATES), 30)
        stored = self.store.list_templates()
        self.assertEqual(len(stored), 30)
        self.assertEqual({t.code: t for t in stored}["URG_BREAKING"], TEMPLATES[0])

    def test_drafts_are_pending_and_deduplicated(self):
        self.store.upsert_item(_item("rss:a"))
        self.assertFalse(self.store.has_drafts("rss:a"))
        self.assertTrue(self.store.save_draft("rss:a", _draft()))
        self.assertFalse(self.store.save_draft("rss:a", _draft()))
        self.assertTrue(self.store.save_draft("rss:a", _draft(tier=LengthTier.LONG, score=90)))
        self.assertTrue(self.store.has_drafts("rss:a"))

        drafts = self.store.list_drafts()
        self.assertEqual(len(drafts), 2)
        self.assertEqual({d["status"] for d in drafts}, {"pending"})
        self.assertEqual(drafts[0]["risk_flags"]["length_category"], "long")
        self.assertEqual(drafts[0]["emotion_triggers"], ["FOMO"])
        self.assertEqual(len(self.store.list_drafts(min_score=80)), 1)
        self.assertEqual(len(self.store.list_drafts(length_category="short")), 1)

    def test_review_decisions(self):
        self.store.upsert_item(_item("rss:a"))
        self.store.save_draft("rss:a", _draft())
        draft_id = self.store.list_drafts()[0]["id"]
        self.assertTrue(self.store.record_decision(draft_id, "approve", edited_text="修正版"))
        (draft,) = self.store.list_drafts(status="approved")
        self.assertEqual(draft["post_text"], "修正版")
        self.assertFalse(self.store.record_decision(999, "reject"))
        with self.assertRaises(ValueError):
            self.store.record_decision(draft_id, "archive")

    def test_job_runs_lifecycle(self):
        first = self.store.start_job("pipeline", {"dry_run": True, "max_items": 10})
        second = self.store.start_job("generate_drafts", {"limit": 5})
        (running,) = self.store.list_jobs(status=JOB_RUNNING, limit=1)
        self.assertEqual(running["id"], second)
        self.assertIsNone(running["finished_at"])

        self.store.finish_job(first, JOB_SUCCESS, stats={"generated": 3})
        self.store.finish_job(second, JOB_FAILED, error="database is locked")

        (done,) = self.store.list_jobs(status=JOB_SUCCESS)
        self.assertEqual(done["job_type"], "pipeline")
        self.assertEqual(done["stats"], {"generated": 3})
        self.assertIsNone(done["error"])
        self.assertIsNotNone(done["finished_at"])

        (failed,) = self.store.list_jobs(status=JOB_FAILED)
        self.assertEqual(failed["error"], {"message": "database is locked"})
        # Stats recorded at start survive a finish without stats.
        self.assertEqual(failed["stats"], {"limit": 5})
        self.assertEqual([job["id"] for job in self.store.list_jobs()], [second, first])
        with self.assertRaises(ValueError):
            self.store.finish_job(first, JOB_RUNNING)


if __name__ == "__main__":
    unittest.main()
