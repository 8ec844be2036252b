import math
import unittest
from datetime import datetime, timedelta, timezone

from buzz.models import Author, NormalizedItem, Platform
from buzz.scoring import WEIGHTS, CandidateScorer, is_candidate, score_item

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _item(**overrides) -> NormalizedItem:
    data = dict(
        external_id="x:1",
        platform=Platform.X,
        url="https://x.com/a/status/1",
        published_at=NOW - timedelta(hours=2),
        ingested_at=NOW,
        text="",
    )
    data.update(overrides)
    return NormalizedItem(**data)


class FixedScorer(CandidateScorer):
    """Scorer whose sub-scores are pinned, to isolate the weighting."""

    def __init__(self, values):
        super().__init__()
        self.values = values

    def engagement_score(self, item):
        return self.values["engagement"]

    def recency_score(self, item, now):
        return self.values["recency"]

    def author_score(self, item):
        return self.values["author_influence"]

    def content_score(self, item):
        return self.values["content_quality"]

    def viral_score(self, item):
        return self.values["viral_signals"]


class CandidateScorerTests(unittest.TestCase):
    def test_breaking_exchange_listing_is_candidate(self):
        item = _item(
            metrics={"likes": 2300, "retweets": 890, "replies": 234},
            author=Author(handle="exchange", followers=50_000),
            text="BREAKING: Major exchange announces new listing next week #crypto 🚀",
        )
        result = score_item(item, now=NOW)
        features = result.features
        self.assertAlmostEqual(features["engagement"], math.log10(4432) * 25, places=6)
        self.assertEqual(features["recency"], 100)
        self.assertEqual(features["author_influence"], 70)
        self.assertEqual(features["content_quality"], 70)
        self.assertEqual(features["viral_signals"], 100)
        self.assertEqual(result.score, 87)
        self.assertTrue(is_candidate(result))
        codes = [reason.code for reason in result.reasons]
        self.assertEqual(codes, ["HIGH_ENGAGEMENT", "RECENT", "QUALITY_CONTENT", "VIRAL_SIGNALS"])

    def test_weights_sum_to_one(self):
        self.assertAlmostEqual(sum(WEIGHTS.values()), 1.0)

    def test_each_weight_carries_through_alone(self):
        item = _item()
        for name, weight in WEIGHTS.items():
            values = {key: (100 if key == name else 0) for key in WEIGHTS}
            result = FixedScorer(values).score(item, now=NOW)
            self.assertEqual(result.score, math.floor(100 * weight + 0.5), name)
        self.assertEqual(FixedScorer({key: 100 for key in WEIGHTS}).score(item, now=NOW).score, 100)

    def test_recency_is_monotonic(self):
        scorer = CandidateScorer()
        ages = [1, 6, 7, 12, 20, 30, 50, 80, 500]
        scores = [scorer.recency_score(_item(published_at=NOW - timedelta(hours=h)), NOW) for h in ages]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(scores[0], 100)
        self.assertEqual(scores[-1], 20)

    def test_score_stays_within_bounds(self):
        loud = _item(
            metrics={"likes": 10**9, "retweets": 10**9, "replies": 10**9},
            author=Author(followers=10**8),
            text="速報 moon 100x!! 🚀 #btc $5 up 50%? " * 5,
        )
        quiet = _item(platform=Platform.MANUAL, published_at=NOW - timedelta(days=30), text=None)
        for item in (loud, quiet):
            score = score_item(item, now=NOW).score
            self.assertGreaterEqual(score, 0)
            self.assertLessEqual(score, 100)

    def test_news_and_unknown_engagement_are_fixed(self):
        self.assertEqual(CandidateScorer.engagement_score(_item(platform=Platform.NEWS)), 50)
        self.assertEqual(CandidateScorer.engagement_score(_item(platform=Platform.MANUAL)), 30)

    def test_malformed_metrics_read_as_zero(self):
        item = _item(metrics={"likes": "lots", "retweets": None})
        self.assertEqual(CandidateScorer.engagement_score(item), 0)

    def test_missing_followers_score_floor(self):
        self.assertEqual(CandidateScorer.author_score(_item(author=None)), 10)
        self.assertEqual(CandidateScorer.author_score(_item(author=Author(followers=1_000_000))), 100)

    def test_candidate_gate_is_fifty(self):
        scorer = CandidateScorer()
        item = _item(platform=Platform.NEWS, published_at=NOW - timedelta(hours=1), text="Kraken opens new office in Tokyo")
        result = scorer.score(item, now=NOW)
        self.assertEqual(result.score, 49)
        self.assertFalse(scorer.is_candidate(result))


if __name__ == "__main__":
    unittest.main()
