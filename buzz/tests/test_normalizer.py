import unittest
from dataclasses import replace
from datetime import datetime, timezone

from crawler.schemas.models import ArticleItem, SocialPostItem, VideoItem

from buzz.models import Platform
from buzz.normalizer import normalize, normalize_article, normalize_manual, normalize_social_post

INGESTED = datetime(2025, 6, 1, tzinfo=timezone.utc)


class NormalizerTests(unittest.TestCase):
    def test_article_keys_on_link_and_keeps_raw_fields(self):
        article = ArticleItem(
            source="CoinDesk",
            title="Bitcoin eyes $90K after ETF inflows",
            url="https://www.coindesk.com/markets/btc-90k",
            author="Jane Doe",
            summary="Spot ETFs took in $500M.",
            topics=["Markets"],
        )
        item = normalize_article(article, ingested_at=INGESTED)
        self.assertEqual(item.external_id, "rss:https://www.coindesk.com/markets/btc-90k")
        self.assertEqual(item.platform, Platform.NEWS)
        self.assertEqual(item.published_at, INGESTED)
        self.assertEqual(item.language, "en")
        self.assertEqual(item.raw["source"], "CoinDesk")
        self.assertEqual(item.raw["categories"], ["Markets"])
        self.assertEqual(item.source_content, "Spot ETFs took in $500M.")

    def test_japanese_article_detected(self):
        article = ArticleItem(source="CoinPost", title="ビットコインが急騰", url="https://coinpost.jp/?p=1")
        self.assertEqual(normalize_article(article).language, "ja")

    def test_normalization_is_idempotent_apart_from_ingest_time(self):
        post = SocialPostItem(
            platform="x",
            user_handle="@whale",
            post_id="42",
            url="https://x.com/whale/status/42",
            text_snippet="BTC to the moon",
            followers=1200,
            metrics={"likes": "10", "retweets": "bad"},
        )
        first = normalize_social_post(post)
        second = normalize_social_post(post)
        self.assertEqual(replace(first, ingested_at=None, published_at=None), replace(second, ingested_at=None, published_at=None))
        self.assertEqual(first.metrics["likes"], 10.0)
        self.assertEqual(first.metrics["retweets"], 0.0)
        self.assertEqual(first.author.handle, "whale")

    def test_dispatch_by_payload_type(self):
        video = VideoItem(video_id="abc", url="https://youtu.be/abc", title="Solana update")
        self.assertEqual(normalize(video, ingested_at=INGESTED).external_id, "youtube:abc")
        manual = normalize({"id": "7", "title": "手動投稿", "published_at": "2025-05-31T10:00:00Z"})
        self.assertEqual(manual.external_id, "manual:7")
        self.assertEqual(manual.published_at, datetime(2025, 5, 31, 10, tzinfo=timezone.utc))
        with self.assertRaises(TypeError):
            normalize(["not", "a", "payload"])

    def test_manual_bad_date_falls_back_to_ingest_time(self):
        item = normalize_manual({"id": "1", "title": "x", "published_at": "yesterday"}, ingested_at=INGESTED)
        self.assertEqual(item.published_at, INGESTED)


if __name__ == "__main__":
    unittest.main()
