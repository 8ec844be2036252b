import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from buzz.cli import cli
from buzz.store import DraftStore


class CliTests(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.db = str(Path(self.tmp.name) / "buzz.db")
        # Keep log records out of the captured command output.
        self.basic_config = patch("buzz.cli.logging.basicConfig")
        self.basic_config.start()
        self.null_handler = logging.NullHandler()
        logging.getLogger("buzz").addHandler(self.null_handler)

    def tearDown(self):
        logging.getLogger("buzz").removeHandler(self.null_handler)
        self.basic_config.stop()
        self.tmp.cleanup()

    def test_seed_templates(self):
        result = self.runner.invoke(cli, ["--db", self.db, "seed-templates"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Seeded 30 templates", result.output)
        self.assertEqual(len(DraftStore(self.db).list_templates()), 30)

    def test_score_prints_result_and_title(self):
        result = self.runner.invoke(cli, ["score", "Bitcoin eyes $90K after ETF inflows"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["title_ja"], "ビットコイン、$90Kを目指す")
        self.assertTrue(0 <= payload["score"] <= 100)

    def test_score_uses_engagement_metrics(self):
        title = "Bitcoin eyes $90K after ETF inflows"
        quiet = self.runner.invoke(cli, ["score", title])
        loud = self.runner.invoke(cli, ["score", title, "--likes", "1000000", "--retweets", "900000"])
        self.assertEqual(quiet.exit_code, 0, quiet.output)
        self.assertEqual(loud.exit_code, 0, loud.output)
        quiet, loud = json.loads(quiet.output), json.loads(loud.output)
        self.assertEqual(quiet["features"]["engagement"], 0)
        self.assertEqual(quiet["features"]["content_quality"], 75)
        self.assertEqual(quiet["score"], 37)
        self.assertEqual(loud["features"]["engagement"], 100)
        self.assertEqual(loud["features"]["viral_signals"], 25)
        self.assertEqual(loud["score"], 70)

    def test_score_as_news_article(self):
        result = self.runner.invoke(cli, ["score", "Kraken opens new office in Tokyo", "--platform", "news"])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["features"]["platform"], "news")
        self.assertEqual(payload["features"]["engagement"], 50)

    def test_generate_without_templates_reports_error(self):
        result = self.runner.invoke(cli, ["--db", self.db, "generate-drafts", "--limit", "5"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)["errors"], ["No templates found"])

    def test_dry_run_and_empty_drafts(self):
        result = self.runner.invoke(cli, ["--db", self.db, "run", "--dry-run", "--platform", "news"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(json.loads(result.output)["dry_run"])
        listing = self.runner.invoke(cli, ["--db", self.db, "drafts"])
        self.assertEqual(json.loads(listing.output), [])

    def test_jobs_lists_runs_by_status(self):
        self.runner.invoke(cli, ["--db", self.db, "generate-drafts", "--limit", "5"])
        self.runner.invoke(cli, ["--db", self.db, "run", "--dry-run"])

        result = self.runner.invoke(cli, ["--db", self.db, "jobs"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual([job["job_type"] for job in json.loads(result.output)], ["pipeline", "generate_drafts"])

        failed = self.runner.invoke(cli, ["--db", self.db, "jobs", "--status", "failed"])
        (job,) = json.loads(failed.output)
        self.assertEqual(job["error"], {"message": "No templates found"})

        bad = self.runner.invoke(cli, ["--db", self.db, "jobs", "--status", "queued"])
        self.assertNotEqual(bad.exit_code, 0)

    def test_review_unknown_draft_fails(self):
        result = self.runner.invoke(cli, ["--db", self.db, "review", "42", "approve"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Draft 42 not found", result.output)


if __name__ == "__main__":
    unittest.main()
