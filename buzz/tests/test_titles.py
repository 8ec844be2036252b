import unittest

from buzz.analyzer import latin_ratio
from buzz.titles import (
    FALLBACK_TITLE,
    MAX_TITLE_LENGTH,
    build_title_candidate,
    generate_title,
    match_title_rule,
    rule_names,
)

SAMPLE_TITLES = [
    "Bitcoin eyes $90K after ETF inflows",
    "Uniswap governance proposal rejected after community vote",
    "BlackRock buys $500M in bitcoin",
    "SEC delays decision on Solana ETF",
    "Ethereum Fusaka upgrade scheduled for December",
    "Big BTC news for all of us",
    "Weekly roundup: Quiet weekend across several communities",
    "",
    "A" * 200,
]


class TitleRuleTests(unittest.TestCase):
    def test_price_target_beats_etf_branch(self):
        self.assertEqual(
            match_title_rule("Bitcoin eyes $90K after ETF inflows"),
            ("eyes_price_target", "ビットコイン、$90Kを目指す"),
        )
        self.assertEqual(generate_title("Bitcoin eyes $90K after ETF inflows"), "ビットコイン、$90Kを目指す")

    def test_rejection_checked_before_passage(self):
        name, title = match_title_rule("Uniswap governance proposal rejected after community vote")
        self.assertEqual(name, "governance_vote")
        self.assertEqual(title, "ユニスワップ、ガバナンス提案否決")

    def test_governance_passed(self):
        self.assertEqual(
            build_title_candidate("Aave governance proposal passes with strong support"),
            "Aave、ガバナンス提案可決",
        )

    def test_price_level_not_reached(self):
        self.assertEqual(
            match_title_rule("Bitcoin to $100K unlikely before 2026"),
            ("price_level", "ビットコイン、$100K到達せず"),
        )

    def test_security_incident_without_entity(self):
        self.assertEqual(
            match_title_rule("Major DeFi protocol hit by exploit"),
            ("security_incident", "セキュリティインシデント発生"),
        )

    def test_hack_outranks_rally_and_coin(self):
        self.assertEqual(
            match_title_rule("Bitcoin rally continues despite DeFi protocol hack"),
            ("security_incident", "セキュリティインシデント発生"),
        )
        names = rule_names()
        self.assertLess(names.index("security_incident"), names.index("bitcoin"))

    def test_unmatched_title_falls_back(self):
        self.assertEqual(
            match_title_rule("Weekly roundup: Quiet weekend across several communities"),
            ("fallback", FALLBACK_TITLE),
        )

    def test_english_candidate_is_replaced_by_fallback(self):
        self.assertEqual(build_title_candidate("Big BTC news for all of us"), "Big BTC news for all of us")
        self.assertEqual(generate_title("Big BTC news for all of us"), FALLBACK_TITLE)

    def test_generated_titles_are_short_and_japanese(self):
        for source in SAMPLE_TITLES:
            title = generate_title(source)
            self.assertTrue(title)
            self.assertLessEqual(len(title), MAX_TITLE_LENGTH)
            self.assertTrue(title == FALLBACK_TITLE or latin_ratio(title) < 0.3, title)

    def test_rule_order(self):
        names = rule_names()
        self.assertEqual(names[0], "eyes_price_target")
        self.assertLess(names.index("governance_vote"), names.index("etf_flow"))
        self.assertLess(names.index("etf_flow"), names.index("regulation"))
        self.assertEqual(names[-1], "keyword_elements")


if __name__ == "__main__":
    unittest.main()
