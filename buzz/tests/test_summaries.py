import unittest

from buzz.models import LengthTier, TopicFlags
from buzz.summaries import (
    BRANCH_ORDER,
    CLOSINGS,
    OPENERS,
    SummaryContext,
    generate_summary,
    resolve_branch,
    tier_branches,
    title_hash,
)
from buzz.summaries import long, medium, short

TIER_MODULES = {LengthTier.SHORT: short, LengthTier.MEDIUM: medium, LengthTier.LONG: long}


class SummaryBranchTests(unittest.TestCase):
    def test_branch_order(self):
        self.assertEqual(
            [name for name, _ in BRANCH_ORDER],
            ["etf", "hack", "governance", "positive", "negative", "mining", "regulation", "stablecoin"],
        )

    def test_hack_beats_positive_in_every_tier(self):
        title = "Bitcoin rally continues despite DeFi protocol hack"
        ctx = SummaryContext.build(title, "")
        self.assertEqual(resolve_branch(ctx.flags), "hack")
        for tier, module in TIER_MODULES.items():
            self.assertEqual(generate_summary(title, "", tier), module.hack(ctx))

    def test_missing_tier_branch_falls_back_to_default(self):
        flags = TopicFlags(is_stablecoin=True)
        self.assertEqual(resolve_branch(flags, tier_branches(LengthTier.SHORT)), "stablecoin")
        self.assertEqual(resolve_branch(flags, tier_branches(LengthTier.MEDIUM)), "default")
        self.assertEqual(resolve_branch(TopicFlags(is_mining=True), tier_branches("long")), "default")

    def test_default_summaries_grow_with_tier(self):
        title = "Kraken opens new office in Tokyo"
        lengths = [len(generate_summary(title, "", tier)) for tier in TIER_MODULES]
        self.assertLess(lengths[0], lengths[1])
        self.assertLess(lengths[1], lengths[2])

    def test_opener_and_closing_are_stable_per_title(self):
        title = "Kraken opens new office in Tokyo"
        ctx = SummaryContext.build(title, "")
        self.assertEqual(ctx.opener, OPENERS[title_hash(title) % 8])
        self.assertEqual(ctx.closing, CLOSINGS[(title_hash(title) + 1) % 8])
        self.assertEqual(generate_summary(title, "", "short"), generate_summary(title, "", "short"))

    def test_governance_short_summary(self):
        summary = generate_summary("Uniswap governance proposal rejected after community vote", "", "short")
        self.assertTrue(summary.startswith("Uniswapのガバナンス提案が否決。"))

    def test_etf_short_summary_reports_flow(self):
        summary = generate_summary("Bitcoin ETF sees $500M inflows", "", LengthTier.SHORT)
        self.assertTrue(summary.startswith("BTCETFに$500Mの流入。"))


ETF_TITLE = "BlackRock Bitcoin ETF sees $500M inflows"
GOVERNANCE_TITLE = "Aave governance proposal on fee switch passes"
POSITIVE_TITLE = "Solana surges 20% as adoption grows"
NEGATIVE_TITLE = "Ethereum drops below $3,000 after whale selloff"
MINING_TITLE = "Marathon expands mining fleet with $200M purchase"
REGULATION_TITLE = "SEC sues Coinbase over unregistered securities"


def _paragraphs(title, tier):
    return generate_summary(title, "", tier).split("\n\n")


class MediumSummaryTests(unittest.TestCase):
    def test_branches_resolve_by_topic(self):
        expected = {
            ETF_TITLE: "etf",
            GOVERNANCE_TITLE: "governance",
            POSITIVE_TITLE: "positive",
            NEGATIVE_TITLE: "negative",
            MINING_TITLE: "mining",
            REGULATION_TITLE: "regulation",
        }
        for title, branch in expected.items():
            ctx = SummaryContext.build(title, "")
            self.assertEqual(resolve_branch(ctx.flags, medium.BRANCHES), branch, title)

    def test_etf(self):
        paras = _paragraphs(ETF_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "ビットコインETF（ブラックロック）に$500M流入")
        self.assertEqual(paras[1], "ブラックロックのビットコインETFで$500M規模の流入が確認されました。")
        self.assertIn("買い意欲の強さを示すシグナルとして、", paras[3])
        self.assertEqual(paras[-1], "資金フローの動向から目が離せません📊")

    def test_governance(self):
        paras = _paragraphs(GOVERNANCE_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "Aaveのガバナンス：手数料変更提案が可決")
        self.assertEqual(paras[1], "Aaveコミュニティで行われた手数料変更に関する提案が可決となりました。")
        self.assertEqual(paras[2], "今回の提案は、プロトコルの手数料体系を見直すもので、Aaveの将来に大きな影響を与える内容でした。")
        self.assertEqual(paras[3], "この可決により、Aaveは新たなフェーズに入ります。実装は今後数週間以内に行われる見込みです。")

    def test_positive(self):
        paras = _paragraphs(POSITIVE_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "ソラナが急騰、20%を突破")
        self.assertEqual(paras[1], "ソラナが力強い上昇を見せています。価格は20%を突破し、市場参加者の注目を集めています。")
        self.assertEqual(paras[2], "今回の上昇の背景には、採用拡大があると見られています。")
        self.assertIn("アクティブアドレス数の増加", paras[4])

    def test_negative(self):
        paras = _paragraphs(NEGATIVE_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "イーサリアムが下落、$3,000を下回る")
        self.assertEqual(paras[1], "イーサリアムが下落圧力に晒されています。価格は$3,000を割り込み、市場に警戒感が広がっています。")
        self.assertEqual(paras[2], "下落の要因として、売り浴びせが指摘されています。短期的なサポートラインを試す展開となっています。")

    def test_mining(self):
        paras = _paragraphs(MINING_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "MarathonがASIC購入、$200M規模")
        self.assertEqual(paras[1], "Marathonがマイニング事業においてASIC購入を発表しました。その規模は$200Mに達します。")
        self.assertEqual(
            paras[2],
            "マイニング企業の動向は、ビットコインの供給動態に直接影響を与えます。"
            "設備投資の増加はハッシュレートの上昇につながり、Marathonの今回の決定は業界全体の指標となります。",
        )

    def test_regulation(self):
        paras = _paragraphs(REGULATION_TITLE, LengthTier.MEDIUM)
        self.assertEqual(paras[0], "米証券取引委員会（SEC）がCoinbaseに対して提訴")
        self.assertEqual(paras[1], "米証券取引委員会（SEC）がCoinbaseに関する提訴を行いました。")
        self.assertEqual(
            paras[2],
            "規制当局の動きは、暗号資産市場に大きな影響を与えます。調査・訴訟の結果次第では、業界全体のルールが見直される可能性があります。",
        )


class LongSummaryTests(unittest.TestCase):
    def test_etf(self):
        summary = generate_summary(ETF_TITLE, "", LengthTier.LONG)
        paras = summary.split("\n\n")
        self.assertEqual(paras[0], "ビットコインETF（ブラックロック）：$500Mの流入を記録")
        self.assertTrue(paras[1].startswith("【速報】\nブラックロックが運用するビットコインETFで$500M規模の流入が確認されました。"))
        self.assertIn("【流入の意味】", summary)
        self.assertIn("特にブラックロックのような大手運用会社への資金流入は、", summary)

    def test_governance(self):
        summary = generate_summary(GOVERNANCE_TITLE, "", LengthTier.LONG)
        self.assertEqual(summary.split("\n\n")[0], "Aaveガバナンス：手数料提案が可決")
        self.assertIn("今回の提案は承認され、新しい手数料体系が導入されます。", summary)
        self.assertIn("最終的にはコミュニティの多数が賛成し、可決となりました。", summary)

    def test_positive(self):
        summary = generate_summary(POSITIVE_TITLE, "", LengthTier.LONG)
        self.assertEqual(summary.split("\n\n")[0], "ソラナが急騰、20%に到達")
        self.assertIn("【上昇の背景】\n今回の上昇の主な要因は採用拡大と見られています。", summary)
        self.assertIn("市場全体のセンチメントが改善し、リスクオン姿勢が強まっています。", summary)
        self.assertIn("・RSIは70を超え過熱圏だが", summary)
        self.assertIn("・TVL（預け入れ総額）：上昇傾向", summary)

    def test_negative(self):
        summary = generate_summary(NEGATIVE_TITLE, "", LengthTier.LONG)
        self.assertEqual(summary.split("\n\n")[0], "イーサリアムが下落、$3,000を割り込む")
        self.assertIn("【下落の要因】\n今回の下落は売り圧力が主因と見られています。", summary)
        self.assertIn("・次のサポートは$3,000付近", summary)
        self.assertIn("イーサリアム市場は変動が大きいですが、テクノロジーとしての価値は変わっていません。", summary)

    def test_mining_and_regulation_read_as_default(self):
        for title, headline in ((MINING_TITLE, "Marathonが購入 - $200M規模"), (REGULATION_TITLE, "Coinbaseが提訴")):
            summary = generate_summary(title, "", LengthTier.LONG)
            self.assertEqual(summary, long.default(SummaryContext.build(title, "")))
            self.assertEqual(summary.split("\n\n")[0], headline)


if __name__ == "__main__":
    unittest.main()
