"""
Catalog of the 30 X post templates and hook/emotion-based selection.
"""
from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from buzz.models import HookType, TemplateCategory

logger = logging.getLogger(__name__)


class UnknownTemplateError(ValueError):
    """An outline referenced a template code that is not in the catalog."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Template not found: {code}")
        self.code = code


class RandomSource(Protocol):
    def random(self) -> float:
        ...


@dataclass(frozen=True)
class TemplateStructure:
    hook: str
    body: str
    cta: str


@dataclass(frozen=True)
class Template:
    code: str
    name: str
    category: TemplateCategory
    hook_type: HookType
    description: str
    structure: TemplateStructure
    example: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["hook_type"] = self.hook_type.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Template":
        structure = data.get("structure") or {}
        return cls(
            code=data["code"],
            name=data.get("name", ""),
            category=TemplateCategory(data["category"]),
            hook_type=HookType(data["hook_type"]),
            description=data.get("description", ""),
            structure=TemplateStructure(
                hook=structure.get("hook", ""),
                body=structure.get("body", ""),
                cta=structure.get("cta", ""),
            ),
            example=data.get("example", ""),
        )


TEMPLATES: Tuple[Template, ...] = (
    Template(
        code="URG_BREAKING",
        name="緊急速報型",
        category=TemplateCategory.URGENCY,
        hook_type=HookType.SHOCK,
        description="速報ニュースを伝える緊急性の高い投稿",
        structure=TemplateStructure(
            hook="【速報】{topic}が{event}",
            body="{detail1}\n\n{detail2}\n\n{impact}",
            cta="最新情報が入り次第お伝えします。\nフォローして続報をお待ちください",
        ),
        example="【速報】ビットコインが10万ドル突破\n\n機関投資家の大量買いが確認\n\n2024年最高値を更新\n\n続報をフォローで",
    ),
    Template(
        code="URG_COUNTDOWN",
        name="カウントダウン型",
        category=TemplateCategory.URGENCY,
        hook_type=HookType.SHOCK,
        description="期限を設けて緊急性を演出",
        structure=TemplateStructure(
            hook="あと{time}で{event}",
            body="{reason}\n\n{action_needed}",
            cta="今すぐチェック",
        ),
        example="あと24時間でエアドロップ終了\n\n対象者は早めに確認を\n\n条件：ウォレット接続のみ\n\n今すぐチェック",
    ),
    Template(
        code="URG_ALERT",
        name="警告型",
        category=TemplateCategory.URGENCY,
        hook_type=HookType.SHOCK,
        description="注意喚起や警告を促す投稿",
        structure=TemplateStructure(
            hook="⚠️ {warning}",
            body="{detail}\n\n{evidence}",
            cta="拡散して被害を防ぎましょう",
        ),
        example="⚠️ 新手の詐欺に注意\n\n公式を装ったDMが急増中\n\n公式は絶対にDMしません\n\nRT・拡散で被害を防ごう",
    ),
    Template(
        code="URG_EXCLUSIVE",
        name="独占情報型",
        category=TemplateCategory.URGENCY,
        hook_type=HookType.SHOCK,
        description="限定・独占情報を強調",
        structure=TemplateStructure(
            hook="【独占】まだ誰も知らない{topic}",
            body="{insider_info}\n\n{implication}",
            cta="続きはリプ欄で",
        ),
        example="【独占】まだ誰も知らない新規上場情報\n\n大手取引所が来週発表予定\n\n対象トークンは...\n\n続きはリプ欄で",
    ),
    Template(
        code="URG_REALTIME",
        name="リアルタイム実況型",
        category=TemplateCategory.URGENCY,
        hook_type=HookType.SHOCK,
        description="今起きていることをリアルタイムで共有",
        structure=TemplateStructure(
            hook="今、{event}が起きています",
            body="{observation}\n\n{data}",
            cta="状況をウォッチ中。いいねで通知ON",
        ),
        example="今、大口が大量に買い増ししています\n\nオンチェーンで確認\n\n過去24時間で$10M流入\n\nいいねで続報通知",
    ),
    Template(
        code="FOMO_MISSED",
        name="乗り遅れ警告型",
        category=TemplateCategory.FOMO,
        hook_type=HookType.QUESTION,
        description="機会損失への恐怖を刺激",
        structure=TemplateStructure(
            hook="まだ{topic}知らないの？",
            body="{success_story}\n\n{opportunity}",
            cta="今からでも遅くない。保存して後で読んで",
        ),
        example="まだSOLのエアドロ知らないの？\n\n先月参加した人は$500獲得\n\n次のチャンスは今週末まで\n\n保存して後で確認",
    ),
    Template(
        code="FOMO_EARLY",
        name="先行者利益型",
        category=TemplateCategory.FOMO,
        hook_type=HookType.SHOCK,
        description="早期参入のメリットを強調",
        structure=TemplateStructure(
            hook="1%の人しか知らない{topic}",
            body="{why_early}\n\n{potential}",
            cta="この投稿を保存して準備を",
        ),
        example="1%の人しか知らないL2プロジェクト\n\nまだトークンなし\n\n今触っておくとエアドロ対象に\n\n保存して準備を",
    ),
    Template(
        code="FOMO_REGRET",
        name="後悔型",
        category=TemplateCategory.FOMO,
        hook_type=HookType.EMPATHY,
        description="過去の機会損失から学ぶ形式",
        structure=TemplateStructure(
            hook="あの時{action}していれば...",
            body="{past_opportunity}\n\n{current_similar}",
            cta="同じ後悔をしないために。RT",
        ),
        example="2020年にETH買っていれば...\n\n当時$200→今$3000\n\n似たチャンスが今ここに\n\n同じ後悔をしないために",
    ),
    Template(
        code="FOMO_WAVE",
        name="波乗り型",
        category=TemplateCategory.FOMO,
        hook_type=HookType.SHOCK,
        description="トレンドの波に乗ることを促す",
        structure=TemplateStructure(
            hook="{trend}の波が来ている",
            body="{evidence}\n\n{how_to_ride}",
            cta="今がチャンス。ブックマーク必須",
        ),
        example="AIミームコインの波が来ている\n\nこの1週間で平均300%上昇\n\n注目すべき3銘柄は...\n\nブクマ必須",
    ),
    Template(
        code="FOMO_INSIDER",
        name="インサイダー風型",
        category=TemplateCategory.FOMO,
        hook_type=HookType.SHOCK,
        description="内部情報を匂わせる",
        structure=TemplateStructure(
            hook="これ言っていいのかわからないけど...",
            body="{hint}\n\n{implication}",
            cta="DYOR。でも知っておいて損はない",
        ),
        example="これ言っていいのかわからないけど...\n\n大手CEXが来月ある発表をする\n\n関連トークンは...\n\nDYOR",
    ),
    Template(
        code="EDU_THREAD",
        name="解説スレッド型",
        category=TemplateCategory.EDUCATION,
        hook_type=HookType.QUESTION,
        description="知識を体系的に解説",
        structure=TemplateStructure(
            hook="{topic}を5分で完全理解🧵",
            body="1. {point1}\n2. {point2}\n3. {point3}",
            cta="保存して後で読み返そう。いいねで応援",
        ),
        example="DeFiを5分で完全理解🧵\n\n1. 銀行なしで金融\n2. スマコンで自動化\n3. 利回りの仕組み\n\n保存必須",
    ),
    Template(
        code="EDU_MISTAKE",
        name="失敗から学ぶ型",
        category=TemplateCategory.EDUCATION,
        hook_type=HookType.EMPATHY,
        description="失敗談から教訓を伝える",
        structure=TemplateStructure(
            hook="この失敗で{amount}失いました",
            body="{what_happened}\n\n{lesson}",
            cta="同じ失敗をしないで。RT拡散希望",
        ),
        example="この失敗で100万円失いました\n\nレバ100倍でロスカット\n\n教訓：リスク管理が全て\n\nRT拡散希望",
    ),
    Template(
        code="EDU_COMPARE",
        name="比較解説型",
        category=TemplateCategory.EDUCATION,
        hook_type=HookType.QUESTION,
        description="2つの選択肢を比較",
        structure=TemplateStructure(
            hook="{option1} vs {option2}どっちがいい？",
            body="{comparison}\n\n{conclusion}",
            cta="あなたはどっち派？コメントで教えて",
        ),
        example="BTC vs ETH どっちがいい？\n\n・BTC：デジタルゴールド\n・ETH：ユーティリティ\n\n結論：両方持つべき\n\nコメントで教えて",
    ),
    Template(
        code="EDU_BEGINNER",
        name="初心者向け型",
        category=TemplateCategory.EDUCATION,
        hook_type=HookType.EMPATHY,
        description="初心者に優しく解説",
        structure=TemplateStructure(
            hook="仮想通貨始めたい人、これだけ覚えて",
            body="{essential1}\n{essential2}\n{essential3}",
            cta="わからないことはリプで質問を",
        ),
        example="仮想通貨始めたい人、これだけ覚えて\n\n✅ 余剰資金で\n✅ 分散投資\n✅ 長期目線\n\nリプで質問受付中",
    ),
    Template(
        code="EDU_MYTH",
        name="誤解解消型",
        category=TemplateCategory.EDUCATION,
        hook_type=HookType.SHOCK,
        description="よくある誤解を正す",
        structure=TemplateStructure(
            hook="{myth}は完全な嘘です",
            body="{truth}\n\n{evidence}",
            cta="正しい情報を広めよう。RT",
        ),
        example="「BTCは詐欺」は完全な嘘です\n\n・15年間稼働\n・時価総額1兆ドル超\n・機関投資家も参入\n\n正しい情報をRT",
    ),
    Template(
        code="STORY_JOURNEY",
        name="成功ストーリー型",
        category=TemplateCategory.STORY,
        hook_type=HookType.EMPATHY,
        description="成功までの道のりを語る",
        structure=TemplateStructure(
            hook="{start}から{goal}までの話",
            body="{journey}\n\n{turning_point}",
            cta="あなたも諦めないで。いいねで応援",
        ),
        example="借金500万から資産1億までの話\n\n2020年、人生最悪の時期\n\nBTCに出会って人生変わった\n\n諦めないで",
    ),
    Template(
        code="STORY_BEHIND",
        name="裏話型",
        category=TemplateCategory.STORY,
        hook_type=HookType.SHOCK,
        description="知られざる裏話を公開",
        structure=TemplateStructure(
            hook="{topic}の知られざる真実",
            body="{reveal}\n\n{implication}",
            cta="この話、もっと広まるべき。RT",
        ),
        example="イーサリアムの知られざる真実\n\nVitalikは当初BTCのコア開発を希望\n\n拒否されてETH誕生\n\nRT",
    ),
    Template(
        code="STORY_DAILY",
        name="日常切り取り型",
        category=TemplateCategory.STORY,
        hook_type=HookType.EMPATHY,
        description="日常の一コマから気づきを得る",
        structure=TemplateStructure(
            hook="今日こんなことがあった",
            body="{episode}\n\n{insight}",
            cta="共感したらいいね",
        ),
        example="今日こんなことがあった\n\n友人「仮想通貨なんて詐欺でしょ」\n\n3年前の自分もそうだった\n\n共感したらいいね",
    ),
    Template(
        code="STORY_TRANSFORMATION",
        name="変化型",
        category=TemplateCategory.STORY,
        hook_type=HookType.EMPATHY,
        description="ビフォーアフターを見せる",
        structure=TemplateStructure(
            hook="{before} → {after}",
            body="{how}\n\n{key_factor}",
            cta="あなたも変われる。保存",
        ),
        example="月収20万 → 月収200万\n\n変わったのは「情報源」だけ\n\n正しい情報は財産\n\n保存推奨",
    ),
    Template(
        code="STORY_CONFESSION",
        name="告白型",
        category=TemplateCategory.STORY,
        hook_type=HookType.EMPATHY,
        description="正直な告白で共感を得る",
        structure=TemplateStructure(
            hook="正直に言います",
            body="{confession}\n\n{lesson}",
            cta="同じ経験ある人いいね",
        ),
        example="正直に言います\n\n含み損で眠れない夜があった\n\n今は笑い話だけど当時は辛かった\n\n同じ経験ある人いいね",
    ),
    Template(
        code="CONT_UNPOPULAR",
        name="逆張り型",
        category=TemplateCategory.CONTROVERSY,
        hook_type=HookType.SHOCK,
        description="一般論と反対の意見を述べる",
        structure=TemplateStructure(
            hook="批判覚悟で言うけど",
            body="{unpopular_opinion}\n\n{reasoning}",
            cta="反論あればコメントで",
        ),
        example="批判覚悟で言うけど\n\nアルトシーズンはもう来ない\n\n理由：市場構造が変わった\n\n反論あればコメントで",
    ),
    Template(
        code="CONT_PREDICTION",
        name="予言型",
        category=TemplateCategory.CONTROVERSY,
        hook_type=HookType.SHOCK,
        description="大胆な予測を述べる",
        structure=TemplateStructure(
            hook="{timeframe}後、{prediction}",
            body="{basis}\n\n{scenario}",
            cta="スクショ保存推奨",
        ),
        example="1年後、BTC20万ドル\n\n半減期後のサイクルは毎回5-10倍\n\n今回も例外じゃない\n\nスクショ保存",
    ),
    Template(
        code="CONT_TRUTH",
        name="真実暴露型",
        category=TemplateCategory.CONTROVERSY,
        hook_type=HookType.SHOCK,
        description="隠された真実を暴く",
        structure=TemplateStructure(
            hook="{topic}の不都合な真実",
            body="{revelation}\n\n{evidence}",
            cta="広めるべき事実。RT",
        ),
        example="取引所の不都合な真実\n\nあなたのコインは実際には存在しない\n\nNot your keys, not your coins\n\nRT",
    ),
    Template(
        code="CONT_CHALLENGE",
        name="挑戦状型",
        category=TemplateCategory.CONTROVERSY,
        hook_type=HookType.QUESTION,
        description="読者に挑戦を投げかける",
        structure=TemplateStructure(
            hook="これに反論できる人いる？",
            body="{claim}\n\n{support}",
            cta="反論待ってます",
        ),
        example="これに反論できる人いる？\n\nBTCはこの10年で最も成功した投資先\n\nS&P500の10倍のリターン\n\n反論待ってます",
    ),
    Template(
        code="CONT_DEBATE",
        name="議論喚起型",
        category=TemplateCategory.CONTROVERSY,
        hook_type=HookType.QUESTION,
        description="賛否が分かれるテーマで議論を促す",
        structure=TemplateStructure(
            hook="{topic}について議論しよう",
            body="{side1}\n{side2}",
            cta="あなたの意見をコメントで",
        ),
        example="規制について議論しよう\n\n賛成派：投資家保護になる\n反対派：イノベーション阻害\n\nあなたの意見は？",
    ),
    Template(
        code="DATA_STATS",
        name="統計データ型",
        category=TemplateCategory.DATA,
        hook_type=HookType.SHOCK,
        description="驚きの統計データを提示",
        structure=TemplateStructure(
            hook="衝撃のデータ：{stat}",
            body="{context}\n\n{implication}",
            cta="データは嘘をつかない。保存",
        ),
        example="衝撃のデータ：BTCホルダーの90%が利益\n\n長期保有が正解だった\n\n平均保有期間：3.2年\n\n保存推奨",
    ),
    Template(
        code="DATA_CHART",
        name="チャート解説型",
        category=TemplateCategory.DATA,
        hook_type=HookType.SHOCK,
        description="チャートパターンを解説",
        structure=TemplateStructure(
            hook="このチャート、見逃さないで",
            body="{pattern}\n\n{what_it_means}",
            cta="テクニカル派はRT",
        ),
        example="このチャート、見逃さないで\n\n週足で強気ダイバージェンス\n\n過去3回とも大きく上昇\n\nテクニカル派はRT",
    ),
    Template(
        code="DATA_ONCHAIN",
        name="オンチェーン分析型",
        category=TemplateCategory.DATA,
        hook_type=HookType.SHOCK,
        description="オンチェーンデータから洞察",
        structure=TemplateStructure(
            hook="オンチェーンが示す{insight}",
            body="{data}\n\n{interpretation}",
            cta="データで判断。いいね",
        ),
        example="オンチェーンが示すクジラの動き\n\n過去7日で$500M流入\n\n大口は買い増し中\n\nデータで判断",
    ),
    Template(
        code="DATA_RANKING",
        name="ランキング型",
        category=TemplateCategory.DATA,
        hook_type=HookType.QUESTION,
        description="ランキング形式で情報を整理",
        structure=TemplateStructure(
            hook="{topic}ランキングTOP{n}",
            body="1位：{first}\n2位：{second}\n3位：{third}",
            cta="異論あればコメント",
        ),
        example="今週の上昇率TOP3\n\n1位：PEPE +120%\n2位：WIF +80%\n3位：BONK +65%\n\n異論あればコメント",
    ),
    Template(
        code="DATA_TIMELINE",
        name="タイムライン型",
        category=TemplateCategory.DATA,
        hook_type=HookType.SHOCK,
        description="時系列で出来事を整理",
        structure=TemplateStructure(
            hook="{topic}の歴史を振り返る",
            body="{year1}: {event1}\n{year2}: {event2}\n{year3}: {event3}",
            cta="歴史は繰り返す。保存",
        ),
        example="BTCの歴史を振り返る\n\n2013: 初の1000ドル\n2017: 20000ドル\n2021: 69000ドル\n\n歴史は繰り返す",
    ),
)

_BY_CODE: Dict[str, Template] = {template.code: template for template in TEMPLATES}

# Bonus added when the emotion profile value for the key is above EMOTION_BAR.
CATEGORY_BONUSES: Tuple[Tuple[str, TemplateCategory, float], ...] = (
    ("urgency", TemplateCategory.URGENCY, 30),
    ("fomo", TemplateCategory.FOMO, 30),
    ("curiosity", TemplateCategory.EDUCATION, 20),
    ("trust", TemplateCategory.DATA, 25),
)
EMOTION_BAR = 0.5
JITTER = 10


def get_template_by_code(code: str) -> Optional[Template]:
    return _BY_CODE.get(code)


def require_template(code: str) -> Template:
    template = _BY_CODE.get(code)
    if template is None:
        raise UnknownTemplateError(code)
    return template


def get_templates_by_category(category: TemplateCategory) -> List[Template]:
    return [template for template in TEMPLATES if template.category == TemplateCategory(category)]


def get_templates_by_hook_type(hook_type: HookType) -> List[Template]:
    return [template for template in TEMPLATES if template.hook_type == HookType(hook_type)]


def template_affinity(template: Template, emotion_profile: Mapping[str, float]) -> float:
    """Deterministic part of the selection score."""
    score = 0.0
    for key, category, bonus in CATEGORY_BONUSES:
        if (emotion_profile.get(key) or 0) > EMOTION_BAR and template.category == category:
            score += bonus
    return score


def select_template(
    hook_type: HookType,
    emotion_profile: Mapping[str, float],
    rng: Optional[RandomSource] = None,
) -> Template:
    """
    Best template for a hook style and emotion profile.

    Each candidate sharing the hook type gets its category bonus plus a
    0..JITTER random tie-break drawn from `rng`; the highest wins. With no
    candidates the first catalog entry is returned.
    """
    rng = rng or random
    candidates = get_templates_by_hook_type(hook_type)
    scored = [
        (template_affinity(template, emotion_profile) + rng.random() * JITTER, template) for template in candidates
    ]
    if not scored:
        logger.debug("No template for hook type %s; using %s", hook_type, TEMPLATES[0].code)
        return TEMPLATES[0]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return scored[0][1]
