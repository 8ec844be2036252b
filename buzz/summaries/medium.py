"""Medium tier: around six paragraphs of news-style prose."""
from __future__ import annotations

from typing import Callable, Dict

from buzz.summaries.context import SummaryContext, paragraphs

ETF_PROVIDERS = (("blackrock", "ブラックロック"), ("fidelity", "フィデリティ"), ("grayscale", "グレースケール"))


def etf(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    flow = ctx.pick((("inflow", "流入"), ("outflow", "流出")), "資金移動")
    coin = ctx.pick((("bitcoin|btc", "ビットコイン"), ("ethereum|eth", "イーサリアム")), "仮想通貨")
    provider = ctx.pick(ETF_PROVIDERS, "")
    signal = {
        "流入": "買い意欲の強さを示すシグナルとして、",
        "流出": "利益確定や様子見姿勢を示すシグナルとして、",
    }.get(flow, "市場動向を示すシグナルとして、")
    return paragraphs(
        f"{coin}ETF{f'（{provider}）' if provider else ''}に{num or '大規模な'}{flow}",
        f"{f'{provider}の{coin}ETFで' if provider else f'{coin}ETF市場で'}"
        f"{f'{num}規模の{flow}が確認されました。' if num else f'注目すべき{flow}がありました。'}",
        f"機関投資家マネーの動向として、今回の{flow}は市場参加者の間で注目を集めています。"
        f"{f'直近1週間では累計{num2}の{flow}となっており、トレンドの形成が見られます。' if num2 else ''}",
        f"ETFを通じた資金の動きは、機関投資家のセンチメントを反映しています。{signal}今後の価格動向に影響を与える可能性があります。",
        f"現物ETFの承認以降、{coin}市場の構造は大きく変化しています。"
        "従来の個人投資家中心の市場から、機関投資家も参加する成熟した市場へと進化を続けています。",
        "資金フローの動向から目が離せません📊",
    )


def hack(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    target = ctx.entity_ja or "プロトコル"
    attack = ctx.pick(
        (
            ("bridge", "ブリッジ攻撃"),
            ("flash.?loan", "フラッシュローン攻撃"),
            ("reentrancy", "リエントランシー攻撃"),
            ("phishing", "フィッシング攻撃"),
        ),
        "ハッキング",
    )
    method = {
        "ブリッジ攻撃": "クロスチェーンブリッジの脆弱性を突いて",
        "フラッシュローン攻撃": "無担保融資を利用した価格操作により",
    }.get(attack, "コントラクトの脆弱性を利用して")
    return paragraphs(
        f"【緊急速報】{target}で{attack}発生{f' - {num}流出' if num else ''}",
        f"{target}のスマートコントラクトで{attack}が発生し、"
        f"{f'{num}相当の資産が流出しました。' if num else 'ユーザー資産に被害が出ています。'}",
        f"攻撃の経緯として、攻撃者は{method}不正に資産を移動させたと見られています。",
        f"{target}チームは現在、被害の全容解明と資金追跡を進めています。"
        f"{f'現時点で{num2}分の資産は凍結に成功したとの報告もあります。' if num2 else ''}",
        f"ユーザーへの対応として、{target}を利用している方は：\n"
        "・承認済みのコントラクト接続を確認・解除\n"
        "・関連トークンの移動を検討\n"
        "・公式アナウンスを待って行動",
        "DeFiを利用する際は、常にリスクを認識し、資産の分散管理を心がけてください🔐",
    )


def governance(ctx: SummaryContext) -> str:
    protocol = ctx.pick(
        (
            ("uniswap", "Uniswap"),
            ("aave", "Aave"),
            ("compound", "Compound"),
            ("maker", "MakerDAO"),
            ("curve", "Curve"),
        ),
        ctx.entity_ja or "DeFiプロトコル",
    )
    result = ctx.pick((("reject|fail|denied|ends in", "否決"), ("pass|approve|backed", "可決")), "審議中")
    proposal = ctx.pick(
        (
            ("fee", "手数料変更"),
            ("treasury", "トレジャリー運用"),
            ("upgrade", "プロトコルアップグレード"),
            ("token", "トークン関連"),
        ),
        "運営方針",
    )
    purpose = {
        "手数料変更": "プロトコルの手数料体系を見直すもので、",
        "トレジャリー運用": "プロトコルが保有する資産の運用方針に関するもので、",
        "プロトコルアップグレード": "技術的なアップグレードを実施するもので、",
    }.get(proposal, "")
    if result == "可決":
        outcome = f"この可決により、{protocol}は新たなフェーズに入ります。実装は今後数週間以内に行われる見込みです。"
    elif result == "否決":
        outcome = (
            f"否決の背景には、コミュニティ内で{proposal}の方向性について意見の相違があったと見られます。"
            "修正案の再提出が予想されます。"
        )
    else:
        outcome = "投票期間中、活発な議論が行われています。"
    return paragraphs(
        f"{protocol}のガバナンス：{proposal}提案が{result}",
        f"{protocol}コミュニティで行われた{proposal}に関する提案が{result}となりました。"
        f"{f'投票には{ctx.num}相当のガバナンストークンが参加しました。' if ctx.num else ''}",
        f"今回の提案は、{purpose}{protocol}の将来に大きな影響を与える内容でした。",
        outcome,
        f"DeFiの分散型ガバナンスは、プロトコルの進化を支える重要な仕組みです。"
        f"{protocol}トークン保有者は、今後も積極的に投票に参加することが推奨されます💡",
    )


def positive(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    coin = ctx.subject
    catalyst = ctx.pick(
        (
            ("etf", "ETFへの資金流入"),
            ("halving", "半減期期待"),
            ("institutional", "機関投資家の買い"),
            ("adoption", "採用拡大"),
        ),
        "買い圧力の増加",
    )
    if ctx.title_has("bitcoin|btc"):
        onchain = "取引所からのBTC流出が続いており、長期保有者の蓄積が進んでいることを示唆しています。"
    else:
        onchain = "アクティブアドレス数の増加が見られ、ネットワーク活動が活発化しています。"
    return paragraphs(
        f"{coin}が{ctx.action or '急伸'}{f'、{num}を突破' if num else ''}",
        f"{coin}が力強い上昇を見せています。{f'価格は{num}を突破し、' if num else ''}市場参加者の注目を集めています。",
        f"今回の上昇の背景には、{catalyst}があると見られています。"
        f"{f'直近24時間では{num2}の上昇幅を記録しました。' if num2 else ''}",
        "テクニカル面では、重要なレジスタンスを上抜けたことで、次の価格目標に向けた動きが期待されています。"
        "ただし、急騰後は利益確定売りによる調整も想定されるため、エントリーのタイミングには注意が必要です。",
        f"オンチェーンデータでは、{onchain}",
        "強気相場でも冷静な判断を。分散投資とリスク管理を忘れずに📈",
    )


def negative(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    coin = ctx.subject
    cause = ctx.pick(
        (
            ("liquidation", "大規模な清算"),
            ("sell.?off", "売り浴びせ"),
            ("whale", "クジラの売却"),
            ("macro", "マクロ経済不安"),
        ),
        "売り圧力",
    )
    return paragraphs(
        f"{coin}が{ctx.action or '急落'}{f'、{num}を下回る' if num else ''}",
        f"{coin}が下落圧力に晒されています。{f'価格は{num}を割り込み、' if num else ''}市場に警戒感が広がっています。",
        f"下落の要因として、{cause}が指摘されています。"
        f"{f'この24時間で{num2}の下げ幅となり、' if num2 else ''}短期的なサポートラインを試す展開となっています。",
        "このような局面では、パニック売りは最悪の選択です。市場は周期的に調整を繰り返すものであり、長期的な視点を持つことが重要です。",
        "追加投資を検討している場合は、さらなる下落の可能性も考慮し、分割での購入を検討してください。"
        "また、ポートフォリオ全体のリスクを再評価する良い機会でもあります。",
        "下落相場は、優良資産を割安で取得するチャンスでもあります。感情に流されず、自身の投資計画に従って行動しましょう📉",
    )


def mining(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    company = ctx.entity_ja or "マイニング企業"
    move = ctx.pick(
        (
            ("buy|purchase|acquire", "ASIC購入"),
            ("sell", "BTC売却"),
            ("expand", "事業拡大"),
            ("hash.?rate", "ハッシュレート"),
        ),
        "事業展開",
    )
    supply = {
        "BTC売却": "マイナーによる売却は市場への供給圧力となりますが、",
        "ASIC購入": "設備投資の増加はハッシュレートの上昇につながり、",
    }.get(move, "")
    return paragraphs(
        f"{company}が{move}{f'、{num}規模' if num else ''}",
        f"{company}がマイニング事業において{move}を発表しました。{f'その規模は{num}に達します。' if num else ''}",
        f"マイニング企業の動向は、ビットコインの供給動態に直接影響を与えます。{supply}{company}の今回の決定は業界全体の指標となります。",
        f"{f'現在のビットコイン価格{num2}を考慮すると、' if num2 else '現在の市場環境を考慮すると、'}"
        "マイニング事業の採算性は重要な局面にあります。電力コストや機器の効率性が、各社の戦略を左右しています。",
        "次の半減期を見据えた動きとして、今後もマイニング業界からは目が離せません⛏️",
    )


def regulation(ctx: SummaryContext) -> str:
    num = ctx.num
    target = ctx.entity_ja or "暗号資産"
    regulator = ctx.pick(
        (
            ("sec", "米証券取引委員会（SEC）"),
            ("cftc", "米商品先物取引委員会（CFTC）"),
            ("doj", "米司法省（DOJ）"),
            ("eu|mica", "EU当局"),
        ),
        "規制当局",
    )
    measure = ctx.pick(
        (("approve", "承認"), ("sue|charge", "提訴"), ("investigate", "調査"), ("ban", "禁止")),
        "規制措置",
    )
    if measure == "承認":
        impact = "今回の承認は、市場参加者にとってポジティブなシグナルとなります。"
    elif measure in ("提訴", "調査"):
        impact = "調査・訴訟の結果次第では、業界全体のルールが見直される可能性があります。"
    else:
        impact = "規制の方向性は、今後の市場発展に大きく影響します。"
    return paragraphs(
        f"{regulator}が{target}に対して{measure}{f'、{num}規模' if num else ''}",
        f"{regulator}が{target}に関する{measure}を行いました。"
        f"{f'この件は{num}規模の市場に影響を与える可能性があります。' if num else ''}",
        f"規制当局の動きは、暗号資産市場に大きな影響を与えます。{impact}",
        "短期的には不確実性から価格変動が予想されますが、長期的には明確なルールの整備が市場の成熟につながるとの見方もあります。",
        "各国の規制動向は複雑に絡み合っています。投資判断においては、最新の規制情報を継続的にチェックすることが重要です🔄",
    )


def default(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    subject = ctx.subject
    if ctx.entity_ja:
        context = f"{ctx.entity_ja}は暗号資産業界において重要なプレイヤーであり、今回の動きは市場全体に影響を与える可能性があります。"
    else:
        context = f"{ctx.main_coin}市場は常に変化しており、今回のニュースもその一環です。"
    return paragraphs(
        f"{subject}{f'が{ctx.action}' if ctx.action else 'に動き'}{f'、{num}規模' if num else ''}",
        f"{subject}に関する重要なニュースが入ってきました。{f'{num}規模の動きとして、' if num else ''}市場参加者の間で注目を集めています。",
        context,
        f"{f'関連する数字として{num2}も報じられており、' if num2 else ''}詳細な分析が待たれます。",
        "暗号資産市場は情報の速度が命です。最新ニュースをキャッチアップし、冷静な投資判断につなげていきましょう🔔",
    )


# No stablecoin branch at this length; those items read as the default summary.
BRANCHES: Dict[str, Callable[[SummaryContext], str]] = {
    "etf": etf,
    "hack": hack,
    "governance": governance,
    "positive": positive,
    "negative": negative,
    "mining": mining,
    "regulation": regulation,
}
