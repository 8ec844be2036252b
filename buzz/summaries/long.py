"""Long tier: sectioned analysis with 【heading】 separators."""
from __future__ import annotations

import re
from typing import Callable, Dict

from buzz.summaries.context import SummaryContext, paragraphs


def etf(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    flow = ctx.pick((("inflow", "流入"), ("outflow", "流出")), "資金移動")
    coin = ctx.pick((("bitcoin|btc", "ビットコイン"), ("ethereum|eth", "イーサリアム")), "仮想通貨")
    provider = ctx.pick(
        (("blackrock", "ブラックロック"), ("fidelity", "フィデリティ"), ("grayscale", "グレースケール"), ("ark", "ARK")),
        "",
    )
    if flow == "流入":
        meaning = paragraphs(
            f"【流入の意味】\n資金流入は機関投資家の{coin}に対する強気姿勢を反映しています。"
            "彼らは長期的な視点で投資を行うことが多く、継続的な流入は価格の下支えになります。",
            f"特に{f'{provider}のような大手運用会社' if provider else '大手運用会社'}への資金流入は、"
            f"{coin}が「オルタナティブ資産」として認知されつつあることの証左です。",
        )
    elif flow == "流出":
        meaning = paragraphs(
            "【流出の意味】\n資金流出は必ずしもネガティブではありません。"
            "利益確定、ポートフォリオリバランス、あるいは他の投資機会への資金シフトなど、様々な理由が考えられます。",
            "重要なのは流出のトレンドと規模です。一時的な流出は市場の健全な調整プロセスの一部であり、過度に心配する必要はありません。",
        )
    else:
        meaning = (
            "【市場への示唆】\nETFの資金フローは、機関投資家のセンチメントを測る最も信頼性の高い指標の一つです。"
            "今回の動きは今後の市場動向を占う上で重要なデータポイントとなります。"
        )
    return paragraphs(
        f"{coin}ETF{f'（{provider}）' if provider else ''}：{num + 'の' if num else ''}{flow}を記録",
        "【速報】\n"
        f"{f'{provider}が運用する{coin}ETFで' if provider else f'{coin}ETF市場で'}"
        f"{f'{num}規模の{flow}が確認されました。' if num else f'大きな{flow}がありました。'}"
        f"{f'週間累計では{num2}に達しています。' if num2 else ''}",
        "【背景】\n2024年1月のビットコイン現物ETF承認以降、機関投資家マネーの流れが暗号資産市場を大きく動かすようになりました。"
        f"{provider or '主要運用会社'}のETFは、年金基金、投資信託、ファミリーオフィスなど、"
        "これまで暗号資産に直接投資できなかった投資家層への門戸を開きました。",
        meaning,
        f"【今後の展望】\nETF市場の成熟とともに、{coin}と伝統的金融市場との相関も変化しています。"
        "機関投資家の参入により、市場の流動性は向上していますが、同時にマクロ経済要因の影響も受けやすくなっています。",
        "ETFの資金フローは毎日公開されます。継続的にウォッチして、市場のトレンドを把握していきましょう📊",
    )


def hack(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    target = ctx.entity_ja or "プロトコル"
    attack = ctx.pick(
        (
            ("bridge", "クロスチェーンブリッジ攻撃"),
            ("flash.?loan", "フラッシュローン攻撃"),
            ("oracle", "オラクル操作"),
            ("reentrancy", "リエントランシー攻撃"),
            ("private.?key", "秘密鍵流出"),
            ("phishing", "フィッシング攻撃"),
        ),
        "セキュリティ侵害",
    )
    techniques = {
        "クロスチェーンブリッジ攻撃": "クロスチェーンブリッジは異なるブロックチェーン間で資産を移動させる重要なインフラですが、"
        "その複雑性ゆえに攻撃対象となりやすい。今回も、ブリッジのコントラクトに存在した脆弱性が悪用されました。",
        "フラッシュローン攻撃": "フラッシュローンは1トランザクション内で借入・返済を完結させる無担保ローンです。"
        "攻撃者はこれを利用して一時的に大量の資金を調達し、価格操作を行ってプロトコルから資産を抜き取りました。",
        "オラクル操作": "DeFiプロトコルは価格データをオラクルから取得しています。"
        "攻撃者はオラクルの価格を操作することで、プロトコルに誤った価格情報を与え、不正な利益を得ました。",
    }
    technique = techniques.get(
        attack, f"攻撃者は{target}のスマートコントラクトに存在した脆弱性を発見し、これを悪用して資産を流出させました。"
    )
    scale = "最大級の" if re.search(r"million|billion", num, re.I) else "注目すべき"
    return paragraphs(
        f"【緊急】{target}で{attack}発生{f' - 被害額{num}' if num else ''}",
        f"【事件概要】\n{target}で{attack}が発生し、"
        f"{f'{num}相当の資産が流出しました。' if num else 'ユーザー資産に被害が出ています。'}"
        f"{f'影響を受けたアドレスは{num2}以上と報告されています。' if num2 else ''}",
        f"これは2024年に入って{scale}セキュリティインシデントの一つです。",
        f"【攻撃の手口】\n{technique}",
        f"【{target}の対応状況】\n"
        "・関連するコントラクトの一時停止\n"
        "・セキュリティ企業との連携による資金追跡\n"
        f"・{'バグバウンティを通じた攻撃者への返還交渉' if num else '被害状況の調査継続'}",
        "【ユーザーがすべきこと】\n"
        f"1. {target}への承認（Approval）を直ちに取り消す\n"
        "   → Revoke.cashなどのツールを使用\n"
        "2. 関連トークンを安全なウォレットに移動\n"
        "3. 公式チャンネル以外の情報に注意（詐欺DM多発）\n"
        "4. 補償プログラムの発表を待つ",
        "【教訓】\n"
        "DeFiは革新的ですが、スマートコントラクトリスクは常に存在します。\n"
        "・1つのプロトコルに資産を集中させない\n"
        "・新しいプロトコルは少額から始める\n"
        "・監査済みであっても過信しない\n"
        "・ハードウェアウォレットの使用を推奨",
        f"続報をお伝えします。{target}ユーザーの方は公式発表をお待ちください🔐",
    )


def governance(ctx: SummaryContext) -> str:
    num = ctx.num
    protocol = ctx.pick(
        (
            ("uniswap", "Uniswap"),
            ("aave", "Aave"),
            ("compound", "Compound"),
            ("maker", "MakerDAO"),
            ("curve", "Curve"),
            ("lido", "Lido"),
        ),
        ctx.entity_ja or "DeFiプロトコル",
    )
    result = ctx.pick((("reject|fail|denied|ends in", "否決"), ("pass|approve|backed", "可決")), "投票中")
    proposal = ctx.pick(
        (
            ("fee", "手数料"),
            ("treasury", "トレジャリー"),
            ("upgrade", "アップグレード"),
            ("incentive", "インセンティブ"),
            ("burn", "トークンバーン"),
        ),
        "ガバナンス",
    )

    if proposal == "手数料":
        status = {
            "可決": "承認され、新しい手数料体系が導入されます",
            "否決": "否決されましたが、修正案の再提出が予想されます",
        }.get(result, "審議中です")
        content = (
            f"{protocol}のプロトコル手数料体系を見直す提案でした。"
            "DeFiプロトコルにとって手数料は重要な収益源であり、同時にユーザーの利用コストにも直結します。"
            f"今回の提案は{status}。"
        )
    elif proposal == "トークンバーン":
        content = f"{protocol}のネイティブトークンをバーン（焼却）する提案でした。バーンはトークンの供給量を減らし、希少性を高める効果があります。"
    elif proposal == "アップグレード":
        content = f"{protocol}のプロトコルをアップグレードする提案でした。新機能の追加、セキュリティの強化、効率性の改善などが含まれています。"
    else:
        content = f"{protocol}の運営方針に関する重要な提案でした。"

    if result == "可決":
        opinions = paragraphs(
            f"賛成派：「{protocol}の持続的な成長のために必要な変更」\n反対派：「実装リスクや副作用を懸念」",
            "最終的にはコミュニティの多数が賛成し、可決となりました。",
        )
        outlook = (
            f"この可決により、{protocol}は新たなフェーズに入ります。"
            "実装は今後数週間以内に行われる見込みで、ユーザーへの影響についても公式から詳細が発表される予定です。"
        )
    elif result == "否決":
        opinions = paragraphs(
            "賛成派：「プロトコルの改善に必要」\n反対派：「時期尚早」「代替案を検討すべき」",
            "反対意見が多数を占め、提案は否決されました。",
        )
        outlook = f"今回の結果を受けて、{protocol}コミュニティでは次のステップについて議論が続くでしょう。"
    else:
        opinions = "賛否両論あり、活発な議論が続いています。"
        outlook = f"今回の結果を受けて、{protocol}コミュニティでは次のステップについて議論が続くでしょう。"

    return paragraphs(
        f"{protocol}ガバナンス：{proposal}提案が{result}",
        f"【投票結果】\n{protocol}のガバナンス投票で、{proposal}に関する提案が{result}となりました。"
        f"{f'{num}相当のガバナンストークンが投票に参加しました。' if num else 'コミュニティから活発な議論がありました。'}",
        f"【提案の内容】\n{content}",
        f"【賛成派・反対派の意見】\n{opinions}",
        f"【{protocol}の今後】\n{outlook}",
        "【なぜガバナンスが重要か】\nDeFiの分散型ガバナンスは、プロトコルを「誰のものでもない」公共財として維持する仕組みです。"
        "トークン保有者が投票権を持ち、プロトコルの方向性を決定します。",
        f"{protocol}のガバナンストークンを保有している方は、今後も積極的に投票に参加することで、プロトコルの発展に貢献できます💡",
    )


def positive(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    coin = ctx.subject
    catalyst = ctx.pick(
        (
            ("etf", "ETF資金流入"),
            ("halving", "半減期"),
            ("institutional", "機関投資家"),
            ("adoption", "採用拡大"),
            ("whale", "クジラの買い"),
        ),
        "市場センチメント改善",
    )
    manager = "ブラックロック" if ctx.title_has("blackrock") else "大手運用会社"
    backgrounds = {
        "ETF資金流入": "ビットコインETFへの資金流入が継続しており、機関投資家マネーが市場を押し上げています。"
        f"特に{manager}のETFへの資金流入が顕著です。",
        "半減期": "ビットコインの半減期が近づき、供給量の減少を見越した買いが入っています。"
        "過去の半減期サイクルでは、半減期の前後に価格が大きく上昇する傾向がありました。",
        "機関投資家": "機関投資家による大規模な買いが確認されています。ポートフォリオの一部として暗号資産を組み込む動きが加速しています。",
        "クジラの買い": "大口投資家（クジラ）による買い増しが観測されています。"
        "オンチェーンデータでは、1000BTC以上を保有するアドレスの増加が確認されています。",
    }
    background = backgrounds.get(catalyst, "市場全体のセンチメントが改善し、リスクオン姿勢が強まっています。")
    technical = "\n".join(
        [
            "【テクニカル分析】",
            "・主要な移動平均線を上抜け",
            f"・RSIは{'70を超え過熱圏だが' if num else '上昇トレンドを示唆'}",
            "・出来高も増加傾向",
            f"・次のレジスタンスは{num2}付近" if num2 else "",
        ]
    )
    if ctx.title_has("bitcoin|btc"):
        onchain = "・取引所のBTC残高：減少傾向（買い圧力優勢）\n・長期保有者の売却：限定的\n・新規アドレス：増加中"
    else:
        onchain = "・アクティブアドレス：増加中\n・TVL（預け入れ総額）：上昇傾向\n・トランザクション数：高水準"
    return paragraphs(
        f"{coin}が{ctx.action or '急騰'}{f'、{num}に到達' if num else ''}",
        f"【現在の状況】\n{coin}が力強い上昇を見せ、{f'{num}を突破しました。' if num else '市場参加者の注目を集めています。'}"
        f"{f'24時間の上昇率は{num2}に達しています。' if num2 else ''}",
        f"【上昇の背景】\n今回の上昇の主な要因は{catalyst}と見られています。",
        background,
        technical,
        f"【オンチェーン指標】\n{onchain}",
        "【投資戦略の考え方】\n強気相場ではFOMO（取り残される恐怖）に駆られがちですが、冷静な判断が重要です。",
        "・上昇が続いている時こそ、利益確定ラインを設定\n"
        "・追加投資は分割で（一括投資は避ける）\n"
        "・ポートフォリオ全体のバランスを確認\n"
        "・レバレッジは控えめに",
        f"{coin}の長期的なファンダメンタルズを信じるなら、短期的な価格変動に一喜一憂せず、自身の投資計画に従って行動しましょう📈",
    )


def negative(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    coin = ctx.subject
    cause = ctx.pick(
        (
            ("liquidation", "大量清算"),
            ("sell", "売り圧力"),
            ("whale", "クジラの売却"),
            ("macro|fed|rate", "マクロ経済要因"),
            ("hack|security", "セキュリティ懸念"),
        ),
        "市場調整",
    )
    explanations = {
        "大量清算": "レバレッジポジションの大量清算（ロスカット）が連鎖的に発生しました。"
        f"先物市場では{num2 or '数億ドル'}規模のロングポジションが清算され、売り圧力が一気に高まりました。"
        "これは過度なレバレッジのリスクを改めて示す事例です。",
        "クジラの売却": "大口投資家（クジラ）による大規模な売却が観測されています。"
        "オンチェーンデータでは、取引所への大量の入金が確認されました。利益確定や資金需要など、売却の理由は様々考えられます。",
        "マクロ経済要因": "マクロ経済の不確実性が暗号資産市場にも波及しています。"
        "金利動向、インフレ指標、地政学リスクなどが投資家心理を冷やしています。"
        "暗号資産は「リスク資産」として、マクロ環境に敏感に反応する傾向があります。",
    }
    explanation = explanations.get(
        cause, "市場は周期的に調整を繰り返します。今回の下落も、上昇トレンドの中での健全な調整である可能性があります。"
    )
    technical = "\n".join(
        [
            "【テクニカル分析】",
            "・主要なサポートラインを試す展開",
            "・RSIは売られすぎ圏に接近",
            "・出来高の増加は売りの勢いを示唆",
            f"・次のサポートは{num}付近" if num else "",
        ]
    )
    if ctx.title_has("bitcoin|btc"):
        history = (
            "ビットコインはこれまで何度も大きな調整を経験してきました。"
            "2017年、2021年の暴落時にも「終わり」と言われましたが、長期的には回復し新高値を更新しています。"
        )
    else:
        history = f"{coin}市場は変動が大きいですが、テクノロジーとしての価値は変わっていません。"
    return paragraphs(
        f"{coin}が{ctx.action or '下落'}{f'、{num}を割り込む' if num else ''}",
        f"【現在の状況】\n{coin}が下落圧力に晒されています。{f'価格は{num}を下回り、' if num else ''}市場に警戒感が広がっています。"
        f"{f'24時間の下落率は{num2}に達しています。' if num2 else ''}",
        f"【下落の要因】\n今回の下落は{cause}が主因と見られています。",
        explanation,
        technical,
        f"【歴史的な視点】\n{history}",
        "【今、すべきこと】\n1. パニック売りはしない\n   → 感情的な判断は往々にして最悪のタイミングになる",
        "2. ポートフォリオを見直す\n   → リスク許容度に合っているか確認",
        "3. 追加投資は慎重に\n   → さらなる下落の可能性も考慮し、分割で",
        "4. 長期視点を忘れない\n   → 短期の価格変動に一喜一憂しない",
        "下落相場は、長期投資家にとっては買い増しの機会かもしれません。ただし、「落ちるナイフを掴む」リスクも認識した上で判断しましょう📉",
    )


def default(ctx: SummaryContext) -> str:
    num, num2 = ctx.num, ctx.num2
    subject = ctx.subject
    if ctx.entity_ja:
        detail = f"{ctx.entity_ja}は暗号資産/ブロックチェーン業界で重要なプレイヤーです。今回の動きは、同社/プロジェクトの戦略的な展開として注目されています。"
    else:
        detail = f"{ctx.main_coin}市場は日々進化を続けており、今回のニュースもその一環です。"
    related = ""
    if ctx.details.specific_details:
        related = "【関連情報】\n" + "\n".join(f"・{item}" for item in ctx.details.specific_details)
    return paragraphs(
        f"{subject}{f'が{ctx.action}' if ctx.action else 'に注目'}{f' - {num}規模' if num else ''}",
        f"【概要】\n{subject}に関する重要なニュースが入ってきました。{f'{num}規模の動きとして' if num else ''}暗号資産市場で注目を集めています。",
        f"【詳細】\n{detail}",
        f"関連する数字として{num2}も報じられており、市場への影響が注目されています。" if num2 else "",
        related,
        "【市場への影響】\nこのニュースが市場に与える影響は、短期的には限定的かもしれませんが、長期的なトレンドを形成する一因となる可能性があります。",
        "暗号資産市場は情報の速度が命。ニュースの背景と影響を正しく理解し、冷静な投資判断につなげていきましょう。",
        "詳細が分かり次第、続報をお届けします🔔",
    )


# Mining, regulation and stablecoin items read as the default analysis at this length.
BRANCHES: Dict[str, Callable[[SummaryContext], str]] = {
    "etf": etf,
    "hack": hack,
    "governance": governance,
    "positive": positive,
    "negative": negative,
}
