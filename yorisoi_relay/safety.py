"""
Pre-scripted responses used instead of, or alongside, generated text.
"""

DANGER_MESSAGE = (
    "今、とてもつらい気持ちなのですね。あなたの気持ちは大切で、"
    "ひとりで抱えなくて大丈夫です。\n\n"
    "安心できる大人や、信頼できる先生・家族と一緒に話してもらえると安全です。"
    "私はここにいますが、命に関わる内容では専門家の力も必要です。\n\n"
    "まずは深呼吸を一つしてみませんか？\n"
    "吸う息を４つ数えながら、吐く息を６つ数えながら、ゆっくりで大丈夫です。"
)

BREATHING_GUIDE = (
    "\n\n少しだけ呼吸を整える時間を一緒にとりましょう。"
    "無理のない範囲で大丈夫です。\n"
    "① 鼻から4秒かけて吸う\n"
    "② 2秒そのまま\n"
    "③ 口から6秒かけてゆっくり吐く\n"
    "あなたのペースでOKですからね。"
)

# Scores below this get the breathing guide appended to generated replies.
CALMING_THRESHOLD = 50


def breathing_guide() -> str:
    return BREATHING_GUIDE


def danger_response() -> str:
    """The fixed reply for messages containing crisis keywords."""
    return DANGER_MESSAGE + BREATHING_GUIDE


def needs_calming(score: int) -> bool:
    return score < CALMING_THRESHOLD
