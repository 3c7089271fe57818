"""
Keyword analysis of chat messages.

Everything here is a plain substring scan over the lexicon's word lists. There
is no semantic understanding, so a crisis message phrased without one of the
listed keywords will not be flagged.
"""

from .lexicon import Lexicon
from .models import DomainTag

SCORE_STEP = 5
MIN_SCORE = 0
MAX_SCORE = 100


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def score_text(current: int, text: str, lexicon: Lexicon) -> int:
    """
    Compute the next sentiment score for a message.

    Each distinct listed word found in the text counts once, regardless of
    how often it occurs.

    Args:
        current: The score before this message
        text: The user's message
        lexicon: Word lists to scan

    Returns:
        The adjusted score, clamped to [0, 100]
    """
    score = current
    for word in lexicon.negative_words:
        if word in text:
            score -= SCORE_STEP
    for word in lexicon.positive_words:
        if word in text:
            score += SCORE_STEP
    return clamp_score(score)


def detect_tags(text: str, lexicon: Lexicon) -> list[DomainTag]:
    """Return the ICF tags whose keywords appear in the text, in category order."""
    return [
        lexicon.tags[category]
        for category, keywords in lexicon.domain_keywords.items()
        if any(keyword in text for keyword in keywords)
    ]


def matched_danger_keywords(text: str, lexicon: Lexicon) -> list[str]:
    return [word for word in lexicon.danger_words if word in text]


def is_dangerous(text: str, lexicon: Lexicon) -> bool:
    """True if any crisis keyword appears in the text."""
    return any(word in text for word in lexicon.danger_words)
