"""
Static word lists and the ICF tag dictionary.

The lexicon is built once at startup and handed to the components that need
it. Loading fails loudly with ``LexiconError`` so a bad tag resource stops the
process before it serves any request.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import LexiconError
from .models import DomainTag

logger = logging.getLogger(__name__)

NEGATIVE_WORDS = ("疲れ", "つらい", "不安", "悲しい", "こわい", "もうだめ", "消えたい", "死にたい", "いやだ")
POSITIVE_WORDS = ("うれしい", "楽しい", "安心", "大丈夫", "できた", "ありがとう", "ほっと")
DANGER_WORDS = ("死にたい", "消えたい", "自殺", "限界", "もう無理")

# Category order is the order tags are reported in.
DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "sleep": ("眠", "寝"),
    "emotion": ("不安", "怖"),
    "stress": ("疲", "忙"),
    "learning": ("勉強", "テスト"),
    "school": ("学校",),
    "relationships": ("友", "人間関係"),
    "family": ("家", "親"),
    "work": ("仕事", "職場"),
}


class Lexicon(BaseModel):
    """Immutable keyword configuration shared by the analysis functions."""

    model_config = ConfigDict(frozen=True)

    tags: dict[str, DomainTag]
    negative_words: tuple[str, ...] = NEGATIVE_WORDS
    positive_words: tuple[str, ...] = POSITIVE_WORDS
    danger_words: tuple[str, ...] = DANGER_WORDS
    domain_keywords: dict[str, tuple[str, ...]] = DOMAIN_KEYWORDS


def load_lexicon(path: Path) -> Lexicon:
    """
    Load the ICF tag dictionary from a JSON file and build the lexicon.

    Args:
        path: Location of the tag JSON, an object keyed by category name

    Returns:
        The immutable Lexicon

    Raises:
        LexiconError: If the file is unreadable, not JSON, or lacks a category
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise LexiconError(f"Cannot read ICF tags from {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LexiconError(f"ICF tags in {path} are not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise LexiconError(f"ICF tags in {path} must be a JSON object")

    missing = [category for category in DOMAIN_KEYWORDS if category not in raw]
    if missing:
        raise LexiconError(f"ICF tags in {path} are missing categories: {', '.join(missing)}")

    try:
        tags = {category: DomainTag.model_validate(raw[category]) for category in DOMAIN_KEYWORDS}
    except ValidationError as e:
        raise LexiconError(f"ICF tags in {path} are malformed: {e}") from e

    logger.info("Loaded %d ICF tags from %s", len(tags), path)
    return Lexicon(tags=tags)
