"""
Tests for loading the ICF tag dictionary.
"""

import json

import pytest

from yorisoi_relay.config import DEFAULT_ICF_TAGS_PATH
from yorisoi_relay.errors import LexiconError
from yorisoi_relay.lexicon import DOMAIN_KEYWORDS, load_lexicon
from yorisoi_relay.models import DomainTag


class TestLoadLexicon:
    """Tests for loading the ICF tag dictionary."""

    def test_packaged_tags(self):
        """Test the packaged tag file covers every category in order."""
        lexicon = load_lexicon(DEFAULT_ICF_TAGS_PATH)
        assert list(lexicon.tags) == list(DOMAIN_KEYWORDS)
        assert lexicon.tags["sleep"] == DomainTag(code="b134", label="睡眠機能")

    def test_custom_tags(self, tmp_path):
        """Test that a custom file is loaded and extra categories are ignored."""
        data = {category: {"code": f"x{i}", "label": category} for i, category in enumerate(DOMAIN_KEYWORDS)}
        data["extra"] = {"code": "z", "label": "ignored"}
        path = tmp_path / "tags.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        lexicon = load_lexicon(path)
        assert lexicon.tags["work"] == DomainTag(code="x7", label="work")
        assert "extra" not in lexicon.tags

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises LexiconError."""
        with pytest.raises(LexiconError, match="Cannot read"):
            load_lexicon(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test that invalid JSON raises LexiconError."""
        path = tmp_path / "tags.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(LexiconError, match="not valid JSON"):
            load_lexicon(path)

    def test_not_an_object(self, tmp_path):
        """Test that a non-object document raises LexiconError."""
        path = tmp_path / "tags.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(LexiconError, match="must be a JSON object"):
            load_lexicon(path)

    def test_missing_category(self, tmp_path):
        """Test that a missing category raises LexiconError."""
        data = json.loads(DEFAULT_ICF_TAGS_PATH.read_text(encoding="utf-8"))
        del data["work"]
        path = tmp_path / "tags.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(LexiconError, match="missing categories: work"):
            load_lexicon(path)

    def test_malformed_tag(self, tmp_path):
        """Test that a tag without a label raises LexiconError."""
        data = json.loads(DEFAULT_ICF_TAGS_PATH.read_text(encoding="utf-8"))
        data["sleep"] = {"code": "b134"}
        path = tmp_path / "tags.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(LexiconError, match="malformed"):
            load_lexicon(path)

    def test_lexicon_is_immutable(self):
        """Test that the lexicon cannot be modified after loading."""
        lexicon = load_lexicon(DEFAULT_ICF_TAGS_PATH)
        with pytest.raises(Exception):
            lexicon.danger_words = ()
