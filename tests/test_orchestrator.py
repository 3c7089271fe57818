"""
Tests for per-message orchestration with fake gateways.
"""

import pytest

from yorisoi_relay.config import DEFAULT_ICF_TAGS_PATH
from yorisoi_relay.errors import GatewayError
from yorisoi_relay.lexicon import load_lexicon
from yorisoi_relay.orchestrator import ChatOrchestrator
from yorisoi_relay.safety import BREATHING_GUIDE, DANGER_MESSAGE, danger_response
from yorisoi_relay.store import SentimentStore

LEXICON = load_lexicon(DEFAULT_ICF_TAGS_PATH)


class FakeCompletion:
    """Completion gateway stand-in that records its calls."""

    def __init__(self, reply="聞かせてくれてありがとう", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, user_text, tags, score):
        self.calls.append((user_text, list(tags), score))
        if self.error:
            raise self.error
        return self.reply


class FakeSpeech:
    """Speech gateway stand-in that records its calls."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def synthesize(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return "QVVESU8="


class TestChatOrchestrator:
    """Tests for per-message orchestration."""

    def setup_method(self):
        """Set up a fresh store, fake gateways and orchestrator for each test."""
        self.store = SentimentStore(LEXICON)
        self.completion = FakeCompletion()
        self.speech = FakeSpeech()
        self.orchestrator = ChatOrchestrator(LEXICON, self.store, self.completion, self.speech)

    async def test_normal_message(self):
        """Test that a normal message is tagged, completed and synthesized."""
        reply = await self.orchestrator.handle("今日は学校で友達と話して楽しかった")

        assert reply.danger is False
        assert reply.score == 70
        assert reply.icf == [LEXICON.tags["school"], LEXICON.tags["relationships"]]
        assert reply.text == "聞かせてくれてありがとう"
        assert reply.audio == "QVVESU8="
        assert self.completion.calls == [
            ("今日は学校で友達と話して楽しかった", reply.icf, 70)
        ]
        assert self.speech.calls == [reply.text]

    async def test_positive_keyword_raises_score(self):
        """Test that a positive keyword raises the score."""
        reply = await self.orchestrator.handle("学校で友達と遊んで楽しい一日だった")
        assert reply.score == 75

    async def test_danger_bypasses_completion(self):
        """Test that a crisis message gets the fixed reply without a completion call."""
        reply = await self.orchestrator.handle("もう無理、消えたい")

        assert reply.danger is True
        assert reply.text == danger_response()
        assert reply.text.startswith(DANGER_MESSAGE)
        assert reply.text.endswith(BREATHING_GUIDE)
        assert reply.score == 65
        assert reply.icf == []
        assert self.completion.calls == []
        assert self.speech.calls == [danger_response()]

    async def test_breathing_guide_below_threshold(self):
        """Test that a score below 50 appends the breathing guide."""
        store = SentimentStore(LEXICON, initial_score=55)
        orchestrator = ChatOrchestrator(LEXICON, store, self.completion, self.speech)

        reply = await orchestrator.handle("疲れたし不安")

        assert reply.score == 45
        assert reply.text == "聞かせてくれてありがとう" + BREATHING_GUIDE
        assert self.speech.calls == [reply.text]

    async def test_no_breathing_guide_at_threshold(self):
        """Test that a score of exactly 50 gets no breathing guide."""
        store = SentimentStore(LEXICON, initial_score=55)
        orchestrator = ChatOrchestrator(LEXICON, store, self.completion, self.speech)

        reply = await orchestrator.handle("疲れた")

        assert reply.score == 50
        assert reply.text == "聞かせてくれてありがとう"

    async def test_empty_message(self):
        """Test that an empty message is still sent for completion."""
        reply = await self.orchestrator.handle("")

        assert reply.danger is False
        assert reply.icf == []
        assert reply.score == 70
        assert self.completion.calls == [("", [], 70)]

    async def test_completion_failure_propagates_and_keeps_score(self):
        """Test that a completion failure propagates and the score update is kept."""
        self.completion.error = GatewayError("quota")

        with pytest.raises(GatewayError):
            await self.orchestrator.handle("つらい")

        assert self.speech.calls == []
        assert await self.store.read() == 65
        assert len(await self.store.history()) == 1

    async def test_speech_failure_propagates(self):
        """Test that a speech failure propagates."""
        self.speech.error = GatewayError("tts down")

        with pytest.raises(GatewayError):
            await self.orchestrator.handle("死にたい")

        assert self.completion.calls == []
