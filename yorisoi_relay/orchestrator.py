"""
Per-message request handling.

``ChatOrchestrator.handle`` runs one message through scoring, tagging and the
danger check, then either uses the fixed safety reply or asks the completion
service, and finally synthesizes the reply text to speech.

The score update is not rolled back when a later step fails: the message was
received and scored even if no reply could be produced.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from .analysis import detect_tags, is_dangerous, matched_danger_keywords
from .lexicon import Lexicon
from .models import ChatReply, DomainTag
from .safety import breathing_guide, danger_response, needs_calming
from .store import SentimentStore

logger = logging.getLogger(__name__)


class Completer(Protocol):
    async def complete(self, user_text: str, tags: Sequence[DomainTag], score: int) -> str: ...


class Synthesizer(Protocol):
    async def synthesize(self, text: str) -> str: ...


class ChatOrchestrator:
    """Sequences the analysis steps and the two gateway calls for a message."""

    def __init__(
        self,
        lexicon: Lexicon,
        store: SentimentStore,
        completion: Completer,
        speech: Synthesizer,
    ) -> None:
        self.lexicon = lexicon
        self.store = store
        self.completion = completion
        self.speech = speech

    async def handle(self, message: str) -> ChatReply:
        """
        Produce the reply for one user message.

        Args:
            message: The user's text, possibly empty

        Returns:
            The reply text, its audio, and the derived metadata

        Raises:
            GatewayError: If the completion or speech call fails
        """
        score = await self.store.update(message)
        tags = detect_tags(message, self.lexicon)

        if is_dangerous(message, self.lexicon):
            logger.warning(
                "Danger keywords detected (%s), using safety response",
                ", ".join(matched_danger_keywords(message, self.lexicon)),
            )
            text = danger_response()
            audio = await self.speech.synthesize(text)
            return ChatReply(text=text, audio=audio, danger=True, score=score, icf=tags)

        text = await self.completion.complete(message, tags, score)
        if needs_calming(score):
            text += breathing_guide()

        audio = await self.speech.synthesize(text)
        return ChatReply(text=text, audio=audio, danger=False, score=score, icf=tags)
