"""
Sentiment score storage for the Yorisoi Relay service.

This module provides an in-memory store that owns the running sentiment score
and its history, and streams every update to subscribers. The score lives only
in process memory and resets on restart.
"""

import asyncio
import time
from collections import deque
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from .analysis import score_text
from .lexicon import Lexicon
from .models import ScorePoint

DEFAULT_INITIAL_SCORE = 70
DEFAULT_HISTORY_LIMIT = 1000


def _now_millis() -> int:
    return int(time.time() * 1000)


class SentimentStore:
    """
    In-memory sentiment score with a bounded history and real-time streaming.

    Every update is a read-modify-write performed while holding the store's
    condition, so concurrent requests are applied one after another and none
    are lost. The history keeps the most recent ``history_limit`` points.
    """

    def __init__(
        self,
        lexicon: Lexicon,
        initial_score: int = DEFAULT_INITIAL_SCORE,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._lexicon = lexicon
        self._score = initial_score
        self._history: deque[ScorePoint] = deque(maxlen=history_limit)
        self._condition = asyncio.Condition()
        self._update_counter = 0  # Simple counter to detect updates

    async def update(self, text: str) -> int:
        """
        Score a message, record the result and notify all subscribers.

        Args:
            text: The user's message

        Returns:
            The new score
        """
        async with self._condition:
            self._score = score_text(self._score, text, self._lexicon)
            self._history.append(ScorePoint(time=_now_millis(), score=self._score))
            self._update_counter += 1

            self._condition.notify_all()

            return self._score

    async def read(self) -> int:
        """Get the current score."""
        async with self._condition:
            return self._score

    async def history(self) -> list[ScorePoint]:
        """Get a snapshot of the recorded score history, oldest first."""
        async with self._condition:
            return list(self._history)

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[ScorePoint, None], None]:
        """
        Stream score updates to a subscriber.

        The generator first yields the current score, stamped now if nothing
        has been recorded yet, then every subsequent point in order. A
        subscriber that falls more than ``history_limit`` updates behind
        resumes from the oldest point still retained.

        Yields:
            An async generator of ScorePoint objects
        """

        async def score_generator() -> AsyncGenerator[ScorePoint, None]:
            async with self._condition:
                last_seen_counter = self._update_counter
                if self._history:
                    current = self._history[-1]
                else:
                    current = ScorePoint(time=_now_millis(), score=self._score)
            yield current

            try:
                while True:
                    async with self._condition:
                        await self._condition.wait_for(
                            lambda: self._update_counter > last_seen_counter
                        )
                        missed = self._update_counter - last_seen_counter
                        last_seen_counter = self._update_counter
                        # Points older than the history window are gone
                        missed = min(missed, len(self._history))
                        points = list(self._history)[-missed:]
                    for point in points:
                        yield point

            except (asyncio.CancelledError, GeneratorExit):
                # Client disconnected or generator closed
                return

        yield score_generator()
