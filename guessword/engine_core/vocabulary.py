"""
Vocabulary - The fixed word list and the shuffled word queue.

The front of the queue is the next word to guess. When the queue runs dry it
is refilled with a fresh shuffle of the whole vocabulary, so a word never
repeats within one pass but may come back in the next.
"""

from __future__ import annotations
from typing import Iterable
import random


WORDS: tuple[str, ...] = (
    "queen",
    "hospital",
    "basketball",
    "cat",
    "change",
    "snail",
    "soup",
    "calendar",
    "sad",
    "desk",
    "guitar",
    "home",
    "railway",
    "zebra",
    "jelly",
    "car",
    "crow",
    "trade",
    "bag",
    "roll",
    "bubble",
)


class WordQueue:
    """
    Shuffled queue over a fixed vocabulary.

    Args:
        vocabulary: Words to draw from (defaults to WORDS)
        rng: Random source used for shuffling (seed it for reproducible rounds)
    """

    def __init__(
        self,
        vocabulary: Iterable[str] = WORDS,
        rng: random.Random | None = None,
    ):
        self.vocabulary: tuple[str, ...] = tuple(vocabulary)
        if not self.vocabulary:
            raise ValueError("Vocabulary must contain at least one word")
        self._rng = rng or random.Random()
        self._words: list[str] = []
        self.passes = 0

    def reset(self) -> None:
        """Refill with a fresh shuffle of the whole vocabulary."""
        self._words = list(self.vocabulary)
        self._rng.shuffle(self._words)
        self.passes += 1

    def advance(self) -> str:
        """Pop the next word, reshuffling first if the queue is exhausted."""
        if not self._words:
            self.reset()
        return self._words.pop(0)

    @property
    def remaining(self) -> list[str]:
        """Words still to come in this pass, front first."""
        return list(self._words)

    def __len__(self) -> int:
        return len(self._words)
