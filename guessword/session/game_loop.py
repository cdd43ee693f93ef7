"""
Game Loop - The screen-side consumer of the round engine.

The loop:
1. Player reads the word and presses Correct or Skip
2. Engine updates score and word, buzzes on a correct guess
3. Final seconds buzz every tick
4. Countdown ends: loop switches to the score screen with the final score
5. Player plays again, or closes the game

Every edge-triggered event the loop reacts to is acknowledged right away, so
the score screen is entered exactly once per round.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import logging

from ..engine_core.errors import PreconditionError, RoundAlreadyRunning, RoundNotActive
from ..engine_core.events import BuzzType, Ticket
from ..engine_core.round_engine import RoundEngine

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """Which screen the player is looking at."""
    GAME = "game"
    SCORE = "score"
    CLOSED = "closed"


@dataclass(frozen=True)
class ScoreResult:
    """What the score screen receives when a round ends."""
    final_score: int
    round_number: int


class Haptics(ABC):
    """Plays buzz patterns on a device."""

    @abstractmethod
    def vibrate(self, buzz: BuzzType) -> None:
        ...


@dataclass
class RecordingHaptics(Haptics):
    """
    Haptics that keeps what it was asked to play.

    Remote clients fetch the queue with drain() and vibrate themselves.
    """
    pending: list[BuzzType] = field(default_factory=list)
    played_count: int = 0

    def vibrate(self, buzz: BuzzType) -> None:
        self.pending.append(buzz)
        self.played_count += 1

    def drain(self) -> list[BuzzType]:
        buzzes = self.pending.copy()
        self.pending.clear()
        return buzzes


class GameLoop:
    """
    Drives the game and score screens from the engine's events.

    Usage:
        loop = GameLoop(engine, haptics=RecordingHaptics())
        loop.begin()

        loop.correct()
        loop.skip()

        # ... countdown runs out ...
        assert loop.state == LoopState.SCORE
        print(loop.result.final_score)

        loop.play_again()
    """

    def __init__(self, engine: RoundEngine, haptics: Haptics | None = None):
        self.engine = engine
        self.haptics = haptics or RecordingHaptics()
        self.state = LoopState.GAME
        self.result: ScoreResult | None = None
        self.history: list[ScoreResult] = []
        self._unsubscribe = [
            engine.round_over.observe(self._on_round_over),
            engine.buzz.observe(self._on_buzz),
        ]

    def begin(self) -> LoopState:
        """Start the first round."""
        self._require(LoopState.GAME, "begin")
        self.engine.start()
        return self.state

    def correct(self) -> LoopState:
        self._require(LoopState.GAME, "correct", RoundNotActive)
        self.engine.guess_correct()
        return self.state

    def skip(self) -> LoopState:
        self._require(LoopState.GAME, "skip", RoundNotActive)
        self.engine.skip()
        return self.state

    def play_again(self) -> LoopState:
        """Leave the score screen and start a new round."""
        if self.state is LoopState.GAME:
            raise RoundAlreadyRunning(self.engine.phase.value)
        self._require(LoopState.SCORE, "play_again")
        self.result = None
        self.state = LoopState.GAME
        self.engine.start()
        return self.state

    def close(self) -> None:
        """Tear the engine down and stop listening to it."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
        self.engine.teardown()
        self.state = LoopState.CLOSED

    def _on_round_over(self, ticket: Ticket[bool]) -> None:
        if not ticket.pending:
            return
        self.result = ScoreResult(
            final_score=self.engine.score.value,
            round_number=self.engine.rounds_played,
        )
        self.history.append(self.result)
        self.state = LoopState.SCORE
        logger.info("Showing score screen: %d", self.result.final_score)
        ticket.acknowledge()

    def _on_buzz(self, ticket: Ticket[BuzzType]) -> None:
        if not ticket.pending or ticket.value is BuzzType.NO_BUZZ:
            return
        self.haptics.vibrate(ticket.value)
        ticket.acknowledge()

    def _require(
        self,
        expected: LoopState,
        operation: str,
        error: type[PreconditionError] = PreconditionError,
    ) -> None:
        if self.state is not expected:
            raise error(operation, self.state.value)
