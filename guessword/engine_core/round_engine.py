"""
Round Engine - All the logic needed to run one round of the game.

State:
- word queue and current word
- score (may go negative)
- remaining time, driven by an IntervalScheduler
- round_over and buzz edge-triggered events

The presentation layer observes the engine's values, calls skip() and
guess_correct() for the two gestures, and acknowledges the edge-triggered
events after reacting to them.

Concurrency: the engine never locks. Ticks and player actions must arrive
through the same serial context (one event loop, or the thread that drives a
ManualScheduler).
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Iterable
import logging
import random

from ..config import DONE, RoundConfig
from .errors import RoundAlreadyRunning, RoundNotActive, RoundOverNotAcknowledged
from .events import BuzzType, EdgeEvent, Ticket
from .formatting import format_elapsed_time
from .observable import ObservableValue
from .timer import IntervalScheduler, TimerHandle
from .vocabulary import WORDS, WordQueue

logger = logging.getLogger(__name__)


class RoundPhase(Enum):
    """Lifecycle of the engine."""
    READY = "ready"  # Never started
    PLAYING = "playing"  # Countdown running
    OVER = "over"  # Countdown reached zero
    STOPPED = "stopped"  # Torn down


@dataclass(frozen=True)
class RoundSnapshot:
    """Read-only copy of the observable state at one moment."""
    phase: RoundPhase
    word: str | None
    score: int
    remaining_seconds: int
    remaining_text: str
    round_over: bool
    buzz: BuzzType


class RoundEngine:
    """
    Runs rounds of the word-guessing game.

    Usage:
        engine = RoundEngine(scheduler=AsyncioScheduler())
        engine.round_over.observe(on_round_over)
        engine.start()

        engine.guess_correct()
        engine.skip()

        # later, on round over
        engine.acknowledge_round_over()
        engine.teardown()
    """

    def __init__(
        self,
        scheduler: IntervalScheduler,
        config: RoundConfig | None = None,
        vocabulary: Iterable[str] = WORDS,
        rng: random.Random | None = None,
    ):
        self.config = config or RoundConfig()
        self.scheduler = scheduler
        self.queue = WordQueue(vocabulary, rng)
        self.phase = RoundPhase.READY
        self.rounds_played = 0
        self._countdown: TimerHandle | None = None

        # Observable state
        self.word: ObservableValue[str | None] = ObservableValue(None)
        self.score: ObservableValue[int] = ObservableValue(0)
        self.remaining: ObservableValue[int] = ObservableValue(self.config.countdown_seconds)
        self.remaining_text: ObservableValue[str] = self.remaining.map(format_elapsed_time)

        # Edge-triggered events
        self.round_over: EdgeEvent[bool] = EdgeEvent(False, name="round_over")
        self.buzz: EdgeEvent[BuzzType] = EdgeEvent(BuzzType.NO_BUZZ, name="buzz")

    # =========================================================================
    # Player actions
    # =========================================================================

    def start(self) -> None:
        """
        Start a new round.

        Shuffles a fresh word queue, shows its first word, resets the score
        and the remaining time, and starts the countdown.

        Raises:
            RoundAlreadyRunning: The countdown of the current round is running
            RoundOverNotAcknowledged: The last round ended and nobody
                acknowledged it yet
        """
        if self.phase is RoundPhase.PLAYING:
            raise RoundAlreadyRunning(self.phase.value)
        if self.phase is RoundPhase.OVER and self.round_over.is_pending:
            raise RoundOverNotAcknowledged(self.phase.value)

        # start() may run inside the last tick of the previous countdown
        self._release_countdown()

        # Leftovers of a torn-down round
        self.round_over.acknowledge()
        self.buzz.acknowledge()

        self.queue.reset()
        self.phase = RoundPhase.PLAYING
        self.advance_word()
        self.score.set(0)
        self.remaining.set(self.config.countdown_seconds)

        self.rounds_played += 1
        round_number = self.rounds_played
        self._countdown = self.scheduler.schedule_periodic(
            self.config.tick_seconds,
            self.config.tick_count,
            partial(self._on_tick, round_number),
            partial(self._on_finish, round_number),
        )
        logger.info(
            "Round %d started: %ds countdown, first word %r",
            self.rounds_played, self.config.countdown_seconds, self.word.value,
        )

    def skip(self) -> None:
        """Skip the current word, costing one point."""
        self._require_playing("skip")
        self.score.set(self.score.value - 1)
        self.advance_word()

    def guess_correct(self) -> None:
        """Count the current word as guessed, buzz, and move on."""
        self._require_playing("guess_correct")
        self.score.set(self.score.value + 1)
        self.buzz.fire(BuzzType.CORRECT)
        self.advance_word()

    def acknowledge_round_over(self, ticket: Ticket[bool] | None = None) -> bool:
        """The consumer has reacted to the end of the round."""
        return self.round_over.acknowledge(ticket)

    def acknowledge_feedback(self, ticket: Ticket[BuzzType] | None = None) -> bool:
        """The consumer has played the buzz."""
        return self.buzz.acknowledge(ticket)

    def teardown(self) -> None:
        """
        Cancel the countdown. Safe to call any number of times, also after
        the countdown finished on its own.
        """
        self._release_countdown()
        if self.phase is not RoundPhase.STOPPED:
            logger.info("Round engine torn down (phase=%s)", self.phase.value)
        self.phase = RoundPhase.STOPPED

    # =========================================================================
    # Internals
    # =========================================================================

    def advance_word(self) -> None:
        """Move to the next word, reshuffling when the queue is exhausted."""
        self.word.set(self.queue.advance())

    def _release_countdown(self) -> None:
        if self._countdown is not None:
            self.scheduler.cancel(self._countdown)
            self._countdown = None

    def _on_tick(self, round_number: int, elapsed: int) -> None:
        if round_number != self.rounds_played or self.phase is not RoundPhase.PLAYING:
            return
        remaining = max(DONE, self.remaining.value - self.config.tick_seconds)
        self.remaining.set(remaining)
        logger.debug("tick %d: %ds left", elapsed, remaining)

        if remaining == DONE:
            self._finish_round()
        elif remaining < self.config.panic_seconds:
            self.buzz.fire(BuzzType.COUNTDOWN_PANIC)

    def _on_finish(self, round_number: int) -> None:
        if round_number != self.rounds_played:
            return
        self._countdown = None
        if self.phase is RoundPhase.PLAYING:
            self.remaining.set(DONE)
            self._finish_round()

    def _finish_round(self) -> None:
        round_number = self.rounds_played
        self.phase = RoundPhase.OVER
        logger.info("Round %d over, final score %d", round_number, self.score.value)
        self.round_over.fire(True)
        # No round-over buzz if a listener already started the next round
        if self.rounds_played == round_number:
            self.buzz.fire(BuzzType.GAME_OVER)

    def _require_playing(self, operation: str) -> None:
        if self.phase is not RoundPhase.PLAYING:
            raise RoundNotActive(operation, self.phase.value)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def countdown_running(self) -> bool:
        return self._countdown is not None and self._countdown.active

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            phase=self.phase,
            word=self.word.value,
            score=self.score.value,
            remaining_seconds=self.remaining.value,
            remaining_text=self.remaining_text.value,
            round_over=self.round_over.value,
            buzz=self.buzz.value,
        )
