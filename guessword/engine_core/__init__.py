"""
Engine Core - The round engine and its building blocks.

The engine is the runtime that:
1. Shuffles the word queue
2. Keeps score
3. Runs the countdown through an interval scheduler
4. Signals round over and haptic cues as edge-triggered events
"""

from .errors import (
    GuessWordError,
    PreconditionError,
    RoundNotActive,
    RoundAlreadyRunning,
    RoundOverNotAcknowledged,
    SessionNotFound,
)
from .events import BuzzType, BUZZ_PATTERNS, EdgeEvent, Ticket
from .formatting import format_elapsed_time
from .observable import ObservableValue
from .round_engine import RoundEngine, RoundPhase, RoundSnapshot
from .timer import (
    IntervalScheduler,
    ManualScheduler,
    AsyncioScheduler,
    TimerHandle,
    TimerState,
)
from .vocabulary import WORDS, WordQueue

__all__ = [
    "GuessWordError",
    "PreconditionError",
    "RoundNotActive",
    "RoundAlreadyRunning",
    "RoundOverNotAcknowledged",
    "SessionNotFound",
    "BuzzType",
    "BUZZ_PATTERNS",
    "EdgeEvent",
    "Ticket",
    "format_elapsed_time",
    "ObservableValue",
    "RoundEngine",
    "RoundPhase",
    "RoundSnapshot",
    "IntervalScheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "TimerHandle",
    "TimerState",
    "WORDS",
    "WordQueue",
]
