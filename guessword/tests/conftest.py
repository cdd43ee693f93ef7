"""
Pytest fixtures for Guessword tests.
"""

import random

import pytest

from ..config import RoundConfig
from ..engine_core.round_engine import RoundEngine
from ..engine_core.timer import ManualScheduler
from ..session import GameLoop, RecordingHaptics, SessionManager


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock that only moves when a test advances it."""
    return ManualScheduler()


@pytest.fixture
def short_config() -> RoundConfig:
    """10 second round, panic buzzes below 3 seconds."""
    return RoundConfig(countdown_seconds=10, tick_seconds=1, panic_seconds=3)


@pytest.fixture
def engine(scheduler: ManualScheduler) -> RoundEngine:
    """Canonical 60 second engine over the full vocabulary."""
    return RoundEngine(scheduler, config=RoundConfig(), rng=random.Random(42))


@pytest.fixture
def two_word_engine(scheduler: ManualScheduler, short_config: RoundConfig) -> RoundEngine:
    """10 second engine over the vocabulary ["a", "b"]."""
    return RoundEngine(
        scheduler,
        config=short_config,
        vocabulary=["a", "b"],
        rng=random.Random(7),
    )


@pytest.fixture
def haptics() -> RecordingHaptics:
    return RecordingHaptics()


@pytest.fixture
def game_loop(two_word_engine: RoundEngine, haptics: RecordingHaptics) -> GameLoop:
    """Game loop on the short engine, first round already running."""
    loop = GameLoop(two_word_engine, haptics=haptics)
    loop.begin()
    return loop


@pytest.fixture
def session_manager(scheduler: ManualScheduler, short_config: RoundConfig) -> SessionManager:
    return SessionManager(scheduler, config=short_config)
