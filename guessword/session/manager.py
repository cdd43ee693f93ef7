"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Client creates a session → engine + game loop, first round starts
2. During the round:
   - Client sends Correct / Skip
   - Countdown ticks on the shared scheduler
   - Buzzes queue up for the client to play
3. Round ends → score screen, client may play again
4. Client ends the session → countdown cancelled, session removed

PERSISTENCE RULES:
- No database
- Sessions live in memory only and vanish with the process
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable
import logging
import random
import time
import uuid

from ..config import RoundConfig
from ..engine_core.errors import SessionNotFound
from ..engine_core.round_engine import RoundEngine
from ..engine_core.timer import IntervalScheduler
from ..engine_core.vocabulary import WORDS
from .game_loop import GameLoop, LoopState, RecordingHaptics

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Round in progress or score screen showing
    GAME_OVER = "game_over"  # Ended by the player
    ABANDONED = "abandoned"  # Cleaned up or ended for another reason


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The round engine
    - The game loop consuming it
    - Buzzes waiting for the client

    The session is destroyed when the player leaves.
    """
    session_id: str
    engine: RoundEngine
    loop: GameLoop
    haptics: RecordingHaptics
    created_at: float

    state: SessionState = SessionState.ACTIVE

    @property
    def config(self) -> RoundConfig:
        return self.engine.config

    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def is_score_screen(self) -> bool:
        return self.loop.state is LoopState.SCORE


class SessionManager:
    """
    Manages game sessions.

    All sessions share one scheduler, so every countdown runs in the same
    execution context as the calls made through the manager.
    """

    def __init__(
        self,
        scheduler: IntervalScheduler,
        config: RoundConfig | None = None,
        vocabulary: Iterable[str] = WORDS,
    ):
        self.scheduler = scheduler
        self.config = config or RoundConfig()
        self.vocabulary = tuple(vocabulary)
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        config: RoundConfig | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a session and start its first round.

        Args:
            config: Round timing (defaults to the manager's)
            seed: Seed for the word shuffle, for reproducible rounds

        Returns:
            New Session with a running countdown
        """
        session_id = str(uuid.uuid4())
        engine = RoundEngine(
            scheduler=self.scheduler,
            config=config or self.config,
            vocabulary=self.vocabulary,
            rng=random.Random(seed),
        )
        haptics = RecordingHaptics()
        loop = GameLoop(engine, haptics=haptics)

        session = Session(
            session_id=session_id,
            engine=engine,
            loop=loop,
            haptics=haptics,
            created_at=time.time(),
        )
        self._sessions[session_id] = session
        loop.begin()
        logger.info("Session %s created", session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """Get a session by ID or raise SessionNotFound."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session: cancel its countdown and forget it.

        Returns:
            False if there was no such session
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.loop.close()
        session.haptics.drain()
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        End sessions older than max_age that are sitting on the score screen.

        Returns:
            IDs of the sessions that were removed
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
            and session.is_score_screen()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return to_remove

    def shutdown(self) -> None:
        """End every session."""
        for session_id in list(self._sessions):
            self.end_session(session_id, reason="shutdown")
