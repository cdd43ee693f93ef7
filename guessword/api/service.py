"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session/engine calls
2. Manages sessions
3. Formats responses for mobile

This layer is framework-agnostic. Errors are raised as engine exceptions
(SessionNotFound, PreconditionError subclasses) and mapped to HTTP by the app.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    SessionResponse,
    RoundStateResponse,
    BuzzQueueResponse,
    VocabularyResponse,
    # Shared
    RoundStateInfo,
    ScoreInfo,
    BuzzInfo,
    # Enums
    SessionStatus,
    BuzzName,
)
from ..config import RoundConfig
from ..engine_core.timer import AsyncioScheduler, IntervalScheduler
from ..session import Session, SessionManager, LoopState, ScoreResult


@dataclass
class APIService:
    """
    Main API service for the mobile app.

    Usage:
        service = APIService()

        # Create session (starts the first round)
        session_response = service.create_session(CreateSessionRequest())

        # Player gestures
        service.correct(session_response.session_id)
        service.skip(session_response.session_id)

        # Haptics to play
        service.get_buzzes(session_response.session_id)
    """
    scheduler: IntervalScheduler = field(default_factory=AsyncioScheduler)
    config: RoundConfig = field(default_factory=RoundConfig.from_env)
    session_manager: SessionManager | None = None

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(self.scheduler, self.config)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new session and start its first round.

        Timing values missing from the request come from the service config.

        Raises:
            pydantic.ValidationError: Inconsistent timing values
        """
        overrides = request.model_dump(exclude_none=True, exclude={"seed"})
        config = RoundConfig(**{**self.config.model_dump(), **overrides})
        session = self.session_manager.create_session(config=config, seed=request.seed)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse:
        session = self.session_manager.require_session(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """End a session and cancel its countdown."""
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Game Loop
    # =========================================================================

    def get_state(self, session_id: str) -> RoundStateResponse:
        session = self.session_manager.require_session(session_id)
        return self._state_response(session)

    def correct(self, session_id: str) -> RoundStateResponse:
        """The word was guessed."""
        session = self.session_manager.require_session(session_id)
        session.loop.correct()
        return self._state_response(session)

    def skip(self, session_id: str) -> RoundStateResponse:
        """The word was skipped."""
        session = self.session_manager.require_session(session_id)
        session.loop.skip()
        return self._state_response(session)

    def play_again(self, session_id: str) -> RoundStateResponse:
        """Start a new round from the score screen."""
        session = self.session_manager.require_session(session_id)
        session.loop.play_again()
        return self._state_response(session)

    def get_buzzes(self, session_id: str) -> BuzzQueueResponse:
        """Drain the buzzes queued for the client."""
        session = self.session_manager.require_session(session_id)
        return BuzzQueueResponse(
            session_id=session_id,
            buzzes=[
                BuzzInfo(buzz=BuzzName(buzz.value), pattern=list(buzz.pattern))
                for buzz in session.haptics.drain()
            ],
        )

    def get_vocabulary(self) -> VocabularyResponse:
        words = list(self.session_manager.vocabulary)
        return VocabularyResponse(words=words, count=len(words))

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def state_info(self, session: Session) -> RoundStateInfo:
        snapshot = session.engine.snapshot()
        return RoundStateInfo(
            word=snapshot.word,
            score=snapshot.score,
            remaining_seconds=snapshot.remaining_seconds,
            remaining_text=snapshot.remaining_text,
            round_over=snapshot.round_over,
            buzz=BuzzName(snapshot.buzz.value),
            phase=snapshot.phase.value,
            round_number=session.engine.rounds_played,
        )

    def _status(self, session: Session) -> SessionStatus:
        if session.loop.state is LoopState.SCORE:
            return SessionStatus.SCORE
        if session.loop.state is LoopState.CLOSED:
            return SessionStatus.ENDED
        return SessionStatus.PLAYING

    def _score_info(self, result: ScoreResult | None) -> ScoreInfo | None:
        if result is None:
            return None
        return ScoreInfo(final_score=result.final_score, round_number=result.round_number)

    def _state_response(self, session: Session) -> RoundStateResponse:
        return RoundStateResponse(
            session_id=session.session_id,
            status=self._status(session),
            state=self.state_info(session),
            result=self._score_info(session.loop.result),
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        config = session.config
        return SessionResponse(
            session_id=session.session_id,
            status=self._status(session),
            created_at=session.created_at,
            countdown_seconds=config.countdown_seconds,
            tick_seconds=config.tick_seconds,
            panic_seconds=config.panic_seconds,
            state=self.state_info(session),
            result=self._score_info(session.loop.result),
            history=[self._score_info(r) for r in session.loop.history],
        )
