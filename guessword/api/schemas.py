"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the mobile app and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- ROUND_NOT_ACTIVE: Correct/Skip sent while no round is running
- ROUND_ALREADY_RUNNING: Play again sent while a round is running
- ROUND_OVER_PENDING: New round requested before the last one was handled
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..config import COUNTDOWN_SECONDS, PANIC_SECONDS, TICK_SECONDS


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Which screen the session is on."""
    PLAYING = "playing"
    SCORE = "score"
    ENDED = "ended"


class BuzzName(str, Enum):
    """Haptic cue names."""
    CORRECT = "correct"
    GAME_OVER = "game_over"
    COUNTDOWN_PANIC = "countdown_panic"
    NO_BUZZ = "no_buzz"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    ROUND_NOT_ACTIVE = "ROUND_NOT_ACTIVE"
    ROUND_ALREADY_RUNNING = "ROUND_ALREADY_RUNNING"
    ROUND_OVER_PENDING = "ROUND_OVER_PENDING"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class RoundStateInfo(BaseModel):
    """Everything the game screen renders."""
    word: Optional[str] = None
    score: int = 0
    remaining_seconds: int = Field(0, ge=0)
    remaining_text: str = Field("00:00", description="MM:SS")
    round_over: bool = False
    buzz: BuzzName = BuzzName.NO_BUZZ
    phase: str = Field("ready", description="ready, playing, over, stopped")
    round_number: int = 0


class ScoreInfo(BaseModel):
    """Result handed to the score screen."""
    final_score: int
    round_number: int


class BuzzInfo(BaseModel):
    """A haptic pattern the client should play."""
    buzz: BuzzName
    pattern: list[int] = Field(description="Milliseconds of wait/vibrate, starting with a wait")


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """
    Create a session and start its first round.

    Timing fields left out use the server's configuration.
    """
    countdown_seconds: Optional[int] = Field(None, gt=0, le=3600, examples=[COUNTDOWN_SECONDS])
    tick_seconds: Optional[int] = Field(None, gt=0, examples=[TICK_SECONDS])
    panic_seconds: Optional[int] = Field(None, ge=0, examples=[PANIC_SECONDS])
    seed: Optional[int] = Field(None, description="Seed for a reproducible word order")


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: SessionStatus
    created_at: float
    countdown_seconds: int
    tick_seconds: int
    panic_seconds: int
    state: RoundStateInfo
    result: Optional[ScoreInfo] = None
    history: list[ScoreInfo] = Field(default_factory=list)


class RoundStateResponse(BaseModel):
    """Round state after an action."""
    session_id: str
    status: SessionStatus
    state: RoundStateInfo
    result: Optional[ScoreInfo] = None


class BuzzQueueResponse(BaseModel):
    """Buzzes queued since the last poll, oldest first."""
    session_id: str
    buzzes: list[BuzzInfo] = Field(default_factory=list)


class VocabularyResponse(BaseModel):
    words: list[str]
    count: int


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ErrorResponse(BaseModel):
    """Error body for every non-2xx response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None
