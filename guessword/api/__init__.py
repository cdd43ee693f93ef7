"""
API Module - Mobile app interface.

Exposes the game via REST API for mobile consumption.
The mobile app:
1. Creates a session (the first round starts right away)
2. Sends Correct / Skip for each word
3. Plays the buzz patterns it receives
4. Shows the score screen when the round ends, offers play again

All state is session-scoped and in memory. No user accounts.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    SessionResponse,
    RoundStateResponse,
    BuzzQueueResponse,
    VocabularyResponse,
    ErrorResponse,
    # Shared
    RoundStateInfo,
    ScoreInfo,
    BuzzInfo,
)
from .service import APIService

__all__ = [
    # Requests
    "CreateSessionRequest",
    # Responses
    "SessionResponse",
    "RoundStateResponse",
    "BuzzQueueResponse",
    "VocabularyResponse",
    "ErrorResponse",
    # Shared
    "RoundStateInfo",
    "ScoreInfo",
    "BuzzInfo",
    # Service
    "APIService",
]
