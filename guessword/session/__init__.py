"""
Session Module - Manages ephemeral game sessions.

A session represents one player's visit:
- Created when the player starts a game
- Holds the round engine and the game loop consuming it
- Survives any number of "play again" rounds
- Destroyed when the player leaves

Sessions are EPHEMERAL:
- No persistence to disk or database
- Countdown cancelled when the session ends
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, ScoreResult, Haptics, RecordingHaptics

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "ScoreResult",
    "Haptics",
    "RecordingHaptics",
]
