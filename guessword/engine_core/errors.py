"""
Engine Errors - Exception taxonomy for the round engine.

There are no recoverable runtime errors in a round. Everything here is a
precondition violation made by the caller (the presentation layer), so the
exceptions are meant for developers, never for players.
"""

from __future__ import annotations


class GuessWordError(Exception):
    """Base class for all guessword errors."""
    pass


# ============ Precondition violations ============

class PreconditionError(GuessWordError):
    """An engine operation was called in a phase that does not allow it."""

    def __init__(self, operation: str, phase: str, message: str | None = None):
        self.operation = operation
        self.phase = phase
        super().__init__(message or f"{operation}() not allowed while round is {phase}")


class RoundNotActive(PreconditionError):
    """skip()/guess_correct() outside of a running round."""
    pass


class RoundAlreadyRunning(PreconditionError):
    """start() while the countdown of the previous round is still running."""

    def __init__(self, phase: str):
        super().__init__(
            "start",
            phase,
            "start() called while the countdown is running; call teardown() first",
        )


class RoundOverNotAcknowledged(PreconditionError):
    """start() before the previous round-over event was acknowledged."""

    def __init__(self, phase: str):
        super().__init__(
            "start",
            phase,
            "start() called before acknowledge_round_over()",
        )


# ============ Sessions ============

class SessionNotFound(GuessWordError):
    """Session does not exist or has already ended."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")
