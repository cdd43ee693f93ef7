"""
Configuration - Round timing constants and environment settings.

The canonical round is 60 seconds long, ticks once per second, and starts
buzzing every second once fewer than 10 seconds are left. Shorter rounds
(10 or 20 seconds) are configured by overriding countdown_seconds.

Environment variables:
    GUESSWORD_COUNTDOWN_SECONDS   Round length in seconds
    GUESSWORD_TICK_SECONDS        Countdown step in seconds
    GUESSWORD_PANIC_SECONDS       Remaining time below which panic buzzes fire
    GUESSWORD_LOG_LEVEL           Logging level (DEBUG, INFO, ...)
    ALLOWED_ORIGINS               Comma-separated CORS origins for the API
"""

from __future__ import annotations
import os

from pydantic import BaseModel, Field, model_validator


# Total game time
COUNTDOWN_SECONDS = 60

# One countdown step
TICK_SECONDS = 1

# The phone buzzes each second once remaining time drops below this
PANIC_SECONDS = 10

# Remaining time when the round is over
DONE = 0

LOG_LEVEL = os.getenv("GUESSWORD_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


class RoundConfig(BaseModel):
    """Timing of one round."""

    countdown_seconds: int = Field(COUNTDOWN_SECONDS, gt=0, description="Round length")
    tick_seconds: int = Field(TICK_SECONDS, gt=0, description="Countdown step")
    panic_seconds: int = Field(PANIC_SECONDS, ge=0, description="Panic buzz threshold")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_timing(self) -> RoundConfig:
        if self.countdown_seconds % self.tick_seconds != 0:
            raise ValueError(
                f"countdown_seconds ({self.countdown_seconds}) must be a multiple "
                f"of tick_seconds ({self.tick_seconds})"
            )
        if self.panic_seconds > self.countdown_seconds:
            raise ValueError(
                f"panic_seconds ({self.panic_seconds}) cannot exceed "
                f"countdown_seconds ({self.countdown_seconds})"
            )
        return self

    @property
    def tick_count(self) -> int:
        """Number of ticks in a full countdown."""
        return self.countdown_seconds // self.tick_seconds

    @classmethod
    def from_env(cls) -> RoundConfig:
        """Build a config from GUESSWORD_* environment variables."""
        return cls(
            countdown_seconds=int(os.getenv("GUESSWORD_COUNTDOWN_SECONDS", str(COUNTDOWN_SECONDS))),
            tick_seconds=int(os.getenv("GUESSWORD_TICK_SECONDS", str(TICK_SECONDS))),
            panic_seconds=int(os.getenv("GUESSWORD_PANIC_SECONDS", str(PANIC_SECONDS))),
        )
