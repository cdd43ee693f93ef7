"""Display formatting for the countdown."""

from __future__ import annotations


def format_elapsed_time(seconds: int) -> str:
    """
    Format a number of seconds as "MM:SS", or "H:MM:SS" from one hour on.

    Negative values are clamped to zero.

    Examples:
        format_elapsed_time(60)   -> "01:00"
        format_elapsed_time(9)    -> "00:09"
        format_elapsed_time(3725) -> "1:02:05"
    """
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
