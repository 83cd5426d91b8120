"""
Utility functions for the Court Sense offense tracker.

This module contains common time helpers used throughout the application.
"""
import time
from datetime import date


def fmt_mmss(seconds: int) -> str:
    """
    Format whole seconds as M:SS, the way offense durations are listed.

    Example:
        >>> fmt_mmss(75)
        '1:15'
        >>> fmt_mmss(9)
        '0:09'
    """
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def fmt_clock(milliseconds: int) -> str:
    """
    Format a running clock value with centisecond resolution.

    Example:
        >>> fmt_clock(12345)
        '0:12.34'
    """
    milliseconds = max(0, int(milliseconds))
    total_seconds = milliseconds // 1000
    centis = (milliseconds % 1000) // 10
    return f"{fmt_mmss(total_seconds)}.{centis:02d}"


def now_ms() -> int:
    """
    Get current timestamp in epoch milliseconds.

    Returns:
        Current time as integer epoch milliseconds
    """
    return int(time.time() * 1000)


def today_iso() -> str:
    """Return today's date as YYYY-MM-DD."""
    return date.today().isoformat()


_last_id = 0


def new_id(suffix: str = "") -> str:
    """
    Generate a time-based identifier.

    Identifiers are millisecond timestamps, bumped when two are requested
    within the same millisecond so they stay unique within a process.
    """
    global _last_id
    candidate = now_ms()
    if candidate <= _last_id:
        candidate = _last_id + 1
    _last_id = candidate
    return f"{candidate}{suffix}"
