"""
Utilities package for the Court Sense offense tracker.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, fmt_clock, now_ms, today_iso, new_id
from .logging_utils import configure_logging
from .constants import (
    APP_TITLE, MAX_PLAYERS_ON_COURT, FIRST_PLAYER_NUMBER, MIN_PLAYER_NUMBER,
    MAX_PLAYER_NUMBER, SHOT_TYPES, FREE_THROW_SLOTS, CLOCK_TICK_SECONDS,
    TEAM_ACTOR, UNKNOWN_PLAYER_NAME, DEFAULT_OPPONENT_NAME, DEFAULT_HOST, DEFAULT_PORT
)

__all__ = [
    "fmt_mmss", "fmt_clock", "now_ms", "today_iso", "new_id", "configure_logging",
    "APP_TITLE", "MAX_PLAYERS_ON_COURT", "FIRST_PLAYER_NUMBER", "MIN_PLAYER_NUMBER",
    "MAX_PLAYER_NUMBER", "SHOT_TYPES", "FREE_THROW_SLOTS", "CLOCK_TICK_SECONDS",
    "TEAM_ACTOR", "UNKNOWN_PLAYER_NAME", "DEFAULT_OPPONENT_NAME", "DEFAULT_HOST", "DEFAULT_PORT"
]
