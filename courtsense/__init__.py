"""
Court Sense Offense Tracker

Records basketball offenses during a live game (offense clock, pass count
and outcome) and derives team, player and lineup statistics from the
resulting log.

This package provides the capture and statistics services and a Flask JSON
API for sideline clients.
"""
from .models import Player, Team, Game, Offense, OffenseResult
from .services import OffenseClock, OffenseSession, StatisticsService, ServiceFactory
from .ui import create_app, run_web_app
from .utils import fmt_mmss, fmt_clock, now_ms, APP_TITLE

__version__ = "1.0.0"
__author__ = "Court Sense Development Team"

__all__ = [
    "Player", "Team", "Game", "Offense", "OffenseResult",
    "OffenseClock", "OffenseSession", "StatisticsService", "ServiceFactory",
    "create_app", "run_web_app",
    "fmt_mmss", "fmt_clock", "now_ms", "APP_TITLE"
]
