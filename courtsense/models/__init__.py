"""
Models package for the Court Sense offense tracker.

This package contains the core data models used throughout the application.
"""
from .player import Player, Team, OpponentTeam
from .offense import FoulShot, Offense, OffenseResult, ResultType
from .game import Game
from .game_report import ActorStats, DashboardReport, LineupStats, OffenseEntry, TeamSummary

__all__ = [
    "Player", "Team", "OpponentTeam",
    "FoulShot", "Offense", "OffenseResult", "ResultType",
    "Game",
    "ActorStats", "DashboardReport", "LineupStats", "OffenseEntry", "TeamSummary"
]
