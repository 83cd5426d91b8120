"""
Services package for the Court Sense offense tracker.

This package contains service classes that handle business logic.
Includes factory for dependency injection around a single store.
"""
from .scheduler import ManualScheduler, Scheduler, ThreadingScheduler
from .clock_service import ClockState, OffenseClock
from .persistence_service import (
    GameRepository, JsonFileStore, KeyValueStore, MemoryStore, TeamRepository
)
from .session_service import OffenseSession, PassCounter, SessionState
from .statistics_service import StatisticsService
from .roster_service import RosterService, next_player_number
from .service_factory import ServiceFactory
from . import offense_classifier

__all__ = [
    "ManualScheduler", "Scheduler", "ThreadingScheduler",
    "ClockState", "OffenseClock",
    "GameRepository", "JsonFileStore", "KeyValueStore", "MemoryStore", "TeamRepository",
    "OffenseSession", "PassCounter", "SessionState",
    "StatisticsService", "RosterService", "next_player_number",
    "ServiceFactory", "offense_classifier"
]
