"""
Service Factory for dependency injection.

This module provides a factory for creating properly configured service
instances around a single key-value store.
"""
from typing import Dict, Optional

from ..models import Game
from .clock_service import OffenseClock
from .persistence_service import GameRepository, KeyValueStore, MemoryStore, TeamRepository
from .roster_service import RosterService
from .scheduler import Scheduler
from .session_service import OffenseSession
from .statistics_service import StatisticsService


class ServiceFactory:
    """
    Factory for creating service instances with shared repositories.

    Repositories are created once per factory so every service sees the same
    locks around the store.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, scheduler: Optional[Scheduler] = None):
        """
        Initialize factory.

        Args:
            store: Durable store; defaults to an in-memory store
            scheduler: Optional scheduler for clock tick callbacks
        """
        self.store = store if store is not None else MemoryStore()
        self.scheduler = scheduler
        self._game_repository: Optional[GameRepository] = None
        self._team_repository: Optional[TeamRepository] = None

    def game_repository(self) -> GameRepository:
        """Get singleton game repository."""
        if self._game_repository is None:
            self._game_repository = GameRepository(self.store)
        return self._game_repository

    def team_repository(self) -> TeamRepository:
        """Get singleton team repository."""
        if self._team_repository is None:
            self._team_repository = TeamRepository(self.store)
        return self._team_repository

    def create_roster_service(self) -> RosterService:
        return RosterService(self.game_repository(), self.team_repository())

    def create_session(self, game: Game) -> OffenseSession:
        """Create a live session with a clock wired to the configured scheduler."""
        clock = OffenseClock(scheduler=self.scheduler)
        return OffenseSession(game, self.game_repository(), clock=clock)

    def create_statistics_service(self, game: Game) -> StatisticsService:
        return StatisticsService(game)

    def create_complete_service_suite(self) -> Dict[str, object]:
        """
        Create the services that do not depend on a particular game.

        Returns:
            Dictionary containing the configured services
        """
        return {
            "games": self.game_repository(),
            "teams": self.team_repository(),
            "roster": self.create_roster_service(),
        }
