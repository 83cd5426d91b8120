"""
Roster service for the Court Sense offense tracker.

This module provides the game setup operations: creating games (optionally
from a saved team), editing the roster and saving the team for reuse.
"""
import logging
from typing import List, Optional, Sequence

from ..errors import PlayerValidationError
from ..models import Game, OpponentTeam, Player, Team
from ..utils import (
    DEFAULT_OPPONENT_NAME, FIRST_PLAYER_NUMBER, MAX_PLAYER_NUMBER, MIN_PLAYER_NUMBER,
    new_id, today_iso,
)
from .persistence_service import GameRepository, TeamRepository

logger = logging.getLogger(__name__)


def next_player_number(players: Sequence[Player]) -> int:
    """Next jersey number: one past the highest in use, never below 4."""
    return max([p.number for p in players] + [FIRST_PLAYER_NUMBER - 1]) + 1


class RosterService:
    """
    Service class for game setup and roster editing.

    Every change is saved immediately so a game can be resumed from any
    screen.
    """

    def __init__(self, games: GameRepository, teams: TeamRepository):
        self.games = games
        self.teams = teams

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------
    def list_games(self) -> List[Game]:
        return self.games.load_games()

    def get_game(self, game_id: str) -> Optional[Game]:
        return self.games.get_game(game_id)

    def create_game(self, team_name: Optional[str] = None) -> Game:
        """
        Create and save a new game.

        Args:
            team_name: Name of a saved team whose merged roster seeds the game;
                an unknown or empty name starts with an empty roster
        """
        game_id = new_id()
        team = Team(id=f"{game_id}-team")
        if team_name:
            saved = self.teams.get_team_by_name(team_name)
            if saved is not None:
                team = Team(id=f"{game_id}-team", name=saved.name, players=list(saved.players))
            else:
                logger.info("No saved team named %r; starting with an empty roster", team_name)

        game = Game(id=game_id, your_team=team, opponent_team=OpponentTeam(), date=today_iso())
        self.games.save_game(game)
        return game

    def delete_game(self, game_id: str) -> bool:
        return self.games.delete_game(game_id)

    def save_setup(self, game: Game, team_name: str, opponent_name: str = "") -> Game:
        """
        Save team and opponent names and remember the team for future games.

        Raises:
            PlayerValidationError: If the team name is empty
        """
        team_name = (team_name or "").strip()
        if not team_name:
            raise PlayerValidationError("Please enter your team name")

        game.your_team.name = team_name
        game.opponent_team = OpponentTeam(name=(opponent_name or "").strip() or DEFAULT_OPPONENT_NAME)
        self.games.save_game(game)
        self.teams.save_team(
            Team(id=game.your_team.id, name=team_name, players=list(game.your_team.players))
        )
        return game

    def update_scoreboard(
        self,
        game: Game,
        current_quarter: Optional[int] = None,
        your_team_score: Optional[int] = None,
        opponent_score: Optional[int] = None,
    ) -> Game:
        """Update the optional quarter and score fields."""
        if current_quarter is not None:
            if int(current_quarter) < 1:
                raise PlayerValidationError("Quarter must be 1 or higher")
            game.current_quarter = int(current_quarter)
        for attr, value in (("your_team_score", your_team_score), ("opponent_score", opponent_score)):
            if value is not None:
                if int(value) < 0:
                    raise PlayerValidationError("Scores cannot be negative")
                setattr(game, attr, int(value))
        self.games.save_game(game)
        return game

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    def add_player(self, game: Game, name: str, number: Optional[int] = None) -> Player:
        name = (name or "").strip()
        if not name:
            raise PlayerValidationError("Player name is required")
        if number is None:
            number = next_player_number(game.your_team.players)
        self._validate_number(number)

        player = Player(id=new_id(), name=name, number=int(number))
        game.your_team.players.append(player)
        self.games.save_game(game)
        return player

    def update_player_number(self, game: Game, player_id: str, number: int) -> Player:
        self._validate_number(number)
        player = self._require_player(game, player_id)
        player.number = int(number)
        self.games.save_game(game)
        return player

    def remove_player(self, game: Game, player_id: str) -> Player:
        """Remove a player; offenses already recorded keep their lineup snapshot."""
        player = self._require_player(game, player_id)
        game.your_team.players = [p for p in game.your_team.players if p.id != player_id]
        self.games.save_game(game)
        return player

    def team_names(self) -> List[str]:
        return self.teams.get_all_team_names()

    @staticmethod
    def _validate_number(number) -> None:
        try:
            value = int(number)
        except (TypeError, ValueError):
            raise PlayerValidationError("Player number must be numeric") from None
        if not MIN_PLAYER_NUMBER <= value <= MAX_PLAYER_NUMBER:
            raise PlayerValidationError(
                f"Player number must be between {MIN_PLAYER_NUMBER} and {MAX_PLAYER_NUMBER}"
            )

    @staticmethod
    def _require_player(game: Game, player_id: str) -> Player:
        player = game.your_team.get_player(player_id)
        if player is None:
            raise PlayerValidationError(f"Player '{player_id}' not found")
        return player
