"""
Game model for the Court Sense offense tracker.

This module contains the Game dataclass which owns your team's roster for
the game, the opponent, and the append-only log of recorded offenses.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .offense import Offense
from .player import OpponentTeam, Team


@dataclass
class Game:
    """
    Represents one tracked game.

    Attributes:
        id: Opaque identifier
        your_team: Your team and its roster for this game
        opponent_team: The opponent (name only)
        date: ISO date (YYYY-MM-DD) the game was created
        offenses: Recorded offenses in the order they happened
        current_quarter: Optional period marker, 1-4 quarters, 5+ overtime
        your_team_score: Optional manually kept score
        opponent_score: Optional manually kept score
    """
    id: str
    your_team: Team
    opponent_team: OpponentTeam = field(default_factory=OpponentTeam)
    date: str = ""
    offenses: List[Offense] = field(default_factory=list)
    current_quarter: Optional[int] = None
    your_team_score: Optional[int] = None
    opponent_score: Optional[int] = None

    def append_offense(self, offense: Offense) -> None:
        """
        Append a finished offense to the log.

        Raises:
            ValueError: If the offense has no elapsed time or reuses an id
        """
        if offense.time <= 0:
            raise ValueError("Only offenses with elapsed time can be recorded")
        if any(existing.id == offense.id for existing in self.offenses):
            raise ValueError(f"Offense '{offense.id}' is already recorded")
        self.offenses.append(offense)

    def remove_offense(self, offense_id: str) -> bool:
        """Delete a single offense by id; returns False when it was not found."""
        remaining = [offense for offense in self.offenses if offense.id != offense_id]
        if len(remaining) == len(self.offenses):
            return False
        self.offenses = remaining
        return True

    def get_offense(self, offense_id: str) -> Optional[Offense]:
        return next((o for o in self.offenses if o.id == offense_id), None)

    def to_json(self) -> Dict[str, Any]:
        """
        Convert Game to a JSON-serializable dictionary.

        Optional scoreboard fields are only written when set, matching the
        stored format of games created before they existed.
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "yourTeam": self.your_team.to_json(),
            "opponentTeam": self.opponent_team.to_json(),
            "date": self.date,
            "offenses": [offense.to_json() for offense in self.offenses],
        }
        if self.current_quarter is not None:
            data["currentQuarter"] = self.current_quarter
        if self.your_team_score is not None:
            data["yourTeamScore"] = self.your_team_score
        if self.opponent_score is not None:
            data["opponentScore"] = self.opponent_score
        return data

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "Game":
        """
        Create Game from a JSON dictionary.

        Missing sections fall back to empty values so partially written or
        older records still load.
        """
        def _optional_int(key: str) -> Optional[int]:
            value = data.get(key)
            return int(value) if value is not None else None

        team_data = data.get("yourTeam") or {}
        return Game(
            id=str(data.get("id", "")),
            your_team=Team.from_json(team_data),
            opponent_team=OpponentTeam.from_json(data.get("opponentTeam")),
            date=str(data.get("date") or ""),
            offenses=[Offense.from_json(o) for o in data.get("offenses") or []],
            current_quarter=_optional_int("currentQuarter"),
            your_team_score=_optional_int("yourTeamScore"),
            opponent_score=_optional_int("opponentScore"),
        )
