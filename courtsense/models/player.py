"""
Player and team models for the Court Sense offense tracker.

This module contains the roster dataclasses: individual players, your team
with its ordered roster, and the opponent which is tracked by name only.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.constants import FIRST_PLAYER_NUMBER


@dataclass
class Player:
    """
    Represents a player on your team.

    Attributes:
        id: Opaque identifier, referenced by offenses and lineups
        name: Display name (used as the merge key when teams are combined)
        number: Jersey number, 0-99; uniqueness is not enforced
    """
    id: str
    name: str
    number: int = FIRST_PLAYER_NUMBER

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "number": self.number}

    @classmethod
    def from_json(cls, data: Dict[str, Any], index: int = 0) -> "Player":
        """
        Create a player from stored data.

        Older saves did not carry jersey numbers; those players receive
        ``4 + index`` based on their roster position.
        """
        number = data.get("number")
        if number is None:
            number = FIRST_PLAYER_NUMBER + index
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            number=int(number),
        )


@dataclass
class Team:
    """Your team: a name and an ordered roster."""
    id: str
    name: str = ""
    players: List[Player] = field(default_factory=list)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_ids(self) -> List[str]:
        return [player.id for player in self.players]

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "players": [player.to_json() for player in self.players],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Team":
        raw_players = data.get("players") or []
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            players=[Player.from_json(p, idx) for idx, p in enumerate(raw_players)],
        )


@dataclass
class OpponentTeam:
    """The opposing team; no roster is tracked."""
    name: str = ""

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "OpponentTeam":
        if not data:
            return cls()
        return cls(name=str(data.get("name") or ""))
