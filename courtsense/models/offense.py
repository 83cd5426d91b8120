"""
Offense models for the Court Sense offense tracker.

An :class:`Offense` is one completed possession: how long it took, how many
passes were made, how it ended and who was on the court. Offenses are
immutable once recorded; the only way to change the log is to delete a
whole record.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..utils.constants import FREE_THROW_SLOTS, MAX_PLAYERS_ON_COURT, SHOT_TYPES


class ResultType(Enum):
    """How an offense ended."""
    TURNOVER = "turnover"
    SCORE = "score"
    MISS = "miss"
    FOUL = "foul"


@dataclass(frozen=True)
class FoulShot:
    """A free throw that was taken."""
    made: bool

    def to_json(self) -> Dict[str, Any]:
        return {"made": self.made}


@dataclass(frozen=True)
class OffenseResult:
    """
    Outcome of an offense.

    Use the ``turnover``/``score``/``miss``/``foul`` constructors rather than
    building instances directly; they fill in only the fields that belong to
    each result type.

    Attributes:
        type: Result kind
        player_id: Player the result is attributed to, ``None`` for the team
        shot_type: 2 or 3 for shot results, ``None`` for turnovers and for
            shot results stored before shot types were recorded
        points: Points scored (score results only)
        offensive_rebound: Whether a miss was rebounded by the offense
        foul_shots: Free throws taken after a foul, in order
    """
    type: ResultType
    player_id: Optional[str] = None
    shot_type: Optional[int] = None
    points: Optional[int] = None
    offensive_rebound: Optional[bool] = None
    foul_shots: Tuple[FoulShot, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Records saved before shot types were tracked load with shot_type None
        if self.type is ResultType.TURNOVER:
            if self.shot_type is not None:
                raise ValueError("Turnovers do not carry a shot type")
        elif self.shot_type is not None and self.shot_type not in SHOT_TYPES:
            raise ValueError(f"Shot type must be one of {SHOT_TYPES}, got {self.shot_type!r}")
        if len(self.foul_shots) > FREE_THROW_SLOTS:
            raise ValueError(f"At most {FREE_THROW_SLOTS} free throws can be recorded")

    @staticmethod
    def _require_shot_type(shot_type) -> int:
        if shot_type not in SHOT_TYPES:
            raise ValueError(f"Shot type must be one of {SHOT_TYPES}, got {shot_type!r}")
        return shot_type

    @classmethod
    def turnover(cls, player_id: Optional[str] = None) -> "OffenseResult":
        return cls(ResultType.TURNOVER, player_id=player_id)

    @classmethod
    def score(cls, shot_type: int, player_id: Optional[str] = None) -> "OffenseResult":
        shot_type = cls._require_shot_type(shot_type)
        return cls(ResultType.SCORE, player_id=player_id, shot_type=shot_type, points=shot_type)

    @classmethod
    def miss(
        cls, shot_type: int, player_id: Optional[str] = None, offensive_rebound: bool = False
    ) -> "OffenseResult":
        return cls(
            ResultType.MISS,
            player_id=player_id,
            shot_type=cls._require_shot_type(shot_type),
            offensive_rebound=offensive_rebound,
        )

    @classmethod
    def foul(
        cls, shot_type: int, foul_shots=(), player_id: Optional[str] = None
    ) -> "OffenseResult":
        shots = tuple(s if isinstance(s, FoulShot) else FoulShot(bool(s)) for s in foul_shots)
        return cls(
            ResultType.FOUL,
            player_id=player_id,
            shot_type=cls._require_shot_type(shot_type),
            foul_shots=shots,
        )

    @property
    def free_throws_taken(self) -> int:
        return len(self.foul_shots)

    @property
    def free_throws_made(self) -> int:
        return sum(1 for shot in self.foul_shots if shot.made)

    @property
    def points_scored(self) -> int:
        """Points this result put on the board, including made free throws."""
        if self.type is ResultType.SCORE:
            return self.points or 0
        if self.type is ResultType.FOUL:
            return self.free_throws_made
        return 0

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.player_id is not None:
            data["playerId"] = self.player_id
        if self.shot_type is not None:
            data["shotType"] = self.shot_type
        if self.type is ResultType.SCORE:
            data["points"] = self.points
        if self.type is ResultType.MISS:
            data["offensiveRebound"] = bool(self.offensive_rebound)
        if self.type is ResultType.FOUL:
            data["foulShots"] = [shot.to_json() for shot in self.foul_shots]
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "OffenseResult":
        try:
            kind = ResultType(data.get("type"))
        except ValueError:
            raise ValueError(f"Unknown offense result type: {data.get('type')!r}") from None

        player_id = data.get("playerId") or None
        shot_type = data.get("shotType")
        shot_type = int(shot_type) if shot_type is not None else None

        if kind is ResultType.TURNOVER:
            return cls.turnover(player_id)
        if kind is ResultType.SCORE:
            points = data.get("points")
            points = int(points) if points is not None else shot_type
            return cls(kind, player_id=player_id, shot_type=shot_type, points=points)
        if kind is ResultType.MISS:
            return cls(
                kind,
                player_id=player_id,
                shot_type=shot_type,
                offensive_rebound=bool(data.get("offensiveRebound", False)),
            )
        # Entries without "made" were never taken and are dropped
        shots = tuple(
            FoulShot(bool(shot["made"]))
            for shot in data.get("foulShots") or []
            if isinstance(shot, dict) and shot.get("made") is not None
        )
        return cls(kind, player_id=player_id, shot_type=shot_type, foul_shots=shots[:FREE_THROW_SLOTS])


@dataclass(frozen=True)
class Offense:
    """
    A recorded offense.

    Attributes:
        id: Opaque identifier
        time: Duration in whole seconds
        passes: Number of passes made
        result: How the offense ended
        players_on_court: Snapshot of the lineup when the offense ended
        timestamp: Epoch milliseconds when the offense was recorded
    """
    id: str
    time: int
    passes: int
    result: OffenseResult
    players_on_court: Tuple[str, ...] = ()
    timestamp: int = 0

    def __post_init__(self) -> None:
        if self.time < 0:
            raise ValueError("Offense time cannot be negative")
        if self.passes < 0:
            raise ValueError("Offense passes cannot be negative")
        if len(self.players_on_court) > MAX_PLAYERS_ON_COURT:
            raise ValueError(f"At most {MAX_PLAYERS_ON_COURT} players can be on court")

    @property
    def lineup_key(self) -> Tuple[str, ...]:
        """Order-independent identity of the lineup."""
        return tuple(sorted(self.players_on_court))

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "time": self.time,
            "passes": self.passes,
            "result": self.result.to_json(),
            "playersOnCourt": list(self.players_on_court),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Offense":
        return cls(
            id=str(data.get("id", "")),
            time=max(0, int(data.get("time", 0))),
            passes=max(0, int(data.get("passes", 0))),
            result=OffenseResult.from_json(data.get("result") or {}),
            players_on_court=tuple(
                str(pid) for pid in (data.get("playersOnCourt") or [])[:MAX_PLAYERS_ON_COURT]
            ),
            timestamp=int(data.get("timestamp", 0)),
        )
