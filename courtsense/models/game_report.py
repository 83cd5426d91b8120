"""Dataclasses representing the statistics views for a game."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class OffenseEntry:
    """One row of the chronological offense list."""

    index: int
    offense_id: str
    time_seconds: int
    time_display: str
    passes: int
    result_type: str
    label: str
    actor: str
    players_on_court: List[str]


@dataclass
class TeamSummary:
    """Aggregate numbers over the whole offense log."""

    offenses: int = 0
    total_time: int = 0
    avg_time: float = 0.0
    total_passes: int = 0
    avg_passes: float = 0.0
    scores: int = 0
    misses: int = 0
    fouls: int = 0
    turnovers: int = 0
    total_points: int = 0
    free_throws_made: int = 0
    free_throws_attempted: int = 0


@dataclass
class ActorStats:
    """Per-actor (player or team bucket) dashboard row."""

    actor_id: Optional[str]
    name: str
    number: Optional[int] = None
    offenses: int = 0
    total_passes: int = 0
    total_time: int = 0
    scores: int = 0
    turnovers: int = 0
    two_point_attempts: int = 0
    two_point_makes: int = 0
    three_point_attempts: int = 0
    three_point_makes: int = 0

    @property
    def avg_passes(self) -> float:
        return self.total_passes / self.offenses if self.offenses else 0.0

    @property
    def avg_time(self) -> float:
        return self.total_time / self.offenses if self.offenses else 0.0

    @property
    def score_percentage(self) -> float:
        return self.scores / self.offenses * 100 if self.offenses else 0.0

    @property
    def field_goal_attempts(self) -> int:
        return self.two_point_attempts + self.three_point_attempts


@dataclass
class DashboardReport:
    """Team and individual statistics for a game."""

    summary: TeamSummary
    actors: List[ActorStats] = field(default_factory=list)
    total: Optional[ActorStats] = None


@dataclass
class LineupStats:
    """Statistics for one set of players on court."""

    key: Tuple[str, ...]
    player_ids: List[str]
    player_names: List[str]
    offenses: int = 0
    total_time: int = 0
    total_passes: int = 0
    scores: int = 0
    turnovers: int = 0

    @property
    def avg_time(self) -> float:
        return self.total_time / self.offenses if self.offenses else 0.0

    @property
    def avg_passes(self) -> float:
        return self.total_passes / self.offenses if self.offenses else 0.0
