"""Statistics derived from a game's offense log."""

from __future__ import annotations

import csv
import io
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import (
    ActorStats, DashboardReport, Game, LineupStats, Offense, OffenseEntry, Player,
    ResultType, TeamSummary,
)
from ..utils import TEAM_ACTOR, UNKNOWN_PLAYER_NAME, fmt_mmss


def _average(total: float, count: int) -> float:
    return total / count if count else 0.0


# ----------------------------------------------------------------------
# Chronological view
# ----------------------------------------------------------------------
def result_label(offense: Offense) -> str:
    """Human readable description of how an offense ended."""
    result = offense.result
    shot = f"{result.shot_type}-pt " if result.shot_type else ""
    if result.type is ResultType.TURNOVER:
        return "Turnover"
    if result.type is ResultType.SCORE:
        return f"{shot}Score ({result.points} pts)"
    if result.type is ResultType.MISS:
        rebound = " (OR)" if result.offensive_rebound else ""
        return f"{shot}Miss{rebound}"
    return f"Foul ({result.free_throws_made}/{result.free_throws_taken} FTs)"


def _actor_name(player_id: Optional[str], players_by_id: Dict[str, Player]) -> str:
    if player_id is None:
        return TEAM_ACTOR
    player = players_by_id.get(player_id)
    return player.name if player else UNKNOWN_PLAYER_NAME


def chronological_view(offenses: Sequence[Offense], players: Iterable[Player]) -> List[OffenseEntry]:
    """The offense log in recording order, ready for listing."""
    players_by_id = {p.id: p for p in players}
    return [
        OffenseEntry(
            index=index,
            offense_id=offense.id,
            time_seconds=offense.time,
            time_display=fmt_mmss(offense.time),
            passes=offense.passes,
            result_type=offense.result.type.value,
            label=result_label(offense),
            actor=_actor_name(offense.result.player_id, players_by_id),
            players_on_court=list(offense.players_on_court),
        )
        for index, offense in enumerate(offenses, start=1)
    ]


def remove_offense(offenses: Sequence[Offense], offense_id: str) -> List[Offense]:
    """Return the log without one offense; nothing else changes."""
    return [offense for offense in offenses if offense.id != offense_id]


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------
def team_summary(offenses: Sequence[Offense]) -> TeamSummary:
    count = len(offenses)
    total_time = sum(o.time for o in offenses)
    total_passes = sum(o.passes for o in offenses)
    kinds = [o.result.type for o in offenses]
    return TeamSummary(
        offenses=count,
        total_time=total_time,
        avg_time=_average(total_time, count),
        total_passes=total_passes,
        avg_passes=_average(total_passes, count),
        scores=kinds.count(ResultType.SCORE),
        misses=kinds.count(ResultType.MISS),
        fouls=kinds.count(ResultType.FOUL),
        turnovers=kinds.count(ResultType.TURNOVER),
        total_points=sum(o.result.points_scored for o in offenses),
        free_throws_made=sum(o.result.free_throws_made for o in offenses),
        free_throws_attempted=sum(o.result.free_throws_taken for o in offenses),
    )


def _accumulate(stats: ActorStats, offense: Offense) -> None:
    result = offense.result
    stats.offenses += 1
    stats.total_passes += offense.passes
    stats.total_time += offense.time

    if result.type is ResultType.TURNOVER:
        stats.turnovers += 1
        return

    made = result.type is ResultType.SCORE
    if made:
        stats.scores += 1
    # Fouls count as a field goal attempt only, whatever happens at the line
    if result.shot_type == 2:
        stats.two_point_attempts += 1
        stats.two_point_makes += int(made)
    elif result.shot_type == 3:
        stats.three_point_attempts += 1
        stats.three_point_makes += int(made)


def actor_breakdown(offenses: Sequence[Offense], players: Sequence[Player]) -> List[ActorStats]:
    """
    Per-actor rows for everyone with at least one offense.

    Rows follow roster order, then players no longer on the roster, then the
    team bucket for unassigned offenses.
    """
    rows: Dict[Optional[str], ActorStats] = {
        p.id: ActorStats(actor_id=p.id, name=p.name, number=p.number) for p in players
    }
    unknown: Dict[str, ActorStats] = {}
    team = ActorStats(actor_id=None, name=TEAM_ACTOR)

    for offense in offenses:
        player_id = offense.result.player_id
        if player_id is None:
            stats = team
        elif player_id in rows:
            stats = rows[player_id]
        else:
            stats = unknown.setdefault(
                player_id, ActorStats(actor_id=player_id, name=UNKNOWN_PLAYER_NAME)
            )
        _accumulate(stats, offense)

    ordered = list(rows.values()) + list(unknown.values()) + [team]
    return [stats for stats in ordered if stats.offenses > 0]


def total_row(offenses: Sequence[Offense]) -> ActorStats:
    """Grand total recomputed from the log, independent of the actor rows."""
    total = ActorStats(actor_id=None, name="Total")
    for offense in offenses:
        _accumulate(total, offense)
    return total


def dashboard(game: Game) -> DashboardReport:
    offenses = game.offenses
    return DashboardReport(
        summary=team_summary(offenses),
        actors=actor_breakdown(offenses, game.your_team.players),
        total=total_row(offenses),
    )


# ----------------------------------------------------------------------
# Lineups
# ----------------------------------------------------------------------
def lineup_summary(offenses: Sequence[Offense], players: Iterable[Player]) -> List[LineupStats]:
    """Group offenses by the set of players on court, in first-seen order."""
    players_by_id = {p.id: p for p in players}
    groups: Dict[Tuple[str, ...], LineupStats] = {}

    for offense in offenses:
        key = offense.lineup_key
        group = groups.get(key)
        if group is None:
            group = LineupStats(
                key=key,
                player_ids=list(key),
                player_names=[
                    players_by_id[pid].name if pid in players_by_id else UNKNOWN_PLAYER_NAME
                    for pid in key
                ],
            )
            groups[key] = group
        group.offenses += 1
        group.total_time += offense.time
        group.total_passes += offense.passes
        if offense.result.type is ResultType.SCORE:
            group.scores += 1
        elif offense.result.type is ResultType.TURNOVER:
            group.turnovers += 1

    return list(groups.values())


# ----------------------------------------------------------------------
# Export
# ----------------------------------------------------------------------
def _actor_row(stats: ActorStats) -> list:
    return [
        stats.name,
        stats.number if stats.number is not None else "",
        stats.offenses,
        round(stats.avg_passes, 1),
        fmt_mmss(round(stats.avg_time)),
        round(stats.score_percentage, 1),
        stats.scores,
        stats.turnovers,
        f"{stats.two_point_makes}/{stats.two_point_attempts}",
        f"{stats.three_point_makes}/{stats.three_point_attempts}",
    ]


def export_dashboard_csv(game: Game, report: Optional[DashboardReport] = None) -> str:
    """Return a CSV document with the summary block followed by the actor table."""
    report = report or dashboard(game)
    summary = report.summary

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Court Sense Game Report"])
    writer.writerow(["Team", game.your_team.name])
    writer.writerow(["Opponent", game.opponent_team.name])
    writer.writerow(["Date", game.date])
    writer.writerow(["Offenses", summary.offenses])
    writer.writerow(["Total Time", fmt_mmss(summary.total_time)])
    writer.writerow(["Average Time", fmt_mmss(round(summary.avg_time))])
    writer.writerow(["Total Passes", summary.total_passes])
    writer.writerow(["Average Passes", round(summary.avg_passes, 1)])
    writer.writerow(["Scores", summary.scores])
    writer.writerow(["Misses", summary.misses])
    writer.writerow(["Fouls", summary.fouls])
    writer.writerow(["Turnovers", summary.turnovers])
    writer.writerow(["Total Points", summary.total_points])
    writer.writerow(["Free Throws", f"{summary.free_throws_made}/{summary.free_throws_attempted}"])
    writer.writerow([])

    writer.writerow(
        ["Name", "Number", "Offenses", "Avg Passes", "Avg Time", "Score %",
         "Scores", "Turnovers", "2PT", "3PT"]
    )
    for stats in report.actors:
        writer.writerow(_actor_row(stats))
    if report.total is not None:
        writer.writerow(_actor_row(report.total))

    csv_text = buffer.getvalue()
    buffer.close()
    return csv_text


class StatisticsService:
    """
    Statistics views for one game.

    Holds no results of its own: every call recomputes from the current
    offense log, so deleting an offense is reflected immediately.
    """

    def __init__(self, game: Game) -> None:
        self.game = game

    def chronological(self) -> List[OffenseEntry]:
        return chronological_view(self.game.offenses, self.game.your_team.players)

    def dashboard(self) -> DashboardReport:
        return dashboard(self.game)

    def lineups(self) -> List[LineupStats]:
        return lineup_summary(self.game.offenses, self.game.your_team.players)

    def export_csv(self) -> str:
        return export_dashboard_csv(self.game)
