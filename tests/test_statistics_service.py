"""Tests for the offense statistics views."""

import csv
import io

import pytest

from courtsense.models import FoulShot, Game, Offense, OffenseResult, OpponentTeam, Player, Team
from courtsense.services import StatisticsService
from courtsense.services.statistics_service import (
    actor_breakdown, chronological_view, dashboard, export_dashboard_csv, lineup_summary,
    remove_offense, result_label, team_summary, total_row,
)

PLAYERS = [
    Player(id="p1", name="Ana", number=4),
    Player(id="p2", name="Bea", number=5),
    Player(id="p3", name="Cleo", number=6),
]


def offense(oid, result, time=10, passes=2, lineup=("p1", "p2", "p3")):
    return Offense(id=oid, time=time, passes=passes, result=result, players_on_court=tuple(lineup))


def make_game(offenses):
    return Game(
        id="g1",
        your_team=Team(id="t1", name="Home", players=list(PLAYERS)),
        opponent_team=OpponentTeam(name="Away"),
        date="2024-03-01",
        offenses=list(offenses),
    )


@pytest.fixture
def log():
    return [
        offense("o1", OffenseResult.score(2, "p1"), time=12, passes=3),
        offense("o2", OffenseResult.turnover("p2"), time=8, passes=1),
        offense("o3", OffenseResult.miss(3, "p1", offensive_rebound=False), time=20, passes=5),
        offense("o4", OffenseResult.foul(2, [True, False], "p3"), time=6, passes=0,
                lineup=("p3", "p2", "p1")),
        offense("o5", OffenseResult.score(3), time=14, passes=4, lineup=("p1", "p2")),
    ]


def test_result_labels():
    assert result_label(offense("a", OffenseResult.turnover())) == "Turnover"
    assert result_label(offense("a", OffenseResult.score(3, "p1"))) == "3-pt Score (3 pts)"
    assert result_label(offense("a", OffenseResult.miss(2, offensive_rebound=True))) == "2-pt Miss (OR)"
    assert result_label(offense("a", OffenseResult.miss(2))) == "2-pt Miss"
    foul = OffenseResult.foul(2, [FoulShot(True), FoulShot(False)])
    assert result_label(offense("a", foul)) == "Foul (1/2 FTs)"


def test_chronological_view_keeps_insertion_order(log):
    entries = chronological_view(log, PLAYERS)

    assert [e.offense_id for e in entries] == ["o1", "o2", "o3", "o4", "o5"]
    assert [e.index for e in entries] == [1, 2, 3, 4, 5]
    assert entries[0].time_display == "0:12"
    assert entries[0].actor == "Ana"
    assert entries[4].actor == "Team"


def test_team_summary_totals(log):
    summary = team_summary(log)

    assert summary.offenses == 5
    assert summary.total_time == 60
    assert summary.avg_time == 12
    assert summary.total_passes == 13
    assert summary.avg_passes == pytest.approx(2.6)
    assert (summary.scores, summary.misses, summary.fouls, summary.turnovers) == (2, 1, 1, 1)
    # 2 + 3 from scores plus one made free throw
    assert summary.total_points == 6
    assert (summary.free_throws_made, summary.free_throws_attempted) == (1, 2)


def test_actor_rows_count_attempts(log):
    rows = actor_breakdown(log, PLAYERS)

    assert [r.name for r in rows] == ["Ana", "Bea", "Cleo", "Team"]
    ana, bea, cleo, team = rows
    assert ana.offenses == 2
    assert (ana.two_point_makes, ana.two_point_attempts) == (1, 1)
    assert (ana.three_point_makes, ana.three_point_attempts) == (0, 1)
    assert ana.score_percentage == 50
    assert bea.turnovers == 1
    assert bea.field_goal_attempts == 0
    assert (cleo.two_point_makes, cleo.two_point_attempts) == (0, 1)
    assert (team.three_point_makes, team.three_point_attempts) == (1, 1)


def test_attempts_match_shot_results(log):
    rows = actor_breakdown(log, PLAYERS)
    shots = [o for o in log if o.result.shot_type is not None]

    assert sum(r.field_goal_attempts for r in rows) == len(shots)
    assert sum(r.two_point_makes + r.three_point_makes for r in rows) == sum(
        1 for o in shots if o.result.type.value == "score"
    )


def test_total_row_matches_sum_of_actor_rows(log):
    rows = actor_breakdown(log, PLAYERS)
    total = total_row(log)

    assert total.offenses == sum(r.offenses for r in rows) == len(log)
    assert total.total_passes == sum(r.total_passes for r in rows)
    assert total.scores == sum(r.scores for r in rows)
    assert total.two_point_attempts == sum(r.two_point_attempts for r in rows)


def test_unknown_player_gets_its_own_row():
    log = [
        offense("o1", OffenseResult.score(2, "gone")),
        offense("o2", OffenseResult.turnover("p1")),
    ]
    rows = actor_breakdown(log, PLAYERS)

    assert [(r.actor_id, r.name) for r in rows] == [("p1", "Ana"), ("gone", "Unknown")]
    assert chronological_view(log, PLAYERS)[0].actor == "Unknown"


def test_lineups_group_regardless_of_order(log):
    groups = lineup_summary(log, PLAYERS)

    assert [g.key for g in groups] == [("p1", "p2", "p3"), ("p1", "p2")]
    full, small = groups
    assert full.offenses == 4
    assert full.player_names == ["Ana", "Bea", "Cleo"]
    assert full.scores == 1
    assert full.turnovers == 1
    assert full.avg_time == 11.5
    assert small.offenses == 1
    assert small.avg_passes == 4


def test_removal_matches_never_recording(log):
    without = remove_offense(log, "o3")
    never = [o for o in log if o.id != "o3"]

    assert len(without) == 4
    assert team_summary(without) == team_summary(never)
    assert actor_breakdown(without, PLAYERS) == actor_breakdown(never, PLAYERS)
    assert lineup_summary(without, PLAYERS) == lineup_summary(never, PLAYERS)
    assert remove_offense(log, "missing") == log


def test_empty_log_has_zero_averages():
    report = dashboard(make_game([]))

    assert report.summary.offenses == 0
    assert report.summary.avg_time == 0
    assert report.summary.avg_passes == 0
    assert report.actors == []
    assert report.total.avg_passes == 0
    assert report.total.score_percentage == 0
    assert lineup_summary([], PLAYERS) == []


def test_service_recomputes_after_deletion(log):
    game = make_game(log)
    service = StatisticsService(game)
    assert service.dashboard().summary.offenses == 5

    game.remove_offense("o1")
    assert service.dashboard().summary.offenses == 4
    assert [e.offense_id for e in service.chronological()] == ["o2", "o3", "o4", "o5"]
    assert len(service.lineups()) == 2


def test_export_csv_contains_summary_and_actor_rows(log):
    text = export_dashboard_csv(make_game(log))
    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == ["Court Sense Game Report"]
    assert ["Team", "Home"] in rows
    assert ["Total Points", "6"] in rows
    assert ["Free Throws", "1/2"] in rows

    header_index = rows.index(
        ["Name", "Number", "Offenses", "Avg Passes", "Avg Time", "Score %",
         "Scores", "Turnovers", "2PT", "3PT"]
    )
    actor_rows = rows[header_index + 1:]
    assert [r[0] for r in actor_rows] == ["Ana", "Bea", "Cleo", "Team", "Total"]
    assert actor_rows[0][:3] == ["Ana", "4", "2"]
    assert actor_rows[0][-2:] == ["1/1", "0/1"]
    assert actor_rows[-1][2] == "5"


def test_score_without_shot_type_counts_points_but_no_attempt():
    older = OffenseResult.from_json({"type": "score", "playerId": "p1", "points": 2})
    log = [offense("o1", older)]

    assert result_label(log[0]) == "Score (2 pts)"
    assert team_summary(log).total_points == 2
    ana = actor_breakdown(log, PLAYERS)[0]
    assert ana.scores == 1
    assert ana.field_goal_attempts == 0
