"""Tests for the JSON API."""

from unittest.mock import patch

import pytest

from courtsense.services import ManualScheduler, MemoryStore
from courtsense.ui import create_app


class FakeClock:
    def __init__(self):
        self.ms = 1_000_000

    def __call__(self):
        return self.ms

    def advance(self, seconds):
        self.ms += int(seconds * 1000)


@pytest.fixture
def fake_clock():
    clock = FakeClock()
    with patch("courtsense.services.clock_service.now_ms", clock):
        yield clock


@pytest.fixture
def client(fake_clock):
    app = create_app(store=MemoryStore())
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def game_id(client):
    game_id = client.post("/api/games", json={}).get_json()["game"]["id"]
    for name in ["Ana", "Bea", "Cleo", "Dani", "Eve", "Fay"]:
        assert client.post(f"/api/games/{game_id}/players", json={"name": name}).status_code == 201
    response = client.put(
        f"/api/games/{game_id}/setup",
        json={"team_name": "Home", "opponent_name": "Away"},
    )
    assert response.status_code == 200
    return game_id


def player_ids(client, game_id):
    game = client.get(f"/api/games/{game_id}").get_json()["game"]
    return [p["id"] for p in game["yourTeam"]["players"]]


def act(client, game_id, action, **params):
    return client.post(f"/api/games/{game_id}/session/action", json={"action": action, **params})


def test_setup_is_saved(client, game_id):
    games = client.get("/api/games").get_json()["games"]
    assert games == [{
        "id": game_id, "date": games[0]["date"], "your_team": "Home",
        "opponent": "Away", "offense_count": 0,
    }]
    assert client.get("/api/teams").get_json()["teams"] == ["Home"]

    game = client.get(f"/api/games/{game_id}").get_json()["game"]
    assert [p["number"] for p in game["yourTeam"]["players"]] == [4, 5, 6, 7, 8, 9]


def test_missing_game_is_404(client):
    response = client.get("/api/games/nope/session")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_record_score_through_the_api(client, game_id, fake_clock):
    ids = player_ids(client, game_id)
    base = f"/api/games/{game_id}/session"

    session = client.get(base).get_json()["session"]
    assert session["players_on_court"] == ids[:5]

    client.post(f"{base}/clock/start")
    fake_clock.advance(12.5)
    client.post(f"{base}/passes/increment")
    client.post(f"{base}/passes/increment")

    session = client.post(f"{base}/shot").get_json()["session"]
    assert session["clock"]["running"] is False
    assert session["flow"]["step"] == "ShotTypeSelection"

    assert act(client, game_id, "select_shot_type", shot_type=3).get_json()["outcome"] == "pending"
    assert act(client, game_id, "select_player", player_id=ids[1]).status_code == 200
    body = act(client, game_id, "select_result", result="score").get_json()
    assert body["outcome"] == "completed"
    assert body["result"] == {"type": "score", "playerId": ids[1], "shotType": 3, "points": 3}
    assert body["session"]["passes"] == 0
    assert body["session"]["offense_count"] == 1

    offenses = client.get(f"/api/games/{game_id}/offenses").get_json()["offenses"]
    assert len(offenses) == 1
    assert offenses[0]["label"] == "3-pt Score (3 pts)"
    assert offenses[0]["time_seconds"] == 12
    assert offenses[0]["passes"] == 2
    assert offenses[0]["actor"] == "Bea"

    dashboard = client.get(f"/api/games/{game_id}/dashboard").get_json()
    assert dashboard["summary"]["total_points"] == 3
    assert dashboard["actors"][0]["name"] == "Bea"
    assert dashboard["actors"][0]["score_percentage"] == 100
    assert dashboard["total"]["offenses"] == 1

    export = client.get(f"/api/games/{game_id}/dashboard/export")
    assert export.mimetype == "text/csv"
    assert "Bea" in export.get_data(as_text=True)

    lineups = client.get(f"/api/games/{game_id}/lineups").get_json()["lineups"]
    assert lineups[0]["offenses"] == 1
    assert lineups[0]["avg_time"] == 12


def test_foul_without_free_throws_is_rejected(client, game_id, fake_clock):
    base = f"/api/games/{game_id}/session"
    client.post(f"{base}/clock/start")
    fake_clock.advance(5)
    client.post(f"{base}/shot")
    act(client, game_id, "select_shot_type", shot_type=2)
    act(client, game_id, "select_result", result="foul")

    response = act(client, game_id, "confirm_free_throws")
    assert response.status_code == 400
    assert "free throw" in response.get_json()["error"]

    act(client, game_id, "toggle_free_throw", slot=0, made=True)
    body = act(client, game_id, "confirm_free_throws").get_json()
    assert body["outcome"] == "completed"
    assert body["result"]["foulShots"] == [{"made": True}]


def test_cancel_resumes_clock(client, game_id, fake_clock):
    base = f"/api/games/{game_id}/session"
    client.post(f"{base}/clock/start")
    fake_clock.advance(3)
    client.post(f"{base}/turnover")

    body = client.post(f"{base}/cancel").get_json()
    assert body["outcome"] == "cancelled"
    assert body["session"]["clock"]["running"] is True
    assert body["session"]["clock"]["elapsed_ms"] == 3000
    assert client.get(f"/api/games/{game_id}/offenses").get_json()["offenses"] == []


def test_lineup_and_clock_errors(client, game_id):
    ids = player_ids(client, game_id)
    base = f"/api/games/{game_id}/session"

    assert client.post(f"{base}/lineup/{ids[5]}").status_code == 400
    assert client.post(f"{base}/clock/start").status_code == 200
    assert client.post(f"{base}/clock/adjust", json={"seconds": 5}).status_code == 400
    assert client.post(f"{base}/lineup/{ids[0]}").status_code == 400
    assert client.post(f"{base}/clock/rewind").status_code == 404

    client.post(f"{base}/clock/pause")
    session = client.post(f"{base}/clock/adjust", json={"seconds": 5}).get_json()["session"]
    assert session["clock"]["state"] == "paused"
    assert session["clock"]["elapsed_ms"] == 5000


def test_delete_offense(client, game_id, fake_clock):
    base = f"/api/games/{game_id}/session"
    client.post(f"{base}/clock/start")
    fake_clock.advance(4)
    client.post(f"{base}/turnover")
    act(client, game_id, "confirm_turnover")

    offense_id = client.get(f"/api/games/{game_id}/offenses").get_json()["offenses"][0]["offense_id"]
    assert client.delete(f"/api/games/{game_id}/offenses/{offense_id}").status_code == 200
    assert client.delete(f"/api/games/{game_id}/offenses/{offense_id}").status_code == 404
    assert client.get(f"/api/games/{game_id}/dashboard").get_json()["summary"]["offenses"] == 0


def test_removed_player_leaves_the_court(client, game_id):
    ids = player_ids(client, game_id)
    client.get(f"/api/games/{game_id}/session")

    assert client.delete(f"/api/games/{game_id}/players/{ids[0]}").status_code == 200
    session = client.get(f"/api/games/{game_id}/session").get_json()["session"]
    assert session["players_on_court"] == ids[1:5]


def test_delete_game(client, game_id):
    assert client.delete(f"/api/games/{game_id}").status_code == 200
    assert client.delete(f"/api/games/{game_id}").status_code == 404
    assert client.get("/api/games").get_json()["games"] == []


def test_rebound_choice_rejects_strings(client, game_id, fake_clock):
    base = f"/api/games/{game_id}/session"
    client.post(f"{base}/clock/start")
    fake_clock.advance(5)
    client.post(f"{base}/shot")
    act(client, game_id, "select_shot_type", shot_type=2)
    act(client, game_id, "select_result", result="miss")

    assert act(client, game_id, "select_rebound", offensive="false").status_code == 400
    body = act(client, game_id, "select_rebound", offensive=False).get_json()
    assert body["outcome"] == "completed"
    assert body["result"]["offensiveRebound"] is False


def test_scheduler_drives_session_clock(fake_clock):
    scheduler = ManualScheduler()
    client = create_app(store=MemoryStore(), scheduler=scheduler).test_client()
    game_id = client.post("/api/games", json={}).get_json()["game"]["id"]
    base = f"/api/games/{game_id}/session"

    client.post(f"{base}/clock/start")
    assert scheduler.active_count == 1
    client.post(f"{base}/clock/pause")
    assert scheduler.active_count == 0


def test_roster_edit_keeps_unsaved_offense(client, game_id, fake_clock):
    app_state = client.application.config["APP_STATE"]
    base = f"/api/games/{game_id}/session"
    client.get(base)
    store = app_state.games.store
    original_set = store.set

    def broken_set(key, value):
        raise OSError("disk full")

    store.set = broken_set
    client.post(f"{base}/clock/start")
    fake_clock.advance(4)
    client.post(f"{base}/turnover")
    act(client, game_id, "confirm_turnover")
    store.set = original_set

    client.post(f"/api/games/{game_id}/players", json={"name": "Gia"})

    offenses = client.get(f"/api/games/{game_id}/offenses").get_json()["offenses"]
    assert len(offenses) == 1
    assert len(app_state.games.get_game(game_id).offenses) == 1
