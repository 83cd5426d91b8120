"""
Web application module for the Court Sense offense tracker.

This module contains the Flask web server that exposes the live offense
session, game setup and statistics views as JSON API endpoints.
"""
import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

from ..errors import CourtSenseError, NotFoundError
from ..models import Game
from ..services import JsonFileStore, KeyValueStore, OffenseSession, Scheduler, ServiceFactory
from ..services import offense_classifier as flow
from ..utils import DEFAULT_HOST, DEFAULT_PORT
from ..utils.constants import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Owns the service factory and one live session per game id.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, scheduler: Optional[Scheduler] = None):
        self.service_factory = ServiceFactory(store, scheduler)
        services = self.service_factory.create_complete_service_suite()
        self.games = services["games"]
        self.roster_service = services["roster"]
        self.sessions: Dict[str, OffenseSession] = {}

    def load_game(self, game_id: str) -> Game:
        game = self.games.get_game(game_id)
        if game is None:
            raise NotFoundError(f"Game '{game_id}' not found")
        return game

    def session_for(self, game_id: str) -> OffenseSession:
        session = self.sessions.get(game_id)
        if session is None:
            session = self.service_factory.create_session(self.load_game(game_id))
            self.sessions[game_id] = session
        return session

    def current_game(self, game_id: str) -> Game:
        """The live session's game if one is open, else the stored game."""
        session = self.sessions.get(game_id)
        if session is not None:
            return session.game
        return self.load_game(game_id)

    def refresh_session(self, game_id: str) -> None:
        """Apply roster edits made to the live game to its lineup."""
        session = self.sessions.get(game_id)
        if session is not None:
            session.sync_roster(session.game)

    def close_session(self, game_id: str) -> None:
        session = self.sessions.pop(game_id, None)
        if session is not None:
            session.teardown()


def _game_summary(game: Game) -> Dict[str, Any]:
    return {
        "id": game.id,
        "date": game.date,
        "your_team": game.your_team.name,
        "opponent": game.opponent_team.name,
        "offense_count": len(game.offenses),
    }


def _outcome_payload(outcome: flow.Transition, session: OffenseSession) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"success": True, "session": session.snapshot()}
    if isinstance(outcome, flow.Completed):
        payload["outcome"] = "completed"
        payload["result"] = outcome.result.to_json()
    elif isinstance(outcome, flow.Continued):
        payload["outcome"] = "continued"
    elif isinstance(outcome, flow.Cancelled):
        payload["outcome"] = "cancelled"
    else:
        payload["outcome"] = "pending"
    return payload


def create_app(
    store: Optional[KeyValueStore] = None,
    data_dir: Optional[str] = None,
    scheduler: Optional[Scheduler] = None,
) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Clients read the clock through the session endpoints, so no periodic
    tick is needed by default. Hosts that render the clock themselves pass
    a scheduler (e.g. ``ThreadingScheduler``) to drive clock ticks.

    Args:
        store: Key-value store to persist into; defaults to JSON files
        data_dir: Directory for the default JSON file store
        scheduler: Optional scheduler for live session clocks

    Returns:
        Configured Flask application instance
    """
    if store is None:
        store = JsonFileStore(data_dir or os.environ.get("COURTSENSE_DATA_DIR", DEFAULT_DATA_DIR))

    app = Flask(__name__)
    app_state = WebAppState(store, scheduler)
    app.config["APP_STATE"] = app_state

    @app.errorhandler(CourtSenseError)
    def handle_user_error(error):
        logger.info("Rejected request: %s", error)
        return jsonify({"success": False, "error": str(error)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return jsonify({"success": False, "error": str(error)}), 404

    @app.errorhandler(ValueError)
    def handle_bad_value(error):
        return jsonify({"success": False, "error": str(error)}), 400

    def _json_body() -> Dict[str, Any]:
        return request.get_json(silent=True) or {}

    # ==================== Games & Setup ==================== #

    @app.route("/api/games", methods=["GET"])
    def list_games():
        games = app_state.roster_service.list_games()
        return jsonify({"success": True, "games": [_game_summary(g) for g in games]})

    @app.route("/api/games", methods=["POST"])
    def create_game():
        """Create a game, optionally seeded from a saved team."""
        data = _json_body()
        game = app_state.roster_service.create_game(data.get("team_name"))
        return jsonify({"success": True, "game": game.to_json()}), 201

    @app.route("/api/games/<game_id>", methods=["GET"])
    def get_game(game_id: str):
        return jsonify({"success": True, "game": app_state.current_game(game_id).to_json()})

    @app.route("/api/games/<game_id>", methods=["DELETE"])
    def delete_game(game_id: str):
        app_state.close_session(game_id)
        if not app_state.roster_service.delete_game(game_id):
            return jsonify({"success": False, "error": "Game not found"}), 404
        return jsonify({"success": True, "message": "Game deleted"})

    @app.route("/api/games/<game_id>/setup", methods=["PUT"])
    def save_setup(game_id: str):
        data = _json_body()
        game = app_state.current_game(game_id)
        app_state.roster_service.save_setup(game, data.get("team_name", ""), data.get("opponent_name", ""))
        if any(key in data for key in ("current_quarter", "your_team_score", "opponent_score")):
            app_state.roster_service.update_scoreboard(
                game,
                current_quarter=data.get("current_quarter"),
                your_team_score=data.get("your_team_score"),
                opponent_score=data.get("opponent_score"),
            )
        app_state.refresh_session(game_id)
        return jsonify({"success": True, "game": game.to_json()})

    @app.route("/api/games/<game_id>/players", methods=["POST"])
    def add_player(game_id: str):
        data = _json_body()
        game = app_state.current_game(game_id)
        player = app_state.roster_service.add_player(game, data.get("name", ""), data.get("number"))
        app_state.refresh_session(game_id)
        return jsonify({"success": True, "player": player.to_json()}), 201

    @app.route("/api/games/<game_id>/players/<player_id>", methods=["PUT"])
    def update_player(game_id: str, player_id: str):
        data = _json_body()
        game = app_state.current_game(game_id)
        player = app_state.roster_service.update_player_number(game, player_id, data.get("number"))
        app_state.refresh_session(game_id)
        return jsonify({"success": True, "player": player.to_json()})

    @app.route("/api/games/<game_id>/players/<player_id>", methods=["DELETE"])
    def remove_player(game_id: str, player_id: str):
        game = app_state.current_game(game_id)
        app_state.roster_service.remove_player(game, player_id)
        app_state.refresh_session(game_id)
        return jsonify({"success": True, "message": "Player removed"})

    @app.route("/api/teams", methods=["GET"])
    def get_team_names():
        return jsonify({"success": True, "teams": app_state.roster_service.team_names()})

    # ==================== Live Session ==================== #

    @app.route("/api/games/<game_id>/session", methods=["GET"])
    def get_session(game_id: str):
        return jsonify({"success": True, "session": app_state.session_for(game_id).snapshot()})

    @app.route("/api/games/<game_id>/session", methods=["DELETE"])
    def close_session(game_id: str):
        app_state.close_session(game_id)
        return jsonify({"success": True, "message": "Session closed"})

    @app.route("/api/games/<game_id>/session/clock/<action>", methods=["POST"])
    def clock_action(game_id: str, action: str):
        session = app_state.session_for(game_id)
        if action == "start":
            session.start_clock()
        elif action == "pause":
            session.pause_clock()
        elif action == "toggle":
            session.toggle_clock()
        elif action == "adjust":
            delta = _json_body().get("seconds")
            if delta is None:
                return jsonify({"success": False, "error": "seconds is required"}), 400
            session.adjust_clock(int(delta))
        else:
            return jsonify({"success": False, "error": f"Unknown clock action: {action}"}), 404
        return jsonify({"success": True, "session": session.snapshot()})

    @app.route("/api/games/<game_id>/session/passes/<action>", methods=["POST"])
    def pass_action(game_id: str, action: str):
        session = app_state.session_for(game_id)
        if action == "increment":
            session.increment_passes()
        elif action == "decrement":
            session.decrement_passes()
        else:
            return jsonify({"success": False, "error": f"Unknown pass action: {action}"}), 404
        return jsonify({"success": True, "session": session.snapshot()})

    @app.route("/api/games/<game_id>/session/lineup/<player_id>", methods=["POST"])
    def toggle_lineup(game_id: str, player_id: str):
        session = app_state.session_for(game_id)
        session.toggle_player(player_id)
        return jsonify({"success": True, "session": session.snapshot()})

    @app.route("/api/games/<game_id>/session/turnover", methods=["POST"])
    def begin_turnover(game_id: str):
        session = app_state.session_for(game_id)
        session.begin_turnover()
        return jsonify({"success": True, "session": session.snapshot()})

    @app.route("/api/games/<game_id>/session/shot", methods=["POST"])
    def begin_shot(game_id: str):
        session = app_state.session_for(game_id)
        session.begin_shot()
        return jsonify({"success": True, "session": session.snapshot()})

    @app.route("/api/games/<game_id>/session/action", methods=["POST"])
    def flow_action(game_id: str):
        """Apply one classifier action, e.g. {"action": "select_result", "result": "miss"}."""
        data = _json_body()
        action = data.pop("action", None)
        if not action:
            return jsonify({"success": False, "error": "action is required"}), 400
        session = app_state.session_for(game_id)
        outcome = session.perform(action, **data)
        return jsonify(_outcome_payload(outcome, session))

    @app.route("/api/games/<game_id>/session/cancel", methods=["POST"])
    def cancel_flow(game_id: str):
        session = app_state.session_for(game_id)
        outcome = session.cancel()
        return jsonify(_outcome_payload(outcome, session))

    # ==================== Statistics ==================== #

    def _statistics(game_id: str):
        return app_state.service_factory.create_statistics_service(app_state.current_game(game_id))

    @app.route("/api/games/<game_id>/offenses", methods=["GET"])
    def list_offenses(game_id: str):
        entries = _statistics(game_id).chronological()
        return jsonify({"success": True, "offenses": [asdict(e) for e in entries]})

    @app.route("/api/games/<game_id>/offenses/<offense_id>", methods=["DELETE"])
    def delete_offense(game_id: str, offense_id: str):
        session = app_state.session_for(game_id)
        if not session.remove_offense(offense_id):
            return jsonify({"success": False, "error": "Offense not found"}), 404
        return jsonify({"success": True, "message": "Offense removed"})

    @app.route("/api/games/<game_id>/dashboard", methods=["GET"])
    def get_dashboard(game_id: str):
        report = _statistics(game_id).dashboard()

        def _actor(stats) -> Dict[str, Any]:
            data = asdict(stats)
            data.update(
                avg_passes=stats.avg_passes,
                avg_time=stats.avg_time,
                score_percentage=stats.score_percentage,
            )
            return data

        return jsonify({
            "success": True,
            "summary": asdict(report.summary),
            "actors": [_actor(stats) for stats in report.actors],
            "total": _actor(report.total) if report.total else None,
        })

    @app.route("/api/games/<game_id>/dashboard/export", methods=["GET"])
    def export_dashboard(game_id: str):
        csv_content = _statistics(game_id).export_csv()
        return Response(
            csv_content,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=game_{game_id}_report.csv"},
        )

    @app.route("/api/games/<game_id>/lineups", methods=["GET"])
    def get_lineups(game_id: str):
        groups = _statistics(game_id).lineups()
        return jsonify({
            "success": True,
            "lineups": [
                {
                    "player_ids": group.player_ids,
                    "player_names": group.player_names,
                    "offenses": group.offenses,
                    "avg_time": group.avg_time,
                    "avg_passes": group.avg_passes,
                    "scores": group.scores,
                    "turnovers": group.turnovers,
                }
                for group in groups
            ],
        })

    return app


def run_web_app(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    data_dir: Optional[str] = None,
) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_dir: Directory for stored games and teams
    """
    app = create_app(data_dir=data_dir)
    logger.info("Serving Court Sense API on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=False)
