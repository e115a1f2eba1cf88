"""
Web application module for the Matchday engine.

This module contains the Flask server exposing match sessions as a JSON
API. Each request is one command against one session; the session's own
lock keeps commands atomic and ordered.
"""
import logging
import threading
import uuid
from dataclasses import asdict
from typing import Dict, Optional

from flask import Flask, Response, jsonify, request

from ..errors import InvalidTransition, NotFound, PreconditionViolation
from ..models import MatchMetadata, MatchSnapshot
from ..services import AutosaveLoop, MatchSession, ServiceFactory
from ..utils import (
    APP_TITLE, DEFAULT_MATCH_FORMAT, DEFAULT_PLANNED_DURATION_MIN, format_match_time
)
from ..utils.constants import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


class WebAppState:
    """
    Sessions currently held by this server, plus their autosave loops.

    Passed explicitly into the route closures; there is no module-level
    "current match".
    """

    def __init__(self, factory: ServiceFactory, autosave: bool = False):
        self.factory = factory
        self.autosave = autosave
        self.sessions: Dict[str, MatchSession] = {}
        self.loops: Dict[str, AutosaveLoop] = {}
        self._lock = threading.Lock()

    def add(self, session: MatchSession) -> None:
        with self._lock:
            if session.match_id in self.sessions:
                raise PreconditionViolation(f"Match already exists: {session.match_id}")
            self.sessions[session.match_id] = session
        self._start_autosave(session)

    def get(self, match_id: str) -> MatchSession:
        """Session from memory, falling back to the store."""
        with self._lock:
            session = self.sessions.get(match_id)
            if session is not None:
                return session
            session = self.factory.restore_session(match_id)
            self.sessions[match_id] = session
        logger.info("Restored match %s from store", match_id)
        self._start_autosave(session)
        return session

    def stop_autosave(self, match_id: str) -> None:
        loop = self.loops.pop(match_id, None)
        if loop is not None:
            loop.stop()

    def shutdown(self) -> None:
        for match_id in list(self.loops):
            self.stop_autosave(match_id)

    def _start_autosave(self, session: MatchSession) -> None:
        if not self.autosave or session.is_completed or session.match_id in self.loops:
            return
        loop = self.factory.create_autosave(session)
        self.loops[session.match_id] = loop
        loop.start()


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _session_payload(session: MatchSession, snapshot: Optional[MatchSnapshot] = None) -> dict:
    """Snapshot record plus the derived values the display needs."""
    snapshot = snapshot or session.snapshot()
    elapsed = snapshot.elapsed_seconds()
    return {
        "snapshot": snapshot.to_json(),
        "elapsed_seconds": elapsed,
        "clock": format_match_time(elapsed),
        "display_time": session.display_time(),
        "score_for": snapshot.score_for,
        "score_against": snapshot.score_against,
        "result": session.result(),
        "players_on_pitch": session.players_on_pitch(),
        "available_substitutes": session.available_substitutes(),
    }


def create_app(factory: Optional[ServiceFactory] = None, autosave: bool = False) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        factory: Service factory (and so the store) to use; in-memory by default
        autosave: Start a background autosave loop for each live match

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    state = WebAppState(factory or ServiceFactory(), autosave=autosave)
    app.extensions["matchday"] = state

    # ==================== Error mapping ==================== #

    @app.errorhandler(InvalidTransition)
    def handle_invalid_transition(exc):
        return _error(str(exc), 409)

    @app.errorhandler(PreconditionViolation)
    def handle_precondition(exc):
        return _error(str(exc), 400)

    @app.errorhandler(NotFound)
    def handle_not_found(exc):
        return _error(str(exc), 404)

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PreconditionViolation("Request body must be a JSON object")
        return data

    # ==================== Matches ==================== #

    @app.route("/api/matches", methods=["POST"])
    def create_match():
        """Set up a new match (phase not_started)."""
        data = _json_body()
        metadata = MatchMetadata(
            match_id=data.get("match_id") or uuid.uuid4().hex,
            team_id=data.get("team_id"),
            opposition=data.get("opposition", ""),
            location=data.get("location", "home"),
            match_format=data.get("match_format", DEFAULT_MATCH_FORMAT),
            match_date=data.get("match_date"),
            starting_lineup=data.get("starting_lineup") or (),
            substitutes=data.get("substitutes") or (),
        )
        session = state.factory.create_session(
            metadata, data.get("planned_duration_minutes", DEFAULT_PLANNED_DURATION_MIN)
        )
        state.add(session)
        return jsonify({"success": True, "match": _session_payload(session)}), 201

    @app.route("/api/matches", methods=["GET"])
    def list_matches():
        stored = set(state.factory.get_store().list_match_ids())
        return jsonify({
            "success": True,
            "live": sorted(state.sessions),
            "stored": sorted(stored),
        })

    @app.route("/api/matches/<match_id>", methods=["GET"])
    def get_match(match_id: str):
        session = state.get(match_id)
        return jsonify({"success": True, "match": _session_payload(session)})

    # ==================== Clock ==================== #

    clock_commands = {
        "start": MatchSession.start_match,
        "pause": MatchSession.pause_match,
        "resume": MatchSession.resume_match,
        "half-time": MatchSession.trigger_half_time,
        "second-half": MatchSession.start_second_half,
        "end": MatchSession.end_match,
    }

    @app.route("/api/matches/<match_id>/clock/<action>", methods=["POST"])
    def clock_command(match_id: str, action: str):
        command = clock_commands.get(action)
        if command is None:
            return _error(f"Unknown clock action: {action}", 404)
        session = state.get(match_id)
        command(session)
        if session.is_completed:
            state.stop_autosave(match_id)
        return jsonify({"success": True, "match": _session_payload(session)})

    @app.route("/api/matches/<match_id>/added-time", methods=["POST"])
    def set_added_time(match_id: str):
        data = _json_body()
        session = state.get(match_id)
        session.set_added_time(data.get("half"), data.get("seconds"))
        return jsonify({"success": True, "match": _session_payload(session)})

    # ==================== Events ==================== #

    @app.route("/api/matches/<match_id>/events", methods=["POST"])
    def log_event(match_id: str):
        data = _json_body()
        kind = data.pop("kind", None)
        if kind is None:
            return _error("Event kind is required", 400)
        session = state.get(match_id)
        event = session.log_event_payload(kind, data)
        return jsonify({"success": True, "event": event.to_json()}), 201

    @app.route("/api/matches/<match_id>/events/<event_id>", methods=["DELETE"])
    def delete_event(match_id: str, event_id: str):
        session = state.get(match_id)
        event = session.remove_event(event_id)
        return jsonify({"success": True, "event": event.to_json()})

    @app.route("/api/matches/<match_id>/events/undo", methods=["POST"])
    def undo_event(match_id: str):
        session = state.get(match_id)
        event = session.undo_last_event()
        return jsonify({"success": True, "event": event.to_json()})

    # ==================== Reports & persistence ==================== #

    @app.route("/api/matches/<match_id>/report", methods=["GET"])
    def get_report(match_id: str):
        session = state.get(match_id)
        report = state.factory.create_report_service().build_report(session.snapshot())
        return jsonify({"success": True, "report": asdict(report)})

    @app.route("/api/matches/<match_id>/report.csv", methods=["GET"])
    def export_report(match_id: str):
        session = state.get(match_id)
        csv_content = state.factory.create_report_service().export_report_csv(session.snapshot())
        return Response(
            csv_content,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=match_{match_id}.csv"},
        )

    @app.route("/api/matches/<match_id>/save", methods=["POST"])
    def save_match(match_id: str):
        session = state.get(match_id)
        # Capture first; the write happens outside the session lock
        snapshot = session.snapshot()
        if not state.factory.get_store().save(snapshot):
            return _error("Could not save match, please retry", 503)
        return jsonify({"success": True, "digest": snapshot.digest()})

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
        data_dir: Directory for match files; None keeps matches in memory
    """
    app = create_app(ServiceFactory(data_dir), autosave=data_dir is not None)
    logger.info("Serving %s API on http://%s:%s", APP_TITLE, host, port)
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        app.extensions["matchday"].shutdown()
