# src/daily_tracker/connectors/http_api.py

"""
HTTP connector (Flask).

Thin JSON routes over TaskService. The service owns rollover, validation and
persistence; this module only maps requests and errors onto HTTP.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from flask import Flask, jsonify, request
from werkzeug.serving import BaseWSGIServer, make_server

from ..core.errors import NotFoundError, PersistenceError, ValidationError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(state: AppState) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    service = state.service

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(PersistenceError)
    def _persistence_error(e: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.path, e)
        return jsonify({"error": "Failed to save tasks"}), 500

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/tasks")
    def list_tasks():
        return jsonify(service.list_tasks().to_dict())

    @app.post("/api/tasks")
    def create_task():
        data = _json_body()
        task = service.create_task(
            data.get("title"),
            description=data.get("description"),
            priority=data.get("priority"),
        )
        return jsonify(task.to_dict()), 201

    @app.put("/api/tasks/<task_id>")
    def update_task(task_id: str):
        task = service.update_task(task_id, _json_body())
        return jsonify(task.to_dict())

    @app.delete("/api/tasks/<task_id>")
    def delete_task(task_id: str):
        service.delete_task(task_id)
        return jsonify({"message": "Task deleted successfully"})

    @app.get("/api/history")
    def history():
        return jsonify([h.to_dict() for h in service.get_history()])

    @app.get("/api/stats")
    def stats():
        return jsonify(service.get_stats().to_dict())

    return app


@dataclass
class HttpBackgroundRunner:
    server: BaseWSGIServer
    thread: threading.Thread

    def stop(self) -> None:
        try:
            self.server.shutdown()
        except Exception:
            logger.debug("Failed to stop HTTP server.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def serve_in_background(state: AppState) -> HttpBackgroundRunner | None:
    """Start the HTTP API in a daemon thread (threaded werkzeug server)."""
    settings = state.settings
    if not getattr(settings, "http_enabled", True):
        logger.info("HTTP API disabled, not starting.")
        return None

    host = str(getattr(settings, "host", "127.0.0.1"))
    port = int(getattr(settings, "port", 5000))

    server = make_server(host, port, create_app(state), threaded=True)
    t = threading.Thread(target=server.serve_forever, name="http-api", daemon=True)
    t.start()

    logger.info("HTTP API available at http://%s:%s/api", host, server.server_port)
    return HttpBackgroundRunner(server=server, thread=t)
