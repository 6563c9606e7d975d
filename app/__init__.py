from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from typing import Any

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

from app.blueprints.api.activity import activity_api
from app.blueprints.api.areas import areas_api
from app.blueprints.api.categories import categories_api
from app.blueprints.api.events import events_api
from app.blueprints.api.identify import identify_api
from app.blueprints.api.notifications import notifications_api
from app.blueprints.api.plants import plants_api
from app.blueprints.api.reminders import reminders_api
from app.config import load_config, setup_logging
from app.extensions import init_extensions, socketio


def create_app(config_overrides: dict[str, Any] | None = None, *, bootstrap_runtime: bool = False) -> Flask:
    """Build the Flask application.

    ``bootstrap_runtime`` installs SIGINT/SIGTERM handlers and is meant for
    the long-running server process only.
    """
    config = load_config()
    if config_overrides:
        for key, value in config_overrides.items():
            setattr(config, key.lower(), value)

    # Configure logging early so container startup is visible in the terminal and garden.log.
    setup_logging(debug=config.DEBUG)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.json.ensure_ascii = False  # keep emoji readable in responses

    # Initialize Socket.IO BEFORE building ServiceContainer (EmitterService needs it)
    init_extensions(flask_app, config.socketio_cors_origins, config.api_cors_origins)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config)
    flask_app.config["CONTAINER"] = container
    flask_app.teardown_appcontext(container.database.close_db)

    # ── Graceful shutdown handlers ──────────────────────────────────
    _shutdown_lock = threading.Lock()
    _shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal _shutdown_done
        with _shutdown_lock:
            if _shutdown_done:
                return
            _shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    atexit.register(_graceful_shutdown, "atexit")
    flask_app.extensions["garden_shutdown"] = _graceful_shutdown

    if bootstrap_runtime:
        # SIGINT=Ctrl-C, SIGTERM=container/systemd stop
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(OSError, ValueError):
                signal.signal(sig, _signal_handler)

    # Global JSON error handler: any unhandled exception on /api/
    # routes gets the error envelope instead of a stack trace.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            if isinstance(exc, HTTPException):
                return exc
            raise exc
        from app.domain.exceptions import GardenError
        from app.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status == 413:
                return error_response("Upload too large", 413)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, GardenError):
            status = exc.http_status
            if status >= 500 and not (exc.public and str(exc)):
                return safe_error(exc, status, context=type(exc).__name__)
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context="unhandled")

    @flask_app.errorhandler(413)
    def _handle_too_large(_exc):
        from app.utils.http import error_response

        return error_response("Upload too large", 413)

    @flask_app.get("/")
    def index():
        return jsonify({"message": "🌱 Garden Tracker API is running"})

    @flask_app.get("/uploads/<path:filename>")
    def uploaded_file(filename: str):
        return send_from_directory(flask_app.config["UPLOAD_FOLDER"], filename)

    # ── API version prefix ──────────────────────────────────────────
    V1 = "/api/v1"

    flask_app.register_blueprint(areas_api, url_prefix=f"{V1}/areas")
    flask_app.register_blueprint(categories_api, url_prefix=f"{V1}/categories")
    flask_app.register_blueprint(plants_api, url_prefix=f"{V1}/plants")
    flask_app.register_blueprint(events_api, url_prefix=f"{V1}/events")
    flask_app.register_blueprint(activity_api, url_prefix=f"{V1}/activity")
    flask_app.register_blueprint(reminders_api, url_prefix=f"{V1}/reminders")
    flask_app.register_blueprint(notifications_api, url_prefix=f"{V1}/notifications")
    flask_app.register_blueprint(identify_api, url_prefix=f"{V1}/identify")

    for bp_name in flask_app.blueprints:
        logging.info(" Registered blueprint: %s", bp_name)

    # ── Rewrite /api/* → /api/v1/* ─────────────────────────────────
    # WSGI-level rewrite, no HTTP redirect.
    _original_wsgi = flask_app.wsgi_app

    def _unversioned_api_rewrite(environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path.startswith("/api/") and not path.startswith("/api/v1/"):
            environ["PATH_INFO"] = "/api/v1" + path[4:]
        return _original_wsgi(environ, start_response)

    flask_app.wsgi_app = _unversioned_api_rewrite  # type: ignore[assignment]

    if config.seed_demo_data:
        from app.services.utilities.demo_data import seed_demo_data

        seed_demo_data(container.garden_service)

    logger = logging.getLogger(__name__)
    logger.info("Garden Tracker application initialized successfully.")

    return flask_app


__all__ = ["create_app", "socketio"]
