"""Flask Extension Instances and Initialisation."""

import logging
import os

from flask import Flask
from flask_compress import Compress
from flask_cors import CORS
from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

# Flask-Compress instance (gzip/brotli for JSON responses)
compress = Compress()

# Flask-CORS instance; the mobile/web clients call the API cross-origin
cors = CORS()


def _socketio_transports() -> list[str]:
    """Return allowed Engine.IO transports.

    Default to polling-only to avoid Werkzeug websocket upgrade crashes.
    Override with `GARDEN_SOCKETIO_TRANSPORTS`, e.g. `polling,websocket`.
    """
    raw = os.getenv("GARDEN_SOCKETIO_TRANSPORTS")
    if raw:
        transports = [t.strip() for t in raw.split(",") if t.strip()]
        if transports:
            return transports

    return ["polling"]


# Threading mode keeps the scheduler and Socket.IO in one process
socketio = SocketIO(
    async_mode="threading",
    cors_allowed_origins=[],
    logger=True,
    engineio_logger=False,
    ping_timeout=60,
    ping_interval=25,
    transports=_socketio_transports(),
)


def init_extensions(
    app: Flask,
    socketio_origins: str | list[str],
    api_origins: str | list[str] = "*",
) -> None:
    """Initialise Flask extension objects."""
    app.config.setdefault(
        "COMPRESS_MIMETYPES",
        [
            "text/html",
            "text/plain",
            "application/json",
        ],
    )
    app.config.setdefault("COMPRESS_MIN_SIZE", 256)  # Don't compress tiny responses
    compress.init_app(app)

    cors.init_app(app, resources={r"/api/*": {"origins": api_origins}, r"/uploads/*": {"origins": api_origins}})

    try:
        logging.getLogger("engineio").setLevel(logging.WARNING)

        socketio.init_app(
            app, cors_allowed_origins=socketio_origins, logger=logging.getLogger("socketio"), engineio_logger=False
        )
        logger.info("✅ Socket.IO initialized with CORS origins: %s", socketio_origins)
    except Exception as e:
        logger.error("Failed to initialize Socket.IO: %s", e, exc_info=True)
        raise
