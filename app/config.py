"""
Configuration for the Garden Tracker API
========================================
Main application runtime settings loaded from environment variables
(``GARDEN_*`` plus ``PLANTNET_API_KEY`` and ``PORT``).
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_origins(name: str, default: str) -> str | list[str]:
    """``*`` stays a wildcard; anything else is a comma-separated origin list."""
    raw = os.getenv(name, default).strip()
    if raw == "*":
        return raw
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("GARDEN_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("GARDEN_SECRET_KEY", "GardenDevSecretKey"))
    database_path: str = field(default_factory=lambda: os.getenv("GARDEN_DATABASE_PATH", "database/garden.db"))
    db_cache_size_kb: int = field(default_factory=lambda: _env_int("GARDEN_DB_CACHE_SIZE_KB", 8_000))
    upload_folder: str = field(default_factory=lambda: os.getenv("GARDEN_UPLOAD_FOLDER", "uploads"))
    max_upload_mb: int = field(default_factory=lambda: _env_int("GARDEN_MAX_UPLOAD_MB", 16))

    # Cross-origin access (mobile/web clients)
    socketio_cors_origins: str | list[str] = field(default_factory=lambda: _env_origins("GARDEN_SOCKETIO_CORS", "*"))
    api_cors_origins: str | list[str] = field(default_factory=lambda: _env_origins("GARDEN_API_CORS", "*"))

    # Calendar reasoning (today, "every day at 8 AM") happens in this zone
    timezone: str = field(default_factory=lambda: os.getenv("GARDEN_TIMEZONE", "UTC"))

    # PlantNet identification
    plantnet_api_key: str | None = field(default_factory=lambda: os.getenv("PLANTNET_API_KEY") or None)
    plantnet_base_url: str = field(
        default_factory=lambda: os.getenv("GARDEN_PLANTNET_BASE_URL", "https://my-api.plantnet.org")
    )
    request_timeout_seconds: int = field(default_factory=lambda: _env_int("GARDEN_REQUEST_TIMEOUT", 30))

    # Background work
    enable_scheduler: bool = field(default_factory=lambda: _env_bool("GARDEN_ENABLE_SCHEDULER", True))
    reminder_dispatch_interval_seconds: int = field(
        default_factory=lambda: _env_int("GARDEN_REMINDER_DISPATCH_INTERVAL", 30)
    )
    scheduler_max_workers: int = field(default_factory=lambda: _env_int("GARDEN_SCHEDULER_MAX_WORKERS", 2))
    seed_demo_data: bool = field(default_factory=lambda: _env_bool("GARDEN_SEED_DEMO_DATA", False))
    eventbus_queue_size: int = field(default_factory=lambda: _env_int("GARDEN_EVENTBUS_QUEUE_SIZE", 1024))
    eventbus_worker_count: int = field(default_factory=lambda: _env_int("GARDEN_EVENTBUS_WORKER_COUNT", 2))

    DEBUG: bool = field(default_factory=lambda: _env_bool("GARDEN_DEBUG", False))
    audit_log_path: str = field(default_factory=lambda: os.getenv("GARDEN_AUDIT_LOG_PATH", "logs/audit.log"))
    log_level: str = field(default_factory=lambda: os.getenv("GARDEN_LOG_LEVEL", "INFO"))
    host: str = field(default_factory=lambda: os.getenv("GARDEN_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 5000))

    # Default insecure secret key - used only for detection
    _DEFAULT_SECRET_KEY: str = field(default="GardenDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set GARDEN_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if self.max_upload_mb <= 0:
            raise ValueError("GARDEN_MAX_UPLOAD_MB must be positive.")
        if self.reminder_dispatch_interval_seconds <= 0:
            raise ValueError("GARDEN_REMINDER_DISPATCH_INTERVAL must be positive.")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        secret = self.secret_key or os.getenv("FLASK_SECRET_KEY")
        if not secret:
            raise RuntimeError(
                "Missing GARDEN_SECRET_KEY or FLASK_SECRET_KEY environment variable. "
                "Production systems must set an explicit secret key."
            )

        return {
            "ENV": self.environment,
            "SECRET_KEY": secret,
            "DATABASE_PATH": self.database_path,
            "UPLOAD_FOLDER": os.path.abspath(self.upload_folder),
            "MAX_CONTENT_LENGTH": self.max_upload_mb * 1024 * 1024,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "API_CORS_ORIGINS": self.api_cors_origins,
            "GARDEN_TIMEZONE": self.timezone,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "DEBUG": self.DEBUG,
        }


def setup_logging(debug: bool = False) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "garden_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "garden_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8; reminder titles carry emoji)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "garden_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs("logs", exist_ok=True)
        file_handler = RotatingFileHandler(
            "logs/garden.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "garden_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"garden_console", "garden_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("GARDEN_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    # Socket.IO polling is chatty
    if _env_bool("GARDEN_SILENCE_SOCKETIO", True):
        logging.getLogger("socketio").setLevel(logging.WARNING)
        logging.getLogger("engineio").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
