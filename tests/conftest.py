"""
Shared test fixtures for the Garden Tracker backend test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- Mock services for optional dependencies (emitter, activity/audit logging)
- Service factories pinned to a fixed clock in UTC
- A Flask app/client pair backed by a temporary database

Usage:
    def test_example(garden_service):
        area = garden_service.create_area("Backyard")
        assert area["emoji"] == "🌱"
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure repository root is on sys.path so tests can import application modules
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from infrastructure.database.repositories import (
    AreaRepository,
    CategoryRepository,
    EventRepository,
    PlantRepository,
    ReceivedNotificationRepository,
    ReminderRepository,
)

# ---------------------------------------------------------------------------
# Database & Repositories
# ---------------------------------------------------------------------------
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output quiet
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

# Saturday, 14 March 2026, 10:00 UTC
NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)


class Clock:
    """Settable clock for services that take ``clock=``."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close()


# ========================== Repository Fixtures ============================


@pytest.fixture()
def area_repo(db_handler):
    return AreaRepository(db_handler)


@pytest.fixture()
def category_repo(db_handler):
    return CategoryRepository(db_handler)


@pytest.fixture()
def plant_repo(db_handler):
    return PlantRepository(db_handler)


@pytest.fixture()
def event_repo(db_handler):
    return EventRepository(db_handler)


@pytest.fixture()
def reminder_repo(db_handler):
    return ReminderRepository(db_handler)


@pytest.fixture()
def received_repo(db_handler):
    return ReceivedNotificationRepository(db_handler)


# ========================== Mock Service Fixtures ==========================


@pytest.fixture()
def mock_audit_logger():
    """Mock AuditLogger."""
    logger = MagicMock()
    logger.record_deletion = MagicMock()
    return logger


@pytest.fixture()
def mock_activity_logger():
    """Mock ActivityLogger that accepts any log_activity call."""
    logger = MagicMock()
    logger.log_activity = MagicMock(return_value=0)
    return logger


@pytest.fixture()
def mock_emitter():
    """Mock EmitterService for SocketIO emission."""
    emitter = MagicMock()
    emitter.emit_reminder_delivered = MagicMock(return_value=True)
    emitter.emit_notifications_changed = MagicMock(return_value=True)
    return emitter


@pytest.fixture()
def clock():
    return Clock()


# ========================== Service Factory Fixtures =======================


@pytest.fixture()
def garden_service(area_repo, category_repo, plant_repo, mock_activity_logger, mock_audit_logger):
    """GardenService with real repos, UTC calendar and mocked loggers."""
    from app.services.application.garden_service import GardenService

    return GardenService(
        area_repo,
        category_repo,
        plant_repo,
        tz=timezone.utc,
        activity_logger=mock_activity_logger,
        audit_logger=mock_audit_logger,
    )


@pytest.fixture()
def event_service(event_repo, garden_service, mock_activity_logger, mock_audit_logger):
    from app.services.application.event_service import EventService

    return EventService(
        event_repo,
        garden_service,
        activity_logger=mock_activity_logger,
        audit_logger=mock_audit_logger,
    )


@pytest.fixture()
def notifications_service(received_repo, event_service, mock_emitter):
    from app.services.application.notifications_service import NotificationsService

    return NotificationsService(received_repo, event_service, mock_emitter)


@pytest.fixture()
def reminder_service(reminder_repo, notifications_service, mock_emitter, mock_activity_logger, mock_audit_logger, clock):
    """ReminderService in UTC whose notion of "now" is the ``clock`` fixture."""
    from app.services.application.reminder_service import ReminderService

    return ReminderService(
        reminder_repo,
        notifications_service,
        tz=timezone.utc,
        emitter_service=mock_emitter,
        activity_logger=mock_activity_logger,
        audit_logger=mock_audit_logger,
        clock=clock,
    )


# ========================== Seed Data Helpers ==============================


class SeedData:
    """Helper to create commonly needed test data.

    Usage in tests::

        def test_something(seed):
            area_id = seed.area("Backyard")
            plant_id = seed.plant("Tomato", area_id=area_id)
    """

    def __init__(self, garden_service):
        self._garden = garden_service
        self._default_category: int | None = None

    def area(self, name: str = "Backyard Garden", **kwargs) -> int:
        return self._garden.create_area(name, **kwargs)["area_id"]

    def category(self, name: str = "Vegetables", emoji: str | None = "🥕") -> int:
        return self._garden.add_category(name, emoji)["category_id"]

    def plant(self, name: str = "Tomato", *, area_id: int, category_id: int | None = None, **kwargs) -> int:
        if category_id is None:
            if self._default_category is None:
                self._default_category = self.category()
            category_id = self._default_category
        return self._garden.add_plant(name, category_id, area_id, **kwargs)["plant_id"]


@pytest.fixture()
def seed(garden_service):
    """SeedData helper for quickly populating the test database."""
    return SeedData(garden_service)


# ========================== Flask App Fixtures =============================


@pytest.fixture()
def app(tmp_path, monkeypatch):
    """Application backed by a temporary database; the dispatcher loop stays off."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PLANTNET_API_KEY", raising=False)

    from app import create_app

    flask_app = create_app(
        {
            "database_path": str(tmp_path / "test.db"),
            "upload_folder": str(tmp_path / "uploads"),
            "audit_log_path": str(tmp_path / "logs" / "audit.log"),
            "enable_scheduler": False,
            "seed_demo_data": False,
        }
    )
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.extensions["garden_shutdown"]("test teardown")


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]
