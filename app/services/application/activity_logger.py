"""Activity logging for garden changes and lifecycle events.

Every activity is written to ``logs/activity.log`` and published on the
container's EventBus as ``activity.<type>``. Only destructive and lifecycle
activities are also stored in the ``ActivityLog`` table.
"""

import json
import logging
import os
from typing import Any

from app.enums.events import GardenActivity
from app.utils.event_bus import EventBus
from app.utils.time import iso_now
from infrastructure.database.repositories.activity_log import ActivityRepository

logger = logging.getLogger(__name__)

ACTIVITY_TOPIC_PREFIX = "activity."


def _activity_file_logger(log_dir: str) -> logging.Logger:
    file_logger = logging.getLogger("activity_log")
    file_logger.setLevel(logging.INFO)
    if not any(getattr(h, "name", "") == "activity_file" for h in file_logger.handlers):
        os.makedirs(log_dir, exist_ok=True)
        handler = logging.FileHandler(os.path.join(log_dir, "activity.log"), encoding="utf-8")
        handler.set_name("activity_file")
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        file_logger.addHandler(handler)
    return file_logger


class ActivityLogger:
    """Record what happened in the garden and fan it out to subscribers."""

    AREA_CREATED = GardenActivity.AREA_CREATED.value
    AREA_UPDATED = GardenActivity.AREA_UPDATED.value
    AREA_DELETED = GardenActivity.AREA_DELETED.value
    CATEGORY_CREATED = GardenActivity.CATEGORY_CREATED.value
    PLANT_ADDED = GardenActivity.PLANT_ADDED.value
    PLANT_UPDATED = GardenActivity.PLANT_UPDATED.value
    PLANT_REMOVED = GardenActivity.PLANT_REMOVED.value
    GROWTH_LOGGED = GardenActivity.GROWTH_LOGGED.value
    GROWTH_LOG_REMOVED = GardenActivity.GROWTH_LOG_REMOVED.value
    EVENT_LOGGED = GardenActivity.EVENT_LOGGED.value
    EVENT_REMOVED = GardenActivity.EVENT_REMOVED.value
    REMINDER_SCHEDULED = GardenActivity.REMINDER_SCHEDULED.value
    REMINDER_CANCELLED = GardenActivity.REMINDER_CANCELLED.value
    REMINDER_DELIVERED = GardenActivity.REMINDER_DELIVERED.value
    SYSTEM_STARTUP = GardenActivity.SYSTEM_STARTUP.value
    SYSTEM_SHUTDOWN = GardenActivity.SYSTEM_SHUTDOWN.value

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    # Stored in the database as well as the log file
    DB_LOGGED_EVENTS = frozenset(
        {
            AREA_DELETED,
            PLANT_REMOVED,
            GROWTH_LOG_REMOVED,
            EVENT_REMOVED,
            REMINDER_CANCELLED,
            SYSTEM_STARTUP,
            SYSTEM_SHUTDOWN,
        }
    )

    def __init__(self, repo: ActivityRepository, event_bus: EventBus | None = None, log_dir: str = "logs"):
        self._repo = repo
        self.event_bus = event_bus
        self._file_logger = _activity_file_logger(log_dir)

    def log_activity(
        self,
        activity_type: str,
        description: str,
        severity: str = INFO,
        entity_type: str | None = None,
        entity_id: int | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """Log one activity.

        Returns the ``ActivityLog`` row id for audited activity types and 0
        for activities that only go to the file and the bus.
        """
        if severity not in {self.INFO, self.WARNING, self.ERROR}:
            severity = self.INFO

        record = {
            "timestamp": iso_now(),
            "activity_type": activity_type,
            "severity": severity,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "description": description,
            "metadata": metadata or {},
        }

        message = f"[{severity.upper()}] {activity_type}: {description}"
        if entity_type and entity_id is not None:
            message += f" ({entity_type}#{entity_id})"
        if metadata:
            message += f" | {json.dumps(metadata, default=str, ensure_ascii=False)}"
        self._file_logger.log(logging.getLevelName(severity.upper()), message)

        if self.event_bus is not None:
            self.event_bus.publish(f"{ACTIVITY_TOPIC_PREFIX}{activity_type}", record)

        if activity_type in self.DB_LOGGED_EVENTS:
            return self._repo.insert(record) or 0
        return 0

    def get_recent_activities(self, limit: int = 50, activity_type: str | None = None) -> list[dict[str, Any]]:
        """Audited activities from the database, newest first."""
        return self._repo.recent(limit=limit, activity_type=activity_type)


def log_if_available(
    activity_logger: ActivityLogger | None,
    activity_type: str,
    description: str,
    **kwargs,
) -> None:
    """Log through *activity_logger* when one is wired in.

    Extra keyword arguments are forwarded to
    :meth:`ActivityLogger.log_activity` (``severity``, ``entity_type``,
    ``entity_id``, ``metadata``).
    """
    if activity_logger is not None:
        activity_logger.log_activity(activity_type, description, **kwargs)
