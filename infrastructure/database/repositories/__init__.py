"""Repository facades exposing typed accessors over low-level mixins."""

from infrastructure.database.repositories.activity_log import ActivityRepository
from infrastructure.database.repositories.events import EventRepository
from infrastructure.database.repositories.garden import AreaRepository, CategoryRepository, PlantRepository
from infrastructure.database.repositories.notifications import ReceivedNotificationRepository
from infrastructure.database.repositories.reminders import ReminderRepository

__all__ = [
    "ActivityRepository",
    "AreaRepository",
    "CategoryRepository",
    "EventRepository",
    "PlantRepository",
    "ReceivedNotificationRepository",
    "ReminderRepository",
]
