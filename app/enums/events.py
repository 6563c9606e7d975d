from enum import Enum


class WebSocketEvent(str, Enum):
    """WebSocket event names for real-time communication."""

    REMINDER_DELIVERED = "reminder_delivered"
    NOTIFICATIONS_CHANGED = "notifications_changed"
    GARDEN_ACTIVITY = "garden_activity"


class GardenActivity(str, Enum):
    """Activity topics published on the EventBus (prefixed with ``activity.``)."""

    AREA_CREATED = "area_created"
    AREA_UPDATED = "area_updated"
    AREA_DELETED = "area_deleted"
    CATEGORY_CREATED = "category_created"
    PLANT_ADDED = "plant_added"
    PLANT_UPDATED = "plant_updated"
    PLANT_REMOVED = "plant_removed"
    GROWTH_LOGGED = "growth_logged"
    GROWTH_LOG_REMOVED = "growth_log_removed"
    EVENT_LOGGED = "event_logged"
    EVENT_REMOVED = "event_removed"
    REMINDER_SCHEDULED = "reminder_scheduled"
    REMINDER_CANCELLED = "reminder_cancelled"
    REMINDER_DELIVERED = "reminder_delivered"
    SYSTEM_STARTUP = "system_startup"
    SYSTEM_SHUTDOWN = "system_shutdown"

    def __str__(self) -> str:
        return self.value
