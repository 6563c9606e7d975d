"""
Application Constants
=====================

Centralized constants to replace magic numbers throughout the codebase.
Organized by domain for easy discovery and maintenance.

Usage:
    from app.constants import FREQUENCY_OPTIONS, TIME_OPTIONS
    from app.constants import Defaults, Feed, Uploads
"""

from app.enums.garden import EventType, ReminderFrequency, ReminderType, TimeOfDay

# =============================================================================
# Entity Defaults
# =============================================================================


class Defaults:
    """Field defaults applied when the caller leaves them out."""

    AREA_EMOJI = "🌱"
    AREA_COVER_COLOR = "#7CB342"
    CATEGORY_EMOJI = "🌱"
    INITIAL_PHOTO_NOTE = "Initial photo"
    NOTIFICATION_TITLE = "Reminder"
    PLANT_NAME = "General"
    EVENT_LABEL = "Event"
    AREA_LABEL = "Area"
    ALL_PLANTS_LABEL = "All plants"


# =============================================================================
# Reminder Constants
# =============================================================================


class Feed:
    """Notification feed projection settings."""

    WINDOW_DAYS = 14
    MAX_WINDOW_DAYS = 60
    # Interval triggers of a day or more are treated as "once a day at hour:minute"
    DAY_SECONDS = 86_400
    DEFAULT_HOUR = 8
    DEFAULT_MINUTE = 0
    CALENDAR_FALLBACK_HOUR = 9


class PingReminder:
    """One-shot reminder used to check delivery end to end."""

    DELAY_SECONDS = 3
    TITLE = "🌱 Test Reminder"
    BODY = "Your garden reminders are working!"


REMINDER_TYPE_LABELS: dict[ReminderType, str] = {
    ReminderType.WATER: "Water",
    ReminderType.FERTILIZE: "Fertilize",
    ReminderType.PRUNE: "Prune",
    ReminderType.PHOTO: "Take Photo",
    ReminderType.HARVEST: "Harvest",
    ReminderType.CUSTOM: "Custom",
}

# (seconds, label)
FREQUENCY_OPTIONS: dict[ReminderFrequency, tuple[int, str]] = {
    ReminderFrequency.DAILY: (86_400, "Every day"),
    ReminderFrequency.EVERY_2_DAYS: (172_800, "Every 2 days"),
    ReminderFrequency.EVERY_3_DAYS: (259_200, "Every 3 days"),
    ReminderFrequency.WEEKLY: (604_800, "Every week"),
    ReminderFrequency.BIWEEKLY: (1_209_600, "Every 2 weeks"),
    ReminderFrequency.MONTHLY: (2_592_000, "Every month"),
}

# (hour, label)
TIME_OPTIONS: dict[TimeOfDay, tuple[int, str]] = {
    TimeOfDay.MORNING: (8, "Morning (8 AM)"),
    TimeOfDay.NOON: (12, "Noon (12 PM)"),
    TimeOfDay.AFTERNOON: (15, "Afternoon (3 PM)"),
    TimeOfDay.EVENING: (18, "Evening (6 PM)"),
}

EVENT_TYPE_LABELS: dict[EventType, str] = {
    EventType.WATER: "Watered",
    EventType.FERTILIZE: "Fertilized",
    EventType.PRUNE: "Pruned",
    EventType.HARVEST: "Harvested",
    EventType.WEED: "Weeded",
    EventType.OTHER: "Other",
}


# =============================================================================
# Uploads
# =============================================================================


class Uploads:
    """Image upload rules."""

    ALLOWED_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})
    URL_PREFIX = "/uploads"


# =============================================================================
# External Services
# =============================================================================


class PlantNet:
    """PlantNet identification API."""

    BASE_URL = "https://my-api.plantnet.org"
    PROJECT_ALL = "all"
    MISSING_KEY_MESSAGE = "PlantNet API key is not configured. Add PLANTNET_API_KEY to your .env file."
    MISSING_IMAGE_MESSAGE = "No image provided."
