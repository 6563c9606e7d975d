"""
Garden Enumerations
===================

Enums for garden events, care reminders and their schedule options.
"""

from enum import Enum


class EventType(str, Enum):
    """Garden care action recorded as an event."""

    WATER = "water"
    FERTILIZE = "fertilize"
    PRUNE = "prune"
    HARVEST = "harvest"
    WEED = "weed"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class ReminderType(str, Enum):
    """Kind of care a reminder nudges the gardener about."""

    WATER = "water"
    FERTILIZE = "fertilize"
    PRUNE = "prune"
    PHOTO = "photo"
    HARVEST = "harvest"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value


class ReminderFrequency(str, Enum):
    """Repeat cadence offered when creating a reminder."""

    DAILY = "daily"
    EVERY_2_DAYS = "every2"
    EVERY_3_DAYS = "every3"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    def __str__(self) -> str:
        return self.value


class TimeOfDay(str, Enum):
    """Preset delivery times for reminders."""

    MORNING = "morning"
    NOON = "noon"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    def __str__(self) -> str:
        return self.value


class TriggerType(str, Enum):
    """Shape of a reminder trigger."""

    TIME_INTERVAL = "timeInterval"
    CALENDAR = "calendar"
    DATE = "date"

    def __str__(self) -> str:
        return self.value


class ActivityKind(str, Enum):
    """Item kinds in the combined recent-activity feed."""

    GROWTH = "growth"
    EVENT = "event"

    def __str__(self) -> str:
        return self.value
