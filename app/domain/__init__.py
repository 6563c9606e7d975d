"""
Domain Package
==============
Garden entities and reminder scheduling logic. Nothing here touches Flask or
the database; rows come in as dicts and leave via ``to_dict``/``to_row``.
"""

from .garden import Area, Category, GardenEvent, GrowthLogEntry, Plant
from .reminders import (
    FeedDay,
    FeedItem,
    ReceivedNotification,
    Reminder,
    ReminderTrigger,
    next_trigger_date,
    project_feed,
)

__all__ = [
    # Garden
    "Area",
    "Category",
    "GardenEvent",
    "GrowthLogEntry",
    "Plant",
    # Reminders
    "FeedDay",
    "FeedItem",
    "ReceivedNotification",
    "Reminder",
    "ReminderTrigger",
    "next_trigger_date",
    "project_feed",
]
