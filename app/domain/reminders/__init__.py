"""Reminder triggers, the upcoming feed and received notifications."""

from .feed import FeedDay, FeedItem, day_label, project_feed
from .received import ReceivedNotification, date_to_seconds, parse_area_id, parse_plant_ids, strip_sprout
from .reminder import Reminder
from .trigger import ReminderTrigger, first_occurrence, next_occurrence, next_trigger_date, occurrences

__all__ = [
    "FeedDay",
    "FeedItem",
    "ReceivedNotification",
    "Reminder",
    "ReminderTrigger",
    "date_to_seconds",
    "day_label",
    "first_occurrence",
    "next_occurrence",
    "next_trigger_date",
    "occurrences",
    "parse_area_id",
    "parse_plant_ids",
    "project_feed",
    "strip_sprout",
]
