"""
Upcoming Reminder Feed
======================

Projects scheduled reminders onto a window of calendar days (14 by default)
in the garden timezone. Each day lists the reminders that fire on it, sorted
by time; empty days are left out.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from itertools import islice
from typing import Any, Iterable

from app.constants import Feed
from app.domain.reminders.reminder import Reminder
from app.domain.reminders.trigger import at_wall_clock


def day_label(day: date, today: date) -> str:
    """``Today``, ``Tomorrow`` or a short date such as ``Sat, Oct 18``."""
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%a}, {day:%b} {day.day}"


@dataclass(slots=True)
class FeedItem:
    identifier: str
    title: str
    body: str
    occurrence: datetime
    reminder_type: str | None = None
    plant_name: str | None = None
    trigger: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_reminder(cls, reminder: Reminder, occurrence: datetime) -> "FeedItem":
        return cls(
            identifier=reminder.identifier,
            title=reminder.title,
            body=reminder.body,
            occurrence=occurrence,
            reminder_type=reminder.reminder_type,
            plant_name=reminder.plant_name,
            trigger=reminder.trigger.to_dict(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "body": self.body,
            "type": self.reminder_type,
            "plant_name": self.plant_name,
            "time": f"{self.occurrence:%H:%M}",
            "occurrence": self.occurrence.isoformat(),
            "trigger": self.trigger,
        }


@dataclass(slots=True)
class FeedDay:
    date: date
    label: str
    items: list[FeedItem]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "label": self.label,
            "items": [item.to_dict() for item in self.items],
        }


def project_feed(
    reminders: Iterable[Reminder],
    *,
    now: datetime,
    tz: tzinfo,
    days: int = Feed.WINDOW_DAYS,
) -> list[FeedDay]:
    """Group upcoming occurrences of *reminders* by local day.

    Only occurrences after *now* and before midnight ending the last day of
    the window are kept. Sub-day interval reminders contribute just their
    next occurrence.
    """
    days = max(1, min(int(days), Feed.MAX_WINDOW_DAYS))
    today = now.astimezone(tz).date()
    window_end = at_wall_clock(today + timedelta(days=days), 0, 0, tz)

    buckets: dict[date, list[FeedItem]] = defaultdict(list)
    for reminder in reminders:
        upcoming = reminder.occurrences(after=now, until=window_end, tz=tz)
        if reminder.trigger.is_sub_daily:
            upcoming = islice(upcoming, 1)
        for occurrence in upcoming:
            local = occurrence.astimezone(tz)
            buckets[local.date()].append(FeedItem.from_reminder(reminder, local))

    feed: list[FeedDay] = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        items = buckets.get(day)
        if not items:
            continue
        items.sort(key=lambda item: (item.occurrence, item.identifier))
        feed.append(FeedDay(date=day, label=day_label(day, today), items=items))
    return feed
