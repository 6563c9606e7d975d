"""Scheduled reminder entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Iterator

from app.constants import Defaults
from app.domain.reminders.trigger import ReminderTrigger, first_occurrence, next_occurrence, occurrences
from app.utils.time import coerce_datetime, iso_utc, utc_now


def _data_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class Reminder:
    """A scheduled notification with its trigger and free-form data."""

    identifier: str
    title: str
    body: str
    trigger: ReminderTrigger
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    anchor_at: datetime | None = None
    next_fire_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Reminder":
        return cls(
            identifier=row["identifier"],
            title=row.get("title") or "",
            body=row.get("body") or "",
            trigger=ReminderTrigger.from_dict(row.get("trigger") or {}),
            data=dict(row.get("data") or {}),
            created_at=coerce_datetime(row.get("created_at")) or utc_now(),
            anchor_at=coerce_datetime(row.get("anchor_at")),
            next_fire_at=coerce_datetime(row.get("next_fire_at")),
        )

    @property
    def hour(self) -> int | None:
        return _data_int(self.data, "hour")

    @property
    def minute(self) -> int | None:
        return _data_int(self.data, "minute")

    @property
    def reminder_type(self) -> str | None:
        return self.data.get("type")

    @property
    def plant_name(self) -> str:
        return self.data.get("plant_name") or Defaults.PLANT_NAME

    def anchor(self, tz: tzinfo) -> datetime | None:
        """First fire time, derived from ``created_at`` when not stored."""
        if self.anchor_at is not None:
            return self.anchor_at
        return first_occurrence(self.trigger, created_at=self.created_at, tz=tz, hour=self.hour, minute=self.minute)

    def occurrences(self, *, after: datetime, until: datetime, tz: tzinfo) -> Iterator[datetime]:
        anchor = self.anchor(tz)
        if anchor is None:
            return iter(())
        return occurrences(self.trigger, anchor, after=after, until=until, tz=tz, hour=self.hour, minute=self.minute)

    def following(self, fired_at: datetime, tz: tzinfo) -> datetime | None:
        """Fire time after *fired_at*, or None once a one-time reminder has fired."""
        if self.trigger.is_one_time:
            return None
        anchor = self.anchor(tz)
        if anchor is None:
            return None
        return next_occurrence(self.trigger, anchor, after=fired_at, tz=tz, hour=self.hour, minute=self.minute)

    def to_row(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "body": self.body,
            "trigger": self.trigger.to_dict(),
            "data": dict(self.data),
            "created_at": iso_utc(self.created_at),
            "anchor_at": iso_utc(self.anchor_at) if self.anchor_at else None,
            "next_fire_at": iso_utc(self.next_fire_at) if self.next_fire_at else None,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "content": {"title": self.title, "body": self.body, "data": dict(self.data)},
            "trigger": self.trigger.to_dict(),
            "created_at": iso_utc(self.created_at),
            "next_fire_at": iso_utc(self.next_fire_at) if self.next_fire_at else None,
        }
