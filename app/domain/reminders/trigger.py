"""
Reminder Triggers
=================

A trigger describes when a reminder fires. Three shapes exist:

- ``timeInterval``: every ``seconds`` (optionally repeating)
- ``calendar``: at ``hour:minute``, optionally restricted to a ``weekday``
  (1 = Sunday ... 7 = Saturday) or a ``day`` of the month
- ``date``: once, at an absolute instant

Interval triggers that span whole days fire at the reminder's wall-clock
time (``hour:minute`` in the garden timezone) every N days; shorter intervals
step in absolute seconds. All functions take ``now``/``tz`` explicitly so the
arithmetic is deterministic under test.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Iterator

from app.constants import Feed
from app.enums.garden import TriggerType
from app.utils.time import coerce_datetime

# Calendar kinds accepted on input; they all normalize to ``calendar``.
_CALENDAR_KINDS = {"calendar", "daily", "weekly", "monthly"}
_REPEATING_KINDS = {"daily", "weekly", "monthly"}
# Upper bound when searching for the next calendar slot (covers "31st of the month").
_SEARCH_HORIZON = timedelta(days=400)


def _opt_int(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer") from None


def at_wall_clock(day: date, hour: int, minute: int, tz: tzinfo) -> datetime:
    """The aware instant for *day* at ``hour:minute`` in *tz*."""
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def next_wall_clock(now: datetime, hour: int, minute: int, tz: tzinfo) -> datetime:
    """Today at ``hour:minute`` in *tz*, or tomorrow if that is not after *now*."""
    now_local = now.astimezone(tz)
    candidate = at_wall_clock(now_local.date(), hour, minute, tz)
    if candidate <= now_local:
        candidate = at_wall_clock(now_local.date() + timedelta(days=1), hour, minute, tz)
    return candidate


def python_weekday(weekday: int) -> int:
    """Convert 1 = Sunday ... 7 = Saturday into ``date.weekday()`` numbering."""
    return (weekday - 2) % 7


def calendar_weekday(day: date) -> int:
    """Convert ``date.weekday()`` into 1 = Sunday ... 7 = Saturday."""
    return (day.weekday() + 1) % 7 + 1


@dataclass(slots=True)
class ReminderTrigger:
    """When a reminder fires."""

    type: TriggerType
    repeats: bool = False
    seconds: int | None = None
    hour: int | None = None
    minute: int | None = None
    weekday: int | None = None
    day: int | None = None
    date: datetime | None = None

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            self.type = TriggerType(self.type)

        if self.type is TriggerType.TIME_INTERVAL:
            if not self.seconds or self.seconds <= 0:
                raise ValueError("timeInterval trigger needs a positive seconds value")
        elif self.type is TriggerType.DATE:
            if self.date is None:
                raise ValueError("date trigger needs a valid date")
            self.repeats = False
        else:
            if self.hour is not None and not 0 <= self.hour <= 23:
                raise ValueError("hour must be between 0 and 23")
            if self.minute is not None and not 0 <= self.minute <= 59:
                raise ValueError("minute must be between 0 and 59")
            if self.weekday is not None and not 1 <= self.weekday <= 7:
                raise ValueError("weekday must be between 1 (Sunday) and 7 (Saturday)")
            if self.day is not None and not 1 <= self.day <= 31:
                raise ValueError("day must be between 1 and 31")

    @classmethod
    def from_dict(cls, raw: Any) -> "ReminderTrigger":
        """Parse a stored trigger or one shaped like a mobile scheduling payload."""
        if isinstance(raw, ReminderTrigger):
            return raw
        if not isinstance(raw, dict):
            raise ValueError("trigger must be an object")

        kind = raw.get("type")
        if kind == TriggerType.TIME_INTERVAL.value or raw.get("seconds"):
            return cls(
                type=TriggerType.TIME_INTERVAL,
                seconds=_opt_int(raw.get("seconds"), "seconds"),
                repeats=bool(raw.get("repeats", False)),
            )

        if raw.get("date") is not None or kind == TriggerType.DATE.value:
            when = coerce_datetime(raw.get("date"))
            if when is None:
                raise ValueError("date trigger needs a valid date")
            return cls(type=TriggerType.DATE, date=when)

        if kind is not None and kind not in _CALENDAR_KINDS:
            raise ValueError(f"Unsupported trigger type: {kind}")
        return cls(
            type=TriggerType.CALENDAR,
            hour=_opt_int(raw.get("hour"), "hour"),
            minute=_opt_int(raw.get("minute"), "minute"),
            weekday=_opt_int(raw.get("weekday"), "weekday"),
            day=_opt_int(raw.get("day"), "day"),
            repeats=bool(raw.get("repeats", kind in _REPEATING_KINDS)),
        )

    def to_dict(self) -> dict[str, Any]:
        if self.type is TriggerType.TIME_INTERVAL:
            return {"type": self.type.value, "seconds": self.seconds, "repeats": self.repeats}
        if self.type is TriggerType.DATE:
            return {"type": self.type.value, "date": self.date.isoformat()}
        payload: dict[str, Any] = {"type": self.type.value}
        for key in ("weekday", "day", "hour", "minute"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        payload["repeats"] = self.repeats
        return payload

    # --- Classification ----------------------------------------------------
    @property
    def is_one_time(self) -> bool:
        return self.type is TriggerType.DATE or not self.repeats

    @property
    def is_daily_interval(self) -> bool:
        return self.type is TriggerType.TIME_INTERVAL and self.seconds == Feed.DAY_SECONDS

    @property
    def is_sub_daily(self) -> bool:
        return self.type is TriggerType.TIME_INTERVAL and (self.seconds or 0) < Feed.DAY_SECONDS

    @property
    def interval_days(self) -> int | None:
        """Whole-day step for day-spanning interval triggers."""
        if self.type is not TriggerType.TIME_INTERVAL or not self.seconds:
            return None
        if self.seconds >= Feed.DAY_SECONDS and self.seconds % Feed.DAY_SECONDS == 0:
            return self.seconds // Feed.DAY_SECONDS
        return None

    def clock(self, hour: int | None = None, minute: int | None = None) -> tuple[int, int]:
        """Wall-clock time for this trigger; explicit values win over the trigger's own."""
        if self.type is TriggerType.CALENDAR:
            h = hour if hour is not None else self.hour if self.hour is not None else Feed.CALENDAR_FALLBACK_HOUR
        else:
            h = hour if hour is not None else Feed.DEFAULT_HOUR
        m = minute if minute is not None else self.minute if self.minute is not None else Feed.DEFAULT_MINUTE
        return h, m

    def matches_day(self, day: date) -> bool:
        if self.weekday is not None and day.weekday() != python_weekday(self.weekday):
            return False
        if self.day is not None and day.day != self.day:
            return False
        return True


def next_trigger_date(
    trigger: ReminderTrigger,
    hour: int | None = None,
    minute: int | None = None,
    *,
    now: datetime,
    tz: tzinfo,
) -> datetime | None:
    """Preview of the next delivery as a reminder list shows it.

    Day-spanning intervals land on today/tomorrow at ``hour:minute`` (default
    8:00); shorter intervals are ``now + seconds``; dates are returned only
    while still in the future; calendar triggers resolve to the next
    ``hour:minute`` (data, then trigger, then 9:00).
    """
    if trigger.type is TriggerType.TIME_INTERVAL:
        seconds = trigger.seconds or 0
        if seconds >= Feed.DAY_SECONDS:
            h, m = trigger.clock(hour, minute)
            return next_wall_clock(now, h, m, tz)
        return now + timedelta(seconds=seconds)

    if trigger.type is TriggerType.DATE:
        return trigger.date if trigger.date > now else None

    h, m = trigger.clock(hour, minute)
    return next_wall_clock(now, h, m, tz)


def first_occurrence(
    trigger: ReminderTrigger,
    *,
    created_at: datetime,
    tz: tzinfo,
    hour: int | None = None,
    minute: int | None = None,
) -> datetime | None:
    """The first time a reminder created at *created_at* fires."""
    if trigger.type is TriggerType.DATE:
        return trigger.date
    if trigger.type is TriggerType.TIME_INTERVAL and trigger.interval_days is None:
        return created_at + timedelta(seconds=trigger.seconds or 0)
    if trigger.type is TriggerType.TIME_INTERVAL:
        h, m = trigger.clock(hour, minute)
        return next_wall_clock(created_at, h, m, tz)
    return next(
        _calendar_slots(trigger, after=created_at, until=created_at + _SEARCH_HORIZON, tz=tz, hour=hour, minute=minute),
        None,
    )


def occurrences(
    trigger: ReminderTrigger,
    anchor: datetime,
    *,
    after: datetime,
    until: datetime,
    tz: tzinfo,
    hour: int | None = None,
    minute: int | None = None,
) -> Iterator[datetime]:
    """Yield fire times ``t`` with ``after < t < until`` for a reminder first firing at *anchor*."""
    if trigger.is_one_time:
        if after < anchor < until:
            yield anchor
        return

    if trigger.type is TriggerType.CALENDAR:
        for slot in _calendar_slots(trigger, after=max(after, anchor - timedelta(seconds=1)), until=until, tz=tz,
                                    hour=hour, minute=minute):
            yield slot
        return

    step_days = trigger.interval_days
    if step_days is not None:
        anchor_local = anchor.astimezone(tz)
        h, m = anchor_local.hour, anchor_local.minute
        elapsed_days = (after.astimezone(tz).date() - anchor_local.date()).days
        k = max(0, math.ceil(elapsed_days / step_days) - 1)
        while True:
            slot = at_wall_clock(anchor_local.date() + timedelta(days=k * step_days), h, m, tz)
            if slot >= until:
                return
            if slot > after:
                yield slot
            k += 1

    step = timedelta(seconds=trigger.seconds or 0)
    k = max(0, math.floor((after - anchor) / step)) if after > anchor else 0
    while True:
        slot = anchor + k * step
        if slot >= until:
            return
        if slot > after:
            yield slot
        k += 1


def next_occurrence(
    trigger: ReminderTrigger,
    anchor: datetime,
    *,
    after: datetime,
    tz: tzinfo,
    hour: int | None = None,
    minute: int | None = None,
) -> datetime | None:
    """The first fire time strictly after *after*, or None when the trigger is spent."""
    return next(
        occurrences(trigger, anchor, after=after, until=after + _SEARCH_HORIZON, tz=tz, hour=hour, minute=minute),
        None,
    )


def _calendar_slots(
    trigger: ReminderTrigger,
    *,
    after: datetime,
    until: datetime,
    tz: tzinfo,
    hour: int | None = None,
    minute: int | None = None,
) -> Iterator[datetime]:
    h, m = trigger.clock(hour, minute)
    day = after.astimezone(tz).date()
    last_day = until.astimezone(tz).date()
    while day <= last_day:
        if trigger.matches_day(day):
            slot = at_wall_clock(day, h, m, tz)
            if after < slot < until:
                yield slot
        day += timedelta(days=1)
