from datetime import date, datetime, timedelta, timezone

import pytest

from app.domain.reminders import Reminder, ReminderTrigger, first_occurrence, next_trigger_date, occurrences
from app.domain.reminders.trigger import calendar_weekday, python_weekday
from app.enums.garden import TriggerType

NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)  # Saturday
UTC = timezone.utc


def _berlin():
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

    try:
        return ZoneInfo("Europe/Berlin")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database not available")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_from_dict_interval_trigger():
    trigger = ReminderTrigger.from_dict({"type": "timeInterval", "seconds": 259200, "repeats": True})
    assert trigger.type is TriggerType.TIME_INTERVAL
    assert trigger.seconds == 259200
    assert trigger.repeats is True
    assert trigger.interval_days == 3


def test_from_dict_daily_kind_is_repeating_calendar():
    trigger = ReminderTrigger.from_dict({"type": "daily", "hour": 8, "minute": 30})
    assert trigger.type is TriggerType.CALENDAR
    assert trigger.repeats is True
    assert (trigger.hour, trigger.minute) == (8, 30)


def test_from_dict_date_trigger_is_one_time():
    trigger = ReminderTrigger.from_dict({"date": "2026-03-20T08:00:00Z", "repeats": True})
    assert trigger.type is TriggerType.DATE
    assert trigger.repeats is False
    assert trigger.is_one_time
    assert trigger.date == datetime(2026, 3, 20, 8, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "timeInterval", "seconds": 0},
        {"type": "bogus"},
        {"type": "calendar", "weekday": 8},
        {"type": "calendar", "hour": 24},
        {"type": "date", "date": "not a date"},
        "daily",
    ],
)
def test_from_dict_rejects_invalid_triggers(raw):
    with pytest.raises(ValueError):
        ReminderTrigger.from_dict(raw)


def test_to_dict_round_trips_calendar_fields():
    trigger = ReminderTrigger(type=TriggerType.CALENDAR, weekday=2, hour=18, minute=0, repeats=True)
    assert trigger.to_dict() == {"type": "calendar", "weekday": 2, "hour": 18, "minute": 0, "repeats": True}
    assert ReminderTrigger.from_dict(trigger.to_dict()) == trigger


def test_weekday_numbering_starts_on_sunday():
    assert calendar_weekday(date(2026, 3, 15)) == 1  # Sunday
    assert calendar_weekday(date(2026, 3, 14)) == 7  # Saturday
    assert python_weekday(1) == 6
    assert python_weekday(2) == 0


# ---------------------------------------------------------------------------
# next_trigger_date
# ---------------------------------------------------------------------------


def test_daily_interval_defaults_to_eight_tomorrow_when_past():
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=86400, repeats=True)
    assert next_trigger_date(trigger, now=NOW, tz=UTC) == datetime(2026, 3, 15, 8, 0, tzinfo=UTC)


def test_daily_interval_uses_given_time_today_when_ahead():
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=86400, repeats=True)
    assert next_trigger_date(trigger, 18, 0, now=NOW, tz=UTC) == datetime(2026, 3, 14, 18, 0, tzinfo=UTC)


def test_short_interval_is_now_plus_seconds():
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=3, repeats=False)
    assert next_trigger_date(trigger, now=NOW, tz=UTC) == NOW + timedelta(seconds=3)


def test_date_trigger_only_while_in_future():
    future = ReminderTrigger(type=TriggerType.DATE, date=NOW + timedelta(hours=2))
    past = ReminderTrigger(type=TriggerType.DATE, date=NOW - timedelta(minutes=1))
    assert next_trigger_date(future, now=NOW, tz=UTC) == NOW + timedelta(hours=2)
    assert next_trigger_date(past, now=NOW, tz=UTC) is None


def test_calendar_falls_back_to_nine_then_trigger_hour():
    bare = ReminderTrigger(type=TriggerType.CALENDAR, repeats=True)
    noon = ReminderTrigger(type=TriggerType.CALENDAR, hour=12, minute=0, repeats=True)
    assert next_trigger_date(bare, now=NOW, tz=UTC) == datetime(2026, 3, 15, 9, 0, tzinfo=UTC)
    assert next_trigger_date(noon, now=NOW, tz=UTC) == datetime(2026, 3, 14, 12, 0, tzinfo=UTC)
    # explicit data hour wins over the trigger's own
    assert next_trigger_date(noon, 15, now=NOW, tz=UTC) == datetime(2026, 3, 14, 15, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Occurrences
# ---------------------------------------------------------------------------


def test_first_occurrence_for_weekly_calendar_is_next_matching_weekday():
    trigger = ReminderTrigger(type=TriggerType.CALENDAR, weekday=2, hour=8, minute=0, repeats=True)  # Mondays
    assert first_occurrence(trigger, created_at=NOW, tz=UTC) == datetime(2026, 3, 16, 8, 0, tzinfo=UTC)


def test_monthly_calendar_skips_to_next_month():
    trigger = ReminderTrigger(type=TriggerType.CALENDAR, day=14, hour=8, minute=0, repeats=True)
    assert first_occurrence(trigger, created_at=NOW, tz=UTC) == datetime(2026, 4, 14, 8, 0, tzinfo=UTC)


def test_interval_occurrences_are_spaced_by_whole_days():
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=2 * 86400, repeats=True)
    anchor = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)
    slots = list(occurrences(trigger, anchor, after=NOW, until=NOW + timedelta(days=7), tz=UTC))
    assert slots == [datetime(2026, 3, d, 8, 0, tzinfo=UTC) for d in (16, 18, 20)]


def test_interval_occurrences_keep_wall_clock_across_dst():
    berlin = _berlin()
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=86400, repeats=True)
    anchor = datetime(2026, 3, 27, 8, 0, tzinfo=berlin)
    after = datetime(2026, 3, 27, 0, 0, tzinfo=berlin)
    slots = list(occurrences(trigger, anchor, after=after, until=after + timedelta(days=4), tz=berlin))
    assert [s.astimezone(berlin).hour for s in slots] == [8, 8, 8, 8]
    assert slots[1].astimezone(UTC).hour == 7  # CET
    assert slots[2].astimezone(UTC).hour == 6  # CEST


def test_sub_daily_interval_steps_in_seconds():
    trigger = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=3600, repeats=True)
    anchor = NOW - timedelta(minutes=90)
    slots = list(occurrences(trigger, anchor, after=NOW, until=NOW + timedelta(hours=3), tz=UTC))
    assert slots == [anchor + timedelta(hours=k) for k in (2, 3, 4)]


def test_one_time_reminder_following_is_none():
    reminder = Reminder(
        identifier="once",
        title="Harvest",
        body="",
        trigger=ReminderTrigger(type=TriggerType.DATE, date=NOW + timedelta(days=1)),
        created_at=NOW,
    )
    assert reminder.anchor(UTC) == NOW + timedelta(days=1)
    assert reminder.following(NOW + timedelta(days=1), UTC) is None


def test_weekly_reminder_following_is_a_week_later():
    fired = datetime(2026, 3, 16, 8, 0, tzinfo=UTC)
    reminder = Reminder(
        identifier="weekly",
        title="Fertilize",
        body="",
        trigger=ReminderTrigger(type=TriggerType.CALENDAR, weekday=2, hour=8, minute=0, repeats=True),
        data={"hour": 8, "minute": 0},
        created_at=NOW,
        anchor_at=fired,
    )
    assert reminder.following(fired, UTC) == fired + timedelta(days=7)
