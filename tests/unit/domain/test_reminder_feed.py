import math
from datetime import date, datetime, timedelta, timezone

import pytest

from app.domain.reminders import Reminder, ReminderTrigger, day_label, project_feed
from app.enums.garden import TriggerType

NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)  # Saturday
UTC = timezone.utc


def _reminder(identifier, trigger, *, hour=8, minute=0, **kwargs):
    return Reminder(
        identifier=identifier,
        title=f"🌱 {identifier}",
        body="",
        trigger=trigger,
        data={"hour": hour, "minute": minute, "type": "water", "plant_name": "Basil"},
        created_at=kwargs.pop("created_at", NOW),
        **kwargs,
    )


def _interval(days, repeats=True):
    return ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=days * 86400, repeats=repeats)


def _all_items(feed):
    return [item for day in feed for item in day.items]


def test_day_labels():
    today = date(2026, 3, 14)
    assert day_label(today, today) == "Today"
    assert day_label(date(2026, 3, 15), today) == "Tomorrow"
    assert day_label(date(2026, 3, 21), today) == "Sat, Mar 21"


@pytest.mark.parametrize("step_days", [2, 3, 7])
def test_n_day_interval_fills_window_at_n_day_spacing(step_days):
    feed = project_feed([_reminder("r", _interval(step_days))], now=NOW, tz=UTC)
    items = _all_items(feed)

    assert math.floor(14 / step_days) <= len(items) <= math.ceil(14 / step_days)
    gaps = {(b.occurrence - a.occurrence) for a, b in zip(items, items[1:])}
    assert gaps <= {timedelta(days=step_days)}
    assert all(item.occurrence.hour == 8 for item in items)


def test_daily_reminder_appears_every_day_when_time_still_ahead():
    evening = ReminderTrigger(type=TriggerType.CALENDAR, hour=18, minute=0, repeats=True)
    feed = project_feed([_reminder("daily", evening, hour=18)], now=NOW, tz=UTC)

    assert len(feed) == 14
    assert feed[0].label == "Today"
    assert feed[1].label == "Tomorrow"
    assert feed[-1].date == date(2026, 3, 27)


def test_daily_reminder_skips_today_once_its_time_passed():
    morning = ReminderTrigger(type=TriggerType.CALENDAR, hour=8, minute=0, repeats=True)
    feed = project_feed([_reminder("daily", morning)], now=NOW, tz=UTC)

    assert len(feed) == 13
    assert feed[0].label == "Tomorrow"


def test_one_time_reminder_appears_once():
    when = datetime(2026, 3, 16, 12, 0, tzinfo=UTC)
    feed = project_feed([_reminder("once", ReminderTrigger(type=TriggerType.DATE, date=when))], now=NOW, tz=UTC)

    assert len(feed) == 1
    assert feed[0].label == "Mon, Mar 16"
    assert feed[0].items[0].to_dict()["time"] == "12:00"


def test_past_one_time_reminder_is_not_shown():
    past = ReminderTrigger(type=TriggerType.DATE, date=NOW - timedelta(hours=1))
    assert project_feed([_reminder("past", past)], now=NOW, tz=UTC) == []


def test_one_time_interval_shows_only_first_occurrence():
    feed = project_feed([_reminder("once", _interval(2, repeats=False))], now=NOW, tz=UTC)
    assert len(_all_items(feed)) == 1


def test_sub_daily_interval_contributes_one_item():
    hourly = ReminderTrigger(type=TriggerType.TIME_INTERVAL, seconds=3600, repeats=True)
    feed = project_feed([_reminder("hourly", hourly)], now=NOW, tz=UTC)

    items = _all_items(feed)
    assert len(items) == 1
    assert items[0].occurrence == NOW + timedelta(hours=1)


def test_items_within_a_day_are_sorted_by_time():
    noon = ReminderTrigger(type=TriggerType.DATE, date=datetime(2026, 3, 15, 12, 0, tzinfo=UTC))
    morning = ReminderTrigger(type=TriggerType.DATE, date=datetime(2026, 3, 15, 7, 30, tzinfo=UTC))
    feed = project_feed([_reminder("b", noon), _reminder("a", morning)], now=NOW, tz=UTC)

    assert [item.identifier for item in feed[0].items] == ["a", "b"]


def test_window_is_clamped_and_respects_days():
    reminders = [_reminder("r", _interval(3))]
    assert len(_all_items(project_feed(reminders, now=NOW, tz=UTC, days=3))) == 1
    assert len(_all_items(project_feed(reminders, now=NOW, tz=UTC, days=0))) == 0


def test_feed_day_to_dict_shape():
    feed = project_feed([_reminder("r", _interval(2))], now=NOW, tz=UTC)
    payload = feed[0].to_dict()

    assert payload["date"] == "2026-03-15"
    assert payload["label"] == "Tomorrow"
    item = payload["items"][0]
    assert item["identifier"] == "r"
    assert item["plant_name"] == "Basil"
    assert item["type"] == "water"
    assert item["trigger"] == {"type": "timeInterval", "seconds": 172800, "repeats": True}
