from datetime import datetime, timezone

import pytest

from app.domain.reminders import ReceivedNotification, date_to_seconds, parse_area_id, parse_plant_ids, strip_sprout

NOW = datetime(2026, 3, 14, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ([1, 2], [1, 2]),
        ("[3, 4]", [3, 4]),
        ("not json", []),
        ('{"plant": 1}', []),
        (None, []),
        (7, []),
    ],
)
def test_parse_plant_ids(value, expected):
    assert parse_plant_ids(value) == expected


def test_parse_area_id_prefers_single_id():
    assert parse_area_id(5, [7, 8]) == 5
    assert parse_area_id(None, [7, 8]) == 7
    assert parse_area_id("", "[9]") == 9
    assert parse_area_id(None, []) is None
    assert parse_area_id(None, None) is None


def test_date_to_seconds_accepts_seconds_and_milliseconds():
    assert date_to_seconds(1_700_000_000) == 1_700_000_000
    assert date_to_seconds(1_700_000_000_000) == 1_700_000_000
    assert date_to_seconds(1_700_000_000_500.0) == 1_700_000_000
    assert date_to_seconds("2026-03-14T10:00:00Z") == int(NOW.timestamp())


def test_strip_sprout():
    assert strip_sprout("🌱 Time to water!") == "Time to water!"
    assert strip_sprout("Prune the roses") == "Prune the roses"
    assert strip_sprout("🌱") == "Reminder"
    assert strip_sprout("   ") == "Reminder"
    assert strip_sprout(None) == "Reminder"


def test_from_delivery_builds_unique_id_and_scope():
    notification = ReceivedNotification.from_delivery(
        "abc",
        title="🌱 Time to water!",
        body="Don't forget to water Basil.",
        data={"plant_id": 4, "plant_name": "Basil", "area_ids": [2]},
        received_at=NOW,
    )

    assert notification.notification_id == f"abc-{int(NOW.timestamp() * 1000)}"
    assert notification.native_identifier == "abc"
    assert notification.plant_ids == [4]
    assert notification.area_id == 2
    assert notification.plant_name == "Basil"
    assert notification.event_title == "Time to water!"


def test_from_delivery_defaults():
    notification = ReceivedNotification.from_delivery("x", title=None, body=None, data=None, received_at=NOW)
    assert notification.title == "Reminder"
    assert notification.body == ""
    assert notification.plant_name == "General"
    assert notification.plant_ids == []
    assert notification.area_id is None


def test_from_tray_uses_date_seconds_in_id():
    presented = {
        "identifier": "native-1",
        "date": int(NOW.timestamp() * 1000),
        "content": {
            "title": "🌱 Time to prune!",
            "body": "Prune the tomato.",
            "data": {"plant_ids": "[1, 2]", "area_id": None, "plant_name": "Tomato"},
        },
    }
    notification = ReceivedNotification.from_tray(presented)

    assert notification.notification_id == f"native-1-{int(NOW.timestamp())}"
    assert notification.received_at == NOW
    assert notification.plant_ids == [1, 2]
    assert notification.area_id is None


def test_to_dict_exposes_id():
    notification = ReceivedNotification.from_delivery("abc", title="T", body="B", data={}, received_at=NOW)
    payload = notification.to_dict()
    assert payload["id"] == notification.notification_id
    assert "notification_id" not in payload
    assert payload["received_at"] == "2026-03-14T10:00:00+00:00"
