from __future__ import annotations

import io
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from app.constants import PlantNet
from app.schemas import ErrorResponse, SuccessResponse
from app.utils.time import utc_now


def _data(response):
    payload = response.get_json() or {}
    assert payload.get("ok") is True, payload
    return SuccessResponse[object].model_validate(payload).data


def _error(response):
    payload = response.get_json() or {}
    assert payload.get("ok") is False, payload
    ErrorResponse.model_validate(payload)
    return payload["error"]


@pytest.fixture()
def garden(client):
    """One area and one category created through the API."""
    area = _data(client.post("/api/v1/areas", json={"name": "Backyard Garden", "emoji": "🏡"}))
    category = _data(client.post("/api/v1/categories", json={"name": "Herbs", "emoji": "🌿"}))
    return {"area_id": area["area_id"], "category_id": category["category_id"]}


def _add_plant(client, garden, name="Basil", **extra):
    body = {"name": name, "category_id": garden["category_id"], "area_id": garden["area_id"], **extra}
    return _data(client.post("/api/v1/plants", json=body))


def test_root_reports_running(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Garden Tracker API is running" in response.get_json()["message"]


# ---------------------------------------------------------------------------
# Areas & categories
# ---------------------------------------------------------------------------


def test_area_lifecycle(client):
    created = client.post("/api/v1/areas", json={"name": "Balcony", "coverColor": "#FFB74D"})
    assert created.status_code == 201
    area = _data(created)
    assert area["emoji"] == "🌱"
    assert area["cover_color"] == "#FFB74D"

    updated = _data(client.put(f"/api/v1/areas/{area['area_id']}", json={"description": "Herb pots"}))
    assert updated["name"] == "Balcony"
    assert updated["description"] == "Herb pots"

    assert [a["name"] for a in _data(client.get("/api/v1/areas"))] == ["Balcony"]

    deleted = client.delete(f"/api/v1/areas/{area['area_id']}")
    assert deleted.status_code == 200
    assert deleted.get_json()["message"] == "Area deleted"
    assert _data(client.get("/api/v1/areas")) == []


def test_create_area_validation_error(client):
    response = client.post("/api/v1/areas", json={"name": "   "})
    assert response.status_code == 400
    error = _error(response)
    assert error["message"] == "Invalid request"
    assert error["errors"]


def test_update_area_null_fields(client, garden):
    url = f"/api/v1/areas/{garden['area_id']}"

    response = client.put(url, json={"description": None, "emoji": None})
    assert response.status_code == 400
    assert _error(response)["message"] == "emoji cannot be null"
    assert client.put(url, json={"coverColor": None}).status_code == 400

    area = _data(client.put(url, json={"description": None}))
    assert area["description"] == ""
    assert area["emoji"] == "🏡"


def test_missing_area_is_404_envelope(client):
    response = client.get("/api/v1/areas/999")
    assert response.status_code == 404
    assert _error(response)["message"] == "Area not found"


def test_delete_area_removes_its_plants(client, garden):
    plant = _add_plant(client, garden)
    client.delete(f"/api/v1/areas/{garden['area_id']}")

    assert client.get(f"/api/v1/plants/{plant['plant_id']}").status_code == 404
    assert _data(client.get("/api/v1/plants")) == []


def test_area_category_counts(client, garden):
    _add_plant(client, garden, "Basil")
    _add_plant(client, garden, "Mint")
    client.post("/api/v1/categories", json={"name": "Flowers"})

    counts = {c["name"]: c["plant_count"] for c in _data(client.get(f"/api/v1/areas/{garden['area_id']}/categories"))}
    assert counts == {"Herbs": 2, "Flowers": 0}


# ---------------------------------------------------------------------------
# Plants & growth log
# ---------------------------------------------------------------------------


def test_add_plant_multipart_with_photo(client, garden):
    response = client.post(
        "/api/v1/plants",
        data={
            "name": "Tomato",
            "category_id": str(garden["category_id"]),
            "area_id": str(garden["area_id"]),
            "variety": "Cherry",
            "photo": (io.BytesIO(b"fake-image"), "tomato.jpg"),
        },
        content_type="multipart/form-data",
    )

    assert response.status_code == 201
    plant = _data(response)
    assert plant["area"]["emoji"] == "🏡"
    assert plant["category"]["name"] == "Herbs"
    [entry] = plant["growth_log"]
    assert entry["note"] == "Initial photo"
    assert entry["photo"].startswith("/uploads/")

    served = client.get(entry["photo"])
    assert served.status_code == 200
    assert served.data == b"fake-image"


def test_add_plant_rejects_bad_image_type(client, garden):
    response = client.post(
        "/api/v1/plants",
        data={
            "name": "Tomato",
            "category_id": str(garden["category_id"]),
            "area_id": str(garden["area_id"]),
            "photo": (io.BytesIO(b"text"), "notes.txt"),
        },
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert "Invalid image format" in _error(response)["message"]


def test_add_plant_unknown_area(client, garden):
    response = client.post("/api/v1/plants", json={"name": "Ghost", "category_id": garden["category_id"], "area_id": 99})
    assert response.status_code == 400
    assert _error(response)["message"] == "Area not found"


def test_list_plants_filters_and_rejects_bad_ids(client, garden):
    _add_plant(client, garden, "Basil")
    other_area = _data(client.post("/api/v1/areas", json={"name": "Greenhouse"}))
    client.post(
        "/api/v1/plants",
        json={"name": "Tomato", "category_id": garden["category_id"], "area_id": other_area["area_id"]},
    )

    names = [p["name"] for p in _data(client.get(f"/api/v1/plants?area={garden['area_id']}"))]
    assert names == ["Basil"]
    assert len(_data(client.get(f"/api/v1/plants?category={garden['category_id']}"))) == 2
    assert client.get("/api/v1/plants?area=abc").status_code == 400


def test_update_and_delete_plant(client, garden):
    plant = _add_plant(client, garden)
    updated = _data(client.put(f"/api/v1/plants/{plant['plant_id']}", json={"variety": "Thai", "datePlanted": "2026-02-01"}))
    assert updated["variety"] == "Thai"
    assert updated["date_planted"] == "2026-02-01"

    assert client.delete(f"/api/v1/plants/{plant['plant_id']}").status_code == 200
    assert client.get(f"/api/v1/plants/{plant['plant_id']}").status_code == 404


def test_update_plant_rejects_null_references(client, garden):
    plant = _add_plant(client, garden)

    response = client.put(f"/api/v1/plants/{plant['plant_id']}", json={"category_id": None})
    assert response.status_code == 400
    assert _error(response)["message"] == "category_id cannot be null"

    cleared = _data(client.put(f"/api/v1/plants/{plant['plant_id']}", json={"description": None}))
    assert cleared["description"] == ""
    assert cleared["category_id"] == garden["category_id"]


def test_deleting_plant_removes_its_photos(client, garden):
    plant = _data(
        client.post(
            "/api/v1/plants",
            data={
                "name": "Tomato",
                "category_id": str(garden["category_id"]),
                "area_id": str(garden["area_id"]),
                "photo": (io.BytesIO(b"fake-image"), "tomato.jpg"),
            },
            content_type="multipart/form-data",
        )
    )
    photo = plant["growth_log"][0]["photo"]
    assert client.get(photo).status_code == 200

    client.delete(f"/api/v1/plants/{plant['plant_id']}")

    assert client.get(photo).status_code == 404


def test_growth_log_endpoints(client, garden):
    plant = _add_plant(client, garden)

    response = client.post(
        f"/api/v1/plants/{plant['plant_id']}/growth-log",
        data={"date": "2026-03-01", "note": "First flowers"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    [entry] = _data(response)["growth_log"]
    assert entry == {**entry, "date": "2026-03-01", "note": "First flowers", "photo": None}

    logs = _data(client.get("/api/v1/activity/growth-logs"))
    assert logs[0]["plant_name"] == "Basil"

    remaining = _data(client.delete(f"/api/v1/plants/{plant['plant_id']}/growth-log/{entry['log_id']}"))
    assert remaining["growth_log"] == []


def test_growth_log_for_missing_plant(client):
    response = client.post("/api/v1/plants/42/growth-log", data={"note": "x"}, content_type="multipart/form-data")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Events & activity
# ---------------------------------------------------------------------------


def test_events_scope_to_plants(client, garden):
    plant = _add_plant(client, garden)
    other = _data(client.post("/api/v1/areas", json={"name": "Greenhouse"}))

    area_event = _data(client.post("/api/v1/events", json={"type": "water", "areaId": garden["area_id"]}))
    _data(client.post("/api/v1/events", json={"type": "water", "area_id": other["area_id"]}))
    all_event = _data(client.post("/api/v1/events", json={"type": "weed"}))

    ids = {e["event_id"] for e in _data(client.get(f"/api/v1/plants/{plant['plant_id']}/events"))}
    assert ids == {area_event["event_id"], all_event["event_id"]}
    assert len(_data(client.get("/api/v1/events"))) == 3


def test_event_rejects_unknown_type(client):
    assert client.post("/api/v1/events", json={"type": "mow"}).status_code == 400


def test_delete_event(client):
    event = _data(client.post("/api/v1/events", json={"type": "harvest"}))
    assert client.delete(f"/api/v1/events/{event['event_id']}").status_code == 200
    assert client.delete(f"/api/v1/events/{event['event_id']}").status_code == 404


def test_recent_activity_and_stats(client, garden):
    plant = _add_plant(client, garden, variety="Genovese")
    client.post(
        f"/api/v1/plants/{plant['plant_id']}/growth-log",
        data={"note": "Leaves", "photo": (io.BytesIO(b"img"), "leaf.png")},
        content_type="multipart/form-data",
    )
    client.post("/api/v1/events", json={"type": "prune", "plant_ids": [plant["plant_id"]]})

    recent = _data(client.get("/api/v1/activity/recent?limit=5"))
    assert {item["kind"] for item in recent} == {"growth", "event"}
    event_item = next(item for item in recent if item["kind"] == "event")
    assert event_item["event_label"] == "Pruned"
    assert event_item["scope_label"] == "Basil"

    assert _data(client.get("/api/v1/activity/stats")) == {
        "total_photos": 1,
        "total_entries": 1,
        "area_count": 1,
        "plant_count": 1,
        "unique_varieties": 1,
    }


# ---------------------------------------------------------------------------
# Reminders & notifications
# ---------------------------------------------------------------------------


def test_reminder_lifecycle_and_feed(client):
    created = client.post(
        "/api/v1/reminders",
        json={"type": "water", "frequency": "every2", "time": "morning", "plantName": "Basil"},
    )
    assert created.status_code == 201
    reminder = _data(created)
    assert reminder["content"]["title"] == "🌱 Time to water!"
    assert reminder["next_trigger_date"] is not None

    feed = _data(client.get("/api/v1/reminders/feed?days=14"))
    items = [item for day in feed for item in day["items"]]
    assert len(items) == 7
    assert all(item["identifier"] == reminder["identifier"] for item in items)

    assert len(_data(client.get("/api/v1/reminders"))) == 1
    assert client.delete(f"/api/v1/reminders/{reminder['identifier']}").status_code == 200
    assert client.delete(f"/api/v1/reminders/{reminder['identifier']}").status_code == 404


def test_reminder_requires_frequency_or_date(client):
    response = client.post("/api/v1/reminders", json={"type": "water"})
    assert response.status_code == 400
    assert _error(response)["message"] == "Invalid request"


def test_one_time_reminder_from_date(client):
    when = (utc_now() + timedelta(days=2)).replace(microsecond=0)
    reminder = _data(client.post("/api/v1/reminders", json={"type": "harvest", "date": when.isoformat()}))
    assert reminder["trigger"]["type"] == "date"

    feed = _data(client.get("/api/v1/reminders/feed"))
    assert sum(len(day["items"]) for day in feed) == 1


def test_reminder_options(client):
    options = _data(client.get("/api/v1/reminders/options"))
    assert len(options["types"]) == 6
    assert len(options["frequencies"]) == 6
    assert len(options["times"]) == 4


def test_dispatched_reminder_reaches_notifications(client, container):
    reminder = _data(client.post("/api/v1/reminders/test"))

    delivered = container.reminder_service.dispatch_due(utc_now() + timedelta(seconds=10))
    assert [n["native_identifier"] for n in delivered] == [reminder["identifier"]]

    items = _data(client.get("/api/v1/notifications"))
    assert [n["id"] for n in items] == [delivered[0]["id"]]
    assert _data(client.get("/api/v1/notifications/count")) == {"count": 1}
    assert _data(client.get("/api/v1/reminders")) == []


def test_notification_to_event_and_dismiss(client, garden):
    plant = _add_plant(client, garden)
    first = _data(
        client.post(
            "/api/v1/notifications",
            json={
                "identifier": "native-1",
                "content": {"title": "🌱 Time to water!", "body": "Water Basil", "data": {"plant_ids": [plant["plant_id"]]}},
            },
        )
    )
    second = _data(client.post("/api/v1/notifications", json={"identifier": "native-2", "title": "Prune"}))

    event = _data(client.post(f"/api/v1/notifications/{first['id']}/event"))
    assert event["type"] == "other"
    assert event["title"] == "Time to water!"
    assert event["plant_ids"] == [plant["plant_id"]]

    assert client.delete(f"/api/v1/notifications/{second['id']}").status_code == 200
    assert _data(client.get("/api/v1/notifications/count")) == {"count": 0}
    assert client.delete(f"/api/v1/notifications/{second['id']}").status_code == 404


def test_sync_notifications_from_tray(client):
    client.post("/api/v1/notifications", json={"identifier": "stale"})

    synced = _data(
        client.put(
            "/api/v1/notifications/sync",
            json=[
                {"identifier": "n1", "date": 1773482400000, "content": {"title": "🌱 Time to water!", "data": {}}},
                {"identifier": "n2", "date": 1773482460, "content": {"title": "🌱 Time to prune!"}},
            ],
        )
    )

    assert [n["id"] for n in synced] == ["n2-1773482460", "n1-1773482400"]

    cleared = client.delete("/api/v1/notifications")
    assert _data(cleared) == {"removed": 2}


# ---------------------------------------------------------------------------
# Plant identification
# ---------------------------------------------------------------------------


def test_identify_requires_image(client):
    response = client.post("/api/v1/identify/plant", data={}, content_type="multipart/form-data")
    assert response.status_code == 400
    assert _error(response)["message"] == "No image provided."


def test_identify_without_api_key(client):
    response = client.post(
        "/api/v1/identify/plant",
        data={"image": (io.BytesIO(b"img"), "leaf.jpg")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 503
    assert _error(response)["message"] == PlantNet.MISSING_KEY_MESSAGE


def test_identify_with_api_key(client, container):
    container.identification_service.api_key = "test-key"
    upstream = MagicMock(ok=True, status_code=200)
    upstream.json.return_value = {"bestMatch": "Ocimum basilicum L.", "results": [{"score": 0.9}]}

    with patch("requests.post", return_value=upstream):
        response = client.post(
            "/api/v1/identify/plant",
            data={"image": (io.BytesIO(b"img"), "leaf.jpg")},
            content_type="multipart/form-data",
        )

    result = _data(response)
    assert result["best_match"] == "Ocimum basilicum L."
    assert result["results"] == [{"score": 0.9}]


def test_identify_upstream_failure_is_502(client, container):
    container.identification_service.api_key = "test-key"
    upstream = MagicMock(ok=False, status_code=401)
    upstream.json.return_value = {"message": "Invalid API key"}

    with patch("requests.post", return_value=upstream):
        response = client.post(
            "/api/v1/identify/disease",
            data={"image": (io.BytesIO(b"img"), "leaf.jpg")},
            content_type="multipart/form-data",
        )

    assert response.status_code == 502
    assert _error(response)["message"] == "Invalid API key"


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def test_unversioned_api_paths_are_rewritten(client):
    created = client.post("/api/areas", json={"name": "Front Yard"})
    assert created.status_code == 201
    assert [a["name"] for a in _data(client.get("/api/v1/areas"))] == ["Front Yard"]


def test_unknown_api_route_returns_envelope(client):
    response = client.get("/api/v1/does-not-exist")
    assert response.status_code == 404
    _error(response)


def test_cors_headers_on_api(client):
    response = client.get("/api/v1/areas", headers={"Origin": "http://localhost:8081"})
    assert response.headers.get("Access-Control-Allow-Origin") in {"*", "http://localhost:8081"}
