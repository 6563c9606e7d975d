from __future__ import annotations

import pytest

from app.domain.exceptions import NotFoundError, ValidationError
from app.enums.garden import EventType


@pytest.fixture()
def garden(seed):
    """Two areas; tomato and carrot in the backyard, basil on the balcony."""
    backyard = seed.area("Backyard")
    balcony = seed.area("Balcony")
    return {
        "backyard": backyard,
        "balcony": balcony,
        "tomato": seed.plant("Tomato", area_id=backyard),
        "carrot": seed.plant("Carrot", area_id=backyard),
        "basil": seed.plant("Basil", area_id=balcony),
    }


def test_add_event_reports_scope(event_service, garden):
    area_event = event_service.add_event("water", area_id=garden["backyard"])
    plant_event = event_service.add_event(EventType.PRUNE, plant_ids=[garden["tomato"]])
    all_event = event_service.add_event("weed", title="Weekend weeding")

    assert area_event["scope"] == "area"
    assert plant_event["scope"] == "plants"
    assert plant_event["plant_ids"] == [garden["tomato"]]
    assert all_event["scope"] == "all"
    assert all_event["title"] == "Weekend weeding"


def test_add_event_rejects_unknown_type(event_service):
    with pytest.raises(ValidationError):
        event_service.add_event("mow")


def test_events_for_plant_follow_scope(event_service, garden):
    backyard_water = event_service.add_event("water", area_id=garden["backyard"])
    balcony_water = event_service.add_event("water", area_id=garden["balcony"])
    basil_prune = event_service.add_event("prune", plant_ids=[garden["basil"]])
    everything = event_service.add_event("fertilize")

    tomato_ids = {e["event_id"] for e in event_service.get_events_for_plant(garden["tomato"])}
    basil_ids = {e["event_id"] for e in event_service.get_events_for_plant(garden["basil"])}

    assert tomato_ids == {backyard_water["event_id"], everything["event_id"]}
    assert basil_ids == {balcony_water["event_id"], basil_prune["event_id"], everything["event_id"]}


def test_area_scope_wins_over_plant_ids(event_service, garden):
    event = event_service.add_event("water", area_id=garden["balcony"], plant_ids=[garden["tomato"]])

    assert event["scope"] == "area"
    assert event_service.get_events_for_plant(garden["tomato"]) == []


def test_events_for_unknown_plant_is_empty(event_service, garden):
    event_service.add_event("water")
    assert event_service.get_events_for_plant(9999) == []


def test_all_events_newest_first(event_service):
    first = event_service.add_event("water")
    second = event_service.add_event("harvest")
    assert [e["event_id"] for e in event_service.get_all_events()] == [second["event_id"], first["event_id"]]


def test_delete_event(event_service, mock_audit_logger):
    event = event_service.add_event("water")
    assert event_service.delete_event(event["event_id"]) is True
    mock_audit_logger.record_deletion.assert_called_once_with("event", event["event_id"], deleted=True)
    with pytest.raises(NotFoundError):
        event_service.delete_event(event["event_id"])


def test_recent_activity_merges_growth_logs_and_events(event_service, garden_service, garden):
    garden_service.add_growth_log(garden["tomato"], date="2020-01-01", note="Sprouted")
    event_service.add_event("water", area_id=garden["backyard"])
    event_service.add_event("prune", plant_ids=[garden["tomato"]])
    event_service.add_event("harvest", plant_ids=[garden["tomato"], garden["basil"]])
    event_service.add_event("other", title="Compost turned")

    items = event_service.get_recent_activity()

    assert [item["kind"] for item in items] == ["event", "event", "event", "event", "growth"]
    labels = [(item["event_label"], item["scope_label"]) for item in items if item["kind"] == "event"]
    assert labels == [
        ("Compost turned", "All plants"),
        ("Harvested", "2 plants"),
        ("Pruned", "Tomato"),
        ("Watered", "Backyard"),
    ]
    assert items[-1]["plant_name"] == "Tomato"


def test_scope_label_counts_only_remaining_plants(event_service, garden_service, garden):
    event_service.add_event("prune", plant_ids=[garden["carrot"]])
    event_service.add_event("harvest", plant_ids=[garden["tomato"], garden["basil"]])
    garden_service.delete_plant(garden["basil"])
    garden_service.delete_plant(garden["carrot"])

    labels = [item["scope_label"] for item in event_service.get_recent_activity() if item["kind"] == "event"]
    assert labels == ["Tomato", "0 plants"]


def test_recent_activity_limit(event_service):
    for _ in range(3):
        event_service.add_event("water")
    assert len(event_service.get_recent_activity(limit=2)) == 2
