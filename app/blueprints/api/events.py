"""
Events API
==========

Garden events (watering, fertilizing, ...) scoped to an area, a set of
plants, or the whole garden.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_event_service as _event_service, get_json, success as _success
from app.schemas import CreateEventRequest
from app.utils.http import safe_route

events_api = Blueprint("events_api", __name__)
logger = logging.getLogger("events_api")


@events_api.get("")
@safe_route("Failed to list events")
def list_events() -> Response:
    """All events, newest first."""
    return _success(_event_service().get_all_events())


@events_api.post("")
@safe_route("Failed to log event")
def add_event() -> Response:
    body = CreateEventRequest(**get_json())
    event = _event_service().add_event(
        body.type,
        title=body.title,
        description=body.description,
        area_id=body.area_id,
        plant_ids=body.plant_ids,
    )
    return _success(event, 201)


@events_api.delete("/<int:event_id>")
@safe_route("Failed to delete event")
def delete_event(event_id: int) -> Response:
    _event_service().delete_event(event_id)
    return _success({"event_id": event_id}, message="Event deleted")
