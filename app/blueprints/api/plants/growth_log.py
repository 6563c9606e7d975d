"""
Plant Growth Log
================

Dated photo/note entries on a plant, plus the garden events that apply to it.
"""

from __future__ import annotations

import logging

from flask import Response, request

from app.blueprints.api._common import (
    get_event_service as _event_service,
    get_garden_service as _garden_service,
    get_payload,
    get_upload_store as _upload_store,
    success as _success,
)
from app.schemas import AddGrowthLogRequest
from app.utils.http import safe_route

from . import plants_api

logger = logging.getLogger("plants_api.growth_log")


@plants_api.post("/<int:plant_id>/growth-log")
@safe_route("Failed to add growth log entry")
def add_growth_log(plant_id: int) -> Response:
    """Multipart ``photo`` (optional), ``date`` (default today) and ``note``; returns the plant."""
    body = AddGrowthLogRequest(**get_payload())
    service = _garden_service()
    service.get_plant(plant_id)

    store = _upload_store()
    photo = store.save(request.files.get("photo"))
    try:
        plant = service.add_growth_log(plant_id, date=body.date, photo=photo, note=body.note)
    except Exception:
        store.remove(photo)
        raise
    return _success(plant, 201)


@plants_api.delete("/<int:plant_id>/growth-log/<int:log_id>")
@safe_route("Failed to delete growth log entry")
def delete_growth_log(plant_id: int, log_id: int) -> Response:
    return _success(_garden_service().delete_growth_log(plant_id, log_id))


@plants_api.get("/<int:plant_id>/events")
@safe_route("Failed to load plant events")
def plant_events(plant_id: int) -> Response:
    """Events scoped to the plant, its area, or the whole garden."""
    return _success(_event_service().get_events_for_plant(plant_id))
