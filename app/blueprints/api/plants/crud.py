"""
Plant CRUD Operations
=====================

Endpoints for creating, reading, updating, and deleting plants.
"""

from __future__ import annotations

import logging

from flask import Response, request

from app.blueprints.api._common import (
    get_garden_service as _garden_service,
    get_json,
    get_payload,
    get_upload_store as _upload_store,
    parse_optional_int,
    success as _success,
)
from app.schemas import CreatePlantRequest, UpdatePlantRequest
from app.utils.http import safe_route

from . import plants_api

logger = logging.getLogger("plants_api.crud")


@plants_api.get("")
@safe_route("Failed to list plants")
def list_plants() -> Response:
    """List plants, optionally filtered with ``?area=<id>`` and/or ``?category=<id>``."""
    area_id = parse_optional_int(request.args.get("area"), "area")
    category_id = parse_optional_int(request.args.get("category"), "category")
    plants = _garden_service().list_plants(area_id=area_id, category_id=category_id)
    logger.debug("Found %s plants (area=%s, category=%s)", len(plants), area_id, category_id)
    return _success(plants)


@plants_api.post("")
@safe_route("Failed to add plant")
def add_plant() -> Response:
    """Add a plant. A multipart ``photo`` becomes the first growth log entry."""
    body = CreatePlantRequest(**get_payload())

    store = _upload_store()
    photo = store.save(request.files.get("photo"))
    try:
        plant = _garden_service().add_plant(
            body.name,
            body.category_id,
            body.area_id,
            description=body.description,
            variety=body.variety,
            date_planted=body.date_planted,
            photo=photo,
            initial_note=body.initial_note,
        )
    except Exception:
        store.remove(photo)
        raise

    logger.info("Created plant %s in area %s", plant["plant_id"], body.area_id)
    return _success(plant, 201)


@plants_api.get("/<int:plant_id>")
@safe_route("Failed to get plant")
def get_plant(plant_id: int) -> Response:
    return _success(_garden_service().get_plant(plant_id))


@plants_api.put("/<int:plant_id>")
@safe_route("Failed to update plant")
def update_plant(plant_id: int) -> Response:
    body = UpdatePlantRequest(**get_json())
    return _success(_garden_service().update_plant(plant_id, body.model_dump(exclude_unset=True)))


@plants_api.delete("/<int:plant_id>")
@safe_route("Failed to delete plant")
def delete_plant(plant_id: int) -> Response:
    _garden_service().delete_plant(plant_id)
    return _success({"plant_id": plant_id}, message="Plant deleted")
