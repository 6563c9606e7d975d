"""
Areas API
=========

Garden areas: list, create, read, update, delete (cascades to plants) and
the per-area category breakdown.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_garden_service as _garden_service, get_json, success as _success
from app.schemas import CreateAreaRequest, UpdateAreaRequest
from app.utils.http import safe_route

areas_api = Blueprint("areas_api", __name__)
logger = logging.getLogger("areas_api")


@areas_api.get("")
@safe_route("Failed to list areas")
def list_areas() -> Response:
    return _success(_garden_service().list_areas())


@areas_api.post("")
@safe_route("Failed to create area")
def create_area() -> Response:
    body = CreateAreaRequest(**get_json())
    area = _garden_service().create_area(
        body.name,
        emoji=body.emoji,
        description=body.description,
        cover_color=body.cover_color,
        cover_image=body.cover_image,
    )
    return _success(area, 201)


@areas_api.get("/<int:area_id>")
@safe_route("Failed to load area")
def get_area(area_id: int) -> Response:
    return _success(_garden_service().get_area(area_id))


@areas_api.put("/<int:area_id>")
@safe_route("Failed to update area")
def update_area(area_id: int) -> Response:
    """Partial update: only the fields present in the body change."""
    body = UpdateAreaRequest(**get_json())
    area = _garden_service().update_area(area_id, body.model_dump(exclude_unset=True))
    return _success(area)


@areas_api.delete("/<int:area_id>")
@safe_route("Failed to delete area")
def delete_area(area_id: int) -> Response:
    _garden_service().delete_area(area_id)
    logger.info("Area %s deleted via API", area_id)
    return _success({"area_id": area_id}, message="Area deleted")


@areas_api.get("/<int:area_id>/categories")
@safe_route("Failed to load area categories")
def area_categories(area_id: int) -> Response:
    """All categories with the number of this area's plants in each."""
    return _success(_garden_service().get_categories_for_area(area_id))
