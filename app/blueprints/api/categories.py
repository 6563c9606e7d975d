from __future__ import annotations

from flask import Blueprint, Response

from app.blueprints.api._common import get_garden_service as _garden_service, get_json, success as _success
from app.schemas import CreateCategoryRequest
from app.utils.http import safe_route

categories_api = Blueprint("categories_api", __name__)


@categories_api.get("")
@safe_route("Failed to list categories")
def list_categories() -> Response:
    return _success(_garden_service().list_categories())


@categories_api.post("")
@safe_route("Failed to add category")
def add_category() -> Response:
    body = CreateCategoryRequest(**get_json())
    return _success(_garden_service().add_category(body.name, emoji=body.emoji), 201)
