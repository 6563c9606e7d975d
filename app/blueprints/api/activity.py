"""
Activity API
============

Read-only views for the home and profile screens: the merged
growth/event timeline, the growth log across plants, and garden stats.
"""

from __future__ import annotations

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_event_service as _event_service,
    get_garden_service as _garden_service,
    parse_optional_int,
    success as _success,
)
from app.utils.http import safe_route

activity_api = Blueprint("activity_api", __name__)


@activity_api.get("/recent")
@safe_route("Failed to load recent activity")
def recent_activity() -> Response:
    """Growth log entries and events merged, newest first (``?limit=`` optional)."""
    limit = parse_optional_int(request.args.get("limit"), "limit")
    return _success(_event_service().get_recent_activity(limit))


@activity_api.get("/growth-logs")
@safe_route("Failed to load growth logs")
def growth_logs() -> Response:
    return _success(_garden_service().get_recent_growth_logs())


@activity_api.get("/stats")
@safe_route("Failed to load garden stats")
def stats() -> Response:
    return _success(_garden_service().profile_stats())
