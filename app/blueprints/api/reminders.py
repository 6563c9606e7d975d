"""
Reminders API
=============

Schedule care reminders and preview when they will fire. Delivery happens
server-side (see ``reminders.dispatch``); delivered reminders land in the
notifications list.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_json,
    get_reminder_service as _reminder_service,
    parse_optional_int,
    success as _success,
)
from app.constants import Feed
from app.schemas import CreateReminderRequest
from app.utils.http import safe_route

reminders_api = Blueprint("reminders_api", __name__)
logger = logging.getLogger("reminders_api")


@reminders_api.get("")
@safe_route("Failed to list reminders")
def list_reminders() -> Response:
    return _success(_reminder_service().list_reminders())


@reminders_api.post("")
@safe_route("Failed to schedule reminder")
def create_reminder() -> Response:
    body = CreateReminderRequest(**get_json())
    reminder = _reminder_service().create_reminder(
        body.type,
        body.frequency,
        body.time,
        note=body.note,
        plant_id=body.plant_id,
        plant_name=body.plant_name,
        date=body.date,
    )
    return _success(reminder, 201)


@reminders_api.get("/options")
@safe_route("Failed to load reminder options")
def reminder_options() -> Response:
    """Types, frequencies and times of day offered by the reminder form."""
    return _success(_reminder_service().options())


@reminders_api.get("/feed")
@safe_route("Failed to build reminder feed")
def reminder_feed() -> Response:
    """Upcoming occurrences grouped by day (``?days=14``)."""
    days = parse_optional_int(request.args.get("days"), "days") or Feed.WINDOW_DAYS
    return _success(_reminder_service().get_feed(days))


@reminders_api.post("/test")
@safe_route("Failed to schedule test reminder")
def send_test_reminder() -> Response:
    return _success(_reminder_service().send_test(), 201)


@reminders_api.delete("/<identifier>")
@safe_route("Failed to cancel reminder")
def delete_reminder(identifier: str) -> Response:
    _reminder_service().delete_reminder(identifier)
    return _success({"identifier": identifier}, message="Reminder cancelled")
