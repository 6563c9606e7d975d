"""
Notifications API
=================

The received-notification list: reminders delivered so far, reconciled
with what the device still shows. Dismissing a notification never cancels
the reminder that produced it.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_json,
    get_notifications_service as _notifications_service,
    success as _success,
)
from app.schemas import ReceiveNotificationRequest, SyncNotificationsRequest
from app.utils.http import safe_route

notifications_api = Blueprint("notifications_api", __name__)
logger = logging.getLogger("notifications_api")


@notifications_api.get("")
@safe_route("Failed to list notifications")
def list_notifications() -> Response:
    """Received notifications, most recent first."""
    return _success(_notifications_service().list_received())


@notifications_api.post("")
@safe_route("Failed to record notification")
def receive_notification() -> Response:
    body = ReceiveNotificationRequest(**get_json())
    notification = _notifications_service().receive(
        body.identifier, title=body.title, body=body.body, data=body.data
    )
    return _success(notification, 201)


@notifications_api.delete("")
@safe_route("Failed to clear notifications")
def clear_notifications() -> Response:
    removed = _notifications_service().clear()
    return _success({"removed": removed}, message="Notifications cleared")


@notifications_api.get("/count")
@safe_route("Failed to count notifications")
def count_notifications() -> Response:
    return _success({"count": _notifications_service().count()})


@notifications_api.put("/sync")
@safe_route("Failed to sync notifications")
def sync_notifications() -> Response:
    """Replace the received list with a snapshot of the device tray."""
    raw = request.get_json(silent=True)
    body = SyncNotificationsRequest.model_validate(raw if raw is not None else {})
    presented = [item.model_dump() for item in body.notifications]
    return _success(_notifications_service().sync_from_tray(presented))


@notifications_api.delete("/<notification_id>")
@safe_route("Failed to dismiss notification")
def dismiss_notification(notification_id: str) -> Response:
    _notifications_service().dismiss(notification_id)
    return _success({"id": notification_id}, message="Notification dismissed")


@notifications_api.post("/<notification_id>/event")
@safe_route("Failed to log event from notification")
def notification_to_event(notification_id: str) -> Response:
    """Log an ``other`` event from the notification, then dismiss it."""
    event = _notifications_service().dismiss_to_event(notification_id)
    return _success(event, 201)
