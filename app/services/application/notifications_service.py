"""
Notification Service
====================

Keeps the list of received reminder notifications in step with what the
gardener has seen.

Features:
- Record reminders delivered while the app is open
- Replace the list from a snapshot of the device notification tray
- Dismiss one notification (the scheduled reminder keeps running)
- Turn a notification into a garden event, then dismiss it
- Clear everything; count for badges

Every change is broadcast over Socket.IO so open clients refresh their badge.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from app.domain.exceptions import NotFoundError
from app.domain.reminders.received import ReceivedNotification
from app.enums.garden import EventType

if TYPE_CHECKING:
    from app.services.application.event_service import EventService
    from app.utils.emitters import EmitterService
    from infrastructure.database.repositories.notifications import ReceivedNotificationRepository

logger = logging.getLogger(__name__)


class NotificationsService:
    """Received-notification list for the notifications screen."""

    def __init__(
        self,
        received_repo: "ReceivedNotificationRepository",
        event_service: "EventService",
        emitter_service: Optional["EmitterService"] = None,
    ):
        """
        Initialize NotificationsService.

        Args:
            received_repo: Repository for received notifications.
            event_service: Used to turn a notification into a garden event.
            emitter_service: Optional emitter for WebSocket broadcasts.
        """
        self._repo = received_repo
        self._events = event_service
        self._emitter = emitter_service

    def _changed(self) -> None:
        if self._emitter:
            self._emitter.emit_notifications_changed(self.count())

    def _load(self, notification_id: str) -> ReceivedNotification:
        row = self._repo.get(notification_id)
        if not row:
            raise NotFoundError("Notification not found", detail={"notification_id": notification_id})
        return ReceivedNotification.from_row(row)

    # --- Queries ---

    def list_received(self) -> list[dict[str, Any]]:
        """Received notifications, most recent first."""
        items = [ReceivedNotification.from_row(row) for row in self._repo.list()]
        items.sort(key=lambda n: n.received_at, reverse=True)
        return [n.to_dict() for n in items]

    def count(self) -> int:
        return self._repo.count()

    # --- Mutations ---

    def receive(
        self,
        identifier: str,
        title: str | None = None,
        body: str | None = None,
        data: dict[str, Any] | None = None,
        received_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Record a delivered reminder under a unique ``<identifier>-<epoch-ms>`` id."""
        notification = ReceivedNotification.from_delivery(
            identifier, title=title, body=body, data=data, received_at=received_at
        )
        self._repo.add(notification.to_row())
        logger.info("Received notification %s", notification.notification_id)
        self._changed()
        return notification.to_dict()

    def sync_from_tray(self, presented: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Replace the received list with the notifications still presented on the device."""
        notifications = [ReceivedNotification.from_tray(item) for item in presented]
        self._repo.replace_all([n.to_row() for n in notifications])
        logger.info("Synced %s notification(s) from tray", len(notifications))
        self._changed()
        return self.list_received()

    def dismiss(self, notification_id: str) -> bool:
        """Remove one received notification. The scheduled reminder is left untouched."""
        self._load(notification_id)
        removed = self._repo.delete(notification_id)
        self._changed()
        return removed

    def dismiss_to_event(self, notification_id: str) -> dict[str, Any]:
        """Log an ``other`` event from the notification's text and scope, then dismiss it."""
        notification = self._load(notification_id)
        event = self._events.add_event(
            EventType.OTHER,
            title=notification.event_title,
            description=notification.body or None,
            area_id=notification.area_id,
            plant_ids=notification.plant_ids,
        )
        self._repo.delete(notification_id)
        self._changed()
        return event

    def clear(self) -> int:
        removed = self._repo.clear()
        logger.info("Cleared %s received notification(s)", removed)
        self._changed()
        return removed
