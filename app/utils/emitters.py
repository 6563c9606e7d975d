"""
WebSocket Emitters
=====================================

Purpose:
    Centralized WebSocket emitter service leveraging Socket.IO Server.

Features:
- Broadcast delivered reminders to connected clients.
- Tell clients the received-notification list changed (badge refresh).
- Relay garden activity from the EventBus so open screens can refresh.
- Explicit event namespace management.

Usage:
    Instantiate EmitterService with the SocketIO extension, then call
    emit_reminder_delivered() or emit_notifications_changed().
"""

import logging
from typing import Any

from flask_socketio import SocketIO

from app.enums.events import WebSocketEvent

logger = logging.getLogger("emitters")

# Socket.IO Namespace Constants
SOCKETIO_NAMESPACE_NOTIFICATIONS = "/notifications"
SOCKETIO_NAMESPACE_ACTIVITY = "/activity"


class EmitterService:
    """
    Centralized WebSocket Emitter Service.

    Attributes:
        sio: The Socket.IO SocketIO instance for emitting events.
    """

    def __init__(self, sio: SocketIO):
        self.sio = sio

    def emit(
        self,
        event: str,
        payload: dict,
        room: str | None = None,
        namespace: str = "/",
    ) -> bool:
        """
        Emit a Socket.IO event.

        Args:
            event (str): Event name (e.g., "reminder_delivered").
            payload (dict): JSON serializable data to send.
            room (Optional[str]): Socket.IO room identifier. Broadcasts if None.
            namespace (str): Socket.IO namespace to emit under (default "/").
        """
        try:
            logger.debug("📡 Emitting event='%s' to namespace='%s' room='%s'", event, namespace, room or "broadcast")
            self.sio.emit(event, payload, to=room, namespace=namespace)
            return True
        except Exception as e:
            logger.exception("[Emitter] Failed to emit event '%s' to room '%s': %s", event, room, e)
            return False

    def emit_reminder_delivered(self, notification: dict[str, Any]) -> bool:
        """Broadcast a freshly delivered reminder."""
        return self.emit(
            WebSocketEvent.REMINDER_DELIVERED.value,
            notification,
            namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS,
        )

    def emit_notifications_changed(self, count: int) -> bool:
        """Broadcast the new size of the received-notification list."""
        return self.emit(
            WebSocketEvent.NOTIFICATIONS_CHANGED.value,
            {"count": count},
            namespace=SOCKETIO_NAMESPACE_NOTIFICATIONS,
        )

    def emit_activity(self, activity: dict[str, Any]) -> bool:
        """Relay an ``activity.*`` EventBus record to the activity namespace."""
        return self.emit(
            WebSocketEvent.GARDEN_ACTIVITY.value,
            activity,
            namespace=SOCKETIO_NAMESPACE_ACTIVITY,
        )
