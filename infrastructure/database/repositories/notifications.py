from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from infrastructure.database.ops.notifications import ReceivedNotificationOperations


@dataclass(frozen=True)
class ReceivedNotificationRepository:
    _backend: ReceivedNotificationOperations

    def add(self, notification: dict[str, Any]) -> str:
        return self._backend.insert_received_notification(notification)

    def replace_all(self, notifications: list[dict[str, Any]]) -> int:
        return self._backend.replace_received_notifications(notifications)

    def get(self, notification_id: str) -> dict[str, Any] | None:
        return self._backend.get_received_notification(notification_id)

    def list(self) -> list[dict[str, Any]]:
        return self._backend.list_received_notifications()

    def count(self) -> int:
        return self._backend.count_received_notifications()

    def delete(self, notification_id: str) -> bool:
        return self._backend.delete_received_notification(notification_id)

    def clear(self) -> int:
        return self._backend.clear_received_notifications()
