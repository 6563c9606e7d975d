from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from infrastructure.database.ops.reminders import ReminderOperations


@dataclass(frozen=True)
class ReminderRepository:
    _backend: ReminderOperations

    def create(self, reminder: dict[str, Any]) -> str:
        return self._backend.insert_reminder(reminder)

    def get(self, identifier: str) -> dict[str, Any] | None:
        return self._backend.get_reminder(identifier)

    def list(self) -> list[dict[str, Any]]:
        return self._backend.list_reminders()

    def due(self, now_iso: str) -> list[dict[str, Any]]:
        return self._backend.list_due_reminders(now_iso)

    def set_next_fire(self, identifier: str, next_fire_at: str | None) -> bool:
        return self._backend.set_reminder_next_fire(identifier, next_fire_at)

    def delete(self, identifier: str) -> bool:
        return self._backend.delete_reminder(identifier)
