from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from infrastructure.database.ops.events import EventOperations


@dataclass(frozen=True)
class EventRepository:
    _backend: EventOperations

    def create(self, event: dict[str, Any]) -> int:
        return self._backend.insert_event(event)

    def get(self, event_id: int) -> dict[str, Any] | None:
        return self._backend.get_event(event_id)

    def list(self, limit: int | None = None) -> list[dict[str, Any]]:
        return self._backend.list_events(limit)

    def delete(self, event_id: int) -> bool:
        return self._backend.delete_event(event_id)
