"""
Event Service
=============
Garden events (watering, pruning, ...) and the combined recent-activity feed.

An event is scoped to an area, to a set of plants, or to the whole garden.
A plant sees an event when the event's area is the plant's area, when the
plant is listed in the event's plant ids, or when the event has no scope.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.constants import Defaults, EVENT_TYPE_LABELS
from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.garden import GardenEvent
from app.enums.garden import ActivityKind, EventType
from app.services.application.activity_logger import ActivityLogger, log_if_available
from app.utils.time import iso_now

if TYPE_CHECKING:
    from app.services.application.garden_service import GardenService
    from infrastructure.database.repositories.events import EventRepository
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


def event_label(event: GardenEvent) -> str:
    """The event title, else the label of its type, else ``Event``."""
    if event.title:
        return event.title
    return EVENT_TYPE_LABELS.get(event.type, Defaults.EVENT_LABEL)


class EventService:
    def __init__(
        self,
        event_repo: "EventRepository",
        garden_service: "GardenService",
        *,
        activity_logger: ActivityLogger | None = None,
        audit_logger: "AuditLogger" | None = None,
    ):
        self.events = event_repo
        self.garden = garden_service
        self.activity_logger = activity_logger
        self.audit_logger = audit_logger

    def _all(self) -> list[GardenEvent]:
        return [GardenEvent.from_row(row) for row in self.events.list()]

    def add_event(
        self,
        type: EventType | str,
        title: str | None = None,
        description: str | None = None,
        area_id: int | None = None,
        plant_ids: list[int] | None = None,
    ) -> dict[str, Any]:
        """Record an event; stored with an ISO ``created_at`` timestamp."""
        try:
            event_type = EventType(type)
        except ValueError:
            raise ValidationError(f"Unknown event type: {type}") from None

        event_id = self.events.create(
            {
                "event_type": event_type.value,
                "title": title or None,
                "description": description or None,
                "area_id": area_id,
                "plant_ids": [int(pid) for pid in (plant_ids or [])],
                "created_at": iso_now(),
            }
        )
        event = GardenEvent.from_row(self.events.get(event_id))
        logger.info("Logged %s event %s (scope=%s)", event.type, event_id, event.scope)
        log_if_available(
            self.activity_logger, ActivityLogger.EVENT_LOGGED, f"{event_label(event)} logged",
            entity_type="event", entity_id=event_id, metadata={"scope": event.scope},
        )
        return event.to_dict()

    def delete_event(self, event_id: int) -> bool:
        if not self.events.get(event_id):
            raise NotFoundError("Event not found", detail={"event_id": event_id})
        deleted = self.events.delete(event_id)
        if self.audit_logger:
            self.audit_logger.record_deletion("event", event_id, deleted=deleted)
        log_if_available(
            self.activity_logger, ActivityLogger.EVENT_REMOVED, f"Event {event_id} removed",
            entity_type="event", entity_id=event_id,
        )
        return deleted

    def get_all_events(self) -> list[dict[str, Any]]:
        """All events, newest first."""
        return [event.to_dict() for event in self._all()]

    def get_events_for_plant(self, plant_id: int) -> list[dict[str, Any]]:
        """Events that apply to *plant_id*, newest first; ``[]`` for an unknown plant."""
        plant = self.garden.plants.get(plant_id)
        if not plant:
            return []
        area_id = int(plant["area_id"])
        return [event.to_dict() for event in self._all() if event.applies_to(plant_id, area_id)]

    def scope_label(self, event: GardenEvent, areas: dict[int, str], plants: dict[int, str]) -> str:
        if event.area_id is not None:
            return areas.get(event.area_id) or Defaults.AREA_LABEL
        if not event.plant_ids:
            return Defaults.ALL_PLANTS_LABEL
        # Deleted plants drop out of the label.
        names = [plants[pid] for pid in event.plant_ids if pid in plants]
        if len(names) == 1:
            return names[0]
        return f"{len(names)} plants"

    def get_recent_activity(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Growth log entries and events merged, most recent first."""
        areas = {a["area_id"]: a["name"] for a in self.garden.areas.list()}
        plants = {p["plant_id"]: p["name"] for p in self.garden.plants.list()}

        items: list[dict[str, Any]] = []
        for entry in self.garden.get_recent_growth_logs():
            items.append({**entry, "kind": ActivityKind.GROWTH.value})
        for event in self._all():
            items.append(
                {
                    **event.to_dict(),
                    "kind": ActivityKind.EVENT.value,
                    "date": event.created_at,
                    "event_label": event_label(event),
                    "scope_label": self.scope_label(event, areas, plants),
                }
            )

        items.sort(key=lambda item: item["date"] or "", reverse=True)
        return items[:limit] if limit else items
