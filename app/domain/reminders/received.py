"""
Received Notifications
======================

Delivered reminders kept until the gardener dismisses them or turns them into
a garden event. Items arrive from the dispatcher (``from_delivery``) or are
mirrored from a device's notification tray (``from_tray``).

Notification data is loosely shaped: plant ids may be a list or a JSON
string, and the scope area may be a single ``area_id`` or the first entry of
``area_ids``. The parse helpers accept all of those.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.constants import Defaults
from app.utils.time import coerce_datetime, epoch_ms, iso_utc, utc_now

_SPROUT = "🌱"


def parse_plant_ids(value: Any) -> list:
    """Return *value* as a list; JSON string lists are decoded, anything else is ``[]``."""
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return []
        return decoded if isinstance(decoded, list) else []
    return []


def parse_area_id(area_id: Any, area_ids: Any = None) -> Any:
    """Return *area_id* when set, else the first entry of *area_ids*, else None."""
    if area_id is not None and area_id != "":
        return area_id
    candidates = parse_plant_ids(area_ids)
    return candidates[0] if candidates else None


def date_to_seconds(value: Any) -> int:
    """Epoch seconds for a tray date; values >= 1e12 are milliseconds."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value if value < 1e12 else value / 1000)
    parsed = coerce_datetime(value)
    return int(parsed.timestamp()) if parsed else int(utc_now().timestamp())


def strip_sprout(title: str | None) -> str:
    """Drop a leading 🌱 from a reminder title, falling back to ``Reminder``."""
    cleaned = (title or "").strip()
    if cleaned.startswith(_SPROUT):
        cleaned = cleaned[len(_SPROUT):].strip()
    return cleaned or Defaults.NOTIFICATION_TITLE


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _scope_from_data(data: dict[str, Any]) -> tuple[list[int], int | None]:
    raw_ids = parse_plant_ids(data.get("plant_ids"))
    if not raw_ids and data.get("plant_id") is not None:
        raw_ids = [data["plant_id"]]
    plant_ids = [pid for pid in (_int_or_none(v) for v in raw_ids) if pid is not None]
    area_id = _int_or_none(parse_area_id(data.get("area_id"), data.get("area_ids")))
    return plant_ids, area_id


@dataclass(slots=True)
class ReceivedNotification:
    notification_id: str
    native_identifier: str
    title: str = Defaults.NOTIFICATION_TITLE
    body: str = ""
    plant_name: str = Defaults.PLANT_NAME
    received_at: datetime = field(default_factory=utc_now)
    plant_ids: list[int] = field(default_factory=list)
    area_id: int | None = None

    @classmethod
    def from_delivery(
        cls,
        identifier: str,
        *,
        title: str | None,
        body: str | None,
        data: dict[str, Any] | None,
        received_at: datetime | None = None,
    ) -> "ReceivedNotification":
        """A notification delivered while the app is running, keyed ``<identifier>-<epoch-ms>``."""
        received_at = received_at or utc_now()
        data = data or {}
        plant_ids, area_id = _scope_from_data(data)
        return cls(
            notification_id=f"{identifier}-{epoch_ms(received_at)}",
            native_identifier=identifier,
            title=title or Defaults.NOTIFICATION_TITLE,
            body=body or "",
            plant_name=data.get("plant_name") or Defaults.PLANT_NAME,
            received_at=received_at,
            plant_ids=plant_ids,
            area_id=area_id,
        )

    @classmethod
    def from_tray(cls, presented: dict[str, Any]) -> "ReceivedNotification":
        """A notification still shown in the tray, keyed ``<identifier>-<date-seconds>``."""
        content = presented.get("content") or {}
        data = content.get("data") or {}
        identifier = str(presented.get("identifier") or "")
        seconds = date_to_seconds(presented.get("date"))
        plant_ids, area_id = _scope_from_data(data)
        return cls(
            notification_id=f"{identifier}-{seconds}",
            native_identifier=identifier,
            title=content.get("title") or Defaults.NOTIFICATION_TITLE,
            body=content.get("body") or "",
            plant_name=data.get("plant_name") or Defaults.PLANT_NAME,
            received_at=coerce_datetime(seconds) or utc_now(),
            plant_ids=plant_ids,
            area_id=area_id,
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ReceivedNotification":
        return cls(
            notification_id=row["notification_id"],
            native_identifier=row.get("native_identifier") or "",
            title=row.get("title") or Defaults.NOTIFICATION_TITLE,
            body=row.get("body") or "",
            plant_name=row.get("plant_name") or Defaults.PLANT_NAME,
            received_at=coerce_datetime(row.get("received_at")) or utc_now(),
            plant_ids=[pid for pid in (_int_or_none(v) for v in parse_plant_ids(row.get("plant_ids"))) if pid is not None],
            area_id=_int_or_none(row.get("area_id")),
        )

    @property
    def event_title(self) -> str:
        return strip_sprout(self.title)

    def to_row(self) -> dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "native_identifier": self.native_identifier,
            "title": self.title,
            "body": self.body,
            "plant_name": self.plant_name,
            "received_at": iso_utc(self.received_at),
            "plant_ids": list(self.plant_ids),
            "area_id": self.area_id,
        }

    def to_dict(self) -> dict[str, Any]:
        payload = self.to_row()
        payload["id"] = payload.pop("notification_id")
        return payload
