"""
Garden Domain Entities
======================
Areas, categories, plants with their growth log, and garden events.

Rows come out of SQLite as plain dicts; these dataclasses normalize them and
render the JSON shape served by the API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.constants import Defaults
from app.enums.garden import EventType


def _clean_ids(values: Any) -> list[int]:
    """Normalize a plant id list, dropping anything that is not an integer id."""
    if not values:
        return []
    cleaned: list[int] = []
    for value in values:
        if isinstance(value, bool):
            continue
        try:
            cleaned.append(int(value))
        except (TypeError, ValueError):
            continue
    return cleaned


@dataclass(slots=True)
class Area:
    """A physical garden zone (e.g. "Backyard Garden")."""

    area_id: int
    name: str
    emoji: str = Defaults.AREA_EMOJI
    description: str = ""
    cover_color: str = Defaults.AREA_COVER_COLOR
    cover_image: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Area":
        return cls(
            area_id=int(row["area_id"]),
            name=row["name"],
            emoji=row.get("emoji") or Defaults.AREA_EMOJI,
            description=row.get("description") or "",
            cover_color=row.get("cover_color") or Defaults.AREA_COVER_COLOR,
            cover_image=row.get("cover_image"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "area_id": self.area_id,
            "name": self.name,
            "emoji": self.emoji,
            "description": self.description,
            "cover_color": self.cover_color,
            "cover_image": self.cover_image,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def summary(self) -> dict[str, Any]:
        return {"area_id": self.area_id, "name": self.name, "emoji": self.emoji}


@dataclass(slots=True)
class Category:
    """A plant grouping such as "Herbs"."""

    category_id: int
    name: str
    emoji: str = Defaults.CATEGORY_EMOJI
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Category":
        return cls(
            category_id=int(row["category_id"]),
            name=row["name"],
            emoji=row.get("emoji") or Defaults.CATEGORY_EMOJI,
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "name": self.name,
            "emoji": self.emoji,
            "created_at": self.created_at,
        }

    def summary(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "name": self.name, "emoji": self.emoji}


@dataclass(slots=True)
class GrowthLogEntry:
    """A dated photo/note record attached to a plant."""

    log_id: int
    plant_id: int
    date: str
    photo: str | None = None
    note: str = ""
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GrowthLogEntry":
        return cls(
            log_id=int(row["log_id"]),
            plant_id=int(row["plant_id"]),
            date=row["date"],
            photo=row.get("photo") or None,
            note=row.get("note") or "",
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "log_id": self.log_id,
            "plant_id": self.plant_id,
            "date": self.date,
            "photo": self.photo,
            "note": self.note,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class Plant:
    """A plant living in one area and tagged with one category."""

    plant_id: int
    name: str
    category_id: int
    area_id: int
    date_planted: str
    description: str = ""
    variety: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    growth_log: list[GrowthLogEntry] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: dict[str, Any], growth_log: list[GrowthLogEntry] | None = None) -> "Plant":
        return cls(
            plant_id=int(row["plant_id"]),
            name=row["name"],
            category_id=int(row["category_id"]),
            area_id=int(row["area_id"]),
            date_planted=row["date_planted"],
            description=row.get("description") or "",
            variety=row.get("variety"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            growth_log=list(growth_log or []),
        )

    def to_dict(self, *, area: Area | None = None, category: Category | None = None) -> dict[str, Any]:
        """Render the plant, populating area/category summaries when provided."""
        return {
            "plant_id": self.plant_id,
            "name": self.name,
            "category_id": self.category_id,
            "area_id": self.area_id,
            "category": category.summary() if category else None,
            "area": area.summary() if area else None,
            "description": self.description,
            "variety": self.variety,
            "date_planted": self.date_planted,
            "growth_log": [entry.to_dict() for entry in self.growth_log],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(slots=True)
class GardenEvent:
    """A logged care action scoped to an area, a set of plants, or everything."""

    event_id: int
    type: EventType
    created_at: str
    title: str | None = None
    description: str | None = None
    area_id: int | None = None
    plant_ids: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            self.type = EventType(self.type)
        self.plant_ids = _clean_ids(self.plant_ids)
        if self.area_id is not None:
            self.area_id = int(self.area_id)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GardenEvent":
        return cls(
            event_id=int(row["event_id"]),
            type=row["event_type"],
            created_at=row["created_at"],
            title=row.get("title"),
            description=row.get("description"),
            area_id=row.get("area_id"),
            plant_ids=row.get("plant_ids") or [],
        )

    @property
    def scope(self) -> str:
        if self.area_id is not None:
            return "area"
        if self.plant_ids:
            return "plants"
        return "all"

    def applies_to(self, plant_id: int, plant_area_id: int) -> bool:
        """Area-scoped events match plants in that area, plant-scoped ones their plants, unscoped ones all."""
        if self.area_id is not None:
            return self.area_id == plant_area_id
        if self.plant_ids:
            return plant_id in self.plant_ids
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "area_id": self.area_id,
            "plant_ids": list(self.plant_ids),
            "scope": self.scope,
            "created_at": self.created_at,
        }
