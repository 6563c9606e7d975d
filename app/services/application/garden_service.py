"""
Garden Service
==============
Business logic for the garden state: areas, categories, plants and their
growth logs.

Plants are always returned populated with their area and category summary
and their growth log, oldest entry first. Deleting an area removes its
plants and their logs.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import tzinfo
from typing import TYPE_CHECKING, Any

from app.constants import Defaults
from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.garden import Area, Category, GrowthLogEntry, Plant
from app.services.application.activity_logger import ActivityLogger, log_if_available
from app.utils.time import coerce_date, iso_now, local_today

if TYPE_CHECKING:
    from infrastructure.database.repositories.garden import AreaRepository, CategoryRepository, PlantRepository
    from infrastructure.logging.audit import AuditLogger
    from app.utils.uploads import UploadStore

logger = logging.getLogger(__name__)

AREA_UPDATABLE = ("name", "emoji", "description", "cover_color", "cover_image")
PLANT_UPDATABLE = ("name", "category_id", "area_id", "description", "variety", "date_planted")

# Columns that cannot be cleared by sending null
AREA_REQUIRED = ("emoji", "cover_color")
PLANT_REQUIRED = ("category_id", "area_id")


def _clean_nulls(fields: dict[str, Any], required: tuple[str, ...]) -> dict[str, Any]:
    missing = sorted(k for k in required if k in fields and fields[k] is None)
    if missing:
        raise ValidationError(f"{', '.join(missing)} cannot be null", detail={"fields": missing})
    if fields.get("description", "") is None:
        fields["description"] = ""
    return fields


class GardenService:
    """Areas, categories, plants and growth log entries."""

    def __init__(
        self,
        area_repo: "AreaRepository",
        category_repo: "CategoryRepository",
        plant_repo: "PlantRepository",
        *,
        tz: tzinfo,
        activity_logger: ActivityLogger | None = None,
        audit_logger: "AuditLogger" | None = None,
        upload_store: "UploadStore" | None = None,
    ):
        self.areas = area_repo
        self.categories = category_repo
        self.plants = plant_repo
        self.tz = tz
        self.activity_logger = activity_logger
        self.audit_logger = audit_logger
        self.upload_store = upload_store

    def _today(self) -> str:
        return local_today(self.tz).isoformat()

    def _discard_uploads(self, paths) -> None:
        """Remove stored files that belonged to deleted rows."""
        if self.upload_store is None:
            return
        for path in paths:
            if path:
                self.upload_store.remove(path)

    # ========================================================================
    # Areas
    # ========================================================================

    def _load_area(self, area_id: int) -> Area:
        row = self.areas.get(area_id)
        if not row:
            raise NotFoundError("Area not found", detail={"area_id": area_id})
        return Area.from_row(row)

    def list_areas(self) -> list[dict[str, Any]]:
        return [Area.from_row(row).to_dict() for row in self.areas.list()]

    def get_area(self, area_id: int) -> dict[str, Any]:
        return self._load_area(area_id).to_dict()

    def create_area(
        self,
        name: str,
        emoji: str | None = None,
        description: str | None = None,
        cover_color: str | None = None,
        cover_image: str | None = None,
    ) -> dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Area name is required")

        now = iso_now()
        area_id = self.areas.create(
            {
                "name": name,
                "emoji": emoji or Defaults.AREA_EMOJI,
                "description": description or "",
                "cover_color": cover_color or Defaults.AREA_COVER_COLOR,
                "cover_image": cover_image,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info("Created area %s (%s)", area_id, name)
        log_if_available(
            self.activity_logger, ActivityLogger.AREA_CREATED, f"Area '{name}' created",
            entity_type="area", entity_id=area_id,
        )
        return self.get_area(area_id)

    def update_area(self, area_id: int, updates: dict[str, Any]) -> dict[str, Any]:
        """Partial update; keys outside the updatable set are ignored."""
        self._load_area(area_id)
        fields = _clean_nulls({k: v for k, v in updates.items() if k in AREA_UPDATABLE}, AREA_REQUIRED)
        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Area name is required")
        if fields:
            fields["updated_at"] = iso_now()
            self.areas.update(area_id, fields)
            log_if_available(
                self.activity_logger, ActivityLogger.AREA_UPDATED, f"Area {area_id} updated",
                entity_type="area", entity_id=area_id, metadata={"fields": sorted(k for k in fields if k != "updated_at")},
            )
        return self.get_area(area_id)

    def delete_area(self, area_id: int) -> bool:
        area = self._load_area(area_id)
        plant_ids = [int(row["plant_id"]) for row in self.plants.list(area_id=area_id)]
        photos = [row.get("photo") for row in self.plants.logs(plant_ids)]
        plant_count = len(plant_ids)
        deleted = self.areas.delete(area_id)
        if deleted:
            self._discard_uploads([area.cover_image, *photos])
        logger.info("Deleted area %s with %s plant(s)", area_id, plant_count)
        if self.audit_logger:
            self.audit_logger.record_deletion("area", area_id, deleted=deleted, plants=plant_count)
        log_if_available(
            self.activity_logger, ActivityLogger.AREA_DELETED, f"Area '{area.name}' deleted",
            entity_type="area", entity_id=area_id, metadata={"plants_removed": plant_count},
        )
        return deleted

    # ========================================================================
    # Categories
    # ========================================================================

    def list_categories(self) -> list[dict[str, Any]]:
        return [Category.from_row(row).to_dict() for row in self.categories.list()]

    def add_category(self, name: str, emoji: str | None = None) -> dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        category_id = self.categories.create(
            {"name": name, "emoji": emoji or Defaults.CATEGORY_EMOJI, "created_at": iso_now()}
        )
        log_if_available(
            self.activity_logger, ActivityLogger.CATEGORY_CREATED, f"Category '{name}' added",
            entity_type="category", entity_id=category_id,
        )
        return Category.from_row(self.categories.get(category_id)).to_dict()

    def get_categories_for_area(self, area_id: int) -> list[dict[str, Any]]:
        """Every category with ``plant_count`` for plants of that category in the area."""
        self._load_area(area_id)
        counts = self.categories.plant_counts_for_area(area_id)
        result = []
        for row in self.categories.list():
            item = Category.from_row(row).to_dict()
            item["plant_count"] = counts.get(item["category_id"], 0)
            result.append(item)
        return result

    # ========================================================================
    # Plants
    # ========================================================================

    def _populate(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        areas = {a.area_id: a for a in (Area.from_row(r) for r in self.areas.list())}
        categories = {c.category_id: c for c in (Category.from_row(r) for r in self.categories.list())}
        logs: dict[int, list[GrowthLogEntry]] = defaultdict(list)
        for log_row in self.plants.logs([int(r["plant_id"]) for r in rows]):
            logs[int(log_row["plant_id"])].append(GrowthLogEntry.from_row(log_row))

        populated = []
        for row in rows:
            plant = Plant.from_row(row, logs.get(int(row["plant_id"])))
            populated.append(
                plant.to_dict(area=areas.get(plant.area_id), category=categories.get(plant.category_id))
            )
        return populated

    def _require_refs(self, category_id: int | None, area_id: int | None) -> None:
        if category_id is not None and not self.categories.get(category_id):
            raise ValidationError("Category not found", detail={"category_id": category_id})
        if area_id is not None and not self.areas.get(area_id):
            raise ValidationError("Area not found", detail={"area_id": area_id})

    def list_plants(self, area_id: int | None = None, category_id: int | None = None) -> list[dict[str, Any]]:
        return self._populate(self.plants.list(area_id=area_id, category_id=category_id))

    def get_plants_for_area(self, area_id: int) -> list[dict[str, Any]]:
        return self.list_plants(area_id=area_id)

    def get_plants_for_area_and_category(self, area_id: int, category_id: int) -> list[dict[str, Any]]:
        return self.list_plants(area_id=area_id, category_id=category_id)

    def get_plant(self, plant_id: int) -> dict[str, Any]:
        row = self.plants.get(plant_id)
        if not row:
            raise NotFoundError("Plant not found", detail={"plant_id": plant_id})
        return self._populate([row])[0]

    def add_plant(
        self,
        name: str,
        category_id: int,
        area_id: int,
        *,
        description: str | None = None,
        variety: str | None = None,
        date_planted: str | None = None,
        photo: str | None = None,
        initial_note: str | None = None,
    ) -> dict[str, Any]:
        """Create a plant; an initial photo becomes its first growth log entry, dated today."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Plant name is required")
        self._require_refs(category_id, area_id)

        now = iso_now()
        plant_id = self.plants.create(
            {
                "name": name,
                "category_id": category_id,
                "area_id": area_id,
                "description": description or "",
                "variety": (variety or "").strip() or None,
                "date_planted": coerce_date(date_planted) or self._today(),
                "created_at": now,
                "updated_at": now,
            }
        )
        if photo:
            self.plants.add_log(
                {
                    "plant_id": plant_id,
                    "date": self._today(),
                    "photo": photo,
                    "note": initial_note or Defaults.INITIAL_PHOTO_NOTE,
                    "created_at": now,
                }
            )
        logger.info("Added plant %s (%s) to area %s", plant_id, name, area_id)
        log_if_available(
            self.activity_logger, ActivityLogger.PLANT_ADDED, f"Plant '{name}' added",
            entity_type="plant", entity_id=plant_id, metadata={"area_id": area_id, "category_id": category_id},
        )
        return self.get_plant(plant_id)

    def update_plant(self, plant_id: int, updates: dict[str, Any]) -> dict[str, Any]:
        self.get_plant(plant_id)
        fields = _clean_nulls({k: v for k, v in updates.items() if k in PLANT_UPDATABLE}, PLANT_REQUIRED)
        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Plant name is required")
        if "date_planted" in fields:
            fields["date_planted"] = coerce_date(fields["date_planted"]) or self._today()
        self._require_refs(fields.get("category_id"), fields.get("area_id"))
        if fields:
            fields["updated_at"] = iso_now()
            self.plants.update(plant_id, fields)
            log_if_available(
                self.activity_logger, ActivityLogger.PLANT_UPDATED, f"Plant {plant_id} updated",
                entity_type="plant", entity_id=plant_id,
            )
        return self.get_plant(plant_id)

    def delete_plant(self, plant_id: int) -> bool:
        plant = self.get_plant(plant_id)
        deleted = self.plants.delete(plant_id)
        if deleted:
            self._discard_uploads(entry["photo"] for entry in plant["growth_log"])
        if self.audit_logger:
            self.audit_logger.record_deletion("plant", plant_id, deleted=deleted, logs=len(plant["growth_log"]))
        log_if_available(
            self.activity_logger, ActivityLogger.PLANT_REMOVED, f"Plant '{plant['name']}' removed",
            entity_type="plant", entity_id=plant_id,
        )
        return deleted

    # ========================================================================
    # Growth log
    # ========================================================================

    def add_growth_log(
        self,
        plant_id: int,
        date: str | None = None,
        photo: str | None = None,
        note: str | None = None,
    ) -> dict[str, Any]:
        """Append a growth log entry and return the updated plant."""
        self.get_plant(plant_id)
        log_id = self.plants.add_log(
            {
                "plant_id": plant_id,
                "date": coerce_date(date) or self._today(),
                "photo": photo,
                "note": note or "",
                "created_at": iso_now(),
            }
        )
        log_if_available(
            self.activity_logger, ActivityLogger.GROWTH_LOGGED, f"Growth log added to plant {plant_id}",
            entity_type="growth_log", entity_id=log_id, metadata={"plant_id": plant_id, "photo": bool(photo)},
        )
        return self.get_plant(plant_id)

    def delete_growth_log(self, plant_id: int, log_id: int) -> dict[str, Any]:
        """Remove one entry and return the updated plant."""
        plant = self.get_plant(plant_id)
        if not self.plants.delete_log(plant_id, log_id):
            raise NotFoundError("Growth log entry not found", detail={"plant_id": plant_id, "log_id": log_id})
        self._discard_uploads(e["photo"] for e in plant["growth_log"] if e["log_id"] == log_id)
        log_if_available(
            self.activity_logger, ActivityLogger.GROWTH_LOG_REMOVED, f"Growth log {log_id} removed",
            entity_type="growth_log", entity_id=log_id, metadata={"plant_id": plant_id},
        )
        return self.get_plant(plant_id)

    def get_recent_growth_logs(self) -> list[dict[str, Any]]:
        """Every growth log entry across plants, newest date first."""
        items = []
        for row in self.plants.logs():
            entry = GrowthLogEntry.from_row(row).to_dict()
            entry["plant_name"] = row.get("plant_name")
            items.append(entry)
        items.sort(key=lambda e: (e["date"], e["log_id"]), reverse=True)
        return items

    # ========================================================================
    # Stats
    # ========================================================================

    def get_unique_variety_count(self) -> int:
        varieties = {(row.get("variety") or "").strip() for row in self.plants.list()}
        varieties.discard("")
        return len(varieties)

    def profile_stats(self) -> dict[str, int]:
        totals = self.plants.log_totals()
        return {
            "total_photos": totals["photos"],
            "total_entries": totals["entries"],
            "area_count": len(self.areas.list()),
            "plant_count": self.plants.count(),
            "unique_varieties": self.get_unique_variety_count(),
        }
