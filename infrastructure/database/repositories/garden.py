from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from infrastructure.database.ops.garden import GardenOperations


@dataclass(frozen=True)
class AreaRepository:
    _backend: GardenOperations

    def create(self, area: dict[str, Any]) -> int:
        return self._backend.insert_area(area)

    def get(self, area_id: int) -> dict[str, Any] | None:
        return self._backend.get_area(area_id)

    def list(self) -> list[dict[str, Any]]:
        return self._backend.list_areas()

    def update(self, area_id: int, fields: dict[str, Any]) -> bool:
        return self._backend.update_area(area_id, fields)

    def delete(self, area_id: int) -> bool:
        return self._backend.delete_area(area_id)


@dataclass(frozen=True)
class CategoryRepository:
    _backend: GardenOperations

    def create(self, category: dict[str, Any]) -> int:
        return self._backend.insert_category(category)

    def get(self, category_id: int) -> dict[str, Any] | None:
        return self._backend.get_category(category_id)

    def list(self) -> list[dict[str, Any]]:
        return self._backend.list_categories()

    def plant_counts_for_area(self, area_id: int) -> dict[int, int]:
        return self._backend.count_plants_by_category(area_id)


@dataclass(frozen=True)
class PlantRepository:
    _backend: GardenOperations

    def create(self, plant: dict[str, Any]) -> int:
        return self._backend.insert_plant(plant)

    def get(self, plant_id: int) -> dict[str, Any] | None:
        return self._backend.get_plant(plant_id)

    def list(self, area_id: int | None = None, category_id: int | None = None) -> list[dict[str, Any]]:
        return self._backend.list_plants(area_id=area_id, category_id=category_id)

    def update(self, plant_id: int, fields: dict[str, Any]) -> bool:
        return self._backend.update_plant(plant_id, fields)

    def delete(self, plant_id: int) -> bool:
        return self._backend.delete_plant(plant_id)

    def count(self, area_id: int | None = None) -> int:
        return self._backend.count_plants(area_id)

    # Growth log
    def add_log(self, entry: dict[str, Any]) -> int:
        return self._backend.insert_growth_log(entry)

    def logs(self, plant_ids: list[int] | None = None) -> list[dict[str, Any]]:
        return self._backend.list_growth_logs(plant_ids)

    def delete_log(self, plant_id: int, log_id: int) -> bool:
        return self._backend.delete_growth_log(plant_id, log_id)

    def log_totals(self) -> dict[str, int]:
        return self._backend.get_growth_log_totals()
