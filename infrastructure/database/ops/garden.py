from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import RepositoryError
from infrastructure.database.sql_safety import ColumnSet

logger = logging.getLogger(__name__)

AREAS = ColumnSet(
    "Areas", "area_id", {"name", "emoji", "description", "cover_color", "cover_image", "created_at", "updated_at"}
)
CATEGORIES = ColumnSet("Categories", "category_id", {"name", "emoji", "created_at"})
PLANTS = ColumnSet(
    "Plants",
    "plant_id",
    {
        "name",
        "category_id",
        "area_id",
        "description",
        "variety",
        "date_planted",
        "created_at",
        "updated_at",
    }
)
GROWTH_LOG = ColumnSet("GrowthLog", "log_id", {"plant_id", "date", "photo", "note", "created_at"})


class GardenOperations:
    """Database operations for Areas, Categories, Plants and GrowthLog tables."""

    # --- Areas -------------------------------------------------------------
    def insert_area(self, area: Dict[str, Any]) -> int:
        sql, params = AREAS.insert_sql(area, context="insert_area")
        try:
            with self.connection() as db:
                cur = db.execute(sql, params)
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_area failed: %s", exc)
            raise RepositoryError("Failed to insert area") from exc

    def get_area(self, area_id: int) -> Optional[Dict[str, Any]]:
        try:
            row = self.get_db().execute("SELECT * FROM Areas WHERE area_id = ?", (area_id,)).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_area failed: %s", exc)
            raise RepositoryError("Failed to load area") from exc

    def list_areas(self) -> List[Dict[str, Any]]:
        try:
            rows = self.get_db().execute("SELECT * FROM Areas ORDER BY area_id DESC").fetchall()
            return [dict(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_areas failed: %s", exc)
            raise RepositoryError("Failed to list areas") from exc

    def update_area(self, area_id: int, fields: Dict[str, Any]) -> bool:
        statement = AREAS.update_sql(area_id, fields, context="update_area")
        if statement is None:
            return self.get_area(area_id) is not None
        try:
            with self.connection() as db:
                cur = db.execute(*statement)
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("update_area failed: %s", exc)
            raise RepositoryError("Failed to update area") from exc

    def delete_area(self, area_id: int) -> bool:
        try:
            with self.connection() as db:
                # Explicit so the cascade holds even on connections opened without foreign_keys.
                db.execute(
                    "DELETE FROM GrowthLog WHERE plant_id IN (SELECT plant_id FROM Plants WHERE area_id = ?)",
                    (area_id,),
                )
                db.execute("DELETE FROM Plants WHERE area_id = ?", (area_id,))
                cur = db.execute("DELETE FROM Areas WHERE area_id = ?", (area_id,))
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_area failed: %s", exc)
            raise RepositoryError("Failed to delete area") from exc

    # --- Categories --------------------------------------------------------
    def insert_category(self, category: Dict[str, Any]) -> int:
        sql, params = CATEGORIES.insert_sql(category, context="insert_category")
        try:
            with self.connection() as db:
                cur = db.execute(sql, params)
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_category failed: %s", exc)
            raise RepositoryError("Failed to insert category") from exc

    def get_category(self, category_id: int) -> Optional[Dict[str, Any]]:
        try:
            row = self.get_db().execute(
                "SELECT * FROM Categories WHERE category_id = ?", (category_id,)
            ).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_category failed: %s", exc)
            raise RepositoryError("Failed to load category") from exc

    def list_categories(self) -> List[Dict[str, Any]]:
        try:
            rows = self.get_db().execute("SELECT * FROM Categories ORDER BY category_id DESC").fetchall()
            return [dict(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_categories failed: %s", exc)
            raise RepositoryError("Failed to list categories") from exc

    def count_plants_by_category(self, area_id: int) -> Dict[int, int]:
        try:
            rows = self.get_db().execute(
                "SELECT category_id, COUNT(*) AS total FROM Plants WHERE area_id = ? GROUP BY category_id",
                (area_id,),
            ).fetchall()
            return {int(r["category_id"]): int(r["total"]) for r in rows}
        except sqlite3.Error as exc:
            logger.error("count_plants_by_category failed: %s", exc)
            raise RepositoryError("Failed to count plants") from exc

    # --- Plants ------------------------------------------------------------
    def insert_plant(self, plant: Dict[str, Any]) -> int:
        sql, params = PLANTS.insert_sql(plant, context="insert_plant")
        try:
            with self.connection() as db:
                cur = db.execute(sql, params)
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_plant failed: %s", exc)
            raise RepositoryError("Failed to insert plant") from exc

    def get_plant(self, plant_id: int) -> Optional[Dict[str, Any]]:
        try:
            row = self.get_db().execute("SELECT * FROM Plants WHERE plant_id = ?", (plant_id,)).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_plant failed: %s", exc)
            raise RepositoryError("Failed to load plant") from exc

    def list_plants(
        self, area_id: Optional[int] = None, category_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        query = "SELECT * FROM Plants WHERE 1=1"
        params: List[Any] = []
        if area_id is not None:
            query += " AND area_id = ?"
            params.append(area_id)
        if category_id is not None:
            query += " AND category_id = ?"
            params.append(category_id)
        query += " ORDER BY plant_id ASC"
        try:
            rows = self.get_db().execute(query, params).fetchall()
            return [dict(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_plants failed: %s", exc)
            raise RepositoryError("Failed to list plants") from exc

    def update_plant(self, plant_id: int, fields: Dict[str, Any]) -> bool:
        statement = PLANTS.update_sql(plant_id, fields, context="update_plant")
        if statement is None:
            return self.get_plant(plant_id) is not None
        try:
            with self.connection() as db:
                cur = db.execute(*statement)
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("update_plant failed: %s", exc)
            raise RepositoryError("Failed to update plant") from exc

    def delete_plant(self, plant_id: int) -> bool:
        try:
            with self.connection() as db:
                db.execute("DELETE FROM GrowthLog WHERE plant_id = ?", (plant_id,))
                cur = db.execute("DELETE FROM Plants WHERE plant_id = ?", (plant_id,))
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_plant failed: %s", exc)
            raise RepositoryError("Failed to delete plant") from exc

    def count_plants(self, area_id: Optional[int] = None) -> int:
        try:
            if area_id is None:
                row = self.get_db().execute("SELECT COUNT(*) FROM Plants").fetchone()
            else:
                row = self.get_db().execute("SELECT COUNT(*) FROM Plants WHERE area_id = ?", (area_id,)).fetchone()
            return int(row[0])
        except sqlite3.Error as exc:
            logger.error("count_plants failed: %s", exc)
            raise RepositoryError("Failed to count plants") from exc

    # --- Growth log --------------------------------------------------------
    def insert_growth_log(self, entry: Dict[str, Any]) -> int:
        sql, params = GROWTH_LOG.insert_sql(entry, context="insert_growth_log")
        try:
            with self.connection() as db:
                cur = db.execute(sql, params)
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_growth_log failed: %s", exc)
            raise RepositoryError("Failed to insert growth log entry") from exc

    def list_growth_logs(self, plant_ids: Optional[List[int]] = None) -> List[Dict[str, Any]]:
        """Growth log rows joined with their plant name, oldest first."""
        query = (
            "SELECT g.*, p.name AS plant_name FROM GrowthLog g "
            "JOIN Plants p ON p.plant_id = g.plant_id"
        )
        params: List[Any] = []
        if plant_ids is not None:
            if not plant_ids:
                return []
            query += f" WHERE g.plant_id IN ({', '.join('?' for _ in plant_ids)})"
            params.extend(plant_ids)
        query += " ORDER BY g.date ASC, g.log_id ASC"
        try:
            rows = self.get_db().execute(query, params).fetchall()
            return [dict(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_growth_logs failed: %s", exc)
            raise RepositoryError("Failed to list growth log") from exc

    def delete_growth_log(self, plant_id: int, log_id: int) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute(
                    "DELETE FROM GrowthLog WHERE log_id = ? AND plant_id = ?",
                    (log_id, plant_id),
                )
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_growth_log failed: %s", exc)
            raise RepositoryError("Failed to delete growth log entry") from exc

    def get_growth_log_totals(self) -> Dict[str, int]:
        try:
            row = self.get_db().execute(
                "SELECT COUNT(*) AS entries, "
                "SUM(CASE WHEN photo IS NOT NULL AND photo != '' THEN 1 ELSE 0 END) AS photos "
                "FROM GrowthLog"
            ).fetchone()
            return {"entries": int(row["entries"] or 0), "photos": int(row["photos"] or 0)}
        except sqlite3.Error as exc:
            logger.error("get_growth_log_totals failed: %s", exc)
            raise RepositoryError("Failed to compute growth log totals") from exc
