from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


def _decode_event(row: sqlite3.Row) -> Dict[str, Any]:
    event = dict(row)
    raw_ids = event.get("plant_ids")
    if raw_ids:
        try:
            event["plant_ids"] = json.loads(raw_ids)
        except (TypeError, ValueError):
            logger.warning("Event %s has malformed plant_ids: %r", event.get("event_id"), raw_ids)
            event["plant_ids"] = []
    else:
        event["plant_ids"] = []
    return event


class EventOperations:
    """Database operations for GardenEvents table."""

    def insert_event(self, event: Dict[str, Any]) -> int:
        plant_ids = event.get("plant_ids") or []
        try:
            with self.connection() as db:
                cur = db.execute(
                    """
                    INSERT INTO GardenEvents (event_type, title, description, area_id, plant_ids, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        event.get("event_type"),
                        event.get("title"),
                        event.get("description"),
                        event.get("area_id"),
                        json.dumps(list(plant_ids)) if plant_ids else None,
                        event.get("created_at"),
                    ),
                )
                return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_event failed: %s", exc)
            raise RepositoryError("Failed to insert event") from exc

    def get_event(self, event_id: int) -> Optional[Dict[str, Any]]:
        try:
            row = self.get_db().execute("SELECT * FROM GardenEvents WHERE event_id = ?", (event_id,)).fetchone()
            return _decode_event(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_event failed: %s", exc)
            raise RepositoryError("Failed to load event") from exc

    def list_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = "SELECT * FROM GardenEvents ORDER BY created_at DESC, event_id DESC"
        params: List[Any] = []
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        try:
            rows = self.get_db().execute(query, params).fetchall()
            return [_decode_event(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_events failed: %s", exc)
            raise RepositoryError("Failed to list events") from exc

    def delete_event(self, event_id: int) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute("DELETE FROM GardenEvents WHERE event_id = ?", (event_id,))
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_event failed: %s", exc)
            raise RepositoryError("Failed to delete event") from exc
