from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _decode_metadata(row: sqlite3.Row) -> Dict[str, Any]:
    item = dict(row)
    if item.get("metadata"):
        try:
            item["metadata"] = json.loads(item["metadata"])
        except (TypeError, ValueError):
            item["metadata"] = None
    return item


class ActivityOperations:
    """Database operations for ActivityLog table."""

    def insert_activity(self, activity: Dict[str, Any]) -> Optional[int]:
        try:
            metadata_json = json.dumps(activity["metadata"]) if activity.get("metadata") else None
            entity_id = activity.get("entity_id")
            with self.connection() as db:
                cur = db.execute(
                    """
                    INSERT INTO ActivityLog (
                        timestamp, activity_type, severity,
                        entity_type, entity_id, description, metadata
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        activity.get("timestamp"),
                        activity.get("activity_type"),
                        activity.get("severity"),
                        activity.get("entity_type"),
                        str(entity_id) if entity_id is not None else None,
                        activity.get("description"),
                        metadata_json,
                    ),
                )
                return cur.lastrowid
        except sqlite3.Error as exc:
            logger.debug("insert_activity failed: %s", exc)
            return None

    def get_recent_activities(self, limit: int = 50, activity_type: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            query = "SELECT * FROM ActivityLog WHERE 1=1"
            params: List[Any] = []
            if activity_type:
                query += " AND activity_type = ?"
                params.append(activity_type)
            query += " ORDER BY timestamp DESC, activity_id DESC LIMIT ?"
            params.append(limit)
            rows = self.get_db().execute(query, params).fetchall()
            return [_decode_metadata(r) for r in rows]
        except sqlite3.Error as exc:
            logger.debug("get_recent_activities failed: %s", exc)
            return []
