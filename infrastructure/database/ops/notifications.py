"""Database operations for received reminder notifications."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)

_INSERT_SQL = """
    INSERT OR REPLACE INTO ReceivedNotifications (
        notification_id, native_identifier, title, body,
        plant_name, received_at, plant_ids, area_id
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


def _row_values(notification: dict[str, Any]) -> tuple:
    plant_ids = notification.get("plant_ids") or []
    return (
        notification["notification_id"],
        notification.get("native_identifier") or "",
        notification.get("title") or "Reminder",
        notification.get("body") or "",
        notification.get("plant_name") or "General",
        notification.get("received_at"),
        json.dumps(list(plant_ids)) if plant_ids else None,
        notification.get("area_id"),
    )


def _decode(row: sqlite3.Row) -> dict[str, Any]:
    item = dict(row)
    raw = item.get("plant_ids")
    try:
        item["plant_ids"] = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        item["plant_ids"] = []
    return item


class ReceivedNotificationOperations:
    """Database operations for the ReceivedNotifications table."""

    def insert_received_notification(self, notification: dict[str, Any]) -> str:
        try:
            with self.connection() as db:
                db.execute(_INSERT_SQL, _row_values(notification))
            return notification["notification_id"]
        except sqlite3.Error as exc:
            logger.error("insert_received_notification failed: %s", exc)
            raise RepositoryError("Failed to store received notification") from exc

    def replace_received_notifications(self, notifications: list[dict[str, Any]]) -> int:
        try:
            with self.connection() as db:
                db.execute("DELETE FROM ReceivedNotifications")
                db.executemany(_INSERT_SQL, [_row_values(n) for n in notifications])
            return len(notifications)
        except sqlite3.Error as exc:
            logger.error("replace_received_notifications failed: %s", exc)
            raise RepositoryError("Failed to sync received notifications") from exc

    def get_received_notification(self, notification_id: str) -> dict[str, Any] | None:
        try:
            row = self.get_db().execute(
                "SELECT * FROM ReceivedNotifications WHERE notification_id = ?",
                (notification_id,),
            ).fetchone()
            return _decode(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_received_notification failed: %s", exc)
            raise RepositoryError("Failed to load received notification") from exc

    def list_received_notifications(self) -> list[dict[str, Any]]:
        try:
            rows = self.get_db().execute(
                "SELECT * FROM ReceivedNotifications ORDER BY received_at ASC, rowid ASC"
            ).fetchall()
            return [_decode(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_received_notifications failed: %s", exc)
            raise RepositoryError("Failed to list received notifications") from exc

    def count_received_notifications(self) -> int:
        try:
            row = self.get_db().execute("SELECT COUNT(*) FROM ReceivedNotifications").fetchone()
            return int(row[0])
        except sqlite3.Error as exc:
            logger.error("count_received_notifications failed: %s", exc)
            raise RepositoryError("Failed to count received notifications") from exc

    def delete_received_notification(self, notification_id: str) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute(
                    "DELETE FROM ReceivedNotifications WHERE notification_id = ?",
                    (notification_id,),
                )
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_received_notification failed: %s", exc)
            raise RepositoryError("Failed to dismiss notification") from exc

    def clear_received_notifications(self) -> int:
        try:
            with self.connection() as db:
                cur = db.execute("DELETE FROM ReceivedNotifications")
                return cur.rowcount
        except sqlite3.Error as exc:
            logger.error("clear_received_notifications failed: %s", exc)
            raise RepositoryError("Failed to clear notifications") from exc
