from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)


def _decode_reminder(row: sqlite3.Row) -> Dict[str, Any]:
    reminder = dict(row)
    for key in ("trigger", "data"):
        raw = reminder.get(key)
        try:
            reminder[key] = json.loads(raw) if raw else {}
        except (TypeError, ValueError):
            logger.warning("Reminder %s has malformed %s column", reminder.get("identifier"), key)
            reminder[key] = {}
    return reminder


class ReminderOperations:
    """Database operations for the Reminders table (scheduled notifications)."""

    def insert_reminder(self, reminder: Dict[str, Any]) -> str:
        try:
            with self.connection() as db:
                db.execute(
                    """
                    INSERT INTO Reminders (identifier, title, body, trigger, data, anchor_at, next_fire_at, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        reminder["identifier"],
                        reminder.get("title") or "",
                        reminder.get("body") or "",
                        json.dumps(reminder.get("trigger") or {}),
                        json.dumps(reminder.get("data") or {}),
                        reminder.get("anchor_at"),
                        reminder.get("next_fire_at"),
                        reminder.get("created_at"),
                    ),
                )
            return reminder["identifier"]
        except sqlite3.Error as exc:
            logger.error("insert_reminder failed: %s", exc)
            raise RepositoryError("Failed to schedule reminder") from exc

    def get_reminder(self, identifier: str) -> Optional[Dict[str, Any]]:
        try:
            row = self.get_db().execute("SELECT * FROM Reminders WHERE identifier = ?", (identifier,)).fetchone()
            return _decode_reminder(row) if row else None
        except sqlite3.Error as exc:
            logger.error("get_reminder failed: %s", exc)
            raise RepositoryError("Failed to load reminder") from exc

    def list_reminders(self) -> List[Dict[str, Any]]:
        try:
            rows = self.get_db().execute("SELECT * FROM Reminders ORDER BY created_at ASC").fetchall()
            return [_decode_reminder(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_reminders failed: %s", exc)
            raise RepositoryError("Failed to list reminders") from exc

    def list_due_reminders(self, now_iso: str) -> List[Dict[str, Any]]:
        try:
            rows = self.get_db().execute(
                "SELECT * FROM Reminders WHERE next_fire_at IS NOT NULL AND next_fire_at <= ? "
                "ORDER BY next_fire_at ASC",
                (now_iso,),
            ).fetchall()
            return [_decode_reminder(r) for r in rows]
        except sqlite3.Error as exc:
            logger.error("list_due_reminders failed: %s", exc)
            raise RepositoryError("Failed to list due reminders") from exc

    def set_reminder_next_fire(self, identifier: str, next_fire_at: Optional[str]) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute(
                    "UPDATE Reminders SET next_fire_at = ? WHERE identifier = ?",
                    (next_fire_at, identifier),
                )
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("set_reminder_next_fire failed: %s", exc)
            raise RepositoryError("Failed to update reminder") from exc

    def delete_reminder(self, identifier: str) -> bool:
        try:
            with self.connection() as db:
                cur = db.execute("DELETE FROM Reminders WHERE identifier = ?", (identifier,))
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("delete_reminder failed: %s", exc)
            raise RepositoryError("Failed to cancel reminder") from exc
