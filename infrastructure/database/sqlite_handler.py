import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.activity_log import ActivityOperations
from infrastructure.database.ops.events import EventOperations
from infrastructure.database.ops.garden import GardenOperations
from infrastructure.database.ops.notifications import ReceivedNotificationOperations
from infrastructure.database.ops.reminders import ReminderOperations

logger = logging.getLogger(__name__)


class SQLiteDatabaseHandler(
    GardenOperations,
    EventOperations,
    ReminderOperations,
    ReceivedNotificationOperations,
    ActivityOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals."""

    def __init__(self, database_path: str, *, cache_size_kb: int = 8_000) -> None:
        self._database_path = database_path
        self._cache_size_kb = int(cache_size_kb)
        self._local = threading.local()
        # Every thread gets its own connection; ":memory:" would give each one
        # a private empty database, so in-memory handlers share one connection.
        self._shared: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.RLock()

        if database_path != ":memory:":
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def is_memory(self) -> bool:
        return self._database_path == ":memory:"

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
        if self.is_memory:
            with self._shared_lock:
                if self._shared is None:
                    self._shared = self._open_connection()
                return self._shared

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Apply connection PRAGMAs.

        - foreign_keys: area -> plant -> growth log cascades rely on it
        - WAL + NORMAL synchronous for file databases
        - memory temp store
        """
        connection.execute("PRAGMA foreign_keys=ON")
        if not self.is_memory:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute(f"PRAGMA cache_size=-{self._cache_size_kb}")
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        if self.is_memory:
            # Closing the shared connection would drop the whole database.
            return
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    def close(self) -> None:
        """Close every connection, including the shared in-memory one."""
        self.close_db()
        with self._shared_lock:
            if self._shared is not None:
                self._shared.close()
                self._shared = None

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        with self.connection() as db:
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Areas (
                    area_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    emoji TEXT NOT NULL DEFAULT '🌱',
                    description TEXT NOT NULL DEFAULT '',
                    cover_color TEXT NOT NULL DEFAULT '#7CB342',
                    cover_image TEXT,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Categories (
                    category_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    emoji TEXT NOT NULL DEFAULT '🌱',
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Plants (
                    plant_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    category_id INTEGER NOT NULL,
                    area_id INTEGER NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    variety TEXT,
                    date_planted TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (category_id) REFERENCES Categories(category_id),
                    FOREIGN KEY (area_id) REFERENCES Areas(area_id) ON DELETE CASCADE
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_plants_area ON Plants(area_id)")
            db.execute("CREATE INDEX IF NOT EXISTS idx_plants_category ON Plants(category_id)")
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS GrowthLog (
                    log_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    plant_id INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    photo TEXT,
                    note TEXT NOT NULL DEFAULT '',
                    created_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (plant_id) REFERENCES Plants(plant_id) ON DELETE CASCADE
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_growth_log_plant ON GrowthLog(plant_id)")
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS GardenEvents (
                    event_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_type TEXT NOT NULL CHECK(event_type IN (
                        'water', 'fertilize', 'prune', 'harvest', 'weed', 'other'
                    )),
                    title TEXT,
                    description TEXT,
                    area_id INTEGER,
                    plant_ids TEXT,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_events_created ON GardenEvents(created_at)")
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Reminders (
                    identifier TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL DEFAULT '',
                    trigger TEXT NOT NULL,
                    data TEXT,
                    anchor_at TIMESTAMP,
                    next_fire_at TIMESTAMP,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_reminders_next_fire ON Reminders(next_fire_at)")
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS ReceivedNotifications (
                    notification_id TEXT PRIMARY KEY,
                    native_identifier TEXT NOT NULL DEFAULT '',
                    title TEXT NOT NULL DEFAULT 'Reminder',
                    body TEXT NOT NULL DEFAULT '',
                    plant_name TEXT NOT NULL DEFAULT 'General',
                    received_at TIMESTAMP NOT NULL,
                    plant_ids TEXT,
                    area_id INTEGER
                )
                """
            )
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS ActivityLog (
                    activity_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp DATETIME NOT NULL,
                    activity_type TEXT NOT NULL,
                    severity TEXT NOT NULL DEFAULT 'info' CHECK(severity IN ('info', 'warning', 'error')),
                    entity_type TEXT,
                    entity_id TEXT,
                    description TEXT NOT NULL,
                    metadata TEXT
                )
                """
            )
        logger.debug("Garden tables ensured at %s", self._database_path)
