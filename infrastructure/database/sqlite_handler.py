import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.analyses import AnalysisOperations
from infrastructure.database.ops.care import CareOperations
from infrastructure.database.ops.maintenance import MaintenanceOperations

logger = logging.getLogger(__name__)


class SQLiteDatabaseHandler(
    AnalysisOperations,
    CareOperations,
    MaintenanceOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals.

    Each thread gets its own connection. Note that ``":memory:"`` therefore
    means one private database per thread; tests that cross threads should use
    a file path.
    """

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()

        # Ensure the directory for the database file exists
        if database_path != ":memory:":
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
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
            or "malformed" in message
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
        """Configure the SQLite connection.

        - WAL mode: readers don't block the background rescanner's writes
        - NORMAL synchronous: safe with WAL
        - Memory temp store
        """
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA cache_size=-16000")  # 16MB cache (negative = KB)
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        try:
            with self.connection() as db:
                # Stored AI analyses; reliability_status defaults to OK so
                # pre-classification rows are picked up by the rescanner
                db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Analyses (
                        analysis_id TEXT PRIMARY KEY,
                        plant_id TEXT NOT NULL,
                        raw_response TEXT,
                        reliability_status TEXT NOT NULL DEFAULT 'OK',
                        health_score INTEGER,
                        summary TEXT DEFAULT '',
                        photo_path TEXT,
                        created_at TIMESTAMP NOT NULL
                    )
                    """
                )
                db.execute("CREATE INDEX IF NOT EXISTS idx_analyses_plant ON Analyses(plant_id, created_at DESC)")
                db.execute("CREATE INDEX IF NOT EXISTS idx_analyses_status ON Analyses(reliability_status)")

                # Care schedules: one per (plant, care type)
                db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS CareSchedules (
                        schedule_id TEXT PRIMARY KEY,
                        plant_id TEXT NOT NULL,
                        care_type TEXT NOT NULL,
                        frequency_days INTEGER NOT NULL,
                        is_custom BOOLEAN NOT NULL DEFAULT 0,
                        enabled BOOLEAN NOT NULL DEFAULT 1,
                        next_due TIMESTAMP NOT NULL,
                        notes TEXT DEFAULT '',
                        snooze_count INTEGER NOT NULL DEFAULT 0,
                        UNIQUE (plant_id, care_type)
                    )
                    """
                )
                db.execute("CREATE INDEX IF NOT EXISTS idx_care_schedules_due ON CareSchedules(enabled, next_due)")

                db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS CareCompletions (
                        completion_id TEXT PRIMARY KEY,
                        schedule_id TEXT NOT NULL,
                        completed_at TIMESTAMP NOT NULL,
                        source TEXT NOT NULL DEFAULT 'in_app',
                        FOREIGN KEY (schedule_id) REFERENCES CareSchedules(schedule_id) ON DELETE CASCADE
                    )
                    """
                )
                db.execute(
                    "CREATE INDEX IF NOT EXISTS idx_care_completions_schedule "
                    "ON CareCompletions(schedule_id, completed_at DESC)"
                )

                # Background job state (rescan cursor)
                db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS MaintenanceState (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP
                    )
                    """
                )
        except sqlite3.Error as exc:
            logger.error("Error creating tables: %s", exc)
