from __future__ import annotations

import logging
import sqlite3

from app.domain.exceptions import RepositoryError
from app.utils.time import iso_now

logger = logging.getLogger(__name__)


class MaintenanceOperations:
    """Key/value state for background maintenance jobs (scan cursors etc.)."""

    def get_maintenance_value(self, key: str) -> str | None:
        db = self.get_db()
        try:
            row = db.execute("SELECT value FROM MaintenanceState WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.error("Error reading maintenance state %s: %s", key, e)
            return None
        return row["value"] if row else None

    def set_maintenance_value(self, key: str, value: str) -> None:
        db = self.get_db()
        try:
            db.execute(
                """
                INSERT INTO MaintenanceState (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, iso_now()),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error writing maintenance state %s: %s", key, e)
            raise RepositoryError(f"Could not persist maintenance state {key}") from e

    def get_maintenance_int(self, key: str, default: int = 0) -> int:
        value = self.get_maintenance_value(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring non-integer maintenance state %s=%r", key, value)
            return default
