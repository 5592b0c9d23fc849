"""
Care Schedule Database Operations
=================================

Database operations for the ``CareSchedules`` and ``CareCompletions``
tables.

Pending AI recommendations are not persisted here: they only live on the
copies the reconciler returns to its caller.

Snooze rows are kept as an audit trail but never anchor a due date and are
left out of the completion history.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from app.domain.care_schedule import CareCompletion, CareSchedule
from app.domain.exceptions import RepositoryError
from app.enums import CompletionSource
from app.utils.time import to_iso

if TYPE_CHECKING:
    from sqlite3 import Connection

logger = logging.getLogger(__name__)


class CareOperations:
    """Care schedule and completion helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    # =========================================================================
    # Schedules
    # =========================================================================

    def insert_care_schedule(self, schedule: CareSchedule) -> CareSchedule:
        """
        Insert a new care schedule.

        Raises:
            RepositoryError: On database failure (including a duplicate
                plant/care type pair)
        """
        db = self.get_db()
        try:
            db.execute(
                """
                INSERT INTO CareSchedules (
                    schedule_id, plant_id, care_type, frequency_days, is_custom,
                    enabled, next_due, notes, snooze_count
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    schedule.schedule_id,
                    schedule.plant_id,
                    schedule.care_type.value,
                    schedule.frequency_days,
                    int(schedule.is_custom),
                    int(schedule.enabled),
                    to_iso(schedule.next_due),
                    schedule.notes,
                    schedule.snooze_count,
                ),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error creating care schedule for plant %s: %s", schedule.plant_id, e)
            raise RepositoryError(f"Could not create {schedule.care_type} schedule") from e

        logger.info(
            "Created %s schedule %s for plant %s (every %s days)",
            schedule.care_type,
            schedule.schedule_id,
            schedule.plant_id,
            schedule.frequency_days,
        )
        return schedule

    def update_care_schedule(self, schedule: CareSchedule) -> bool:
        """
        Overwrite a schedule's mutable fields.

        Returns:
            True if the schedule exists and was updated

        Raises:
            RepositoryError: On database failure
        """
        db = self.get_db()
        try:
            cursor = db.execute(
                """
                UPDATE CareSchedules SET
                    frequency_days = ?, is_custom = ?, enabled = ?,
                    next_due = ?, notes = ?, snooze_count = ?
                WHERE schedule_id = ?
                """,
                (
                    schedule.frequency_days,
                    int(schedule.is_custom),
                    int(schedule.enabled),
                    to_iso(schedule.next_due),
                    schedule.notes,
                    schedule.snooze_count,
                    schedule.schedule_id,
                ),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error updating care schedule %s: %s", schedule.schedule_id, e)
            raise RepositoryError(f"Could not update schedule {schedule.schedule_id}") from e
        return cursor.rowcount > 0

    def get_care_schedule(self, schedule_id: str) -> CareSchedule | None:
        db = self.get_db()
        try:
            row = db.execute("SELECT * FROM CareSchedules WHERE schedule_id = ?", (schedule_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting care schedule %s: %s", schedule_id, e)
            return None
        return CareSchedule.from_row(row) if row else None

    def get_care_schedules_for_plant(self, plant_id: str) -> list[CareSchedule]:
        db = self.get_db()
        try:
            rows = db.execute(
                "SELECT * FROM CareSchedules WHERE plant_id = ? ORDER BY care_type",
                (plant_id,),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error listing care schedules for plant %s: %s", plant_id, e)
            return []
        return [CareSchedule.from_row(row) for row in rows]

    def get_enabled_care_schedules(self) -> list[CareSchedule]:
        db = self.get_db()
        try:
            rows = db.execute("SELECT * FROM CareSchedules WHERE enabled = 1 ORDER BY next_due ASC").fetchall()
        except sqlite3.Error as e:
            logger.error("Error listing enabled care schedules: %s", e)
            return []
        return [CareSchedule.from_row(row) for row in rows]

    # =========================================================================
    # Completions
    # =========================================================================

    def insert_care_completion(self, completion: CareCompletion) -> CareCompletion:
        """
        Record a completion.

        Raises:
            RepositoryError: On database failure
        """
        db = self.get_db()
        try:
            db.execute(
                """
                INSERT INTO CareCompletions (completion_id, schedule_id, completed_at, source)
                VALUES (?, ?, ?, ?)
                """,
                (
                    completion.completion_id,
                    completion.schedule_id,
                    to_iso(completion.completed_at),
                    completion.source.value,
                ),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error recording completion for schedule %s: %s", completion.schedule_id, e)
            raise RepositoryError(f"Could not record completion for {completion.schedule_id}") from e
        return completion

    def get_last_care_completion(self, schedule_id: str) -> CareCompletion | None:
        db = self.get_db()
        try:
            row = db.execute(
                """
                SELECT * FROM CareCompletions
                WHERE schedule_id = ? AND source != ?
                ORDER BY completed_at DESC, rowid DESC
                LIMIT 1
                """,
                (schedule_id, CompletionSource.SNOOZE.value),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting last completion for schedule %s: %s", schedule_id, e)
            return None
        return CareCompletion.from_row(row) if row else None

    def get_care_completions(self, schedule_id: str, limit: int = 20) -> list[CareCompletion]:
        db = self.get_db()
        try:
            rows = db.execute(
                """
                SELECT * FROM CareCompletions
                WHERE schedule_id = ? AND source != ?
                ORDER BY completed_at DESC, rowid DESC
                LIMIT ?
                """,
                (schedule_id, CompletionSource.SNOOZE.value, limit),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error listing completions for schedule %s: %s", schedule_id, e)
            return []
        return [CareCompletion.from_row(row) for row in rows]
