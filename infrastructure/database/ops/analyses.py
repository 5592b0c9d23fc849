"""
Analysis Database Operations
============================

Database operations for the ``Analyses`` table: stored AI responses and
their reliability classification.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from app.domain.analysis_record import AnalysisRecord
from app.domain.exceptions import RepositoryError
from app.enums import ReliabilityStatus
from app.utils.time import to_iso

if TYPE_CHECKING:
    from sqlite3 import Connection

logger = logging.getLogger(__name__)


class AnalysisOperations:
    """Analysis CRUD helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    def insert_analysis(self, record: AnalysisRecord) -> AnalysisRecord:
        """
        Insert an analysis record.

        Raises:
            RepositoryError: On database failure
        """
        db = self.get_db()
        try:
            db.execute(
                """
                INSERT INTO Analyses (
                    analysis_id, plant_id, raw_response, reliability_status,
                    health_score, summary, photo_path, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.analysis_id,
                    record.plant_id,
                    record.raw_response,
                    record.reliability_status.value,
                    record.health_score,
                    record.summary,
                    record.photo_path,
                    to_iso(record.created_at),
                ),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error inserting analysis %s: %s", record.analysis_id, e)
            raise RepositoryError(f"Could not store analysis {record.analysis_id}") from e

        logger.debug(
            "Stored analysis %s for plant %s (status=%s)",
            record.analysis_id,
            record.plant_id,
            record.reliability_status,
        )
        return record

    def get_analysis(self, analysis_id: str) -> AnalysisRecord | None:
        db = self.get_db()
        try:
            row = db.execute("SELECT * FROM Analyses WHERE analysis_id = ?", (analysis_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error("Error getting analysis %s: %s", analysis_id, e)
            return None
        return AnalysisRecord.from_row(row) if row else None

    def get_analyses_for_plant(self, plant_id: str, limit: int = 20) -> list[AnalysisRecord]:
        db = self.get_db()
        try:
            rows = db.execute(
                """
                SELECT * FROM Analyses
                WHERE plant_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (plant_id, limit),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error listing analyses for plant %s: %s", plant_id, e)
            return []
        return [AnalysisRecord.from_row(row) for row in rows]

    def get_ok_analyses_after(self, after_rowid: int, limit: int) -> list[tuple[int, AnalysisRecord]]:
        """
        Records still at the default OK status, oldest first, past the scan cursor.

        Returns:
            List of ``(rowid, record)`` pairs
        """
        db = self.get_db()
        try:
            rows = db.execute(
                """
                SELECT rowid AS row_id, * FROM Analyses
                WHERE reliability_status = ? AND rowid > ?
                ORDER BY rowid ASC
                LIMIT ?
                """,
                (ReliabilityStatus.OK.value, after_rowid, limit),
            ).fetchall()
        except sqlite3.Error as e:
            logger.error("Error fetching analyses for rescan: %s", e)
            return []
        return [(int(row["row_id"]), AnalysisRecord.from_row(row)) for row in rows]

    def update_analysis_status_if_ok(self, analysis_id: str, status: ReliabilityStatus) -> bool:
        """
        Guarded status update: only applies while the stored status is still OK.

        Returns:
            True if the row was updated

        Raises:
            RepositoryError: On database failure
        """
        db = self.get_db()
        try:
            cursor = db.execute(
                """
                UPDATE Analyses SET reliability_status = ?
                WHERE analysis_id = ? AND reliability_status = ?
                """,
                (ReliabilityStatus(status).value, analysis_id, ReliabilityStatus.OK.value),
            )
            db.commit()
        except sqlite3.Error as e:
            logger.error("Error updating status of analysis %s: %s", analysis_id, e)
            raise RepositoryError(f"Could not update analysis {analysis_id}") from e
        return cursor.rowcount > 0
