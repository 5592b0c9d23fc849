"""
Analysis Repository
===================

Concrete implementation of the AnalysisRepository protocol using SQLite.
Wraps the AnalysisOperations and MaintenanceOperations mixins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.constants import RESCAN_CURSOR_KEY
from app.domain.analysis_record import AnalysisRecord
from app.enums import ReliabilityStatus

if TYPE_CHECKING:
    from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler


class AnalysisRepository:
    """Facade providing typed access to stored analyses and the rescan cursor."""

    def __init__(self, backend: "SQLiteDatabaseHandler") -> None:
        self._backend = backend

    # ==================== CRUD Operations ====================

    def create(self, record: AnalysisRecord) -> AnalysisRecord:
        return self._backend.insert_analysis(record)

    def get_by_id(self, analysis_id: str) -> AnalysisRecord | None:
        return self._backend.get_analysis(analysis_id)

    def list_for_plant(self, plant_id: str, limit: int = 20) -> list[AnalysisRecord]:
        return self._backend.get_analyses_for_plant(plant_id, limit)

    # ==================== Rescan Support ====================

    def fetch_unscanned(self, after_rowid: int, limit: int) -> list[tuple[int, AnalysisRecord]]:
        return self._backend.get_ok_analyses_after(after_rowid, limit)

    def update_status_if_ok(self, analysis_id: str, status: ReliabilityStatus) -> bool:
        return self._backend.update_analysis_status_if_ok(analysis_id, status)

    def get_scan_cursor(self) -> int:
        return self._backend.get_maintenance_int(RESCAN_CURSOR_KEY, 0)

    def set_scan_cursor(self, rowid: int) -> None:
        self._backend.set_maintenance_value(RESCAN_CURSOR_KEY, str(int(rowid)))
