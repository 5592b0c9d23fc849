"""
Repository Protocols
====================

Defines the persistence interfaces the engine services depend on.
Implementations live in ``infrastructure.database.repositories``; tests may
substitute in-memory fakes or mocks.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from app.domain.analysis_record import AnalysisRecord
from app.domain.care_schedule import CareCompletion, CareSchedule
from app.enums import ReliabilityStatus


class AnalysisRepository(Protocol):
    """Protocol for analysis record persistence."""

    @abstractmethod
    def create(self, record: AnalysisRecord) -> AnalysisRecord:
        """Insert a new analysis record."""
        ...

    @abstractmethod
    def get_by_id(self, analysis_id: str) -> AnalysisRecord | None:
        """Get an analysis by ID, or None."""
        ...

    @abstractmethod
    def list_for_plant(self, plant_id: str, limit: int = 20) -> list[AnalysisRecord]:
        """Most recent analyses for a plant, newest first."""
        ...

    @abstractmethod
    def fetch_unscanned(self, after_rowid: int, limit: int) -> list[tuple[int, AnalysisRecord]]:
        """
        Get records still classified OK with a rowid greater than ``after_rowid``.

        Args:
            after_rowid: Scan cursor (0 to start from the beginning)
            limit: Maximum number of records

        Returns:
            ``(rowid, record)`` pairs in ascending rowid order
        """
        ...

    @abstractmethod
    def update_status_if_ok(self, analysis_id: str, status: ReliabilityStatus) -> bool:
        """
        Persist a non-OK status, but only while the stored status is still OK.

        Returns:
            True if a row was updated
        """
        ...

    @abstractmethod
    def get_scan_cursor(self) -> int:
        """Highest rowid already examined by the background rescanner."""
        ...

    @abstractmethod
    def set_scan_cursor(self, rowid: int) -> None:
        """Persist the rescanner cursor."""
        ...


class CareScheduleRepository(Protocol):
    """Protocol for care schedule and completion persistence."""

    @abstractmethod
    def get_by_id(self, schedule_id: str) -> CareSchedule | None:
        """Get a schedule by ID, or None."""
        ...

    @abstractmethod
    def get_by_plant(self, plant_id: str) -> list[CareSchedule]:
        """All schedules for a plant."""
        ...

    @abstractmethod
    def get_enabled(self) -> list[CareSchedule]:
        """All schedules with reminders enabled, soonest due first."""
        ...

    @abstractmethod
    def insert(self, schedule: CareSchedule) -> CareSchedule:
        """Insert a new schedule."""
        ...

    @abstractmethod
    def update(self, schedule: CareSchedule) -> CareSchedule:
        """Overwrite an existing schedule."""
        ...

    @abstractmethod
    def get_last_completion(self, schedule_id: str) -> CareCompletion | None:
        """Most recent non-snooze completion for a schedule, or None."""
        ...

    @abstractmethod
    def add_completion(self, completion: CareCompletion) -> CareCompletion:
        """Record a care completion."""
        ...

    @abstractmethod
    def list_completions(self, schedule_id: str, limit: int = 20) -> list[CareCompletion]:
        """Recent non-snooze completions for a schedule, newest first."""
        ...


__all__ = ["AnalysisRepository", "CareScheduleRepository"]
