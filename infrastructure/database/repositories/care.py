"""
Care Schedule Repository
========================

Concrete implementation of the CareScheduleRepository protocol using SQLite.
Wraps the CareOperations mixin from the infrastructure layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.domain.care_schedule import CareCompletion, CareSchedule
from app.domain.exceptions import NotFoundError

if TYPE_CHECKING:
    from infrastructure.database.ops.care import CareOperations


class CareScheduleRepository:
    """
    Concrete implementation of CareScheduleRepository protocol.

    Wraps the CareOperations mixin to provide repository pattern access.
    """

    def __init__(self, backend: "CareOperations") -> None:
        self._backend = backend

    # ==================== Schedules ====================

    def get_by_id(self, schedule_id: str) -> CareSchedule | None:
        return self._backend.get_care_schedule(schedule_id)

    def get_by_plant(self, plant_id: str) -> list[CareSchedule]:
        return self._backend.get_care_schedules_for_plant(plant_id)

    def get_enabled(self) -> list[CareSchedule]:
        return self._backend.get_enabled_care_schedules()

    def insert(self, schedule: CareSchedule) -> CareSchedule:
        return self._backend.insert_care_schedule(schedule)

    def update(self, schedule: CareSchedule) -> CareSchedule:
        """Update an existing schedule.

        Raises:
            NotFoundError: If the schedule no longer exists
        """
        if not self._backend.update_care_schedule(schedule):
            raise NotFoundError(f"Care schedule {schedule.schedule_id} not found")
        return schedule

    # ==================== Completions ====================

    def get_last_completion(self, schedule_id: str) -> CareCompletion | None:
        return self._backend.get_last_care_completion(schedule_id)

    def add_completion(self, completion: CareCompletion) -> CareCompletion:
        return self._backend.insert_care_completion(completion)

    def list_completions(self, schedule_id: str, limit: int = 20) -> list[CareCompletion]:
        return self._backend.get_care_completions(schedule_id, limit)
