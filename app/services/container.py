from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import AppConfig
from app.services.ai.photo_quality_gate import PhotoQualityGate
from app.services.ai.response_parser import LayeredResponseParser
from app.services.application.analysis_rescan_service import AnalysisRescanService
from app.services.application.analysis_service import AnalysisService
from app.services.application.care_schedule_service import CareScheduleService
from app.services.application.reminder_service import ReminderService
from app.services.container_builder import ContainerBuilder
from app.workers.executors import WorkerPools
from infrastructure.database.repositories import AnalysisRepository, CareScheduleRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core engine services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    analysis_repo: AnalysisRepository
    care_schedule_repo: CareScheduleRepository
    quality_gate: PhotoQualityGate
    response_parser: LayeredResponseParser
    reminder_service: ReminderService
    care_schedule_service: CareScheduleService
    analysis_service: AnalysisService
    rescan_service: AnalysisRescanService
    workers: WorkerPools

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies."""
        logger.info("Building ServiceContainer using ContainerBuilder...")
        container = cls(**ContainerBuilder(config).build())
        logger.info("ServiceContainer built successfully.")
        return container

    def start_background_tasks(self) -> None:
        """Re-arm reminders and queue the startup maintenance jobs."""
        from app.workers.maintenance_tasks import analysis_rescan_task

        self.reminder_service.reschedule_all_alarms()
        if self.config.rescan_on_startup:
            self.workers.submit_storage(analysis_rescan_task, self)
            logger.info("Queued startup analysis rescan")

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.workers.shutdown(wait=True)
        self.database.close_db()
        logger.info("ServiceContainer shutdown complete.")
