"""
Container Builder
=================

Extracts service container construction logic from ServiceContainer.build().

Each build_*() method constructs one layer:
- build_infrastructure(): database handler and repositories
- build_application_components(): engine services and worker pools
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any

from app.config import AppConfig
from app.services.ai.photo_quality_gate import PhotoQualityGate
from app.services.ai.response_parser import LayeredResponseParser
from app.services.application.analysis_rescan_service import AnalysisRescanService
from app.services.application.analysis_service import AnalysisService
from app.services.application.care_schedule_service import CareScheduleService
from app.services.application.reminder_service import ReminderService
from app.workers.executors import WorkerPools
from infrastructure.database.repositories import AnalysisRepository, CareScheduleRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

logger = logging.getLogger(__name__)


@dataclass
class InfrastructureComponents:
    """Infrastructure layer components (database, repos)."""

    database: SQLiteDatabaseHandler
    analysis_repo: AnalysisRepository
    care_schedule_repo: CareScheduleRepository


@dataclass
class ApplicationComponents:
    """Engine services and background workers."""

    quality_gate: PhotoQualityGate
    response_parser: LayeredResponseParser
    reminder_service: ReminderService
    care_schedule_service: CareScheduleService
    analysis_service: AnalysisService
    rescan_service: AnalysisRescanService
    workers: WorkerPools


class ContainerBuilder:
    """Builder for constructing the service container."""

    def __init__(self, config: AppConfig):
        self.config = config

    def build_infrastructure(self) -> InfrastructureComponents:
        logger.info("Building infrastructure components...")
        database = SQLiteDatabaseHandler(self.config.database_path)
        database.init_app(None)

        return InfrastructureComponents(
            database=database,
            analysis_repo=AnalysisRepository(database),
            care_schedule_repo=CareScheduleRepository(database),
        )

    def build_application_components(self, infra: InfrastructureComponents) -> ApplicationComponents:
        logger.info("Building application components...")
        parser = LayeredResponseParser()

        reminder_service = ReminderService(
            reminder_time=self.config.reminder_time,
            paused=self.config.reminders_paused,
            timezone=self.config.reminder_timezone,
            schedule_repo=infra.care_schedule_repo,
        )
        care_schedule_service = CareScheduleService(infra.care_schedule_repo, reminder_service)

        return ApplicationComponents(
            quality_gate=PhotoQualityGate(),
            response_parser=parser,
            reminder_service=reminder_service,
            care_schedule_service=care_schedule_service,
            analysis_service=AnalysisService(infra.analysis_repo, care_schedule_service, parser=parser),
            rescan_service=AnalysisRescanService(infra.analysis_repo, parser=parser),
            workers=WorkerPools(
                storage_workers=self.config.storage_workers,
                network_workers=self.config.network_workers,
            ),
        )

    def build(self) -> dict[str, Any]:
        """Build every layer and return the flattened component mapping."""
        infra = self.build_infrastructure()
        app_components = self.build_application_components(infra)

        components: dict[str, Any] = {"config": self.config}
        for layer in (infra, app_components):
            components.update({f.name: getattr(layer, f.name) for f in fields(layer)})
        return components
