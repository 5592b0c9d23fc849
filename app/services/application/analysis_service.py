"""
Analysis Service
================
Ingestion and read-side view of AI plant analyses.

Ingestion: parse the raw provider text, persist an :class:`AnalysisRecord`
with the computed reliability status, then turn the care plan (only complete
parses have one) into care items and reconcile them with the plant's
schedules.

Read side: re-parse the stored text and tell the UI what it can show: the
structured result (or a minimal stand-in), a fallback message for degraded
parses and whether a re-analysis can be offered.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from app.constants import HealthScoreBands
from app.domain.analysis_record import AnalysisRecord
from app.domain.care_schedule import CareSchedule
from app.domain.exceptions import NotFoundError
from app.enums import ReliabilityStatus
from app.schemas.analysis import HealthAssessment, Identification, PlantAnalysisResult
from app.services.ai.response_parser import LayeredResponseParser, ParseOutcome
from app.services.application.care_item_builder import build_care_items

if TYPE_CHECKING:
    from app.domain.repositories import AnalysisRepository
    from app.services.application.care_schedule_service import CareScheduleService

logger = logging.getLogger(__name__)

PARTIAL_FALLBACK_MESSAGE = "Some details couldn't be loaded"
UNAVAILABLE_FALLBACK_MESSAGE = "Full details unavailable"


def health_label(score: int | None) -> str:
    """Human label for a 0-10 health score."""
    if score is None:
        return "Unknown"
    if score >= HealthScoreBands.HEALTHY_MIN:
        return "Healthy"
    if score >= HealthScoreBands.NEEDS_ATTENTION_MIN:
        return "Needs Attention"
    return "Critical"


def fallback_message(status: ReliabilityStatus) -> Optional[str]:
    if status == ReliabilityStatus.OK:
        return None
    if status == ReliabilityStatus.PARTIAL:
        return PARTIAL_FALLBACK_MESSAGE
    return UNAVAILABLE_FALLBACK_MESSAGE


@dataclass
class AnalysisIngestResult:
    record: AnalysisRecord
    outcome: ParseOutcome
    needs_confirmation: list[CareSchedule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis": self.record.to_dict(),
            "parse": self.outcome.to_dict(),
            "needs_confirmation": [s.to_dict() for s in self.needs_confirmation],
        }


@dataclass
class AnalysisView:
    record: AnalysisRecord
    status: ReliabilityStatus
    result: PlantAnalysisResult
    fallback_message: Optional[str]
    can_reanalyze: bool

    def to_dict(self) -> dict[str, Any]:
        health = self.result.health_assessment
        return {
            "analysis": self.record.to_dict(),
            "status": str(self.status),
            "result": self.result.to_dict(),
            "health_label": health_label(health.score if health else None),
            "fallback_message": self.fallback_message,
            "can_reanalyze": self.can_reanalyze,
        }


class AnalysisService:
    """Records analyses and builds their reliability view."""

    def __init__(
        self,
        analysis_repo: "AnalysisRepository",
        care_schedule_service: "CareScheduleService",
        parser: LayeredResponseParser | None = None,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._repo = analysis_repo
        self._care = care_schedule_service
        self._parser = parser or LayeredResponseParser()
        self._new_id = id_factory

    def record_analysis(
        self,
        plant_id: str,
        raw_response: str | None,
        photo_path: str | None = None,
    ) -> AnalysisIngestResult:
        """
        Parse, persist and reconcile one AI response.

        Returns:
            AnalysisIngestResult with the stored record, the parse outcome and
            any custom schedules that now need the user's confirmation
        """
        outcome = self._parser.parse(raw_response)
        result = outcome.result
        health = result.health_assessment if result is not None else None

        record = self._repo.create(
            AnalysisRecord(
                analysis_id=self._new_id(),
                plant_id=plant_id,
                raw_response=raw_response,
                reliability_status=outcome.status,
                health_score=health.score if health else None,
                summary=health.summary if health else "",
                photo_path=photo_path,
            )
        )
        logger.info(
            "Recorded analysis %s for plant %s (status=%s hash=%s)",
            record.analysis_id,
            plant_id,
            outcome.status,
            outcome.content_hash,
        )

        care_plan = result.care_plan if result is not None else None
        needs_confirmation = self._care.reconcile(plant_id, build_care_items(care_plan))
        return AnalysisIngestResult(record=record, outcome=outcome, needs_confirmation=needs_confirmation)

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        record = self._repo.get_by_id(analysis_id)
        if record is None:
            raise NotFoundError(f"Analysis {analysis_id} not found")
        return record

    def list_analyses(self, plant_id: str, limit: int = 20) -> list[AnalysisRecord]:
        return self._repo.list_for_plant(plant_id, limit)

    def get_analysis_view(self, analysis_id: str) -> AnalysisView:
        """
        Re-parse a stored analysis for display.

        Raises:
            NotFoundError: Unknown analysis
        """
        record = self.get_analysis(analysis_id)
        outcome = self._parser.parse(record.raw_response)
        status = outcome.status
        result = outcome.result or self._minimal_result(record)

        return AnalysisView(
            record=record,
            status=status,
            result=result,
            fallback_message=fallback_message(status),
            can_reanalyze=status != ReliabilityStatus.OK and bool(record.photo_path),
        )

    @staticmethod
    def _minimal_result(record: AnalysisRecord) -> PlantAnalysisResult:
        """Stand-in result built from the stored score and summary."""
        return PlantAnalysisResult(
            identification=Identification(common_name="Unknown Plant", confidence="unknown"),
            health_assessment=HealthAssessment(
                score=record.health_score if record.health_score is not None else 0,
                summary=record.summary,
            ),
        )
