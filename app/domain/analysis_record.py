"""
Analysis Record Entity
======================

A stored AI plant analysis: the raw provider response plus the reliability
classification computed by the layered response parser. The raw text is kept
so the record can be re-parsed after schema changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.enums import ReliabilityStatus
from app.utils.time import coerce_datetime, to_iso, utc_now


@dataclass
class AnalysisRecord:
    analysis_id: str
    plant_id: str
    raw_response: str | None = None
    reliability_status: ReliabilityStatus = ReliabilityStatus.OK
    health_score: int | None = None
    summary: str = ""
    photo_path: str | None = None
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        if isinstance(self.reliability_status, str):
            self.reliability_status = ReliabilityStatus(self.reliability_status)

    def to_dict(self, include_raw: bool = False) -> dict[str, Any]:
        data = {
            "analysis_id": self.analysis_id,
            "plant_id": self.plant_id,
            "reliability_status": self.reliability_status.value,
            "health_score": self.health_score,
            "summary": self.summary,
            "photo_path": self.photo_path,
            "created_at": to_iso(self.created_at),
        }
        if include_raw:
            data["raw_response"] = self.raw_response
        return data

    @staticmethod
    def from_row(row: Any) -> "AnalysisRecord":
        """Create from an ``Analyses`` database row."""
        data = dict(row)
        return AnalysisRecord(
            analysis_id=data["analysis_id"],
            plant_id=data["plant_id"],
            raw_response=data.get("raw_response"),
            reliability_status=ReliabilityStatus(data.get("reliability_status") or ReliabilityStatus.OK.value),
            health_score=data.get("health_score"),
            summary=data.get("summary") or "",
            photo_path=data.get("photo_path"),
            created_at=coerce_datetime(data.get("created_at")) or utc_now(),
        )
