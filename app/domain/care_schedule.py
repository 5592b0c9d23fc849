"""
Care Schedule Domain Entities
=============================

Recurring care schedules (water / fertilize / repot) for a plant, the
completion log that anchors due dates, and the care items an AI care plan is
turned into before reconciliation.

A schedule is *custom* once the user explicitly changed its frequency; custom
schedules are never silently overwritten by new AI recommendations. Instead a
:class:`PendingRecommendation` is attached for the user to accept or dismiss.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.constants import (
    PENDING_RECOMMENDATION_PREFIX,
    PENDING_RECOMMENDATION_SEPARATOR,
    SUGGEST_ADJUST_MARKER,
)
from app.enums import CareType, CompletionSource
from app.utils.intervals import parse_interval_days
from app.utils.time import coerce_datetime, to_iso, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingRecommendation:
    """An AI-proposed frequency awaiting the user's decision.

    Attributes:
        days: Proposed frequency in days
        original_notes: Notes to restore when the recommendation is accepted
    """

    days: int
    original_notes: str = ""

    def to_note(self) -> str:
        """Plain-text encoding ``AI_RECOMMENDED:<days>|<notes>`` for text-only consumers."""
        return f"{PENDING_RECOMMENDATION_PREFIX}{self.days}{PENDING_RECOMMENDATION_SEPARATOR}{self.original_notes}"

    @staticmethod
    def from_note(text: str | None) -> "PendingRecommendation" | None:
        """Decode the plain-text form; returns None for anything else."""
        if not text or not text.startswith(PENDING_RECOMMENDATION_PREFIX):
            return None
        payload = text[len(PENDING_RECOMMENDATION_PREFIX) :]
        days_text, sep, notes = payload.partition(PENDING_RECOMMENDATION_SEPARATOR)
        if not sep:
            return None
        try:
            days = int(days_text.strip())
        except ValueError:
            logger.debug("Ignoring malformed pending recommendation note: %r", text)
            return None
        return PendingRecommendation(days=days, original_notes=notes)

    def to_dict(self) -> dict[str, Any]:
        return {"days": self.days, "original_notes": self.original_notes}


@dataclass
class CareSchedule:
    """
    Recurring care schedule for one (plant, care type) pair.

    Attributes:
        schedule_id: Unique identifier (uuid4 hex)
        plant_id: Plant this schedule belongs to
        care_type: water, fertilize or repot
        frequency_days: Days between care events (1-90)
        is_custom: True once the user explicitly set the frequency
        enabled: Per-plant reminder toggle
        next_due: When the next care event is due (aware UTC)
        notes: Care notes from the AI plan
        pending_recommendation: AI proposal awaiting confirmation (never persisted)
        snooze_count: Consecutive snoozes since the last completion; from the
            third one the notes carry the suggest-adjust marker
    """

    schedule_id: str
    plant_id: str
    care_type: CareType
    frequency_days: int
    is_custom: bool = False
    enabled: bool = True
    next_due: datetime = field(default_factory=utc_now)
    notes: str = ""
    pending_recommendation: PendingRecommendation | None = None
    snooze_count: int = 0

    def __post_init__(self):
        if isinstance(self.care_type, str):
            self.care_type = CareType(self.care_type)

    @property
    def has_pending_recommendation(self) -> bool:
        return self.pending_recommendation is not None

    @property
    def suggest_adjust(self) -> bool:
        """True once repeated snoozes flagged the frequency for review."""
        return SUGGEST_ADJUST_MARKER in (self.notes or "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule_id": self.schedule_id,
            "plant_id": self.plant_id,
            "care_type": self.care_type.value,
            "frequency_days": self.frequency_days,
            "is_custom": self.is_custom,
            "enabled": self.enabled,
            "next_due": to_iso(self.next_due),
            "notes": self.notes,
            "pending_recommendation": (
                self.pending_recommendation.to_dict() if self.pending_recommendation else None
            ),
            "snooze_count": self.snooze_count,
            "suggest_adjust": self.suggest_adjust,
        }

    @staticmethod
    def from_row(row: Any) -> "CareSchedule":
        """Create from a ``CareSchedules`` database row."""
        data = dict(row)
        return CareSchedule(
            schedule_id=data["schedule_id"],
            plant_id=data["plant_id"],
            care_type=CareType(data["care_type"]),
            frequency_days=int(data["frequency_days"]),
            is_custom=bool(data.get("is_custom", 0)),
            enabled=bool(data.get("enabled", 1)),
            next_due=coerce_datetime(data.get("next_due")) or utc_now(),
            notes=data.get("notes") or "",
            snooze_count=int(data.get("snooze_count") or 0),
        )


@dataclass
class CareCompletion:
    """One recorded care event."""

    completion_id: str
    schedule_id: str
    completed_at: datetime
    source: CompletionSource = CompletionSource.IN_APP

    def __post_init__(self):
        if isinstance(self.source, str):
            self.source = CompletionSource(self.source)

    def to_dict(self) -> dict[str, Any]:
        return {
            "completion_id": self.completion_id,
            "schedule_id": self.schedule_id,
            "completed_at": to_iso(self.completed_at),
            "source": self.source.value,
        }

    @staticmethod
    def from_row(row: Any) -> "CareCompletion":
        data = dict(row)
        return CareCompletion(
            completion_id=data["completion_id"],
            schedule_id=data["schedule_id"],
            completed_at=coerce_datetime(data["completed_at"]),
            source=CompletionSource(data.get("source") or CompletionSource.IN_APP.value),
        )


@dataclass(frozen=True)
class CareItem:
    """A care recommendation derived from an AI care plan."""

    care_type: CareType
    frequency: str | None = None
    notes: str = ""

    @property
    def frequency_days(self) -> int:
        return parse_interval_days(self.frequency)

    def to_dict(self) -> dict[str, Any]:
        return {
            "care_type": self.care_type.value,
            "frequency": self.frequency,
            "frequency_days": self.frequency_days,
            "notes": self.notes,
        }
