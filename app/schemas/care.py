"""
Care Schedule Schemas
=====================

Pydantic request models for the care schedule API.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.constants import IntervalBounds
from app.enums import CareType, CompletionSource, SnoozeOption


class CareItemRequest(BaseModel):
    """One care item as produced by a care plan."""

    care_type: CareType = Field(..., description="water | fertilize | repot | prune")
    frequency: Optional[str] = Field(default=None, description='Natural-language frequency, e.g. "every 7-10 days"')
    notes: str = Field(default="", max_length=1000)

    @field_validator("care_type", mode="before")
    @classmethod
    def normalize_care_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class ReconcileRequest(BaseModel):
    """Body of POST /api/plants/<plant_id>/care/reconcile."""

    items: list[CareItemRequest] = Field(default_factory=list)


class ToggleRemindersRequest(BaseModel):
    """Body of POST /api/plants/<plant_id>/care/reminders."""

    enabled: bool


class UpdateFrequencyRequest(BaseModel):
    """Body of PATCH /api/care/schedules/<schedule_id>/frequency."""

    # Out-of-range values are clamped by the service rather than rejected
    frequency_days: int = Field(..., description=f"Days between care events ({IntervalBounds.MIN_DAYS}-{IntervalBounds.MAX_DAYS})")


class AcceptRecommendationRequest(BaseModel):
    """Body of POST .../recommendation/accept (optional)."""

    days: Optional[int] = Field(default=None, ge=1, description="Recommended frequency from the reconcile response")
    original_notes: str = Field(default="", max_length=1000)


class CompletionRequest(BaseModel):
    """Body of POST /api/care/schedules/<schedule_id>/complete (optional)."""

    source: CompletionSource = CompletionSource.IN_APP

    @field_validator("source")
    @classmethod
    def reject_snooze(cls, v):
        if v == CompletionSource.SNOOZE:
            raise ValueError("snoozes are recorded through the snooze endpoint")
        return v


class SnoozeRequest(BaseModel):
    """Body of POST /api/care/schedules/<schedule_id>/snooze (optional)."""

    option: SnoozeOption = Field(default=SnoozeOption.SIX_HOURS, description="six_hours | one_day | next_cycle")


class ReminderSettingsRequest(BaseModel):
    """Body of PUT /api/care/reminders/settings; omitted fields stay unchanged."""

    paused: Optional[bool] = None
    reminder_time: Optional[str] = Field(default=None, description="HH:MM in the reminder timezone")
