"""
Schemas Module
==============

This module provides Pydantic models for the AI analysis payload and for
request/response validation.
"""

from app.schemas.analysis import (
    CarePlan,
    Fertilizer,
    HealthAssessment,
    HealthIssue,
    Identification,
    ImmediateAction,
    Light,
    PlantAnalysisResult,
    Pruning,
    RecordAnalysisRequest,
    Repotting,
    RescanRequest,
    Watering,
)
from app.schemas.care import (
    AcceptRecommendationRequest,
    CareItemRequest,
    CompletionRequest,
    ReconcileRequest,
    ReminderSettingsRequest,
    SnoozeRequest,
    ToggleRemindersRequest,
    UpdateFrequencyRequest,
)
from app.schemas.common import ErrorDetail, ErrorResponse, SuccessResponse

__all__ = [
    # Common
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
    # Analysis payload
    "PlantAnalysisResult",
    "Identification",
    "HealthAssessment",
    "HealthIssue",
    "ImmediateAction",
    "CarePlan",
    "Watering",
    "Light",
    "Fertilizer",
    "Pruning",
    "Repotting",
    # Analysis API
    "RecordAnalysisRequest",
    "RescanRequest",
    # Care API
    "CareItemRequest",
    "ReconcileRequest",
    "ToggleRemindersRequest",
    "UpdateFrequencyRequest",
    "AcceptRecommendationRequest",
    "CompletionRequest",
    "SnoozeRequest",
    "ReminderSettingsRequest",
]
