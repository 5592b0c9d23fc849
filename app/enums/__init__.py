"""
Enums Module
============

This module provides enumeration types for the plant care engine.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.common import (
    SCHEDULABLE_CARE_TYPES,
    CareType,
    CompletionSource,
    QualityIssue,
    QualityMode,
    QualitySeverity,
    ReliabilityStatus,
    SnoozeOption,
)

__all__ = [
    "SCHEDULABLE_CARE_TYPES",
    "CareType",
    "CompletionSource",
    "QualityIssue",
    "QualityMode",
    "QualitySeverity",
    "ReliabilityStatus",
    "SnoozeOption",
]
