"""
Domain Package
==============
Entities, value objects and repository protocols of the plant care engine.

Entities are plain dataclasses with ``to_dict`` / ``from_row`` helpers; they
carry no persistence logic of their own.
"""

from .analysis_record import AnalysisRecord
from .care_schedule import CareCompletion, CareItem, CareSchedule, PendingRecommendation
from .repositories import AnalysisRepository, CareScheduleRepository

__all__ = [
    # Analyses
    "AnalysisRecord",
    "AnalysisRepository",
    # Care scheduling
    "CareCompletion",
    "CareItem",
    "CareSchedule",
    "CareScheduleRepository",
    "PendingRecommendation",
]
