"""
Common Enumerations
====================

This module contains the enums shared by the parser, the quality gate and the
care scheduling services.
"""

from enum import Enum


class ReliabilityStatus(str, Enum):
    """
    How much of a parsed AI response could be trusted.
    Used by: response_parser, analysis_rescan_service, analysis_service
    """
    OK = "OK"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"
    EMPTY = "EMPTY"

    def __str__(self) -> str:
        return self.value


class QualityMode(str, Enum):
    """
    Threshold set used by the photo quality gate.
    LENIENT is the "quick diagnosis" flow.
    """
    STANDARD = "standard"
    LENIENT = "lenient"

    def __str__(self) -> str:
        return self.value


class QualityIssue(str, Enum):
    """
    Reason a photo failed the quality gate.
    ACCESS / DECODE / ERROR are resource failures, not photo properties.
    """
    NONE = "none"
    BLUR = "blur"
    DARK = "dark"
    BRIGHT = "bright"
    RESOLUTION = "resolution"
    ACCESS = "access"
    DECODE = "decode"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class QualitySeverity(str, Enum):
    """
    Severity of a quality failure.
    Egregious failures cannot be overridden; borderline ones can.
    """
    NONE = "none"
    BORDERLINE = "borderline"
    EGREGIOUS = "egregious"

    def __str__(self) -> str:
        return self.value


class CareType(str, Enum):
    """
    Care item types derived from an AI care plan.
    Only WATER, FERTILIZE and REPOT get recurring schedules.
    """
    WATER = "water"
    FERTILIZE = "fertilize"
    REPOT = "repot"
    PRUNE = "prune"

    def __str__(self) -> str:
        return self.value

    @property
    def is_schedulable(self) -> bool:
        return self in SCHEDULABLE_CARE_TYPES


SCHEDULABLE_CARE_TYPES = frozenset({CareType.WATER, CareType.FERTILIZE, CareType.REPOT})


class CompletionSource(str, Enum):
    """Where a care completion was recorded from."""
    IN_APP = "in_app"
    NOTIFICATION_ACTION = "notification_action"
    SNOOZE = "snooze"

    def __str__(self) -> str:
        return self.value


class SnoozeOption(str, Enum):
    """
    How far a snoozed reminder is pushed back.
    NEXT_CYCLE adds one full frequency to the current due date.
    """
    SIX_HOURS = "six_hours"
    ONE_DAY = "one_day"
    NEXT_CYCLE = "next_cycle"

    def __str__(self) -> str:
        return self.value
