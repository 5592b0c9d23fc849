"""
Care interval parsing
=====================

Converts the free-text frequencies an AI care plan produces ("every 2-3
weeks", "twice a month", "water when the top inch of soil is dry") into a
whole number of days in the schedulable range.

This is the only frequency strategy in the codebase: the care item builder
and the schedule reconciler both go through :func:`parse_interval_days`.
"""

from __future__ import annotations

import re

from app.constants import FREQUENCY_KEYWORDS, IntervalBounds

_CONDITION_TERMS = ("as needed", "check")
_CONDITION_WORD = re.compile(r"\b(when|if)\b")
_SOIL_TERMS = ("soil", "moist", "dry", "wet")

# Digit runs are capped; anything that long clamps to MAX_DAYS anyway
_RANGE = re.compile(r"(\d{1,6})\s*(?:-|–|to)\s*(\d{1,6})")
_NUMBER = re.compile(r"\d{1,6}")

# Longest keywords first so "biweekly" beats "weekly" at the same position.
_KEYWORDS = re.compile(
    "|".join(re.escape(word) for word in sorted(FREQUENCY_KEYWORDS, key=len, reverse=True))
)


def clamp_interval(days: int) -> int:
    """Clamp a day count into [MIN_DAYS, MAX_DAYS]."""
    return max(IntervalBounds.MIN_DAYS, min(IntervalBounds.MAX_DAYS, days))


def _is_condition_based(lower: str) -> bool:
    if any(term in lower for term in _CONDITION_TERMS):
        return True
    return bool(_CONDITION_WORD.search(lower)) and any(term in lower for term in _SOIL_TERMS)


def _unit_multiplier(lower: str) -> int:
    if "week" in lower:
        return IntervalBounds.DAYS_PER_WEEK
    if "month" in lower:
        return IntervalBounds.DAYS_PER_MONTH
    return 1


def _raw_days(lower: str) -> int:
    if _is_condition_based(lower):
        return IntervalBounds.DEFAULT_DAYS

    match = _RANGE.search(lower)
    if match:
        upper = max(int(match.group(1)), int(match.group(2)))
        return upper * _unit_multiplier(lower)

    match = _NUMBER.search(lower)
    if match:
        return int(match.group(0)) * _unit_multiplier(lower)

    if "twice a week" in lower:
        return IntervalBounds.TWICE_A_WEEK_DAYS
    if "twice a month" in lower:
        return IntervalBounds.TWICE_A_MONTH_DAYS

    match = _KEYWORDS.search(lower)
    if match:
        return FREQUENCY_KEYWORDS[match.group(0)]

    return IntervalBounds.DEFAULT_DAYS


def parse_interval_days(text: str | None) -> int:
    """
    Parse a natural-language care frequency into days.

    Args:
        text: Frequency phrase from the AI care plan (may be None)

    Returns:
        Days between care events, always within [1, 90]. Phrases that cannot
        be interpreted fall back to 14 days; this function never raises.
    """
    if text is None or not text.strip():
        return IntervalBounds.DEFAULT_DAYS
    return clamp_interval(_raw_days(text.lower()))
