"""
Application Constants
=====================

Centralized constants to replace magic numbers throughout the codebase.
Organized by domain for easy discovery and maintenance.

The photo-quality and interval values are part of the engine's observable
behaviour: stored scores and test fixtures depend on them, so they must not be
tuned casually.

Usage:
    from app.constants import RESCAN_BATCH_SIZE
    from app.constants import PhotoQualityThresholds, IntervalBounds
"""

# =============================================================================
# Photo Quality Gate
# =============================================================================


class PhotoQualityThresholds:
    """Thresholds for the blur / brightness / resolution checks."""

    # Resolution (either dimension, in pixels)
    MIN_RESOLUTION = 480

    # Blur score (sqrt of the mean squared Laplacian, same unit for all three)
    EGREGIOUS_BLUR_SCORE = 15.0
    MIN_BLUR_SCORE = 45.0
    LENIENT_MIN_BLUR_SCORE = 30.0

    # Brightness (mean luma normalized to 0..1)
    MIN_BRIGHTNESS = 0.15
    MAX_BRIGHTNESS = 0.95
    LENIENT_MIN_BRIGHTNESS = 0.12
    LENIENT_MAX_BRIGHTNESS = 0.97
    EGREGIOUS_MIN_BRIGHTNESS = 0.05
    EGREGIOUS_MAX_BRIGHTNESS = 0.98


class PixelSampling:
    """Working size and sampling strides for pixel statistics."""

    WORKING_MAX_SIZE = 800  # pixels, longest kept edge after power-of-two downsampling
    BRIGHTNESS_STRIDE = 10  # every 10th pixel in both axes
    BLUR_STRIDE = 5  # every 5th pixel in both axes
    BLUR_BORDER = 5  # pixels skipped on every edge

    # ITU-R BT.601 luma weights
    LUMA_R = 0.299
    LUMA_G = 0.587
    LUMA_B = 0.114


# =============================================================================
# Care intervals
# =============================================================================


class IntervalBounds:
    """Bounds and fallbacks for care-frequency parsing (days)."""

    MIN_DAYS = 1
    MAX_DAYS = 90
    DEFAULT_DAYS = 14

    TWICE_A_WEEK_DAYS = 4
    TWICE_A_MONTH_DAYS = 15

    DAYS_PER_WEEK = 7
    DAYS_PER_MONTH = 30


# Keyword fallbacks (pre-clamp). Longer keywords win over the shorter ones
# they contain when both match at the same position.
FREQUENCY_KEYWORDS: dict[str, int] = {
    "daily": 1,
    "biweekly": 14,
    "bi-weekly": 14,
    "fortnightly": 14,
    "weekly": 7,
    "week": 7,
    "bimonthly": 60,
    "bi-monthly": 60,
    "monthly": 30,
    "month": 30,
    "yearly": 365,
    "annual": 365,
    "year": 365,
}

# Default phrases for care items that the AI only flags as "needed"
PRUNING_DEFAULT_FREQUENCY = "monthly"
REPOTTING_DEFAULT_FREQUENCY = "yearly"


# =============================================================================
# Layered response parsing
# =============================================================================


class ParserConstants:
    """Content hashing and Tier-1 salvage defaults."""

    CONTENT_HASH_BYTES = 4  # first 4 bytes of SHA-256 -> 8 hex chars
    PLACEHOLDER_HASH = "00000000"

    DEFAULT_COMMON_NAME = "Unknown"
    DEFAULT_CONFIDENCE = "low"
    DEFAULT_HEALTH_SCORE = 5


PENDING_RECOMMENDATION_PREFIX = "AI_RECOMMENDED:"
PENDING_RECOMMENDATION_SEPARATOR = "|"

# Snoozing a due reminder
SNOOZE_SHORT_HOURS = 6
SUGGEST_ADJUST_SNOOZES = 3  # consecutive snoozes before the UI suggests a new frequency
SUGGEST_ADJUST_MARKER = "[SUGGEST_ADJUST]"


# =============================================================================
# Background work
# =============================================================================

RESCAN_BATCH_SIZE = 5
RESCAN_CURSOR_KEY = "analysis_rescan_cursor"


class HealthScoreBands:
    """Health score (0-10) label thresholds."""

    HEALTHY_MIN = 7
    NEEDS_ATTENTION_MIN = 4
