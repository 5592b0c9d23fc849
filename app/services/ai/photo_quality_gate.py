"""
Photo Quality Gate
==================
Cheap statistical checks run on a plant photo *before* it is sent to the
(paid) AI analysis call.

Checks, in order:

1. Resolution, read from the image header only. Either side below 480 px
   fails regardless of mode.
2. Egregious brightness (too dark / blown out to be usable).
3. Egregious blur (Laplacian energy of the grayscale image).
4. Borderline brightness and blur, with a relaxed threshold set for the
   "quick diagnosis" flow (``QualityMode.LENIENT``).

Egregious failures cannot be overridden by the user; borderline failures
can. Pixel statistics are computed on strided samples of a power-of-two
downsampled copy, so scores stay comparable across devices.

The gate never raises: unreadable sources are reported as failing verdicts
with issue ``access``, ``decode`` or ``error``.
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from typing import Any, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from app.constants import PhotoQualityThresholds as T
from app.constants import PixelSampling
from app.enums import QualityIssue, QualityMode, QualitySeverity

logger = logging.getLogger(__name__)

PhotoSource = Union[bytes, bytearray, str, os.PathLike, Image.Image, np.ndarray]

_MESSAGES = {
    QualityIssue.RESOLUTION: "Image resolution is too low ({width}x{height}). Use a higher quality photo.",
    QualityIssue.DARK: "Photo is too dark. Try taking it in better light.",
    QualityIssue.BRIGHT: "Photo is overexposed. Reduce lighting or avoid direct light.",
    QualityIssue.BLUR: "Photo appears blurry. Hold the camera steady and focus on the plant.",
    QualityIssue.ACCESS: "Could not open image",
    QualityIssue.DECODE: "Could not decode image",
    QualityIssue.ERROR: "Quality check failed: {error}",
}


@dataclass(frozen=True)
class QualityVerdict:
    """Outcome of one quality check."""

    passed: bool
    issue: QualityIssue = QualityIssue.NONE
    severity: QualitySeverity = QualitySeverity.NONE
    override_allowed: bool = False
    blur_score: float | None = None
    brightness: float | None = None
    message: str | None = None
    width: int | None = None
    height: int | None = None

    @property
    def can_submit(self) -> bool:
        """True when the photo may be sent, either outright or with a user override."""
        return self.passed or self.override_allowed

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "issue": str(self.issue),
            "severity": str(self.severity),
            "override_allowed": self.override_allowed,
            "can_submit": self.can_submit,
            "blur_score": round(self.blur_score, 2) if self.blur_score is not None else None,
            "brightness": round(self.brightness, 4) if self.brightness is not None else None,
            "message": self.message,
            "width": self.width,
            "height": self.height,
        }


def _fail(
    issue: QualityIssue,
    severity: QualitySeverity,
    *,
    blur_score: float | None = None,
    brightness: float | None = None,
    width: int | None = None,
    height: int | None = None,
    error: str = "",
) -> QualityVerdict:
    return QualityVerdict(
        passed=False,
        issue=issue,
        severity=severity,
        override_allowed=severity == QualitySeverity.BORDERLINE,
        blur_score=blur_score,
        brightness=brightness,
        message=_MESSAGES[issue].format(width=width, height=height, error=error),
        width=width,
        height=height,
    )


# ---------------------------------------------------------------------------
# Pixel statistics
# ---------------------------------------------------------------------------


def calculate_sample_size(width: int, height: int, target: int = PixelSampling.WORKING_MAX_SIZE) -> int:
    """Largest power of two that keeps both halved dimensions at or above ``target``."""
    sample = 1
    if height > target or width > target:
        half_h, half_w = height // 2, width // 2
        while (half_h // sample) >= target and (half_w // sample) >= target:
            sample *= 2
    return sample


def _luma(rgb: np.ndarray) -> np.ndarray:
    rgb = rgb.astype(np.float64)
    return (
        PixelSampling.LUMA_R * rgb[..., 0]
        + PixelSampling.LUMA_G * rgb[..., 1]
        + PixelSampling.LUMA_B * rgb[..., 2]
    )


def calculate_brightness(rgb: np.ndarray) -> float:
    """Mean luma of every 10th pixel in both axes, normalized to 0..1."""
    stride = PixelSampling.BRIGHTNESS_STRIDE
    sampled = _luma(rgb[::stride, ::stride])
    if sampled.size == 0:
        return 0.0
    return float(sampled.mean() / 255.0)


def calculate_blur_score(rgb: np.ndarray) -> float:
    """
    Square root of the mean squared Laplacian (higher is sharper).

    The 4-neighbour Laplacian is evaluated on truncated integer grayscale at
    every 5th pixel, skipping a 5 pixel border.
    """
    gray = _luma(rgb).astype(np.int64)
    h, w = gray.shape
    s, b = PixelSampling.BLUR_STRIDE, PixelSampling.BLUR_BORDER
    if h - b <= b or w - b <= b:
        return 0.0

    center = gray[b : h - b : s, b : w - b : s]
    left = gray[b : h - b : s, b - 1 : w - b - 1 : s]
    right = gray[b : h - b : s, b + 1 : w - b + 1 : s]
    top = gray[b - 1 : h - b - 1 : s, b : w - b : s]
    bottom = gray[b + 1 : h - b + 1 : s, b : w - b : s]

    laplacian = 4 * center - (left + right + top + bottom)
    if laplacian.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(laplacian.astype(np.float64) ** 2)))


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------


class PhotoQualityGate:
    """Blur / brightness / resolution heuristics for plant photos."""

    def check_quality(self, source: PhotoSource, mode: QualityMode | str = QualityMode.STANDARD) -> QualityVerdict:
        """
        Check a photo.

        Args:
            source: Encoded image bytes, a file path, a PIL image or an
                ``H x W x 3`` uint8 array
            mode: ``standard`` for full analysis, ``lenient`` for quick diagnosis

        Returns:
            QualityVerdict (never raises)
        """
        try:
            mode = QualityMode(mode)
        except ValueError:
            logger.warning("Unknown quality mode %r, using standard thresholds", mode)
            mode = QualityMode.STANDARD

        try:
            image, owned = self._open(source)
        except UnidentifiedImageError as exc:
            logger.info("Quality check: cannot decode image: %s", exc)
            return _fail(QualityIssue.DECODE, QualitySeverity.EGREGIOUS)
        except OSError as exc:
            logger.info("Quality check: cannot open image: %s", exc)
            return _fail(QualityIssue.ACCESS, QualitySeverity.EGREGIOUS)
        except Exception as exc:
            logger.warning("Quality check failed while opening image: %s", exc)
            return _fail(QualityIssue.ERROR, QualitySeverity.EGREGIOUS, error=str(exc))

        try:
            return self._evaluate(image, mode)
        except OSError as exc:
            logger.info("Quality check: image data could not be decoded: %s", exc)
            return _fail(QualityIssue.DECODE, QualitySeverity.EGREGIOUS)
        except Exception as exc:
            logger.warning("Quality check failed: %s", exc, exc_info=True)
            return _fail(QualityIssue.ERROR, QualitySeverity.EGREGIOUS, error=str(exc))
        finally:
            if owned:
                image.close()

    @staticmethod
    def _open(source: PhotoSource) -> tuple[Image.Image, bool]:
        """Return a (lazily decoded) image and whether the gate owns it."""
        if isinstance(source, Image.Image):
            return source, False
        if isinstance(source, np.ndarray):
            return Image.fromarray(np.ascontiguousarray(source)), True
        if isinstance(source, (bytes, bytearray)):
            return Image.open(io.BytesIO(bytes(source))), True
        if isinstance(source, (str, os.PathLike)):
            return Image.open(source), True
        raise TypeError(f"Unsupported photo source type: {type(source).__name__}")

    def _evaluate(self, image: Image.Image, mode: QualityMode) -> QualityVerdict:
        width, height = image.size
        if width < T.MIN_RESOLUTION or height < T.MIN_RESOLUTION:
            return _fail(QualityIssue.RESOLUTION, QualitySeverity.EGREGIOUS, width=width, height=height)

        working = image.convert("RGB")
        sample = calculate_sample_size(width, height)
        if sample > 1:
            working = working.reduce(sample)
        rgb = np.asarray(working)

        brightness = calculate_brightness(rgb)
        if brightness < T.EGREGIOUS_MIN_BRIGHTNESS:
            return _fail(
                QualityIssue.DARK, QualitySeverity.EGREGIOUS, brightness=brightness, width=width, height=height
            )
        if brightness > T.EGREGIOUS_MAX_BRIGHTNESS:
            return _fail(
                QualityIssue.BRIGHT, QualitySeverity.EGREGIOUS, brightness=brightness, width=width, height=height
            )

        blur_score = calculate_blur_score(rgb)
        if blur_score < T.EGREGIOUS_BLUR_SCORE:
            return _fail(
                QualityIssue.BLUR,
                QualitySeverity.EGREGIOUS,
                blur_score=blur_score,
                brightness=brightness,
                width=width,
                height=height,
            )

        if mode == QualityMode.LENIENT:
            min_brightness, max_brightness = T.LENIENT_MIN_BRIGHTNESS, T.LENIENT_MAX_BRIGHTNESS
            min_blur = T.LENIENT_MIN_BLUR_SCORE
        else:
            min_brightness, max_brightness = T.MIN_BRIGHTNESS, T.MAX_BRIGHTNESS
            min_blur = T.MIN_BLUR_SCORE

        issue = QualityIssue.NONE
        if blur_score < min_blur:
            issue = QualityIssue.BLUR
        elif brightness < min_brightness:
            issue = QualityIssue.DARK
        elif brightness > max_brightness:
            issue = QualityIssue.BRIGHT

        if issue != QualityIssue.NONE:
            logger.debug(
                "Borderline photo (%s mode): issue=%s blur=%.1f brightness=%.3f",
                mode, issue, blur_score, brightness,
            )
            return _fail(
                issue,
                QualitySeverity.BORDERLINE,
                blur_score=blur_score,
                brightness=brightness,
                width=width,
                height=height,
            )

        return QualityVerdict(
            passed=True,
            blur_score=blur_score,
            brightness=brightness,
            width=width,
            height=height,
        )
