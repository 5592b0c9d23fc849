"""
Photo API Blueprint
===================

Routes:
- POST /api/photos/quality?mode=standard|lenient - Run the photo quality gate

The photo is sent either as a multipart ``image`` file or as the raw request
body. A failing verdict is still a successful request (HTTP 200); only a
missing photo or an unknown mode is a 400.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_container as _container,
    get_quality_gate as _quality_gate,
    success as _success,
)
from app.domain.exceptions import ValidationError
from app.enums import QualityMode
from app.utils.http import safe_route

logger = logging.getLogger("photos_api")

photos_api = Blueprint("photos_api", __name__, url_prefix="/api/photos")


def _read_photo_bytes() -> bytes:
    upload = request.files.get("image")
    data = upload.read() if upload is not None else request.get_data(cache=False)
    if not data:
        raise ValidationError("No photo supplied (send an 'image' file or a raw body)")
    return data


@photos_api.post("/quality")
@safe_route("Failed to check photo quality")
def check_quality() -> Response:
    """
    Returns:
        {
            "passed": false,
            "issue": "blur",
            "severity": "borderline",
            "override_allowed": true,
            "can_submit": true,
            "blur_score": 38.2,
            "brightness": 0.41,
            "message": "...",
            ...
        }
    """
    raw_mode = request.args.get("mode", QualityMode.STANDARD.value).strip().lower()
    try:
        mode = QualityMode(raw_mode)
    except ValueError:
        raise ValidationError(
            f"Unknown quality mode '{raw_mode}'",
            detail={"allowed": [m.value for m in QualityMode]},
        ) from None

    photo = _read_photo_bytes()
    verdict = _container().workers.submit_storage(_quality_gate().check_quality, photo, mode).result()
    logger.debug("Photo quality verdict: %s (%s)", verdict.issue, verdict.severity)
    return _success(verdict.to_dict())
