"""
Analysis API Blueprint
======================

Ingestion and display of AI plant analyses.

Routes:
- POST /api/analyses - Parse and store a raw AI response, reconcile care schedules
- GET /api/analyses/<analysis_id> - Reliability view of a stored analysis
- GET /api/plants/<plant_id>/analyses - Stored analyses of a plant (newest first)
- POST /api/analyses/rescan - Re-parse one batch of stored analyses
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_analysis_service as _analysis_service,
    get_container as _container,
    get_rescan_service as _rescan_service,
    parse_body as _parse_body,
    success as _success,
)
from app.schemas import RecordAnalysisRequest, RescanRequest
from app.utils.http import safe_route

logger = logging.getLogger("analysis_api")

analysis_api = Blueprint("analysis_api", __name__, url_prefix="/api")


@analysis_api.post("/analyses")
@safe_route("Failed to record analysis")
def record_analysis() -> Response:
    """
    Record a raw AI response.

    Request body:
    {
        "plant_id": "monstera-1",
        "raw_response": "{\"identification\": {...}, ...}",
        "photo_path": "photos/monstera-1/2024-05-01.jpg"
    }

    Returns:
        {"analysis": {...}, "parse": {...}, "needs_confirmation": [...]}
    """
    body = _parse_body(RecordAnalysisRequest)
    result = _analysis_service().record_analysis(
        plant_id=body.plant_id,
        raw_response=body.raw_response,
        photo_path=body.photo_path,
    )
    return _success(result.to_dict(), 201)


@analysis_api.get("/analyses/<analysis_id>")
@safe_route("Failed to load analysis")
def get_analysis(analysis_id: str) -> Response:
    """
    Reliability view: result (or minimal stand-in), fallback message and
    whether re-analysis can be offered.
    """
    view = _analysis_service().get_analysis_view(analysis_id)
    return _success(view.to_dict())


@analysis_api.get("/plants/<plant_id>/analyses")
@safe_route("Failed to list analyses")
def list_analyses(plant_id: str) -> Response:
    limit = request.args.get("limit", default=20, type=int)
    limit = max(1, min(limit, 100))
    records = _analysis_service().list_analyses(plant_id, limit)
    return _success([r.to_dict() for r in records])


@analysis_api.post("/analyses/rescan")
@safe_route("Failed to rescan analyses")
def rescan_analyses() -> Response:
    """
    Re-parse one batch of analyses still marked OK on the storage pool.

    Request body (optional):
    - batch_size: Records examined (default from config)
    """
    body = _parse_body(RescanRequest, required=False)
    container = _container()
    batch_size = body.batch_size or container.config.rescan_batch_size

    summary = container.workers.submit_storage(_rescan_service().rescan_batch, batch_size).result()
    return _success(summary.to_dict())
