"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, parse_body, success, fail,
        get_analysis_service, get_care_schedule_service, ...
    )

This module centralizes:
- Service container access
- Request JSON parsing and validation
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import TypeVar

from flask import current_app, request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.domain.exceptions import ValidationError
from app.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

ModelT = TypeVar("ModelT", bound=BaseModel)

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_body(model: type[ModelT], *, required: bool = True) -> ModelT:
    """
    Validate the JSON request body against a pydantic model.

    Args:
        model: Request schema
        required: Reject a missing / non-object body

    Raises:
        ValidationError: Body missing or invalid (mapped to HTTP 400)
    """
    raw = request.get_json(silent=True)
    if raw is None and not required:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(raw)
    except PydanticValidationError as ve:
        raise ValidationError(
            "Invalid request",
            detail={"errors": ve.errors(include_url=False, include_context=False, include_input=False)},
        ) from ve


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)


# ============================================================================
# SERVICE ACCESSORS
# ============================================================================


def get_analysis_service():
    return get_container().analysis_service


def get_rescan_service():
    return get_container().rescan_service


def get_care_schedule_service():
    return get_container().care_schedule_service


def get_reminder_service():
    return get_container().reminder_service


def get_quality_gate():
    return get_container().quality_gate


def get_database():
    return get_container().database
