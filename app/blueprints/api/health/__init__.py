"""
Health API Blueprint
====================

Liveness and readiness endpoints.

Routes:
- GET /api/health/ping - Basic liveness check
- GET /api/health/system - Database, worker pool and reminder status
"""

from __future__ import annotations

import logging

from flask import Blueprint

logger = logging.getLogger("health_api")

# Create the blueprint
health_api = Blueprint("health_api", __name__, url_prefix="/api/health")

from app.blueprints.api.health.system import register_system_routes

register_system_routes(health_api)

__all__ = ["health_api"]
