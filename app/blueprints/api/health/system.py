"""
System Health Endpoints
=======================

Core liveness / readiness endpoints.
"""

from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, Response

from app.blueprints.api._common import (
    get_container as _container,
    success as _success,
)
from app.utils.http import safe_route
from app.utils.time import iso_now, to_iso

logger = logging.getLogger("health_api")


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("/ping")
    @safe_route("Failed to handle ping request")
    def ping() -> Response:
        """
        Basic liveness check for monitoring tools.

        Returns:
            {"status": "ok", "timestamp": "..."}
        """
        return _success({"status": "ok", "timestamp": iso_now()})

    @health_api.get("/system")
    @safe_route("Failed to get system health")
    def get_system_health() -> Response:
        """
        Readiness of the engine's moving parts.

        Returns:
            {
                "status": "healthy|degraded",
                "database": {"ok": true},
                "workers": {"running": true, "storage": 2, "network": 8},
                "reminders": {"paused": false, "next_alarm": "..."},
                "timestamp": "..."
            }
        """
        container = _container()

        database_ok = True
        try:
            container.database.get_db().execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            logger.warning("Database health check failed: %s", exc)
            database_ok = False

        workers = container.workers
        reminders = container.reminder_service
        next_alarm = getattr(reminders.sink, "next_alarm", None)

        healthy = database_ok and workers.is_running
        return _success(
            {
                "status": "healthy" if healthy else "degraded",
                "database": {"ok": database_ok},
                "workers": {
                    "running": workers.is_running,
                    "storage": workers.storage_workers,
                    "network": workers.network_workers,
                },
                "reminders": {
                    "paused": reminders.paused,
                    "next_alarm": to_iso(next_alarm) if next_alarm else None,
                },
                "timestamp": iso_now(),
            }
        )
