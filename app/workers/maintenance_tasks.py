"""
Maintenance Tasks: background jobs run on the storage worker pool.

- analysis_rescan_task: backfill reliability statuses of stored analyses

Usage:
    from app.workers.maintenance_tasks import analysis_rescan_task

    container.workers.submit_storage(analysis_rescan_task, container)
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from app.domain.exceptions import PlantCareError

if TYPE_CHECKING:
    from app.services.container import ServiceContainer

logger = logging.getLogger(__name__)

TASK_SOFT_ERRORS = (
    PlantCareError,
    sqlite3.Error,
    RuntimeError,
    ValueError,
    TypeError,
    OSError,
)


def analysis_rescan_task(
    container: "ServiceContainer",
    batch_size: int | None = None,
    max_batches: int = 1,
) -> dict[str, Any]:
    """
    Re-parse stored analyses still marked OK.

    Runs up to ``max_batches`` batches, stopping early once the table is
    exhausted.
    """
    size = batch_size or container.config.rescan_batch_size
    results: dict[str, Any] = {
        "batches": 0,
        "scanned": 0,
        "updated": 0,
        "exhausted": False,
        "errors": [],
    }

    try:
        for _ in range(max(1, max_batches)):
            summary = container.rescan_service.rescan_batch(size)
            results["batches"] += 1
            results["scanned"] += summary.scanned
            results["updated"] += summary.updated
            results["exhausted"] = summary.exhausted
            if summary.exhausted:
                break
    except TASK_SOFT_ERRORS as e:
        logger.error("Analysis rescan failed: %s", e, exc_info=True)
        results["errors"].append(str(e))

    return results
