"""
Workers module for background services and maintenance tasks.

This module contains:
- executors: bounded storage / network thread pools
- maintenance_tasks: task definitions run on the storage pool
"""

__all__ = [
    "WorkerPools",
    "analysis_rescan_task",
]

from app.workers.executors import WorkerPools
from app.workers.maintenance_tasks import analysis_rescan_task
