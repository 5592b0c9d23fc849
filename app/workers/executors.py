"""
Worker Pools
============
Bounded thread pools for background work.

- ``storage``: small pool for CPU / SQLite work (quality checks, parsing,
  rescans, reconciliation). Kept small so SQLite writers do not pile up.
- ``network``: larger pool reserved for I/O-bound calls (AI provider uploads).

Usage:
    pools = WorkerPools(storage_workers=2, network_workers=8)
    future = pools.submit_storage(analysis_rescan_task, container)
    pools.shutdown()
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class WorkerPools:
    """Owns the storage and network executors."""

    def __init__(self, storage_workers: int = 2, network_workers: int = 8) -> None:
        self._storage_workers = max(1, storage_workers)
        self._network_workers = max(1, network_workers)
        self._lock = threading.Lock()
        self._storage: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=self._storage_workers,
            thread_name_prefix="PlantCareStorage",
        )
        self._network: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=self._network_workers,
            thread_name_prefix="PlantCareNetwork",
        )
        logger.info(
            "Worker pools started (storage=%d, network=%d)",
            self._storage_workers,
            self._network_workers,
        )

    @property
    def storage_workers(self) -> int:
        return self._storage_workers

    @property
    def network_workers(self) -> int:
        return self._network_workers

    @property
    def is_running(self) -> bool:
        return self._storage is not None

    def submit_storage(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            if self._storage is None:
                raise RuntimeError("Storage pool has been shut down")
            return self._storage.submit(self._run, fn, *args, **kwargs)

    def submit_network(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            if self._network is None:
                raise RuntimeError("Network pool has been shut down")
            return self._network.submit(self._run, fn, *args, **kwargs)

    @staticmethod
    def _run(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            logger.exception("Background job %s failed", getattr(fn, "__name__", fn))
            raise

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            storage, self._storage = self._storage, None
            network, self._network = self._network, None
        if storage is not None:
            storage.shutdown(wait=wait)
        if network is not None:
            network.shutdown(wait=wait)
        logger.info("Worker pools stopped")
