"""Tests for worker pools and maintenance tasks."""

import sqlite3
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.services.application.analysis_rescan_service import RescanSummary
from app.workers.executors import WorkerPools
from app.workers.maintenance_tasks import analysis_rescan_task


def _container(*summaries, batch_size=5):
    rescan = MagicMock()
    rescan.rescan_batch.side_effect = list(summaries)
    return SimpleNamespace(config=SimpleNamespace(rescan_batch_size=batch_size), rescan_service=rescan)


class TestAnalysisRescanTask:
    def test_uses_configured_batch_size(self):
        container = _container(RescanSummary(scanned=3, updated=1, exhausted=True), batch_size=7)

        result = analysis_rescan_task(container)

        container.rescan_service.rescan_batch.assert_called_once_with(7)
        assert result == {"batches": 1, "scanned": 3, "updated": 1, "exhausted": True, "errors": []}

    def test_runs_until_exhausted(self):
        container = _container(
            RescanSummary(scanned=5, updated=2),
            RescanSummary(scanned=5, updated=0),
            RescanSummary(scanned=1, updated=1, exhausted=True),
        )

        result = analysis_rescan_task(container, batch_size=5, max_batches=10)

        assert result["batches"] == 3
        assert result["scanned"] == 11
        assert result["updated"] == 3
        assert result["exhausted"] is True

    def test_soft_errors_are_reported(self):
        container = _container()
        container.rescan_service.rescan_batch.side_effect = sqlite3.OperationalError("database is locked")

        result = analysis_rescan_task(container)

        assert result["batches"] == 0
        assert result["errors"] == ["database is locked"]

    def test_against_real_database(self, rescan_service, seed_analysis):
        seed_analysis("broken {")
        container = SimpleNamespace(config=SimpleNamespace(rescan_batch_size=5), rescan_service=rescan_service)

        result = analysis_rescan_task(container)
        assert (result["scanned"], result["updated"], result["exhausted"]) == (1, 1, True)


class TestWorkerPools:
    def test_jobs_run_on_named_threads(self):
        pools = WorkerPools(storage_workers=1, network_workers=2)
        try:
            storage_thread = pools.submit_storage(lambda: threading.current_thread().name).result(timeout=5)
            network_thread = pools.submit_network(lambda: threading.current_thread().name).result(timeout=5)
        finally:
            pools.shutdown()

        assert storage_thread.startswith("PlantCareStorage")
        assert network_thread.startswith("PlantCareNetwork")

    def test_job_exceptions_propagate_to_future(self):
        pools = WorkerPools(storage_workers=1, network_workers=1)
        try:
            future = pools.submit_storage(lambda: 1 / 0)
            with pytest.raises(ZeroDivisionError):
                future.result(timeout=5)
        finally:
            pools.shutdown()

    def test_submit_after_shutdown(self):
        pools = WorkerPools(storage_workers=1, network_workers=1)
        pools.shutdown()
        pools.shutdown()

        assert pools.is_running is False
        with pytest.raises(RuntimeError):
            pools.submit_storage(print)

    def test_worker_counts_have_a_floor(self):
        pools = WorkerPools(storage_workers=0, network_workers=0)
        try:
            assert (pools.storage_workers, pools.network_workers) == (1, 1)
        finally:
            pools.shutdown()
