"""
Shared test fixtures for the plant care engine test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- Services with a fixed clock and a mocked reminder collaborator
- A Flask app built on a temporary database file
- Canned AI responses

Usage:
    def test_example(care_repo, care_service):
        care_service.reconcile("plant-1", [...])
        assert care_repo.get_by_plant("plant-1")
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.domain.analysis_record import AnalysisRecord
from app.enums import ReliabilityStatus
from app.services.application.analysis_rescan_service import AnalysisRescanService
from app.services.application.analysis_service import AnalysisService
from app.services.application.care_schedule_service import CareScheduleService
from app.services.application.reminder_service import LoggingAlarmSink, ReminderService

# ---------------------------------------------------------------------------
# Database & Repositories
# ---------------------------------------------------------------------------
from infrastructure.database.repositories import AnalysisRepository, CareScheduleRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging, keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)

FIXED_NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


# ========================== Canned AI responses ============================

FULL_ANALYSIS: dict[str, Any] = {
    "identification": {
        "commonName": "Monstera",
        "scientificName": "Monstera deliciosa",
        "confidence": "high",
        "notes": "Mature specimen",
    },
    "healthAssessment": {
        "score": 8,
        "summary": "Healthy with minor yellowing",
        "issues": [
            {"name": "Yellowing", "severity": "low", "description": "Lower leaf", "affectedArea": "lower leaves"}
        ],
    },
    "immediateActions": [{"action": "Remove yellow leaf", "priority": "soon", "detail": "Cut at the stem"}],
    "carePlan": {
        "watering": {"frequency": "every 7-10 days", "amount": "Until water drains", "notes": "Let top soil dry"},
        "light": {"ideal": "Bright indirect", "current": "Medium", "adjustment": None},
        "fertilizer": {"type": "Balanced liquid", "frequency": "monthly", "nextApplication": "June"},
        "pruning": {"needed": True, "instructions": "Trim aerial roots", "when": "spring"},
        "repotting": {"needed": False, "signs": "", "recommendedPotSize": None},
        "seasonal": "Reduce watering in winter",
    },
    "funFact": "Its leaves develop holes as the plant matures.",
}

TRUNCATED_ANALYSIS = '{"identification": {"commonName": "Pothos", "confidence": "medium"}, "healthAssessment": {"score": 6, "summ'


@pytest.fixture()
def full_analysis_text() -> str:
    return json.dumps(FULL_ANALYSIS)


@pytest.fixture()
def truncated_analysis_text() -> str:
    return TRUNCATED_ANALYSIS


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database, no cross-test contamination.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_db()


@pytest.fixture()
def db_connection(db_handler):
    """Raw sqlite3 connection for direct SQL in tests."""
    with db_handler.connection() as conn:
        yield conn


# ========================== Repository Fixtures ============================


@pytest.fixture()
def analysis_repo(db_handler):
    """AnalysisRepository backed by the in-memory DB."""
    return AnalysisRepository(db_handler)


@pytest.fixture()
def care_repo(db_handler):
    """CareScheduleRepository backed by the in-memory DB."""
    return CareScheduleRepository(db_handler)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture()
def mock_reminder_service():
    """Mock ReminderService that records schedule_next_alarm calls."""
    reminders = MagicMock()
    reminders.schedule_next_alarm = MagicMock(return_value=None)
    return reminders


@pytest.fixture()
def reminder_service(care_repo, clock):
    return ReminderService(reminder_time="09:00", sink=LoggingAlarmSink(), schedule_repo=care_repo, clock=clock)


@pytest.fixture()
def care_service(care_repo, mock_reminder_service, clock):
    return CareScheduleService(care_repo, mock_reminder_service, clock=clock)


@pytest.fixture()
def analysis_service(analysis_repo, care_service):
    return AnalysisService(analysis_repo, care_service)


@pytest.fixture()
def rescan_service(analysis_repo):
    return AnalysisRescanService(analysis_repo)


# ========================== Seeding Helpers ================================


@pytest.fixture()
def seed_analysis(analysis_repo):
    """Insert an analysis row directly, bypassing the parser.

    Legacy rows were stored as OK regardless of content, which is what the
    rescanner has to clean up.
    """
    counter = {"n": 0}

    def _seed(
        raw_response: str | None,
        *,
        plant_id: str = "plant-1",
        status: ReliabilityStatus = ReliabilityStatus.OK,
        health_score: int | None = None,
        summary: str = "",
        photo_path: str | None = None,
    ) -> AnalysisRecord:
        counter["n"] += 1
        return analysis_repo.create(
            AnalysisRecord(
                analysis_id=f"analysis-{counter['n']}",
                plant_id=plant_id,
                raw_response=raw_response,
                reliability_status=status,
                health_score=health_score,
                summary=summary,
                photo_path=photo_path,
                created_at=FIXED_NOW,
            )
        )

    return _seed


# ========================== Flask App Fixtures =============================


@pytest.fixture()
def app(tmp_path):
    """Flask app on a temporary database file (the worker pools use their own threads)."""
    from app import create_app

    flask_app = create_app(
        {
            "database_path": str(tmp_path / "plantcare-test.db"),
            "log_dir": None,
            "rescan_on_startup": False,
            "reminders_paused": False,
        }
    )
    flask_app.config["TESTING"] = True
    yield flask_app
    flask_app.config["CONTAINER"].shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]
