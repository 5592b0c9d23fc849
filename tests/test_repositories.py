"""Integration tests for the SQLite repositories."""

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.analysis_record import AnalysisRecord
from app.domain.care_schedule import CareCompletion, CareSchedule
from app.domain.exceptions import NotFoundError, RepositoryError
from app.enums import CareType, ReliabilityStatus

NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _schedule(schedule_id="s1", plant_id="p1", care_type=CareType.WATER, **kwargs):
    return CareSchedule(
        schedule_id=schedule_id,
        plant_id=plant_id,
        care_type=care_type,
        frequency_days=kwargs.pop("frequency_days", 7),
        next_due=kwargs.pop("next_due", NOW),
        **kwargs,
    )


class TestSchema:
    def test_tables_exist(self, db_connection):
        names = {
            row["name"] for row in db_connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {"Analyses", "CareSchedules", "CareCompletions", "MaintenanceState"} <= names

    def test_create_tables_is_idempotent(self, db_handler):
        db_handler.create_tables()
        db_handler.create_tables()


class TestAnalysisRepository:
    def test_round_trip(self, analysis_repo):
        analysis_repo.create(
            AnalysisRecord(
                analysis_id="a1",
                plant_id="p1",
                raw_response="{}",
                health_score=7,
                summary="Fine",
                created_at=NOW,
            )
        )
        stored = analysis_repo.get_by_id("a1")
        assert stored.raw_response == "{}"
        assert stored.health_score == 7
        assert stored.created_at == NOW
        assert analysis_repo.get_by_id("missing") is None

    def test_duplicate_id_raises(self, analysis_repo):
        analysis_repo.create(AnalysisRecord(analysis_id="a1", plant_id="p1"))
        with pytest.raises(RepositoryError):
            analysis_repo.create(AnalysisRecord(analysis_id="a1", plant_id="p1"))

    def test_list_for_plant_newest_first(self, analysis_repo):
        for i in range(3):
            analysis_repo.create(
                AnalysisRecord(analysis_id=f"a{i}", plant_id="p1", created_at=NOW + timedelta(minutes=i))
            )
        analysis_repo.create(AnalysisRecord(analysis_id="other", plant_id="p2"))

        assert [r.analysis_id for r in analysis_repo.list_for_plant("p1")] == ["a2", "a1", "a0"]
        assert len(analysis_repo.list_for_plant("p1", limit=2)) == 2

    def test_guarded_status_update(self, analysis_repo):
        analysis_repo.create(AnalysisRecord(analysis_id="a1", plant_id="p1"))

        assert analysis_repo.update_status_if_ok("a1", ReliabilityStatus.PARTIAL) is True
        # Already downgraded: the guard keeps the first write
        assert analysis_repo.update_status_if_ok("a1", ReliabilityStatus.FAILED) is False
        assert analysis_repo.get_by_id("a1").reliability_status == ReliabilityStatus.PARTIAL

    def test_fetch_unscanned_respects_cursor(self, analysis_repo):
        for i in range(4):
            analysis_repo.create(AnalysisRecord(analysis_id=f"a{i}", plant_id="p1"))
        analysis_repo.update_status_if_ok("a1", ReliabilityStatus.FAILED)

        rows = analysis_repo.fetch_unscanned(0, 10)
        assert [r.analysis_id for _, r in rows] == ["a0", "a2", "a3"]

        after_first = analysis_repo.fetch_unscanned(rows[0][0], 10)
        assert [r.analysis_id for _, r in after_first] == ["a2", "a3"]

    def test_scan_cursor_persists(self, analysis_repo):
        assert analysis_repo.get_scan_cursor() == 0
        analysis_repo.set_scan_cursor(42)
        analysis_repo.set_scan_cursor(43)
        assert analysis_repo.get_scan_cursor() == 43


class TestCareScheduleRepository:
    def test_round_trip(self, care_repo):
        care_repo.insert(_schedule(is_custom=True, notes="mine", snooze_count=2))
        stored = care_repo.get_by_id("s1")

        assert stored.care_type == CareType.WATER
        assert stored.is_custom is True
        assert stored.enabled is True
        assert stored.next_due == NOW
        assert stored.notes == "mine"
        assert stored.snooze_count == 2

    def test_one_schedule_per_plant_and_type(self, care_repo):
        care_repo.insert(_schedule("s1"))
        with pytest.raises(RepositoryError):
            care_repo.insert(_schedule("s2"))

    def test_update(self, care_repo):
        schedule = care_repo.insert(_schedule())
        schedule.frequency_days = 21
        schedule.enabled = False
        care_repo.update(schedule)

        stored = care_repo.get_by_id("s1")
        assert stored.frequency_days == 21
        assert stored.enabled is False

    def test_update_missing_raises(self, care_repo):
        with pytest.raises(NotFoundError):
            care_repo.update(_schedule("ghost"))

    def test_enabled_ordered_by_due_date(self, care_repo):
        care_repo.insert(_schedule("late", "p1", next_due=NOW + timedelta(days=3)))
        care_repo.insert(_schedule("soon", "p2", next_due=NOW + timedelta(days=1)))
        care_repo.insert(_schedule("off", "p3", enabled=False))

        assert [s.schedule_id for s in care_repo.get_enabled()] == ["soon", "late"]

    def test_completions(self, care_repo):
        care_repo.insert(_schedule())
        assert care_repo.get_last_completion("s1") is None

        for i, source in enumerate(["in_app", "snooze", "notification_action"]):
            care_repo.add_completion(
                CareCompletion(f"c{i}", "s1", NOW + timedelta(days=i), source=source)
            )

        last = care_repo.get_last_completion("s1")
        assert last.completion_id == "c2"
        assert last.completed_at == NOW + timedelta(days=2)
        assert [c.completion_id for c in care_repo.list_completions("s1", limit=2)] == ["c2", "c0"]

    def test_snooze_rows_are_excluded(self, care_repo):
        care_repo.insert(_schedule())
        care_repo.add_completion(CareCompletion("c0", "s1", NOW, source="in_app"))
        care_repo.add_completion(CareCompletion("c1", "s1", NOW + timedelta(hours=6), source="snooze"))

        assert care_repo.get_last_completion("s1").completion_id == "c0"
        assert [c.completion_id for c in care_repo.list_completions("s1")] == ["c0"]

    def test_only_snoozes_means_never_completed(self, care_repo):
        care_repo.insert(_schedule())
        care_repo.add_completion(CareCompletion("c0", "s1", NOW, source="snooze"))

        assert care_repo.get_last_completion("s1") is None
        assert care_repo.list_completions("s1") == []
