"""Tests for daily reminder alarm planning."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from app.domain.care_schedule import CareSchedule
from app.enums import CareType
from app.services.application.reminder_service import LoggingAlarmSink, ReminderService, parse_reminder_time

NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _service(**kwargs) -> ReminderService:
    kwargs.setdefault("clock", lambda: NOW)
    return ReminderService(**kwargs)


class TestParseReminderTime:
    def test_valid(self):
        parsed = parse_reminder_time("07:45")
        assert (parsed.hour, parsed.minute) == (7, 45)

    @pytest.mark.parametrize("value", ["7", "25:00", "10:60", "ab:cd"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_reminder_time(value)


class TestNextAlarmTime:
    def test_later_today(self):
        assert _service(reminder_time="09:00").next_alarm_time() == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def test_past_time_rolls_to_tomorrow(self):
        assert _service(reminder_time="07:30").next_alarm_time() == datetime(2024, 5, 2, 7, 30, tzinfo=timezone.utc)

    def test_exactly_now_rolls_to_tomorrow(self):
        assert _service(reminder_time="08:00").next_alarm_time() == NOW + timedelta(days=1)

    def test_timezone_is_applied(self):
        try:
            ZoneInfo("Europe/Madrid")
        except ZoneInfoNotFoundError:
            pytest.skip("tz database not available")
        service = _service(reminder_time="09:00", timezone="Europe/Madrid")
        # 08:00 UTC is 10:00 in Madrid (CEST), so 09:00 local is tomorrow
        fire_at = service.next_alarm_time()
        assert fire_at.astimezone(timezone.utc) == datetime(2024, 5, 2, 7, 0, tzinfo=timezone.utc)

    def test_unknown_timezone_falls_back_to_utc(self):
        service = _service(reminder_time="09:00", timezone="Mars/Olympus_Mons")
        assert service.next_alarm_time() == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class TestScheduleNextAlarm:
    def test_schedules_on_sink(self):
        sink = LoggingAlarmSink()
        fire_at = _service(sink=sink).schedule_next_alarm()
        assert fire_at == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        assert sink.next_alarm == fire_at

    def test_paused_cancels(self):
        sink = MagicMock()
        assert _service(paused=True, sink=sink).schedule_next_alarm() is None
        sink.cancel.assert_called_once_with()
        sink.schedule.assert_not_called()

    def test_pause_then_resume(self):
        sink = LoggingAlarmSink()
        service = _service(sink=sink)
        service.schedule_next_alarm()
        assert service.set_paused(True) is None
        assert sink.next_alarm is None
        assert service.set_paused(False) is not None
        assert sink.next_alarm is not None

    def test_set_reminder_time_rearms(self):
        sink = LoggingAlarmSink()
        service = _service(sink=sink)
        service.set_reminder_time("20:15")
        assert sink.next_alarm == datetime(2024, 5, 1, 20, 15, tzinfo=timezone.utc)

    def test_reschedule_all_is_noop_while_paused(self):
        sink = MagicMock()
        assert _service(paused=True, sink=sink).reschedule_all_alarms() is None
        sink.cancel.assert_not_called()
        sink.schedule.assert_not_called()


class TestDueSchedules:
    def test_without_repository(self):
        assert _service().get_due_schedules() == []

    def test_only_enabled_and_due(self, care_repo):
        def schedule(schedule_id, next_due, enabled=True):
            care_repo.insert(
                CareSchedule(
                    schedule_id=schedule_id,
                    plant_id=f"plant-{schedule_id}",
                    care_type=CareType.WATER,
                    frequency_days=7,
                    enabled=enabled,
                    next_due=next_due,
                )
            )

        schedule("due", NOW - timedelta(hours=1))
        schedule("later", NOW + timedelta(days=2))
        schedule("disabled", NOW - timedelta(days=1), enabled=False)

        due = _service(schedule_repo=care_repo).get_due_schedules()
        assert [s.schedule_id for s in due] == ["due"]
