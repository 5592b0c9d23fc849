"""
Reminder Service
================
Plans the single daily "care reminder" alarm. The engine only decides *when*
the next alarm should fire; delivering it (push notification, OS alarm,
scheduler job) is the job of the :class:`AlarmSink` implementation.

The care schedule service signals this service once after every batch of
schedule changes.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Callable, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain.care_schedule import CareSchedule
from app.domain.repositories import CareScheduleRepository
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class AlarmSink(Protocol):
    """Receives planned alarm changes."""

    def schedule(self, fire_at: datetime) -> None: ...

    def cancel(self) -> None: ...


class LoggingAlarmSink:
    """Default sink: remembers and logs the planned alarm."""

    def __init__(self) -> None:
        self.next_alarm: Optional[datetime] = None

    def schedule(self, fire_at: datetime) -> None:
        self.next_alarm = fire_at
        logger.info("Daily care reminder scheduled for %s", fire_at.isoformat())

    def cancel(self) -> None:
        if self.next_alarm is not None:
            logger.info("Daily care reminder cancelled")
        self.next_alarm = None


def parse_reminder_time(value: str) -> time:
    """Parse ``HH:MM`` into a time object."""
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError("reminder time must be in HH:MM format")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23):
        raise ValueError("hour must be between 0 and 23")
    if not (0 <= minute <= 59):
        raise ValueError("minute must be between 0 and 59")
    return time(hour=hour, minute=minute)


class ReminderService:
    """Computes and arms the next daily reminder alarm."""

    def __init__(
        self,
        *,
        reminder_time: str = "09:00",
        paused: bool = False,
        timezone: str | None = None,
        sink: AlarmSink | None = None,
        schedule_repo: CareScheduleRepository | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._reminder_time = parse_reminder_time(reminder_time)
        self._paused = paused
        self._tz = self._resolve_timezone(timezone)
        self._sink = sink or LoggingAlarmSink()
        self._schedule_repo = schedule_repo
        self._clock = clock

    @staticmethod
    def _resolve_timezone(name: str | None) -> ZoneInfo | None:
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid reminder timezone '%s', using UTC", name)
            return None

    @property
    def sink(self) -> AlarmSink:
        return self._sink

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def reminder_time(self) -> str:
        return self._reminder_time.strftime("%H:%M")

    def set_paused(self, paused: bool) -> Optional[datetime]:
        """Pause or resume reminders and re-arm accordingly."""
        self._paused = paused
        return self.schedule_next_alarm()

    def set_reminder_time(self, value: str) -> Optional[datetime]:
        """Change the preferred reminder time (``HH:MM``) and re-arm."""
        self._reminder_time = parse_reminder_time(value)
        return self.schedule_next_alarm()

    def next_alarm_time(self, now: datetime | None = None) -> datetime:
        """Next occurrence of the reminder time: today if still ahead, else tomorrow."""
        now = now or self._clock()
        if self._tz is not None:
            now = now.astimezone(self._tz)
        candidate = now.replace(
            hour=self._reminder_time.hour,
            minute=self._reminder_time.minute,
            second=0,
            microsecond=0,
        )
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    def schedule_next_alarm(self) -> Optional[datetime]:
        """
        Arm the daily alarm.

        Returns:
            The planned alarm time, or None when reminders are paused (any
            existing alarm is cancelled)
        """
        if self._paused:
            self._sink.cancel()
            return None
        fire_at = self.next_alarm_time()
        self._sink.schedule(fire_at)
        return fire_at

    def reschedule_all_alarms(self) -> Optional[datetime]:
        """Re-arm after a restart (no-op while paused)."""
        if self._paused:
            return None
        return self.schedule_next_alarm()

    def get_due_schedules(self, until: datetime | None = None) -> list[CareSchedule]:
        """Enabled schedules due at or before ``until`` (default: now)."""
        if self._schedule_repo is None:
            return []
        cutoff = until or self._clock()
        return [s for s in self._schedule_repo.get_enabled() if s.next_due <= cutoff]
