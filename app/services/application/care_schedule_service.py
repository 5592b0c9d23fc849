"""
Care Schedule Service
=====================
Reconciles AI-derived care items with a plant's existing care schedules and
owns every other schedule mutation (reminder toggle, user frequency override,
accepting or dismissing AI recommendations, recording completions and
snoozes).

Reconciliation rules per schedulable care item:

==================================  ==========================================
Existing schedule                   Decision
==================================  ==========================================
none                                insert (``is_custom=False``)
non-custom                          update frequency + notes, ``next_due``
                                    from the last completion (or now)
custom, same frequency              no-op
custom, different frequency         no write; return a copy carrying a
                                    :class:`PendingRecommendation`
==================================  ==========================================

The plant's schedules are read once up front; there is no transaction across
the individual writes. Callers that may reconcile the same plant concurrently
must serialize per plant.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Iterable

from app.constants import SNOOZE_SHORT_HOURS, SUGGEST_ADJUST_MARKER, SUGGEST_ADJUST_SNOOZES
from app.domain.care_schedule import CareCompletion, CareItem, CareSchedule, PendingRecommendation
from app.domain.exceptions import ConflictError, NotFoundError, ValidationError
from app.enums import CareType, CompletionSource, SnoozeOption
from app.utils.intervals import clamp_interval
from app.utils.time import add_days, utc_now

if TYPE_CHECKING:
    from app.domain.repositories import CareScheduleRepository
    from app.services.application.reminder_service import ReminderService

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _without_marker(notes: str) -> str:
    return notes.replace(f" {SUGGEST_ADJUST_MARKER}", "").replace(SUGGEST_ADJUST_MARKER, "").strip()


class CareScheduleService:
    """Care schedule reconciliation and user-driven schedule changes."""

    def __init__(
        self,
        schedule_repo: "CareScheduleRepository",
        reminder_service: "ReminderService",
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        """
        Args:
            schedule_repo: Care schedule persistence
            reminder_service: Signalled once after each batch of changes
            clock: Returns the current aware UTC time (injectable for tests)
            id_factory: Generates schedule / completion IDs
        """
        self._repo = schedule_repo
        self._reminders = reminder_service
        self._clock = clock
        self._new_id = id_factory

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_due(self, schedule_id: str, frequency_days: int, now: datetime) -> datetime:
        """Last completion + frequency, or now + frequency when never completed."""
        last = self._repo.get_last_completion(schedule_id)
        anchor = last.completed_at if last is not None else now
        return add_days(anchor, frequency_days)

    def _require(self, schedule_id: str) -> CareSchedule:
        schedule = self._repo.get_by_id(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Care schedule {schedule_id} not found")
        return schedule

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile(self, plant_id: str, care_items: Iterable[CareItem]) -> list[CareSchedule]:
        """
        Reconcile freshly derived care items with the plant's schedules.

        Args:
            plant_id: Plant whose schedules are reconciled
            care_items: Items from the latest care plan; unschedulable types
                (e.g. prune) are skipped

        Returns:
            Copies of custom schedules whose AI frequency differs, each with
            ``pending_recommendation`` set and the sentinel text in ``notes``
        """
        now = self._clock()
        existing: dict[CareType, CareSchedule] = {s.care_type: s for s in self._repo.get_by_plant(plant_id)}
        needs_confirmation: list[CareSchedule] = []
        inserted = updated = 0

        for item in care_items:
            if not item.care_type.is_schedulable:
                logger.debug("Skipping unschedulable care type %s for plant %s", item.care_type, plant_id)
                continue

            days = item.frequency_days
            notes = item.notes or ""
            current = existing.get(item.care_type)

            if current is None:
                schedule = CareSchedule(
                    schedule_id=self._new_id(),
                    plant_id=plant_id,
                    care_type=item.care_type,
                    frequency_days=days,
                    is_custom=False,
                    enabled=True,
                    next_due=add_days(now, days),
                    notes=notes,
                )
                existing[item.care_type] = self._repo.insert(schedule)
                inserted += 1

            elif not current.is_custom:
                current.frequency_days = days
                current.notes = notes
                current.next_due = self._next_due(current.schedule_id, days, now)
                self._repo.update(current)
                updated += 1

            elif current.frequency_days == days:
                continue

            else:
                pending = PendingRecommendation(days=days, original_notes=notes)
                needs_confirmation.append(
                    dataclasses.replace(current, notes=pending.to_note(), pending_recommendation=pending)
                )
                logger.info(
                    "Custom %s schedule %s differs from AI recommendation (%s vs %s days)",
                    current.care_type,
                    current.schedule_id,
                    current.frequency_days,
                    days,
                )

        logger.info(
            "Reconciled care schedules for plant %s: %d inserted, %d updated, %d need confirmation",
            plant_id,
            inserted,
            updated,
            len(needs_confirmation),
        )
        self._reminders.schedule_next_alarm()
        return needs_confirmation

    # ------------------------------------------------------------------
    # Companion operations
    # ------------------------------------------------------------------

    def list_schedules(self, plant_id: str) -> list[CareSchedule]:
        return self._repo.get_by_plant(plant_id)

    def get_schedule(self, schedule_id: str) -> CareSchedule:
        return self._require(schedule_id)

    def toggle_reminders(self, plant_id: str, enabled: bool) -> list[CareSchedule]:
        """Enable or disable every schedule of a plant; enabling recomputes ``next_due``."""
        now = self._clock()
        schedules = self._repo.get_by_plant(plant_id)
        for schedule in schedules:
            schedule.enabled = enabled
            if enabled:
                schedule.next_due = self._next_due(schedule.schedule_id, schedule.frequency_days, now)
            self._repo.update(schedule)

        logger.info(
            "%s reminders for plant %s (%d schedules)",
            "Enabled" if enabled else "Disabled",
            plant_id,
            len(schedules),
        )
        self._reminders.schedule_next_alarm()
        return schedules

    def update_frequency(self, schedule_id: str, frequency_days: int) -> CareSchedule | None:
        """
        User override of a schedule's frequency; marks the schedule custom.

        Returns:
            The updated schedule, or None if it does not exist
        """
        schedule = self._repo.get_by_id(schedule_id)
        if schedule is None:
            logger.warning("Cannot update frequency: care schedule %s not found", schedule_id)
            return None

        days = clamp_interval(int(frequency_days))
        schedule.frequency_days = days
        schedule.is_custom = True
        schedule.next_due = self._next_due(schedule_id, days, self._clock())
        self._repo.update(schedule)

        logger.info("Care schedule %s set to every %d days (custom)", schedule_id, days)
        self._reminders.schedule_next_alarm()
        return schedule

    def accept_recommendation(
        self,
        schedule_id: str,
        pending: PendingRecommendation | None = None,
    ) -> CareSchedule:
        """
        Apply a pending AI recommendation through the non-custom update path.

        Args:
            schedule_id: Schedule the recommendation belongs to
            pending: The recommendation returned by :meth:`reconcile`; when
                omitted, a sentinel persisted in the schedule's notes is used

        Raises:
            NotFoundError: Unknown schedule
            ConflictError: No pending recommendation to accept
        """
        schedule = self._require(schedule_id)
        pending = pending or PendingRecommendation.from_note(schedule.notes)
        if pending is None:
            raise ConflictError(f"Care schedule {schedule_id} has no pending recommendation")

        days = clamp_interval(pending.days)
        schedule.frequency_days = days
        schedule.is_custom = False
        schedule.notes = pending.original_notes
        schedule.pending_recommendation = None
        schedule.next_due = self._next_due(schedule_id, days, self._clock())
        self._repo.update(schedule)

        logger.info("Accepted AI recommendation for schedule %s: every %d days", schedule_id, days)
        self._reminders.schedule_next_alarm()
        return schedule

    def dismiss_recommendation(self, schedule_id: str) -> CareSchedule:
        """Keep the custom frequency; strips a persisted sentinel from the notes."""
        schedule = self._require(schedule_id)
        pending = PendingRecommendation.from_note(schedule.notes)
        if pending is not None:
            schedule.notes = pending.original_notes
            self._repo.update(schedule)
            logger.info("Dismissed persisted AI recommendation on schedule %s", schedule_id)
        schedule.pending_recommendation = None
        return schedule

    def record_completion(
        self,
        schedule_id: str,
        source: CompletionSource | str = CompletionSource.IN_APP,
        completed_at: datetime | None = None,
    ) -> CareSchedule:
        """
        Record a care completion and advance ``next_due`` from it.

        Resets the snooze streak and clears the suggest-adjust marker.

        Raises:
            NotFoundError: Unknown schedule
            ValidationError: ``source`` is ``snooze`` (use :meth:`snooze`)
        """
        source = CompletionSource(source)
        if source == CompletionSource.SNOOZE:
            raise ValidationError("Snoozes are not completions; use the snooze action")

        schedule = self._require(schedule_id)
        completion = CareCompletion(
            completion_id=self._new_id(),
            schedule_id=schedule_id,
            completed_at=completed_at or self._clock(),
            source=source,
        )
        self._repo.add_completion(completion)

        schedule.snooze_count = 0
        schedule.notes = _without_marker(schedule.notes)
        schedule.next_due = add_days(completion.completed_at, schedule.frequency_days)
        self._repo.update(schedule)

        logger.info("Recorded %s completion for schedule %s", completion.source, schedule_id)
        self._reminders.schedule_next_alarm()
        return schedule

    def snooze(self, schedule_id: str, option: SnoozeOption | str = SnoozeOption.SIX_HOURS) -> CareSchedule:
        """
        Push a due reminder back without completing the care.

        ``six_hours`` and ``one_day`` count from now; ``next_cycle`` adds one
        full frequency to the current ``next_due``. Every snooze increments
        ``snooze_count``, and from the third consecutive one the notes carry
        the suggest-adjust marker. The snooze is logged as a ``snooze``
        completion, which never anchors a due date.

        Raises:
            NotFoundError: Unknown schedule
            ValidationError: Unknown snooze option
        """
        try:
            option = SnoozeOption(option)
        except ValueError:
            raise ValidationError(
                f"Unknown snooze option '{option}'",
                detail={"allowed": [o.value for o in SnoozeOption]},
            ) from None

        schedule = self._require(schedule_id)
        now = self._clock()
        if option == SnoozeOption.SIX_HOURS:
            schedule.next_due = now + timedelta(hours=SNOOZE_SHORT_HOURS)
        elif option == SnoozeOption.ONE_DAY:
            schedule.next_due = add_days(now, 1)
        else:
            schedule.next_due = add_days(schedule.next_due, schedule.frequency_days)

        schedule.snooze_count += 1
        if schedule.snooze_count >= SUGGEST_ADJUST_SNOOZES and not schedule.suggest_adjust:
            schedule.notes = f"{schedule.notes} {SUGGEST_ADJUST_MARKER}".strip()

        self._repo.add_completion(
            CareCompletion(
                completion_id=self._new_id(),
                schedule_id=schedule_id,
                completed_at=now,
                source=CompletionSource.SNOOZE,
            )
        )
        self._repo.update(schedule)

        logger.info(
            "Snoozed schedule %s (%s): next due %s, %d consecutive snoozes",
            schedule_id,
            option,
            schedule.next_due.isoformat(),
            schedule.snooze_count,
        )
        self._reminders.schedule_next_alarm()
        return schedule

    def list_completions(self, schedule_id: str, limit: int = 20) -> list[CareCompletion]:
        self._require(schedule_id)
        return self._repo.list_completions(schedule_id, limit)
