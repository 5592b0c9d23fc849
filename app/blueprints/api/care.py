"""
Care Schedule API Blueprint
===========================

Routes:
- GET /api/plants/<plant_id>/care/schedules - List a plant's care schedules
- POST /api/plants/<plant_id>/care/reconcile - Reconcile care items with schedules
- POST /api/plants/<plant_id>/care/reminders - Enable / disable a plant's reminders
- PATCH /api/care/schedules/<schedule_id>/frequency - User frequency override
- POST /api/care/schedules/<schedule_id>/recommendation/accept - Apply AI recommendation
- POST /api/care/schedules/<schedule_id>/recommendation/dismiss - Keep custom frequency
- POST /api/care/schedules/<schedule_id>/complete - Record a completion
- POST /api/care/schedules/<schedule_id>/snooze - Push a due reminder back
- GET /api/care/schedules/<schedule_id>/completions - Completion history
- GET /api/care/due - Schedules due now (or before ?until=)
- GET /api/care/reminders/settings - Reminder pause state and time
- PUT /api/care/reminders/settings - Pause / resume reminders, change reminder time
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_care_schedule_service as _care_service,
    get_reminder_service as _reminder_service,
    parse_body as _parse_body,
    success as _success,
)
from app.domain.care_schedule import CareItem, PendingRecommendation
from app.domain.exceptions import NotFoundError, ValidationError
from app.schemas import (
    AcceptRecommendationRequest,
    CompletionRequest,
    ReconcileRequest,
    ReminderSettingsRequest,
    SnoozeRequest,
    ToggleRemindersRequest,
    UpdateFrequencyRequest,
)
from app.utils.http import safe_route
from app.utils.time import coerce_datetime, to_iso

logger = logging.getLogger("care_api")

care_api = Blueprint("care_api", __name__, url_prefix="/api")


# ==================== Plant scoped ====================


@care_api.get("/plants/<plant_id>/care/schedules")
@safe_route("Failed to list care schedules")
def list_schedules(plant_id: str) -> Response:
    schedules = _care_service().list_schedules(plant_id)
    return _success([s.to_dict() for s in schedules])


@care_api.post("/plants/<plant_id>/care/reconcile")
@safe_route("Failed to reconcile care schedules")
def reconcile(plant_id: str) -> Response:
    """
    Reconcile care items with the plant's schedules.

    Request body:
    {
        "items": [
            {"care_type": "water", "frequency": "every 7-10 days", "notes": "Until drainage"},
            {"care_type": "fertilize", "frequency": "monthly"}
        ]
    }

    Returns:
        {"needs_confirmation": [...]} - custom schedules with a differing AI frequency
    """
    body = _parse_body(ReconcileRequest)
    items = [CareItem(care_type=i.care_type, frequency=i.frequency, notes=i.notes) for i in body.items]
    pending = _care_service().reconcile(plant_id, items)
    return _success({"needs_confirmation": [s.to_dict() for s in pending]})


@care_api.post("/plants/<plant_id>/care/reminders")
@safe_route("Failed to toggle reminders")
def toggle_reminders(plant_id: str) -> Response:
    """Request body: {"enabled": true}"""
    body = _parse_body(ToggleRemindersRequest)
    schedules = _care_service().toggle_reminders(plant_id, body.enabled)
    return _success([s.to_dict() for s in schedules])


# ==================== Schedule scoped ====================


@care_api.patch("/care/schedules/<schedule_id>/frequency")
@safe_route("Failed to update care frequency")
def update_frequency(schedule_id: str) -> Response:
    """Request body: {"frequency_days": 10} (clamped to 1-90)"""
    body = _parse_body(UpdateFrequencyRequest)
    schedule = _care_service().update_frequency(schedule_id, body.frequency_days)
    if schedule is None:
        raise NotFoundError(f"Care schedule {schedule_id} not found")
    return _success(schedule.to_dict())


@care_api.post("/care/schedules/<schedule_id>/recommendation/accept")
@safe_route("Failed to accept recommendation")
def accept_recommendation(schedule_id: str) -> Response:
    """
    Request body (optional):
    {"days": 7, "original_notes": "Until drainage"}

    Without ``days`` a recommendation persisted in the schedule notes is used.
    """
    body = _parse_body(AcceptRecommendationRequest, required=False)
    pending = None
    if body.days is not None:
        pending = PendingRecommendation(days=body.days, original_notes=body.original_notes)
    schedule = _care_service().accept_recommendation(schedule_id, pending)
    return _success(schedule.to_dict())


@care_api.post("/care/schedules/<schedule_id>/recommendation/dismiss")
@safe_route("Failed to dismiss recommendation")
def dismiss_recommendation(schedule_id: str) -> Response:
    schedule = _care_service().dismiss_recommendation(schedule_id)
    return _success(schedule.to_dict())


@care_api.post("/care/schedules/<schedule_id>/complete")
@safe_route("Failed to record care completion")
def complete(schedule_id: str) -> Response:
    """Request body (optional): {"source": "in_app" | "notification_action"}"""
    body = _parse_body(CompletionRequest, required=False)
    schedule = _care_service().record_completion(schedule_id, body.source)
    return _success(schedule.to_dict(), 201)


@care_api.get("/care/schedules/<schedule_id>/completions")
@safe_route("Failed to list care completions")
def list_completions(schedule_id: str) -> Response:
    limit = request.args.get("limit", default=20, type=int)
    completions = _care_service().list_completions(schedule_id, max(1, min(limit, 100)))
    return _success([c.to_dict() for c in completions])


@care_api.post("/care/schedules/<schedule_id>/snooze")
@safe_route("Failed to snooze care reminder")
def snooze(schedule_id: str) -> Response:
    """
    Push a due reminder back without completing it.

    Request body (optional):
    {"option": "six_hours" | "one_day" | "next_cycle"}   (default six_hours)

    Returns the schedule; ``suggest_adjust`` turns true after three
    consecutive snoozes.
    """
    body = _parse_body(SnoozeRequest, required=False)
    schedule = _care_service().snooze(schedule_id, body.option)
    return _success(schedule.to_dict())


# ==================== Reminders ====================


@care_api.get("/care/due")
@safe_route("Failed to list due care")
def list_due() -> Response:
    """
    Enabled schedules due at or before ``until`` (ISO 8601, default now).

    This is what the daily reminder shows when it fires.
    """
    raw_until = request.args.get("until")
    until = None
    if raw_until:
        until = coerce_datetime(raw_until)
        if until is None:
            raise ValidationError(f"Invalid 'until' timestamp: {raw_until}")
    schedules = _reminder_service().get_due_schedules(until)
    return _success([s.to_dict() for s in schedules])


def _reminder_settings() -> dict:
    reminders = _reminder_service()
    next_alarm = getattr(reminders.sink, "next_alarm", None)
    return {
        "paused": reminders.paused,
        "reminder_time": reminders.reminder_time,
        "next_alarm": to_iso(next_alarm) if next_alarm else None,
    }


@care_api.get("/care/reminders/settings")
@safe_route("Failed to load reminder settings")
def get_reminder_settings() -> Response:
    return _success(_reminder_settings())


@care_api.put("/care/reminders/settings")
@safe_route("Failed to update reminder settings")
def update_reminder_settings() -> Response:
    """
    Request body (fields optional):
    {"paused": false, "reminder_time": "08:30"}

    Both changes re-arm the daily alarm.
    """
    body = _parse_body(ReminderSettingsRequest)
    reminders = _reminder_service()
    if body.reminder_time is not None:
        try:
            reminders.set_reminder_time(body.reminder_time)
        except ValueError as exc:
            raise ValidationError(str(exc), detail={"field": "reminder_time"}) from None
    if body.paused is not None:
        reminders.set_paused(body.paused)
    return _success(_reminder_settings())
