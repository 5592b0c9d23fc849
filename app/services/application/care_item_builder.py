"""
Care Item Builder
=================
Turns a parsed AI care plan into the care items the schedule reconciler
consumes. Frequencies stay as the AI phrased them; the day count is always
derived through :func:`app.utils.intervals.parse_interval_days`.
"""

from __future__ import annotations

from app.constants import PRUNING_DEFAULT_FREQUENCY, REPOTTING_DEFAULT_FREQUENCY
from app.domain.care_schedule import CareItem
from app.enums import CareType
from app.schemas.analysis import CarePlan


def _watering_notes(amount: str | None, notes: str | None) -> str:
    return " - ".join(part for part in (amount, notes) if part)


def build_care_items(care_plan: CarePlan | None) -> list[CareItem]:
    """
    Build care items from a care plan.

    Args:
        care_plan: Parsed care plan (None for partial or failed analyses)

    Returns:
        Care items in plan order: water, fertilize, prune, repot
    """
    if care_plan is None:
        return []

    items: list[CareItem] = []

    watering = care_plan.watering
    if watering is not None and watering.frequency:
        items.append(
            CareItem(
                care_type=CareType.WATER,
                frequency=watering.frequency,
                notes=_watering_notes(watering.amount, watering.notes),
            )
        )

    fertilizer = care_plan.fertilizer
    if fertilizer is not None and fertilizer.frequency:
        items.append(
            CareItem(care_type=CareType.FERTILIZE, frequency=fertilizer.frequency, notes=fertilizer.type or "")
        )

    pruning = care_plan.pruning
    if pruning is not None and pruning.needed:
        items.append(
            CareItem(care_type=CareType.PRUNE, frequency=PRUNING_DEFAULT_FREQUENCY, notes=pruning.instructions)
        )

    repotting = care_plan.repotting
    if repotting is not None and repotting.needed:
        items.append(
            CareItem(care_type=CareType.REPOT, frequency=REPOTTING_DEFAULT_FREQUENCY, notes=repotting.signs)
        )

    return items
