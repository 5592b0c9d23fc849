"""Tests for turning a parsed care plan into care items."""

from app.enums import CareType
from app.schemas.analysis import CarePlan
from app.services.application.care_item_builder import build_care_items


def _plan(**blocks) -> CarePlan:
    return CarePlan.model_validate(blocks)


class TestWatering:
    def test_amount_and_notes_are_joined(self):
        items = build_care_items(
            _plan(watering={"frequency": "every 7 days", "amount": "250ml", "notes": "Use rain water"})
        )
        assert len(items) == 1
        assert items[0].care_type == CareType.WATER
        assert items[0].notes == "250ml - Use rain water"
        assert items[0].frequency_days == 7

    def test_amount_only(self):
        items = build_care_items(_plan(watering={"frequency": "weekly", "amount": "250ml"}))
        assert items[0].notes == "250ml"

    def test_notes_only(self):
        items = build_care_items(_plan(watering={"frequency": "weekly", "notes": "Bottom water"}))
        assert items[0].notes == "Bottom water"

    def test_missing_frequency_is_skipped(self):
        assert build_care_items(_plan(watering={"amount": "250ml"})) == []


class TestOtherCareTypes:
    def test_fertilizer_uses_type_as_notes(self):
        items = build_care_items(_plan(fertilizer={"type": "Balanced liquid", "frequency": "every 2 weeks"}))
        assert items[0].care_type == CareType.FERTILIZE
        assert items[0].notes == "Balanced liquid"
        assert items[0].frequency_days == 14

    def test_pruning_defaults_to_monthly(self):
        items = build_care_items(_plan(pruning={"needed": "true", "instructions": "Trim leggy stems"}))
        assert items[0].care_type == CareType.PRUNE
        assert items[0].frequency == "monthly"
        assert items[0].notes == "Trim leggy stems"

    def test_repotting_defaults_to_yearly_and_clamps(self):
        items = build_care_items(_plan(repotting={"needed": True, "signs": "Roots circling"}))
        assert items[0].care_type == CareType.REPOT
        assert items[0].frequency == "yearly"
        assert items[0].frequency_days == 90

    def test_not_needed_blocks_are_skipped(self):
        items = build_care_items(_plan(pruning={"needed": False}, repotting={"needed": "false"}))
        assert items == []


class TestPlanOrderAndEmptyInput:
    def test_none_plan(self):
        assert build_care_items(None) == []

    def test_items_follow_plan_order(self):
        plan = _plan(
            repotting={"needed": True},
            pruning={"needed": True},
            fertilizer={"frequency": "monthly"},
            watering={"frequency": "daily"},
        )
        assert [i.care_type for i in build_care_items(plan)] == [
            CareType.WATER,
            CareType.FERTILIZE,
            CareType.PRUNE,
            CareType.REPOT,
        ]


def test_oversized_frequency_number_is_clamped():
    items = build_care_items(_plan(watering={"frequency": "every " + "9" * 5000 + " days"}))
    assert items[0].frequency_days == 90
