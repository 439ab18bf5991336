"""Overlap warnings between planned activities and fixed trip blocks."""

from __future__ import annotations

import pytest

from tripcore.schemas.itinerary import PlannedItem, TripBlock
from tripcore.validation.custom_event_overlaps import (
    build_custom_event_overlap_warnings,
    get_custom_event_kind_label,
)

DAY = "2026-03-18"


@pytest.fixture
def flight():
    return TripBlock("f1", "Flight to Rome", DAY, "10:30", "12:30", kind="flight")


def test_overlap_line_format(flight):
    planned = [PlannedItem("1", "Colosseum", DAY, "10:00:00", "11:00:00")]
    assert build_custom_event_overlap_warnings(planned, [flight]) == [
        'Overlap on 2026-03-18: "Colosseum" (10:00-11:00) overlaps Flight "Flight to Rome" (10:30-12:30).'
    ]


def test_touching_and_other_day_items_do_not_overlap(flight):
    planned = [
        PlannedItem("1", "Breakfast", DAY, "09:30", "10:30"),
        PlannedItem("2", "Lunch", DAY, "12:30", "13:30"),
        PlannedItem("3", "Colosseum", "2026-03-19", "10:00", "11:00"),
        PlannedItem("4", "Broken", DAY, "bad", "11:00"),
    ]
    assert build_custom_event_overlap_warnings(planned, [flight]) == []


def test_warnings_beyond_the_limit_are_summarised(flight):
    planned = [
        PlannedItem("1", "Colosseum", DAY, "10:00", "11:00"),
        PlannedItem("2", "Forum", DAY, "11:00", "12:00"),
    ]
    warnings = build_custom_event_overlap_warnings(planned, [flight], max_warnings=1)
    assert len(warnings) == 2
    assert warnings[0].startswith('Overlap on 2026-03-18: "Colosseum"')
    assert warnings[1] == "Overlap warnings omitted for 1 other item(s)."


def test_blank_title_and_unknown_kind_fall_back_to_custom_event():
    blocks = [TripBlock("b1", "  ", DAY, "14:00", "15:00", kind="spa")]
    planned = [PlannedItem("1", "Museum", DAY, "14:30", "15:30")]
    assert build_custom_event_overlap_warnings(planned, blocks) == [
        'Overlap on 2026-03-18: "Museum" (14:30-15:30) overlaps Custom event "Custom event" (14:00-15:00).'
    ]


def test_blocks_on_one_day_are_reported_in_start_order():
    blocks = [
        TripBlock("b2", "Check in", DAY, "15:00", "16:00", kind="hotel_check_in"),
        TripBlock("b1", "Check out", DAY, "09:00", "10:00", kind="hotel_check_out"),
    ]
    planned = [PlannedItem("1", "Walk", DAY, "09:30", "15:30")]
    warnings = build_custom_event_overlap_warnings(planned, blocks)
    assert [w.split(" overlaps ")[1] for w in warnings] == [
        'Hotel check-out "Check out" (09:00-10:00).',
        'Hotel check-in "Check in" (15:00-16:00).',
    ]


@pytest.mark.parametrize(
    "kind, label",
    [("flight", "Flight"), ("HOTEL_CHECK_IN", "Hotel check-in"), ("other", "Custom event"), (None, "Custom event")],
)
def test_kind_labels(kind, label):
    assert get_custom_event_kind_label(kind) == label
