"""Greedy multi-day auto-scheduler."""

from __future__ import annotations

import random
from collections import defaultdict

import pytest

from tripcore.planning.scheduler import (
    REASON_NEVER_OPEN,
    REASON_NO_DATES,
    REASON_NO_TIME,
    AutoScheduler,
    auto_schedule_activities,
)
from tripcore.schemas.itinerary import Coordinates, FixedPlacement

D1 = "2026-01-05"   # Monday
D2 = "2026-01-06"   # Tuesday
D3 = "2026-01-07"


def _by_date(placements):
    grouped = defaultdict(list)
    for p in placements:
        grouped[p.date].append(p)
    return grouped


def _assert_well_formed(result, day_start=600, day_end=1080):
    for date, items in _by_date(result.placements).items():
        starts = [p.start_min for p in items]
        assert starts == sorted(starts), date
        for prev, nxt in zip(items, items[1:]):
            assert prev.end_min <= nxt.start_min, (date, prev.id, nxt.id)
        for p in items:
            assert day_start <= p.start_min < p.end_min <= day_end


def test_placements_never_overlap_and_stay_inside_the_window(make_candidate):
    rng = random.Random(7)
    candidates = [
        make_candidate(
            str(i),
            lat=41.9 + rng.uniform(-0.05, 0.05),
            lng=12.5 + rng.uniform(-0.05, 0.05),
            duration=rng.choice([30, 45, 60, 90, 120]),
        )
        for i in range(1, 21)
    ]
    fixed = [
        FixedPlacement(D1, 720, 780, Coordinates(41.9, 12.5)),
        FixedPlacement(D2, 600, 660),
    ]

    result = auto_schedule_activities([D1, D2, D3], candidates, fixed)

    _assert_well_formed(result)
    placed = {p.id for p in result.placements}
    unplaced = {u.id for u in result.unplaced}
    assert placed | unplaced == {c.id for c in candidates}
    assert not placed & unplaced
    for p in result.placements:
        if p.date == D1:
            assert p.end_min <= 720 or p.start_min >= 780
        if p.date == D2:
            assert p.start_min >= 660


def test_first_item_starts_after_a_fixed_block(make_candidate):
    result = auto_schedule_activities([D1], [make_candidate("1")], [FixedPlacement(D1, 600, 700)])
    assert [(p.id, p.start_time, p.end_time) for p in result.placements] == [("1", "11:40", "12:40")]


def test_consecutive_stops_leave_room_for_travel_and_buffer(make_candidate):
    # ~1.1 km apart: 15 walking minutes plus the 10 minute buffer.
    candidates = [make_candidate("1", 41.90, 12.5), make_candidate("2", 41.91, 12.5)]
    result = auto_schedule_activities([D1], candidates)
    first, second = result.placements
    assert first.start_min == 600
    assert second.start_min == first.end_min + 25


def test_overflow_spills_to_the_next_date_then_reports_unplaced(make_candidate):
    candidates = [make_candidate(str(i), duration=240) for i in (1, 2, 3)]
    result = auto_schedule_activities([D1, D2], candidates)

    assert [(p.id, p.date, p.start_min) for p in result.placements] == [
        ("1", D1, 600),
        ("2", D2, 600),
    ]
    assert "Moved to the next day with room" in result.placements[1].reasons
    assert [(u.id, u.reason) for u in result.unplaced] == [("3", REASON_NO_TIME)]


def test_preferred_date_is_honoured(make_candidate):
    result = auto_schedule_activities([D1, D2], [make_candidate("1", preferred_date=D2)])
    (placement,) = result.placements
    assert placement.date == D2
    assert "Kept on preferred date" in placement.reasons


def test_opening_hours_are_respected(make_candidate, make_hours):
    candidate = make_candidate("1", open_hours=(make_hours(1, "13:00", "17:00"),))
    (placement,) = auto_schedule_activities([D1], [candidate]).placements
    assert (placement.start_time, placement.end_time) == ("13:00", "14:00")
    assert "Fits opening hours" in placement.reasons


def test_closed_weekday_moves_to_an_open_date(make_candidate, make_hours):
    candidate = make_candidate("1", open_hours=(make_hours(2, "09:00", "17:00"),))   # Tuesdays only
    (placement,) = auto_schedule_activities([D1, D2], [candidate]).placements
    assert placement.date == D2


def test_hours_that_never_fit_the_day_window_are_unplaced(make_candidate, make_hours):
    evening_only = make_candidate("1", open_hours=(make_hours(1, "19:00", "22:00"),))
    sunday_only = make_candidate("2", open_hours=(make_hours(0, "09:00", "17:00"),))
    result = auto_schedule_activities([D1], [evening_only, sunday_only])
    assert result.placements == []
    assert [(u.id, u.reason) for u in result.unplaced] == [
        ("1", REASON_NEVER_OPEN),
        ("2", REASON_NEVER_OPEN),
    ]


def test_distant_clusters_each_get_their_own_date(make_candidate):
    origin = [
        make_candidate("a1", 0.000, 0.000, duration=90),
        make_candidate("a2", 0.001, 0.001, duration=90),
        make_candidate("a3", 0.002, 0.001, duration=90),
        make_candidate("a4", 0.003, 0.002, duration=90),
    ]
    far = [
        make_candidate("b1", 10.000, 10.000),
        make_candidate("b2", 10.001, 10.001),
        make_candidate("b3", 10.002, 10.001),
        make_candidate("b4", 10.003, 10.002),
    ]
    result = auto_schedule_activities([D1, D2], origin + far)

    assert result.unplaced == []
    assert len(result.placements) == 8
    dates = {p.id: p.date for p in result.placements}
    assert {dates[c.id] for c in origin} == {D1}
    assert {dates[c.id] for c in far} == {D2}
    _assert_well_formed(result)


def test_stop_at_the_origin_keeps_its_coordinates(make_candidate):
    (placement,) = auto_schedule_activities([D1], [make_candidate("1", 0.0, 0.0)]).placements
    assert "Grouped nearby stops" in placement.reasons


def test_without_dates_every_candidate_is_unplaced(make_candidate):
    result = auto_schedule_activities(["not-a-date"], [make_candidate("1"), make_candidate("2")])
    assert result.placements == []
    assert {u.reason for u in result.unplaced} == {REASON_NO_DATES}


def test_candidates_without_coordinates_are_still_scheduled(make_candidate):
    result = auto_schedule_activities([D1], [make_candidate("1", lat=None, lng=None)])
    assert [p.id for p in result.placements] == ["1"]
    assert "Grouped nearby stops" not in result.placements[0].reasons


def test_duplicate_and_blank_ids_are_dropped(make_candidate):
    result = auto_schedule_activities([D1], [make_candidate("1"), make_candidate("1"), make_candidate("  ")])
    assert [p.id for p in result.placements] == ["1"]
    assert result.unplaced == []


def test_output_is_repeatable(make_candidate):
    candidates = [make_candidate(str(i), 41.9 + i * 0.002, 12.5) for i in range(1, 8)]
    scheduler = AutoScheduler(day_start_min=540, day_end_min=1020, step_min=15)
    first = scheduler.schedule([D1, D2], candidates)
    second = scheduler.schedule([D1, D2], candidates)
    assert first == second
    _assert_well_formed(first, 540, 1020)
    assert all(p.start_min % 15 == 0 for p in first.placements)


@pytest.mark.parametrize("duration", [float("nan"), float("inf"), 0, -30])
def test_unusable_durations_fall_back_to_an_hour(make_candidate, duration):
    (placement,) = auto_schedule_activities([D1], [make_candidate("1", duration=duration)]).placements
    assert placement.end_min - placement.start_min == 60


def test_non_ascii_digit_ids_sort_without_error(make_candidate):
    result = auto_schedule_activities([D1], [make_candidate("²"), make_candidate("1")])
    assert sorted(p.id for p in result.placements) == ["1", "²"]
    assert result.unplaced == []


@pytest.mark.parametrize("duration, expected", [(5, 15), (1000, 480)])
def test_durations_are_clamped(make_candidate, duration, expected):
    (placement,) = auto_schedule_activities(["2026-01-05"], [make_candidate("1", duration=duration)],
                                            day_start_min=0, day_end_min=1440).placements
    assert placement.end_min - placement.start_min == expected
