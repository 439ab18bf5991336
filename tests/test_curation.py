"""Themed day-plan curation."""

from __future__ import annotations

import itertools

from tripcore.planning.curation import build_curated_day_plan
from tripcore.schemas.itinerary import DayThemeKey, OpenInterval, PreferencesProfile
from tripcore.schemas.operations import dump_operations

WED = "2026-03-18"
THU = "2026-03-19"


def _ops(result):
    return [(op.itinerary_activity_id, op.date, op.start_time, op.end_time) for op in result.operations]


def _shopping_and_museums(make_curation_candidate):
    shops = [
        make_curation_candidate("1", 41.900, 12.500, types=("shopping_mall",)),
        make_curation_candidate("2", 41.901, 12.501, types=("shopping_mall",)),
        make_curation_candidate("3", 41.902, 12.502, types=("clothing_store",)),
    ]
    museums = [
        make_curation_candidate("4", 41.960, 12.600, types=("museum",)),
        make_curation_candidate("5", 41.961, 12.601, types=("art_gallery",)),
    ]
    return shops + museums


def test_schedules_within_known_opening_hours(make_curation_candidate, make_hours):
    museum = make_curation_candidate("1", types=("museum",), activity_id=10, name="Museum")
    result = build_curated_day_plan(
        [WED],
        [museum],
        PreferencesProfile(interests=["museums"]),
        open_hours_by_activity_id={10: [make_hours(3, "10:00", "17:00")]},
        requested_theme=DayThemeKey.museums,
    )

    assert dump_operations(result.operations) == [{
        "op": "update_activity",
        "itineraryActivityId": "1",
        "date": WED,
        "startTime": "10:00",
        "endTime": "11:00",
    }]
    assert result.scheduled_ids == {"1"}
    (plan,) = result.day_plans
    assert plan.items[0].theme == DayThemeKey.museums
    assert plan.rationale == "Focused on museums and kept things close together when possible."


def test_output_is_identical_for_every_input_order(make_curation_candidate):
    candidates = [
        make_curation_candidate("1", 41.900, 12.500, types=("museum",)),
        make_curation_candidate("2", 41.901, 12.501, types=("museum",)),
        make_curation_candidate("3", 41.910, 12.490, types=("shopping_mall",)),
        make_curation_candidate("4", 41.911, 12.491, types=("shopping_mall",)),
        make_curation_candidate("12", None, None, types=("restaurant",)),
    ]
    prefs = PreferencesProfile(pace="packed")

    baseline = build_curated_day_plan([WED, THU], candidates, prefs)
    assert len(baseline.operations) == 5
    for order in itertools.permutations(candidates):
        result = build_curated_day_plan([WED, THU], list(order), prefs)
        assert dump_operations(result.operations) == dump_operations(baseline.operations)
        assert result.day_plans == baseline.day_plans


def test_requested_theme_goes_first(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        _shopping_and_museums(make_curation_candidate),
        PreferencesProfile(pace="relaxed"),
        requested_theme=DayThemeKey.museums,
    )
    assert _ops(result) == [
        ("4", WED, "09:00", "10:00"),
        ("5", WED, "10:15", "11:15"),
        ("1", WED, "11:30", "12:30"),
    ]


def test_largest_neighbourhood_wins_without_a_theme(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        _shopping_and_museums(make_curation_candidate),
        PreferencesProfile(pace="relaxed"),
    )
    assert [op.itinerary_activity_id for op in result.operations] == ["1", "2", "3"]
    assert result.day_plans[0].rationale == "Planned a relaxed day within your 09:00-18:00 window."


def test_interests_lift_a_neighbourhood(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        _shopping_and_museums(make_curation_candidate),
        PreferencesProfile(pace="relaxed", interests=["museums"]),
    )
    assert [op.itinerary_activity_id for op in result.operations][:2] == ["4", "5"]


def test_mixed_theme_adds_no_bonus(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        _shopping_and_museums(make_curation_candidate),
        PreferencesProfile(pace="relaxed"),
        requested_theme=DayThemeKey.mixed,
    )
    assert [op.itinerary_activity_id for op in result.operations] == ["1", "2", "3"]


def test_pace_caps_items_per_day(make_curation_candidate):
    candidates = [make_curation_candidate(str(i)) for i in range(1, 8)]
    relaxed = build_curated_day_plan([WED], candidates, PreferencesProfile(pace="relaxed"))
    balanced = build_curated_day_plan([WED], candidates, PreferencesProfile(pace="balanced"))
    packed = build_curated_day_plan([WED], candidates, PreferencesProfile(pace="packed"))
    assert (len(relaxed.operations), len(balanced.operations), len(packed.operations)) == (3, 4, 6)

    two_days = build_curated_day_plan([WED, THU], candidates, PreferencesProfile(pace="relaxed"))
    assert [len(p.items) for p in two_days.day_plans] == [3, 3]


def test_max_operations_bounds_the_whole_range(make_curation_candidate):
    candidates = [make_curation_candidate(str(i)) for i in range(1, 8)]
    result = build_curated_day_plan([WED, THU], candidates, PreferencesProfile(), max_operations=2)
    assert len(result.operations) == 2
    assert len(result.day_plans) == 1


def test_locked_candidates_only_land_on_their_date(make_curation_candidate):
    candidates = [
        make_curation_candidate("1", locked_date=THU),
        make_curation_candidate("2"),
        make_curation_candidate("3", locked_date="2026-04-01"),
    ]
    result = build_curated_day_plan([WED, THU], candidates, PreferencesProfile())
    assert _ops(result) == [
        ("2", WED, "09:00", "10:00"),
        ("1", THU, "09:00", "10:00"),
    ]
    assert "3" not in result.scheduled_ids


def test_fixed_blocks_are_avoided(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        [make_curation_candidate("1"), make_curation_candidate("2")],
        PreferencesProfile(),
        fixed_by_date={WED: [OpenInterval(540, 720), OpenInterval(790, 800)]},
    )
    # 12:00-13:00, then 13:15 would collide with 13:10-13:20, so the next free window at 13:20
    assert _ops(result) == [
        ("1", WED, "12:00", "13:00"),
        ("2", WED, "13:20", "14:20"),
    ]


def test_closed_candidate_does_not_block_the_rest(make_curation_candidate, make_hours):
    candidates = [
        make_curation_candidate("1", activity_id=10),
        make_curation_candidate("2"),
    ]
    result = build_curated_day_plan(
        [WED],
        candidates,
        PreferencesProfile(),
        open_hours_by_activity_id={10: [make_hours(0, "09:00", "17:00")]},   # Sundays only
    )
    assert _ops(result) == [("2", WED, "09:00", "10:00")]


def test_duration_strings_and_short_window_fallback(make_curation_candidate):
    result = build_curated_day_plan(
        [WED],
        [make_curation_candidate("1", duration="01:30:00"), make_curation_candidate("2", duration="abc")],
        PreferencesProfile(day_start="09:00", day_end="09:45", travel_mode="driving"),
    )
    assert _ops(result) == [
        ("1", WED, "09:00", "10:30"),
        ("2", WED, "10:40", "11:40"),
    ]


def test_non_numeric_ids_are_ignored(make_curation_candidate):
    result = build_curated_day_plan([WED], [make_curation_candidate("abc")], PreferencesProfile())
    assert result.operations == []
    assert result.day_plans == []


def test_superscript_digit_ids_are_ignored(make_curation_candidate):
    candidates = [make_curation_candidate("²"), make_curation_candidate("1")]
    result = build_curated_day_plan([WED], candidates, PreferencesProfile())
    assert [op.itinerary_activity_id for op in result.operations] == ["1"]


def test_invalid_dates_in_the_range_are_skipped(make_curation_candidate):
    result = build_curated_day_plan(
        ["2026-13-01", "2026-02-30", "not-a-date", WED],
        [make_curation_candidate("1")],
        PreferencesProfile(),
    )
    assert _ops(result) == [("1", WED, "09:00", "10:00")]
    assert [p.date for p in result.day_plans] == [WED]
