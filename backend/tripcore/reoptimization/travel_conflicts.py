"""
reoptimization/travel_conflicts.py
----------------------------------
Gap checks between consecutive timed activities on one day.

  build_adjacent_segments      -> consecutive (from, to) pairs with their gap
  classify_travel_time_conflict -> ok / tight / conflict for one gap
  suggest_travel_time_shift    -> single forward shift of the later activity
  assess_day_travel_conflicts  -> the three above chained over a day

All arithmetic; nothing here searches or mutates the schedule.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tripcore import config
from tripcore.planning.placement import id_sort_key
from tripcore.schemas.itinerary import (
    AdjacentSegment,
    ScheduledRow,
    SegmentAssessment,
    TravelTimeConflict,
    TravelTimeShift,
)
from tripcore.tool_usage.distance_tool import DistanceTool
from tripcore.tool_usage.time_tool import MINUTES_PER_DAY, parse_time_to_minutes
from tripcore.validation.ingestion_validator import usable_coordinates

logger = logging.getLogger(__name__)


def classify_travel_time_conflict(
    gap_minutes: int,
    travel_minutes: int,
    buffer_minutes: int = config.TRAVEL_BUFFER_MIN,
    tight_threshold_minutes: int = config.TRAVEL_TIGHT_THRESHOLD_MIN,
) -> TravelTimeConflict:
    """
    ``conflict`` when the gap is shorter than travel + buffer, otherwise
    ``tight`` when the slack is within the threshold, else ``ok``.
    """
    required = max(0, int(travel_minutes)) + max(0, int(buffer_minutes))
    gap = int(gap_minutes)
    if gap < required:
        return TravelTimeConflict("conflict", required, 0, required - gap)
    slack = gap - required
    status = "tight" if slack <= tight_threshold_minutes else "ok"
    return TravelTimeConflict(status, required, slack, 0)


def suggest_travel_time_shift(
    from_end_min: int,
    to_start_min: int,
    to_end_min: int,
    required_gap_min: int,
    next_start_min: Optional[int] = None,
    day_end_min: Optional[int] = None,
    max_shift_min: int = config.TRAVEL_MAX_SHIFT_MIN,
) -> Optional[TravelTimeShift]:
    """
    Minimal forward shift of the later activity so its gap reaches
    *required_gap_min*.

    None when no shift is needed, the shift exceeds *max_shift_min*, the
    shifted activity plus the required gap would run into *next_start_min*,
    or it would end after *day_end_min* or midnight.
    """
    shift = int(required_gap_min) - (int(to_start_min) - int(from_end_min))
    if shift <= 0 or shift > max_shift_min:
        return None

    new_start = int(to_start_min) + shift
    new_end = int(to_end_min) + shift
    if next_start_min is not None and new_end + required_gap_min > next_start_min:
        return None
    if day_end_min is not None and new_end > day_end_min:
        return None
    if new_end > MINUTES_PER_DAY:
        return None
    return TravelTimeShift(shift_min=shift, new_start_min=new_start, new_end_min=new_end)


def build_adjacent_segments(rows: Iterable[ScheduledRow], date: str) -> list[AdjacentSegment]:
    """Consecutive pairs on *date* ordered by start, end, id. Gaps may be negative."""
    timed: list[tuple[int, int, str]] = []
    for row in rows:
        if row.date != date:
            continue
        start = parse_time_to_minutes(row.start_time)
        end = parse_time_to_minutes(row.end_time)
        if start is None or end is None or end <= start:
            continue
        timed.append((start, end, str(row.id)))

    timed.sort(key=lambda t: (t[0], t[1], id_sort_key(t[2])))
    return [
        AdjacentSegment(
            date=date,
            from_id=prev[2],
            to_id=nxt[2],
            from_end_min=prev[1],
            to_start_min=nxt[0],
            gap_minutes=nxt[0] - prev[1],
        )
        for prev, nxt in zip(timed, timed[1:])
    ]


def assess_day_travel_conflicts(
    rows: Iterable[ScheduledRow],
    date: str,
    buffer_minutes: int = config.TRAVEL_BUFFER_MIN,
    tight_threshold_minutes: int = config.TRAVEL_TIGHT_THRESHOLD_MIN,
    day_end_min: Optional[int] = None,
    distance_tool: Optional[DistanceTool] = None,
) -> list[SegmentAssessment]:
    """
    Classify every adjacent segment on *date* using a straight-line travel
    estimate, and attach a shift suggestion to each conflict.
    """
    rows = list(rows)
    tool = distance_tool or DistanceTool()
    by_id = {str(r.id): r for r in rows if r.date == date}
    segments = build_adjacent_segments(rows, date)

    assessments: list[SegmentAssessment] = []
    for idx, seg in enumerate(segments):
        origin = usable_coordinates(by_id[seg.from_id].coordinates)
        dest = usable_coordinates(by_id[seg.to_id].coordinates)
        travel = tool.travel_time_minutes(origin, dest)
        conflict = classify_travel_time_conflict(seg.gap_minutes, travel, buffer_minutes, tight_threshold_minutes)

        shift = None
        if conflict.status == "conflict":
            to_end = parse_time_to_minutes(by_id[seg.to_id].end_time)
            following = segments[idx + 1].to_start_min if idx + 1 < len(segments) else None
            shift = suggest_travel_time_shift(
                from_end_min=seg.from_end_min,
                to_start_min=seg.to_start_min,
                to_end_min=to_end,
                required_gap_min=conflict.required_gap_minutes,
                next_start_min=following,
                day_end_min=day_end_min,
            )
            logger.debug(
                "travel conflict %s -> %s on %s: short by %d, shift=%s",
                seg.from_id, seg.to_id, date, conflict.short_by_minutes, shift,
            )
        assessments.append(SegmentAssessment(seg, travel, conflict, shift))
    return assessments
