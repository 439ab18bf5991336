"""
planning/placement.py
---------------------
Slot-finding primitives shared by the Scheduler and the Curation engine.

Every helper works on half-open minute windows inside one day and is
deterministic: ties are always broken by an explicit id comparison.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from tripcore.planning.opening_hours import merge_intervals
from tripcore.schemas.itinerary import Coordinates, OpenInterval
from tripcore.tool_usage.distance_tool import haversine_meters
from tripcore.tool_usage.time_tool import clamp_minute, overlaps

T = TypeVar("T")

_MAX_PROBES = 600   # bounded cursor walk per slot search


def round_up_to_step(value: float, step: int) -> int:
    step = max(1, math.floor(step))
    return math.ceil(value / step) * step


def id_sort_key(value: str) -> tuple[int, int, str]:
    """Numeric ids order numerically, everything else after them lexicographically."""
    return (0, int(value), value) if value.isdecimal() else (1, 0, value)


def subtract_busy(
    day_start_min: int,
    day_end_min: int,
    busy: Iterable[OpenInterval],
    min_window_min: int = 10,
) -> list[OpenInterval]:
    """Free windows of [day_start, day_end) after removing *busy*, each ≥ min_window_min."""
    start, end = clamp_minute(day_start_min), clamp_minute(day_end_min)
    if end <= start:
        return []

    free: list[OpenInterval] = []
    cursor = start
    for block in merge_intervals(busy):
        b_start, b_end = max(start, block.start_min), min(end, block.end_min)
        if b_end <= cursor:
            continue
        if b_start > cursor:
            free.append(OpenInterval(cursor, b_start))
        cursor = max(cursor, b_end)
    if cursor < end:
        free.append(OpenInterval(cursor, end))
    return [w for w in free if w.end_min - w.start_min >= min_window_min]


def next_open_window_start(
    intervals: Optional[Sequence[OpenInterval]],
    desired_start_min: int,
    duration_min: int,
    day_end_min: int,
) -> Optional[int]:
    """
    Earliest start ≥ desired that fits inside an open interval and the day.
    ``intervals=None`` means hours unknown: open all day.
    """
    desired = clamp_minute(desired_start_min)
    duration = max(1, duration_min)
    day_end = clamp_minute(day_end_min)

    if intervals is None:
        return desired if desired + duration <= day_end else None

    for interval in intervals:
        start = max(desired, interval.start_min)
        if start + duration > interval.end_min or start + duration > day_end:
            continue
        return start
    return None


def find_next_available_start(
    desired_start_min: int,
    duration_min: int,
    reserved: Sequence[OpenInterval],
    open_intervals: Optional[Sequence[OpenInterval]],
    day_end_min: int,
    step_min: int,
) -> Optional[int]:
    """
    Walk forward from *desired_start_min* (on the step grid) until a window of
    *duration_min* is open, inside the day, and clear of every reserved block.
    """
    step = max(1, step_min)
    duration = max(1, duration_min)
    day_end = clamp_minute(day_end_min)

    cursor = round_up_to_step(clamp_minute(desired_start_min), step)
    for _ in range(_MAX_PROBES):
        if cursor + duration > day_end:
            return None
        open_start = next_open_window_start(open_intervals, cursor, duration, day_end)
        if open_start is None:
            return None
        cursor = round_up_to_step(open_start, step)
        if cursor + duration > day_end:
            return None

        conflict = next(
            (b for b in reserved if overlaps(cursor, cursor + duration, b.start_min, b.end_min)),
            None,
        )
        if conflict is None:
            return cursor
        cursor = round_up_to_step(conflict.end_min, step)
    return None


def order_by_nearest_neighbor(
    items: Sequence[T],
    coords_of: Callable[[T], Optional[Coordinates]],
    id_of: Callable[[T], str],
    start: Optional[Coordinates] = None,
) -> list[T]:
    """
    Greedy nearest-neighbour tour over items with coordinates, then the
    coordinate-less items by id.

    The seed is the item closest to *start*, or the smallest id when no
    start point is given. Distance ties go to the smaller id.
    """
    located = sorted((i for i in items if coords_of(i) is not None), key=lambda i: id_sort_key(id_of(i)))
    unlocated = sorted((i for i in items if coords_of(i) is None), key=lambda i: id_sort_key(id_of(i)))
    if len(located) <= 1:
        return located + unlocated

    def _closest(origin: Coordinates, pool: list[T]) -> T:
        return min(pool, key=lambda i: (haversine_meters(origin, coords_of(i)), id_sort_key(id_of(i))))

    remaining = list(located)
    current = _closest(start, remaining) if start is not None else remaining[0]
    ordered = [current]
    remaining.remove(current)
    while remaining:
        current = _closest(coords_of(current), remaining)
        ordered.append(current)
        remaining.remove(current)
    return ordered + unlocated
