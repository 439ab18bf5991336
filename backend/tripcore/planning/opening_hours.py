"""
planning/opening_hours.py
-------------------------
Per-weekday opening windows → merged, day-scoped intervals.

Rows with a missing or out-of-range field contribute nothing. Overnight
rows (close < open) become [open, 24:00) and [00:00, close) on the same
weekday; multiple overnight rows are resolved by the ordinary merge step.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from tripcore.schemas.itinerary import OpenHoursRow, OpenInterval
from tripcore.tool_usage.time_tool import MINUTES_PER_DAY, clamp_minute, get_day_of_week_from_iso_date
from tripcore.validation.ingestion_validator import filter_valid, validate_open_hours_row


def _valid_rows(rows: Optional[Iterable[OpenHoursRow]]) -> list[OpenHoursRow]:
    return filter_valid((r for r in rows or () if r is not None), validate_open_hours_row)


def _row_interval_minutes(row: OpenHoursRow) -> tuple[int, int]:
    open_min = int(row.open_hour) * 60 + int(row.open_minute)
    close_min = int(row.close_hour) * 60 + int(row.close_minute)
    return open_min, close_min


def merge_intervals(intervals: Iterable[OpenInterval]) -> list[OpenInterval]:
    """Sort and merge overlapping or touching intervals; drops empty ones."""
    ordered = sorted(
        (i for i in intervals if i.end_min > i.start_min),
        key=lambda i: (i.start_min, i.end_min),
    )
    merged: list[OpenInterval] = []
    for interval in ordered:
        if merged and interval.start_min <= merged[-1].end_min:
            last = merged[-1]
            merged[-1] = OpenInterval(last.start_min, max(last.end_min, interval.end_min))
        else:
            merged.append(interval)
    return merged


def get_open_intervals_for_day(
    rows: Optional[Iterable[OpenHoursRow]],
    day_of_week: int,
) -> list[OpenInterval]:
    """Merged open intervals for one weekday (0 = Sunday)."""
    if day_of_week is None or not (0 <= day_of_week <= 6) or not rows:
        return []

    intervals: list[OpenInterval] = []
    for row in _valid_rows(rows):
        if int(float(row.day)) != day_of_week:
            continue
        open_min, close_min = _row_interval_minutes(row)
        if open_min == close_min:
            continue
        if close_min < open_min:
            intervals.append(OpenInterval(clamp_minute(open_min), MINUTES_PER_DAY))
            intervals.append(OpenInterval(0, clamp_minute(close_min)))
            continue
        intervals.append(OpenInterval(clamp_minute(open_min), clamp_minute(close_min)))

    return merge_intervals(intervals)


def has_known_hours(rows: Optional[Iterable[OpenHoursRow]]) -> bool:
    """True when at least one row is fully valid, i.e. the venue's hours are known."""
    return bool(_valid_rows(rows))


def open_intervals_for_date(
    rows: Optional[Iterable[OpenHoursRow]],
    iso_date: str,
) -> Optional[list[OpenInterval]]:
    """
    Intervals for the weekday of *iso_date*.

    Returns None when hours are unknown (no valid row at all) and an empty
    list when hours are known but the venue is closed that weekday.
    """
    rows = list(rows or ())
    if not has_known_hours(rows):
        return None
    return get_open_intervals_for_day(rows, get_day_of_week_from_iso_date(iso_date))


def is_open_for_window(intervals: Iterable[OpenInterval], start_min: float, end_min: float) -> bool:
    """True only if one merged interval contains the whole [start, end) window."""
    start, end = clamp_minute(start_min), clamp_minute(end_min)
    if end <= start:
        return False
    return any(start >= i.start_min and end <= i.end_min for i in intervals or ())


def suggest_next_open_start(
    intervals: Iterable[OpenInterval],
    desired_start_min: float,
    duration_min: float,
) -> Optional[int]:
    """
    Nearest feasible start to *desired_start_min* across all intervals long
    enough for *duration_min*; None when no interval fits.
    """
    duration = max(1, math.floor(duration_min))
    desired = clamp_minute(desired_start_min)

    best: Optional[tuple[int, int]] = None  # (delta, start)
    for interval in intervals or ():
        latest_start = interval.end_min - duration
        if latest_start < interval.start_min:
            continue
        candidate = interval.start_min if desired <= interval.start_min else min(desired, latest_start)
        delta = abs(candidate - desired)
        if best is None or delta < best[0]:
            best = (delta, candidate)

    return clamp_minute(best[1]) if best else None


def auto_correct_to_next_open_interval(
    intervals: Iterable[OpenInterval],
    start_min: int,
    end_min: int,
) -> Optional[tuple[int, int]]:
    """
    Keep [start, end) if it is already open; otherwise move it forward to the
    earliest open interval that fits the same length. None when nothing fits.
    """
    intervals = list(intervals or ())
    duration = end_min - start_min
    if duration <= 0:
        return None
    if is_open_for_window(intervals, start_min, end_min):
        return start_min, end_min
    for interval in intervals:
        candidate = max(start_min, interval.start_min)
        if candidate + duration <= interval.end_min:
            return candidate, candidate + duration
    return None
