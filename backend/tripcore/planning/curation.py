"""
planning/curation.py
--------------------
Themed day-plan builder across an explicit ISO date range.

Differs from the auto-scheduler in what it optimises for: instead of
packing every candidate, it fills each day (up to a pace-dependent cap)
from the most relevant neighbourhood first, where relevance comes from the
requested theme and the traveller's interests.

Determinism: the output depends only on the *set* of candidates. Every
ordering step sorts on explicit keys (score, grid key, id) and never on
input position, so any permutation of ``candidates`` yields identical
operations and day plans.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from tripcore import config
from tripcore.planning.opening_hours import auto_correct_to_next_open_interval, open_intervals_for_date
from tripcore.planning.placement import id_sort_key, order_by_nearest_neighbor, subtract_busy
from tripcore.planning.themes import primary_theme_from_types
from tripcore.schemas.itinerary import (
    CuratedDayPlan,
    CuratedItem,
    CurationCandidate,
    CurationResult,
    DayThemeKey,
    OpenHoursRow,
    OpenInterval,
    PreferencesProfile,
)
from tripcore.schemas.operations import UpdateActivityOperation
from tripcore.tool_usage.time_tool import (
    format_minutes_to_hhmm,
    is_iso_date_string,
    parse_duration_to_minutes,
    parse_time_to_minutes,
)
from tripcore.validation.ingestion_validator import usable_coordinates

logger = logging.getLogger(__name__)

_REQUESTED_THEME_BONUS = 10
_INTEREST_BONUS        = 3

_BUFFER_BY_MODE: dict[str, int] = {"driving": 10, "bicycling": 10, "transit": 15, "walking": 15}
_DAILY_CAP_BY_PACE: dict[str, int] = {"relaxed": 3, "balanced": 4, "packed": 6}


@dataclass
class _Bucket:
    key: str
    members: list[CurationCandidate]
    score: int


def _grid_key(candidate: CurationCandidate, grid: float) -> str:
    coords = usable_coordinates(candidate.coordinates)
    if coords is None:
        return "no_coords"
    return f"{round(coords.lat / grid)},{round(coords.lng / grid)}"


def _duration_of(candidate: CurationCandidate) -> int:
    minutes = parse_duration_to_minutes(candidate.duration) or config.DEFAULT_DURATION_MIN
    return max(config.MIN_DURATION_MIN, minutes)


def _day_window(prefs: PreferencesProfile) -> tuple[int, int]:
    start = parse_time_to_minutes(prefs.day_start)
    end = parse_time_to_minutes(prefs.day_end)
    if start is None or end is None or end <= start + 60:
        return (parse_time_to_minutes(config.CURATION_DAY_START) or 9 * 60,
                parse_time_to_minutes(config.CURATION_DAY_END) or 18 * 60)
    return start, end


def _nn_order(candidates: Sequence[CurationCandidate]) -> list[CurationCandidate]:
    return order_by_nearest_neighbor(
        candidates,
        coords_of=lambda c: usable_coordinates(c.coordinates),
        id_of=lambda c: c.itinerary_activity_id,
    )


def _theme_value(theme: Optional[DayThemeKey]) -> Optional[str]:
    return theme.value if theme is not None else None


class _DayFiller:
    """Places candidates into one date's free windows, in the given order."""

    def __init__(
        self,
        date: str,
        free_windows: list[OpenInterval],
        open_hours_by_activity_id: Mapping[int, Sequence[OpenHoursRow]],
        buffer_min: int,
        daily_cap: int,
        result: CurationResult,
        max_operations: int,
    ) -> None:
        self.date = date
        self.windows = free_windows
        self.open_hours = open_hours_by_activity_id
        self.buffer_min = buffer_min
        self.daily_cap = daily_cap
        self.result = result
        self.max_operations = max_operations
        self.items: list[CuratedItem] = []
        self.window_idx = 0
        self.cursor = free_windows[0].start_min if free_windows else 0

    @property
    def full(self) -> bool:
        return (
            len(self.items) >= self.daily_cap
            or len(self.result.operations) >= self.max_operations
            or self.window_idx >= len(self.windows)
        )

    def fill(self, queue: list[CurationCandidate]) -> list[CurationCandidate]:
        """
        Place candidates from *queue* in order; return those left over.

        A candidate that fits no remaining window today is kept for a later
        date and does not block the ones behind it.
        """
        left: list[CurationCandidate] = []
        for idx, candidate in enumerate(queue):
            if self.full:
                left.extend(queue[idx:])
                break
            placed = self._find_slot(candidate)
            if placed is None:
                left.append(candidate)
                continue
            window_idx, start, end = placed
            self._record(candidate, start, end)
            self.window_idx = window_idx
            self.cursor = end + self.buffer_min
            if self.cursor >= self.windows[window_idx].end_min:
                self.window_idx += 1
                if self.window_idx < len(self.windows):
                    self.cursor = self.windows[self.window_idx].start_min
        return left

    def _find_slot(self, candidate: CurationCandidate) -> Optional[tuple[int, int, int]]:
        for idx in range(self.window_idx, len(self.windows)):
            window = self.windows[idx]
            earliest = self.cursor if idx == self.window_idx else window.start_min
            slot = self._try_slot(candidate, window, earliest)
            if slot is not None:
                return idx, slot[0], slot[1]
        return None

    def _record(self, candidate: CurationCandidate, start: int, end: int) -> None:
        self.result.operations.append(UpdateActivityOperation(
            op="update_activity",
            itinerary_activity_id=candidate.itinerary_activity_id,
            date=self.date,
            start_time=format_minutes_to_hhmm(start),
            end_time=format_minutes_to_hhmm(end),
        ))
        self.result.scheduled_ids.add(candidate.itinerary_activity_id)
        self.items.append(CuratedItem(
            itinerary_activity_id=candidate.itinerary_activity_id,
            title=candidate.name,
            start_time=format_minutes_to_hhmm(start),
            end_time=format_minutes_to_hhmm(end),
            theme=primary_theme_from_types(candidate.types),
        ))

    def _try_slot(
        self,
        candidate: CurationCandidate,
        window: OpenInterval,
        earliest: int,
    ) -> Optional[tuple[int, int]]:
        duration = _duration_of(candidate)
        base_start = max(window.start_min, math.floor(earliest))
        base_end = base_start + duration
        if base_end > window.end_min:
            return None

        rows = self.open_hours.get(candidate.activity_id) if candidate.activity_id is not None else None
        intervals = open_intervals_for_date(rows, self.date)
        if intervals is None:
            return base_start, base_end
        if not intervals:
            return None   # known hours, closed this weekday

        corrected = auto_correct_to_next_open_interval(intervals, base_start, base_end)
        if corrected is None or corrected[1] > window.end_min:
            return None
        return corrected


def build_curated_day_plan(
    date_range: Iterable[str],
    candidates: Iterable[CurationCandidate],
    preferences: PreferencesProfile,
    fixed_by_date: Optional[Mapping[str, Sequence[OpenInterval]]] = None,
    open_hours_by_activity_id: Optional[Mapping[int, Sequence[OpenHoursRow]]] = None,
    requested_theme: Optional[DayThemeKey] = None,
    max_operations: int = config.MAX_OPERATIONS,
) -> CurationResult:
    """
    Build ``update_activity`` operations and a day-by-day plan view.

    Candidates with a ``locked_date`` are only ever placed on that date.
    Unlocked candidates are bucketed on a coarse lat/lng grid; buckets are
    consumed highest score first, where a bucket scores one point per member
    plus bonuses for members matching the requested theme or an interest.
    """
    fixed_by_date = fixed_by_date or {}
    open_hours_by_activity_id = open_hours_by_activity_id or {}
    max_operations = max(0, min(config.MAX_OPERATIONS, int(max_operations)))

    day_start, day_end = _day_window(preferences)
    buffer_min = _BUFFER_BY_MODE.get(preferences.travel_mode, 15)
    daily_cap = _DAILY_CAP_BY_PACE.get(preferences.pace, 4)
    focus = requested_theme if requested_theme not in (None, DayThemeKey.mixed) else None
    interests = set(preferences.interests or ())

    unique: dict[str, CurationCandidate] = {}
    for c in sorted(candidates, key=lambda c: (id_sort_key(c.itinerary_activity_id), c.name)):
        if not (c.itinerary_activity_id.isascii() and c.itinerary_activity_id.isdecimal()):
            continue   # operations only address numeric itinerary ids
        unique.setdefault(c.itinerary_activity_id, c)
    ordered = list(unique.values())

    locked_by_date: dict[str, list[CurationCandidate]] = {}
    unlocked: list[CurationCandidate] = []
    for c in ordered:
        if c.locked_date and is_iso_date_string(c.locked_date):
            locked_by_date.setdefault(c.locked_date, []).append(c)
        else:
            unlocked.append(c)

    grouped: dict[str, list[CurationCandidate]] = {}
    for c in unlocked:
        grouped.setdefault(_grid_key(c, config.CURATION_GRID_DEG), []).append(c)

    def _score(members: list[CurationCandidate]) -> int:
        score = len(members)
        for c in members:
            theme = _theme_value(primary_theme_from_types(c.types))
            if focus is not None and theme == focus.value:
                score += _REQUESTED_THEME_BONUS
            if theme is not None and theme in interests:
                score += _INTEREST_BONUS
        return score

    buckets = sorted(
        (_Bucket(key, _nn_order(members), _score(members)) for key, members in grouped.items()),
        key=lambda b: (-b.score, b.key),
    )

    result = CurationResult()
    for date in date_range:
        if len(result.operations) >= max_operations:
            break
        if not is_iso_date_string(date):
            continue

        busy = [OpenInterval(b.start_min, b.end_min) for b in fixed_by_date.get(date, ())]
        windows = subtract_busy(day_start, day_end, busy, config.MIN_FREE_WINDOW_MIN)
        if not windows:
            continue

        filler = _DayFiller(
            date, windows, open_hours_by_activity_id, buffer_min, daily_cap, result, max_operations,
        )

        locked_left: list[CurationCandidate] = []
        if locked_by_date.get(date):
            locked_left = filler.fill(_nn_order(locked_by_date[date]))

        for bucket in buckets:
            if filler.full:
                break
            if bucket.members:
                bucket.members = filler.fill(bucket.members)

        if not filler.items:
            continue

        if focus is not None:
            rationale = f"Focused on {focus.value} and kept things close together when possible."
        else:
            rationale = (
                f"Planned a {preferences.pace} day within your "
                f"{format_minutes_to_hhmm(day_start)}-{format_minutes_to_hhmm(day_end)} window."
            )
        if locked_left:
            rationale += " Some items couldn't fit into this day."
        result.day_plans.append(CuratedDayPlan(date=date, rationale=rationale, items=filler.items))

    logger.debug(
        "curation: %d operation(s) over %d day(s)", len(result.operations), len(result.day_plans)
    )
    return result
