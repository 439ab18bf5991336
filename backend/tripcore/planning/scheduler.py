"""
planning/scheduler.py
---------------------
Greedy multi-day auto-scheduler for unscheduled itinerary activities.

For a pool of candidates, a set of immovable fixed placements, an ordered
date pool and one [day_start, day_end) window applied to every day:

  1. Candidates with a preferred date inside the pool are placed on that
     date first.
  2. The rest are grouped by greedy nearest-neighbour chaining: a candidate
     joins a group when it lies within CLUSTER_RADIUS_M of any member.
     Candidates without coordinates form groups of one.
  3. Groups are processed largest first (tie: smallest member id). Each
     group is anchored on the least-loaded date (tie: earliest) and its
     members are placed there in nearest-neighbour order, each starting
     after the previous stop plus travel and a transition buffer.
  4. Members that do not fit spill to the following dates, wrapping to
     earlier ones; whatever fits nowhere is reported in ``unplaced``.

Constraints enforced per placement:
  - no overlap with fixed blocks or earlier placements on the same date
  - [start, end) inside [day_start, day_end)
  - fully inside one opening interval when the venue's hours are known
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from tripcore import config
from tripcore.planning.opening_hours import has_known_hours, is_open_for_window, open_intervals_for_date
from tripcore.planning.placement import (
    find_next_available_start,
    id_sort_key,
    next_open_window_start,
    order_by_nearest_neighbor,
)
from tripcore.schemas.itinerary import (
    Coordinates,
    FixedPlacement,
    OpenHoursRow,
    OpenInterval,
    Placement,
    ScheduleCandidate,
    ScheduleResult,
    UnplacedCandidate,
)
from tripcore.tool_usage.distance_tool import DistanceTool, haversine_meters
from tripcore.tool_usage.time_tool import (
    clamp_minute,
    format_minutes_to_hhmm,
    is_iso_date_string,
    parse_duration_to_minutes,
)
from tripcore.validation.ingestion_validator import usable_coordinates

logger = logging.getLogger(__name__)

REASON_NO_DATES     = "No dates available to schedule into."
REASON_NO_TIME      = "Not enough time in the available day range."
REASON_NEVER_OPEN   = "Opening hours never fit inside the day window."


@dataclass(frozen=True)
class _Item:
    id: str
    name: str
    coords: Optional[Coordinates]
    duration: int
    preferred_date: Optional[str]
    open_hours: Optional[tuple[OpenHoursRow, ...]]


@dataclass
class _DayState:
    """Occupancy of one date while the scheduler runs."""
    reserved: list[OpenInterval] = field(default_factory=list)
    cursor_min: int = 0
    cursor_coord: Optional[Coordinates] = None
    placed_any: bool = False

    @property
    def load_minutes(self) -> int:
        return sum(b.end_min - b.start_min for b in self.reserved)


def _normalize_candidates(candidates: Iterable[ScheduleCandidate]) -> list[_Item]:
    items: dict[str, _Item] = {}
    for c in candidates:
        item_id = str(c.id if c.id is not None else "").strip()
        if not item_id or item_id in items:
            continue
        duration = parse_duration_to_minutes(c.duration_minutes) or config.DEFAULT_DURATION_MIN
        items[item_id] = _Item(
            id=item_id,
            name=str(c.name or "").strip() or f"Activity {item_id}",
            coords=usable_coordinates(c.coordinates),
            duration=max(config.MIN_DURATION_MIN, min(config.MAX_DURATION_MIN, duration)),
            preferred_date=c.preferred_date if is_iso_date_string(c.preferred_date) else None,
            open_hours=tuple(c.open_hours) if c.open_hours else None,
        )
    return list(items.values())


def _centroid(points: Sequence[Coordinates]) -> Optional[Coordinates]:
    if not points:
        return None
    return Coordinates(
        lat=sum(p.lat for p in points) / len(points),
        lng=sum(p.lng for p in points) / len(points),
    )


class AutoScheduler:
    """
    Deterministic greedy scheduler.

    Usage:
        scheduler = AutoScheduler(day_start_min=600, day_end_min=1080)
        result = scheduler.schedule(date_pool, candidates, fixed)
    """

    def __init__(
        self,
        day_start_min: int | None = None,
        day_end_min: int | None = None,
        step_min: int | None = None,
        buffer_min: int | None = None,
        cluster_radius_m: float | None = None,
        distance_tool: DistanceTool | None = None,
    ) -> None:
        self.day_start_min = clamp_minute(config.DAY_START_MIN if day_start_min is None else day_start_min)
        self.day_end_min   = clamp_minute(config.DAY_END_MIN if day_end_min is None else day_end_min)
        self.step_min      = max(1, config.SCHEDULE_STEP_MIN if step_min is None else step_min)
        self.buffer_min    = max(0, config.SCHEDULE_BUFFER_MIN if buffer_min is None else buffer_min)
        self.cluster_radius_m = max(
            0.0, config.CLUSTER_RADIUS_M if cluster_radius_m is None else cluster_radius_m
        )
        self.distance_tool = distance_tool or DistanceTool()

    # ── Public entry point ────────────────────────────────────────────────────

    def schedule(
        self,
        date_pool: Iterable[str],
        candidates: Iterable[ScheduleCandidate],
        fixed: Iterable[FixedPlacement] = (),
    ) -> ScheduleResult:
        pool = sorted({d for d in date_pool if is_iso_date_string(d)})
        items = _normalize_candidates(candidates)
        result = ScheduleResult()

        if not pool or self.day_end_min <= self.day_start_min:
            result.unplaced = [UnplacedCandidate(i.id, REASON_NO_DATES) for i in items]
            return result

        days = self._initial_day_states(pool, fixed)

        # ── Step 1: preferred dates ──────────────────────────────────────────
        pending: list[_Item] = []
        for date in pool:
            preferred = [i for i in items if i.preferred_date == date]
            if preferred:
                pending.extend(self._place_on_date(date, preferred, days[date], result, anchor=date))
        pending.extend(i for i in items if i.preferred_date not in days)

        # ── Steps 2–4: proximity groups, anchored on the least-loaded date ───
        clusters = self._cluster_by_proximity(pending)
        logger.debug("schedule: %d items, %d groups over %d dates", len(items), len(clusters), len(pool))

        leftovers: list[_Item] = []
        for cluster in clusters:
            anchor_idx = min(range(len(pool)), key=lambda i: (days[pool[i]].load_minutes, i))
            remaining = cluster
            for date in pool[anchor_idx:] + pool[:anchor_idx]:
                remaining = self._place_on_date(date, remaining, days[date], result, anchor=pool[anchor_idx])
                if not remaining:
                    break
            leftovers.extend(remaining)

        for item in sorted(leftovers, key=lambda i: id_sort_key(i.id)):
            never_open = has_known_hours(item.open_hours) and not self._ever_fits(item, pool)
            reason = REASON_NEVER_OPEN if never_open else REASON_NO_TIME
            logger.debug("schedule: %s unplaced (%s)", item.id, reason)
            result.unplaced.append(UnplacedCandidate(item.id, reason))

        result.placements.sort(key=lambda p: (p.date, p.start_min, id_sort_key(p.id)))
        return result

    # ── Private ───────────────────────────────────────────────────────────────

    def _initial_day_states(
        self,
        pool: list[str],
        fixed: Iterable[FixedPlacement],
    ) -> dict[str, _DayState]:
        days = {d: _DayState(cursor_min=self.day_start_min) for d in pool}
        first_fixed: dict[str, tuple[int, Coordinates]] = {}
        for block in fixed:
            if block.date not in days:
                continue
            start, end = clamp_minute(block.start_min), clamp_minute(block.end_min)
            if end <= start:
                continue
            days[block.date].reserved.append(OpenInterval(start, end))
            coords = usable_coordinates(block.coordinates)
            if coords and (block.date not in first_fixed or start < first_fixed[block.date][0]):
                first_fixed[block.date] = (start, coords)
        for date, state in days.items():
            state.reserved.sort(key=lambda b: (b.start_min, b.end_min))
            if date in first_fixed:
                state.cursor_coord = first_fixed[date][1]
        return days

    def _cluster_by_proximity(self, items: list[_Item]) -> list[list[_Item]]:
        """
        Greedy single-linkage grouping: grow each group from its smallest-id
        seed by repeatedly absorbing the closest unassigned item that lies
        within the radius of any member.
        """
        located = sorted((i for i in items if i.coords), key=lambda i: id_sort_key(i.id))
        unlocated = sorted((i for i in items if not i.coords), key=lambda i: id_sort_key(i.id))

        unassigned = list(located)
        clusters: list[list[_Item]] = []
        while unassigned:
            group = [unassigned.pop(0)]
            while unassigned:
                best: Optional[tuple[float, tuple, _Item]] = None
                for cand in unassigned:
                    dist = min(haversine_meters(m.coords, cand.coords) for m in group)
                    key = (dist, id_sort_key(cand.id), cand)
                    if dist <= self.cluster_radius_m and (best is None or key[:2] < best[:2]):
                        best = key
                if best is None:
                    break
                group.append(best[2])
                unassigned.remove(best[2])
            clusters.append(group)

        clusters.extend([i] for i in unlocated)
        clusters.sort(key=lambda g: (-len(g), min(id_sort_key(i.id) for i in g)))
        return clusters

    def _place_on_date(
        self,
        date: str,
        items: list[_Item],
        state: _DayState,
        result: ScheduleResult,
        anchor: str,
    ) -> list[_Item]:
        """Place what fits on *date*; return the items that did not fit."""
        start_coord = state.cursor_coord or _centroid([i.coords for i in items if i.coords])
        ordered = order_by_nearest_neighbor(items, lambda i: i.coords, lambda i: i.id, start_coord)

        spill: list[_Item] = []
        for item in ordered:
            intervals = open_intervals_for_date(item.open_hours, date)
            if intervals == []:
                spill.append(item)   # known hours, closed this weekday
                continue

            desired = self.day_start_min
            if state.placed_any:
                travel = self.distance_tool.travel_time_minutes(state.cursor_coord, item.coords)
                desired = max(self.day_start_min, state.cursor_min + travel + self.buffer_min)

            start = find_next_available_start(
                desired_start_min=desired,
                duration_min=item.duration,
                reserved=state.reserved,
                open_intervals=intervals,
                day_end_min=self.day_end_min,
                step_min=self.step_min,
            )
            if start is None:
                spill.append(item)
                continue

            end = start + item.duration
            state.reserved.append(OpenInterval(start, end))
            state.reserved.sort(key=lambda b: (b.start_min, b.end_min))
            state.cursor_min = end
            state.cursor_coord = item.coords or state.cursor_coord
            state.placed_any = True

            reasons: list[str] = []
            if item.preferred_date == date:
                reasons.append("Kept on preferred date")
            if item.coords:
                reasons.append("Grouped nearby stops")
            if intervals and is_open_for_window(intervals, start, end):
                reasons.append("Fits opening hours")
            if date != anchor:
                reasons.append("Moved to the next day with room")

            result.placements.append(Placement(
                id=item.id,
                date=date,
                start_min=start,
                end_min=end,
                start_time=format_minutes_to_hhmm(start),
                end_time=format_minutes_to_hhmm(end),
                reasons=reasons,
            ))

        if spill:
            logger.debug("schedule: %d item(s) spill past %s", len(spill), date)
        return spill

    def _ever_fits(self, item: _Item, pool: list[str]) -> bool:
        """True when the item's hours admit its duration on some pool date, ignoring occupancy."""
        for date in pool:
            intervals = open_intervals_for_date(item.open_hours, date)
            if intervals == []:
                continue
            if next_open_window_start(intervals, self.day_start_min, item.duration, self.day_end_min) is not None:
                return True
        return False


def auto_schedule_activities(
    date_pool: Iterable[str],
    candidates: Iterable[ScheduleCandidate],
    fixed: Iterable[FixedPlacement] = (),
    **options,
) -> ScheduleResult:
    """Functional wrapper: ``AutoScheduler(**options).schedule(...)``."""
    return AutoScheduler(**options).schedule(date_pool, candidates, fixed)
