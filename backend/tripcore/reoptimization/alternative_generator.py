"""
reoptimization/alternative_generator.py
---------------------------------------
Ranked substitutes for one itinerary slot.

Given a target activity and the rest of the itinerary, returns at most three
replacement candidates scored on three criteria.

Hard filters (never scored):
  - same destination as the target
  - fully unscheduled, or scheduled in exactly the target's date+start+end
  - not the target itself
  - not known to be closed during the target's window

Scoring (additive):
  - proximity       up to 10 pts, linear to 0 at 10 km
  - type overlap    1.5 pts per shared place type
  - open during slot 3 pts when opening hours confirm the window

Design principles:
  - NO schedule mutation. This module is read-only and produces a list.
  - Ordering is total: score desc, distance asc (unknown last), id.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Mapping, Optional, Sequence

from tripcore import config
from tripcore.planning.opening_hours import is_open_for_window, open_intervals_for_date
from tripcore.planning.themes import normalize_types
from tripcore.schemas.itinerary import AlternativeSuggestion, ItineraryActivity, OpenHoursRow
from tripcore.tool_usage.distance_tool import distance_meters_lng_lat
from tripcore.tool_usage.time_tool import is_iso_date_string, parse_time_to_minutes

logger = logging.getLogger(__name__)

_PROXIMITY_RANGE_KM = 10.0


def _format_km(meters: float) -> str:
    """One decimal, half-up, trailing ``.0`` dropped: 1110 m -> "1.1 km", 2000 m -> "2 km"."""
    return f"{math.floor(meters / 100 + 0.5) / 10:g} km"


def _same_slot(candidate: ItineraryActivity, target: ItineraryActivity) -> bool:
    if not (candidate.date and candidate.start_time and candidate.end_time):
        return False
    return (
        candidate.date == target.date
        and candidate.start_time == target.start_time
        and candidate.end_time == target.end_time
    )


def _is_eligible(candidate: ItineraryActivity, target: ItineraryActivity) -> bool:
    return candidate.is_unscheduled or _same_slot(candidate, target)


class AlternativeGenerator:
    """
    Ranks replacement candidates for a single itinerary slot.

    Usage:
        gen = AlternativeGenerator(open_hours_by_activity_id={101: rows})
        options = gen.generate(target, itinerary_rows, max_alternatives=3)
    """

    def __init__(
        self,
        open_hours_by_activity_id: Optional[Mapping[int, Sequence[OpenHoursRow]]] = None,
    ) -> None:
        self._open_hours = open_hours_by_activity_id or {}

    # ── Public ────────────────────────────────────────────────────────────────

    def generate(
        self,
        target: ItineraryActivity,
        candidates: Iterable[ItineraryActivity],
        max_alternatives: Optional[int] = None,
    ) -> list[AlternativeSuggestion]:
        limit = config.MAX_ALTERNATIVES
        if max_alternatives is not None:
            limit = max(1, min(config.MAX_ALTERNATIVES, int(max_alternatives)))

        target_id = target.itinerary_activity_id.strip()
        destination_id = target.itinerary_destination_id.strip()
        window = self._target_window(target)
        target_coords = target.activity.coordinates if target.activity else None
        target_types = set(normalize_types(list(target.activity.types) if target.activity else []))

        scored: list[AlternativeSuggestion] = []
        for candidate in candidates:
            candidate_id = candidate.itinerary_activity_id.strip()
            if not candidate_id or candidate_id == target_id:
                continue
            if destination_id and candidate.itinerary_destination_id.strip() != destination_id:
                continue
            if not _is_eligible(candidate, target):
                continue

            suggestion = self._score(candidate_id, candidate, target_coords, target_types, window)
            if suggestion is not None:
                scored.append(suggestion)

        scored.sort(key=lambda s: (
            -s.score,
            s.distance_meters if s.distance_meters is not None else math.inf,
            s.candidate_id,
        ))
        logger.debug(
            "alternatives for %s: %d eligible, returning %d", target_id, len(scored), min(limit, len(scored))
        )
        return scored[:limit]

    # ── Private ───────────────────────────────────────────────────────────────

    @staticmethod
    def _target_window(target: ItineraryActivity) -> Optional[tuple[str, int, int]]:
        if not is_iso_date_string(target.date):
            return None
        start = parse_time_to_minutes(target.start_time)
        end = parse_time_to_minutes(target.end_time)
        if start is None or end is None or end <= start:
            return None
        return target.date, start, end

    def _score(
        self,
        candidate_id: str,
        candidate: ItineraryActivity,
        target_coords: Optional[tuple[float, float]],
        target_types: set[str],
        window: Optional[tuple[str, int, int]],
    ) -> Optional[AlternativeSuggestion]:
        """Score one eligible candidate; None when it is known closed for the window."""
        details = candidate.activity
        reasons: list[str] = []
        score = 0.0

        distance = distance_meters_lng_lat(target_coords, details.coordinates if details else None)
        if distance is not None and math.isfinite(distance):
            km = distance / 1000
            score += max(0.0, config.PROXIMITY_MAX_POINTS * (1 - km / _PROXIMITY_RANGE_KM))
            reasons.append(f"Nearby ({_format_km(distance)})")
        else:
            distance = None

        shared = len(target_types & set(normalize_types(list(details.types) if details else [])))
        if shared:
            score += shared * config.TYPE_OVERLAP_POINTS
            reasons.append("Similar vibe")

        is_open: Optional[bool] = None
        if window is not None and details is not None and details.activity_id is not None:
            date, start, end = window
            intervals = open_intervals_for_date(self._open_hours.get(details.activity_id), date)
            if intervals is not None:
                is_open = is_open_for_window(intervals, start, end)
                if not is_open:
                    logger.debug("alternatives: drop %s, closed during %s %d-%d", candidate_id, date, start, end)
                    return None
                score += config.OPEN_DURING_SLOT_POINTS
                reasons.append("Open during that time")

        return AlternativeSuggestion(
            candidate_id=candidate_id,
            score=score,
            distance_meters=distance,
            is_open_during_slot=is_open,
            reasons=reasons,
        )


def rank_slot_alternative_candidates(
    target: ItineraryActivity,
    candidates: Iterable[ItineraryActivity],
    open_hours_by_activity_id: Optional[Mapping[int, Sequence[OpenHoursRow]]] = None,
    max_alternatives: Optional[int] = None,
) -> list[AlternativeSuggestion]:
    """Functional wrapper: ``AlternativeGenerator(hours).generate(...)``."""
    return AlternativeGenerator(open_hours_by_activity_id).generate(target, candidates, max_alternatives)
