"""
schemas/itinerary.py
--------------------
Dataclass definitions for the plain records flowing in and out of the
scheduling engine.

Inputs (candidates, rows, blocks) are treated as read-only; every engine
function returns fresh instances of the output records below.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional, Union

Pace       = Literal["relaxed", "balanced", "packed"]
TravelMode = Literal["walking", "driving", "transit", "bicycling"]
ConflictStatus = Literal["ok", "tight", "conflict"]


class DayThemeKey(str, Enum):
    shopping  = "shopping"
    sights    = "sights"
    museums   = "museums"
    food      = "food"
    nightlife = "nightlife"
    nature    = "nature"
    mixed     = "mixed"


# ── Geography ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinates:
    """A (lat, lng) pair. Activity rows upstream store [lng, lat]; convert explicitly."""
    lat: float
    lng: float

    @classmethod
    def from_lng_lat(cls, pair: Any) -> Optional["Coordinates"]:
        """Build from a [lng, lat] pair; None when the pair is missing or non-numeric."""
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            return None
        try:
            lng, lat = float(pair[0]), float(pair[1])
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None
        return cls(lat=lat, lng=lng)


# ── Opening hours ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OpenHoursRow:
    """One opening window for a weekday (0 = Sunday). None fields mean "unknown"."""
    day: Optional[int]
    open_hour: Optional[int] = None
    open_minute: Optional[int] = None
    close_hour: Optional[int] = None
    close_minute: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "OpenHoursRow":
        return cls(
            day=row.get("day"),
            open_hour=row.get("open_hour"),
            open_minute=row.get("open_minute"),
            close_hour=row.get("close_hour"),
            close_minute=row.get("close_minute"),
        )


@dataclass(frozen=True)
class OpenInterval:
    """Half-open [start_min, end_min) inside one day."""
    start_min: int
    end_min: int


# ── Scheduler ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScheduleCandidate:
    """An activity not yet bound to a slot."""
    id: str
    name: str
    coordinates: Optional[Coordinates] = None
    types: tuple[str, ...] = ()
    duration_minutes: int = 60
    preferred_date: Optional[str] = None
    open_hours: Optional[tuple[OpenHoursRow, ...]] = None


@dataclass(frozen=True)
class FixedPlacement:
    """Already-scheduled occupancy the scheduler must not move or overlap."""
    date: str
    start_min: int
    end_min: int
    coordinates: Optional[Coordinates] = None


@dataclass
class Placement:
    id: str
    date: str
    start_min: int
    end_min: int
    start_time: str = ""
    end_time: str = ""
    reasons: list[str] = field(default_factory=list)


@dataclass
class UnplacedCandidate:
    id: str
    reason: str


@dataclass
class ScheduleResult:
    placements: list[Placement] = field(default_factory=list)
    unplaced: list[UnplacedCandidate] = field(default_factory=list)


# ── Curation ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CurationCandidate:
    """
    An unscheduled itinerary activity offered to the curation engine.

    ``duration`` may be minutes or a duration string ("45 minutes",
    "01:30:00"); it is normalised by parse_duration_to_minutes.
    """
    itinerary_activity_id: str
    name: str
    activity_id: Optional[int] = None
    coordinates: Optional[Coordinates] = None
    types: tuple[str, ...] = ()
    duration: Union[int, float, str, None] = 60
    locked_date: Optional[str] = None


@dataclass
class CuratedItem:
    itinerary_activity_id: str
    title: str
    start_time: str
    end_time: str
    theme: Optional[DayThemeKey] = None


@dataclass
class CuratedDayPlan:
    date: str
    rationale: str
    items: list[CuratedItem] = field(default_factory=list)


@dataclass
class CurationResult:
    operations: list = field(default_factory=list)      # list[UpdateActivityOperation]
    day_plans: list[CuratedDayPlan] = field(default_factory=list)
    scheduled_ids: set[str] = field(default_factory=set)


# ── Upstream itinerary rows ──────────────────────────────────────────────────

@dataclass(frozen=True)
class ActivityDetails:
    activity_id: Optional[int] = None
    name: str = ""
    types: tuple[str, ...] = ()
    coordinates: Optional[tuple[float, float]] = None   # [lng, lat]


@dataclass(frozen=True)
class ItineraryActivity:
    """A persisted itinerary row; date/start/end are all None when unscheduled."""
    itinerary_activity_id: str
    itinerary_destination_id: str = ""
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    activity: Optional[ActivityDetails] = None

    @property
    def is_unscheduled(self) -> bool:
        return self.date is None and self.start_time is None and self.end_time is None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ItineraryActivity":
        raw = row.get("activity") or None
        activity = None
        if isinstance(raw, dict):
            activity_id = raw.get("activity_id")
            try:
                activity_id = int(activity_id) if activity_id is not None else None
            except (TypeError, ValueError):
                activity_id = None
            coords = raw.get("coordinates")
            activity = ActivityDetails(
                activity_id=activity_id,
                name=str(raw.get("name") or ""),
                types=tuple(str(t) for t in (raw.get("types") or ())),
                coordinates=tuple(coords) if isinstance(coords, (list, tuple)) else None,
            )
        return cls(
            itinerary_activity_id=str(row.get("itinerary_activity_id") or "").strip(),
            itinerary_destination_id=str(row.get("itinerary_destination_id") or "").strip(),
            date=row.get("date"),
            start_time=row.get("start_time"),
            end_time=row.get("end_time"),
            activity=activity,
        )


@dataclass
class AlternativeSuggestion:
    candidate_id: str
    score: float
    distance_meters: Optional[float] = None
    is_open_during_slot: Optional[bool] = None
    reasons: list[str] = field(default_factory=list)


# ── Travel time ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TravelTimeConflict:
    status: ConflictStatus
    required_gap_minutes: int
    slack_minutes: int
    short_by_minutes: int


@dataclass(frozen=True)
class TravelTimeShift:
    shift_min: int
    new_start_min: int
    new_end_min: int


@dataclass(frozen=True)
class ScheduledRow:
    """One timed activity on a day, as fed to the segment builder."""
    id: str
    date: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class AdjacentSegment:
    date: str
    from_id: str
    to_id: str
    from_end_min: int
    to_start_min: int
    gap_minutes: int


@dataclass
class SegmentAssessment:
    segment: AdjacentSegment
    travel_minutes: int
    conflict: TravelTimeConflict
    shift: Optional[TravelTimeShift] = None


# ── Trip blocks (custom events) ──────────────────────────────────────────────

@dataclass(frozen=True)
class PlannedItem:
    id: str
    name: str
    date: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class TripBlock:
    """A fixed calendar event: flight, hotel check-in/out, or a custom block."""
    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    kind: Optional[str] = None


# ── Preferences ──────────────────────────────────────────────────────────────

@dataclass
class PreferencesProfile:
    pace: Pace = "balanced"
    day_start: str = "09:00"
    day_end: str = "18:00"
    interests: list[str] = field(default_factory=list)
    travel_mode: TravelMode = "walking"


@dataclass
class InferredPreferences:
    pace: Pace
    day_start: str
    day_end: str
    interests: list[str] = field(default_factory=list)


@dataclass
class PreferenceHints:
    """Explicit values pulled from a free-text message; None = not mentioned."""
    pace: Optional[Pace] = None
    interests: Optional[list[str]] = None

    def is_empty(self) -> bool:
        return self.pace is None and not self.interests


@dataclass
class EffectivePreferences:
    source: Literal["explicit", "inferred"]
    preferences: PreferencesProfile
