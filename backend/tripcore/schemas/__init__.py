"""tripcore/schemas — plain records and the downstream operation contract."""

from tripcore.schemas.itinerary import (
    AlternativeSuggestion,
    Coordinates,
    DayThemeKey,
    FixedPlacement,
    ItineraryActivity,
    OpenHoursRow,
    OpenInterval,
    Placement,
    PreferencesProfile,
    ScheduleCandidate,
    ScheduleResult,
    TripBlock,
)
from tripcore.schemas.operations import (
    AddPlaceOperation,
    Operation,
    RemoveActivityOperation,
    UpdateActivityOperation,
    dump_operations,
    parse_operations,
)
from tripcore.schemas.preferences import AiItineraryPreferences

__all__ = [
    "AlternativeSuggestion",
    "Coordinates",
    "DayThemeKey",
    "FixedPlacement",
    "ItineraryActivity",
    "OpenHoursRow",
    "OpenInterval",
    "Placement",
    "PreferencesProfile",
    "ScheduleCandidate",
    "ScheduleResult",
    "TripBlock",
    "AddPlaceOperation",
    "Operation",
    "RemoveActivityOperation",
    "UpdateActivityOperation",
    "dump_operations",
    "parse_operations",
    "AiItineraryPreferences",
]
