"""tripcore/reoptimization — slot alternatives and travel-time repair suggestions."""

from tripcore.reoptimization.alternative_generator import (
    AlternativeGenerator,
    rank_slot_alternative_candidates,
)
from tripcore.reoptimization.travel_conflicts import (
    assess_day_travel_conflicts,
    build_adjacent_segments,
    classify_travel_time_conflict,
    suggest_travel_time_shift,
)

__all__ = [
    "AlternativeGenerator",
    "rank_slot_alternative_candidates",
    "assess_day_travel_conflicts",
    "build_adjacent_segments",
    "classify_travel_time_conflict",
    "suggest_travel_time_shift",
]
