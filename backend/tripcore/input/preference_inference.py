"""
input/preference_inference.py
-----------------------------
Traveller preference profile for itinerary prompting and curation.

Three sources, merged field by field (highest precedence first):
  1. hints pulled from the current chat message   (extract_preference_hints_from_message)
  2. the stored profile the user saved explicitly (parse_ai_itinerary_preferences)
  3. values inferred from already-scheduled rows   (infer_preferences_from_activities)
  4. hard defaults (balanced, 09:00-18:00, walking)

No LLM involved; message hints come from a local keyword map.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from tripcore.planning.themes import classify_themes_from_types
from tripcore.schemas.itinerary import (
    EffectivePreferences,
    InferredPreferences,
    ItineraryActivity,
    PreferenceHints,
    PreferencesProfile,
)
from tripcore.schemas.preferences import AiItineraryPreferences
from tripcore.tool_usage.time_tool import format_minutes_to_hhmm, is_iso_date_string, parse_time_to_minutes

logger = logging.getLogger(__name__)

_DEFAULT_DAY_START_MIN = 9 * 60
_DEFAULT_DAY_END_MIN   = 18 * 60
_PACKED_AVG_PER_DAY    = 6
_RELAXED_AVG_PER_DAY   = 3
_MAX_INTERESTS         = 3

# Tie-break order when two interests were seen equally often.
INTEREST_ORDER: tuple[str, ...] = ("sights", "museums", "food", "shopping", "nature", "nightlife")

# ─────────────────────────────────────────────────────────────────────────────
# Local keyword → value maps for message hints
# ─────────────────────────────────────────────────────────────────────────────
_PACE_KEYWORDS: dict[str, str] = {
    "relaxed": "relaxed", "chill": "relaxed", "easy": "relaxed", "slow": "relaxed",
    "balanced": "balanced", "moderate": "balanced",
    "packed": "packed",   "busy": "packed",   "full": "packed",  "intense": "packed",
}

_INTEREST_KEYWORDS: dict[str, str] = {
    # Shopping
    "shopping": "shopping", "shops": "shopping", "mall": "shopping", "market": "shopping",
    # Food
    "food": "food", "eat": "food", "restaurant": "food", "cafe": "food",
    "coffee": "food", "dinner": "food", "lunch": "food",
    # Museums
    "museum": "museums", "museums": "museums", "gallery": "museums",
    # Sights
    "sight": "sights", "sights": "sights", "landmark": "sights",
    "attraction": "sights", "historic": "sights",
    # Nature
    "nature": "nature", "park": "nature", "hike": "nature", "beach": "nature",
    # Nightlife
    "nightlife": "nightlife", "bar": "nightlife", "club": "nightlife",
}


def _keyword_hit(keyword: str, text: str) -> Optional[int]:
    """Position of *keyword* as a whole word in *text*, or None."""
    match = re.search(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", text)
    return match.start() if match else None


def _median(values: list[int]) -> Optional[int]:
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return math.floor((ordered[mid - 1] + ordered[mid]) / 2 + 0.5)


def _infer_pace(counts_per_day: list[int]) -> str:
    if not counts_per_day:
        return "balanced"
    avg = sum(counts_per_day) / len(counts_per_day)
    if avg >= _PACKED_AVG_PER_DAY:
        return "packed"
    if avg <= _RELAXED_AVG_PER_DAY:
        return "relaxed"
    return "balanced"


def _rank_interests(rows: list[ItineraryActivity]) -> list[str]:
    counts: Counter[str] = Counter()
    for row in rows:
        types = list(row.activity.types) if row.activity else []
        counts.update(theme.value for theme in classify_themes_from_types(types))
    order = {name: i for i, name in enumerate(INTEREST_ORDER)}
    ranked = sorted(counts, key=lambda k: (-counts[k], order.get(k, len(order)), k))
    return ranked[:_MAX_INTERESTS]


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def infer_preferences_from_activities(activities: Iterable[ItineraryActivity]) -> InferredPreferences:
    """
    Median start / median end of dated rows as the day window, mean rows
    per dated day as the pace, and the three most frequent themes.
    """
    rows = list(activities or ())
    starts: list[int] = []
    ends: list[int] = []
    per_day: Counter[str] = Counter()

    for row in rows:
        if not is_iso_date_string(row.date):
            continue
        start = parse_time_to_minutes(row.start_time)
        end = parse_time_to_minutes(row.end_time)
        if start is not None:
            starts.append(start)
        if end is not None:
            ends.append(end)
        per_day[row.date] += 1

    start_med = _median(starts)
    end_med = _median(ends)
    inferred = InferredPreferences(
        pace=_infer_pace(list(per_day.values())),
        day_start=format_minutes_to_hhmm(start_med if start_med is not None else _DEFAULT_DAY_START_MIN),
        day_end=format_minutes_to_hhmm(end_med if end_med is not None else _DEFAULT_DAY_END_MIN),
        interests=_rank_interests(rows),
    )
    logger.debug("inferred preferences from %d row(s): %s", len(rows), inferred)
    return inferred


def extract_preference_hints_from_message(message: Optional[str]) -> PreferenceHints:
    """
    Pace and interest keywords stated in *message*. When several pace words
    appear the strongest wins (packed > balanced > relaxed); interests keep
    the order they are mentioned in.
    """
    text = str(message or "").lower()
    hints = PreferenceHints()
    if not text.strip():
        return hints

    paces = {value for kw, value in _PACE_KEYWORDS.items() if _keyword_hit(kw, text) is not None}
    for pace in ("packed", "balanced", "relaxed"):
        if pace in paces:
            hints.pace = pace
            break

    positions: dict[str, int] = {}
    for kw, interest in _INTEREST_KEYWORDS.items():
        pos = _keyword_hit(kw, text)
        if pos is not None and (interest not in positions or pos < positions[interest]):
            positions[interest] = pos
    if positions:
        hints.interests = sorted(positions, key=lambda k: (positions[k], k))
    return hints


def parse_ai_itinerary_preferences(value: Any) -> Optional[AiItineraryPreferences]:
    """Validate a stored profile blob; None when it does not match version 1."""
    if value is None:
        return None
    try:
        return AiItineraryPreferences.model_validate(value)
    except ValidationError as exc:
        logger.debug("ignoring stored preferences: %d validation error(s)", exc.error_count())
        return None


def get_ai_itinerary_preferences_from_profile(profile_preferences: Any) -> Optional[AiItineraryPreferences]:
    """Read ``ai_itinerary`` out of a user's stored preferences mapping."""
    if not isinstance(profile_preferences, dict):
        return None
    return parse_ai_itinerary_preferences(profile_preferences.get("ai_itinerary"))


def merge_effective_preferences(
    explicit_profile: Optional[AiItineraryPreferences] = None,
    inferred: Optional[InferredPreferences] = None,
    message_hints: Optional[PreferenceHints] = None,
) -> EffectivePreferences:
    """
    Field-by-field merge: message hints > stored profile > inferred > defaults.
    ``source`` is "explicit" when the stored profile or the message supplied
    any field.
    """
    defaults = PreferencesProfile()
    hints = message_hints or PreferenceHints()

    def _pick(*values: Any) -> Any:
        return next(v for v in values if v is not None)

    explicit_fields = {
        name: getattr(explicit_profile, name)
        for name in ("pace", "day_start", "day_end", "interests", "travel_mode")
        if explicit_profile is not None and getattr(explicit_profile, name) is not None
    }
    interests_explicit = explicit_fields.get("interests") or None

    merged = PreferencesProfile(
        pace=_pick(hints.pace, explicit_fields.get("pace"), inferred.pace if inferred else None, defaults.pace),
        day_start=_pick(explicit_fields.get("day_start"), inferred.day_start if inferred else None, defaults.day_start),
        day_end=_pick(explicit_fields.get("day_end"), inferred.day_end if inferred else None, defaults.day_end),
        interests=list(_pick(
            hints.interests or None,
            interests_explicit,
            (inferred.interests or None) if inferred else None,
            defaults.interests,
        )),
        travel_mode=_pick(explicit_fields.get("travel_mode"), defaults.travel_mode),
    )
    source = "explicit" if explicit_fields or not hints.is_empty() else "inferred"
    return EffectivePreferences(source=source, preferences=merged)


def build_preferences_prompt_lines(preferences: PreferencesProfile, source: str) -> list[str]:
    """Plain-text lines describing *preferences* for a model prompt."""
    lines = [
        f"Preferences source: {source}",
        f"Pace: {preferences.pace}",
        f"Typical day window: {preferences.day_start}–{preferences.day_end}",
        f"Travel mode: {preferences.travel_mode}",
    ]
    if preferences.interests:
        lines.append(f"Interests: {', '.join(preferences.interests)}")
    return lines
