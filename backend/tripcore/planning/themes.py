"""
planning/themes.py
------------------
Coarse day themes from place-type tags and from free-text requests.

Classification is fixed set membership; nothing is learned or scored.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from tripcore.planning.place_types import FOOD_TYPES, HISTORICAL_TYPES, SHOPPING_TYPES
from tripcore.schemas.itinerary import DayThemeKey

MUSEUM_TYPES: frozenset[str] = frozenset({"museum", "art_gallery"})
NIGHTLIFE_TYPES: frozenset[str] = frozenset({"night_club", "casino", "bar"})
NATURE_TYPES: frozenset[str] = frozenset({
    "national_park", "park", "hiking_area", "beach", "natural_feature",
    "campground", "zoo", "aquarium",
})
SIGHTS_TYPES: frozenset[str] = HISTORICAL_TYPES - MUSEUM_TYPES - NATURE_TYPES

# Order themes are reported in, and the priority used to pick a primary one.
THEME_PRIORITY: tuple[DayThemeKey, ...] = (
    DayThemeKey.shopping,
    DayThemeKey.museums,
    DayThemeKey.sights,
    DayThemeKey.food,
    DayThemeKey.nightlife,
    DayThemeKey.nature,
)

_THEME_TYPE_SETS: dict[DayThemeKey, frozenset[str]] = {
    DayThemeKey.shopping:  SHOPPING_TYPES,
    DayThemeKey.museums:   MUSEUM_TYPES,
    DayThemeKey.sights:    SIGHTS_TYPES,
    DayThemeKey.food:      FOOD_TYPES,
    DayThemeKey.nightlife: NIGHTLIFE_TYPES,
    DayThemeKey.nature:    NATURE_TYPES,
}

_MESSAGE_PATTERNS: dict[DayThemeKey, re.Pattern[str]] = {
    DayThemeKey.shopping:  re.compile(r"\b(shopping|shops?|malls?|boutiques?|markets?)\b"),
    DayThemeKey.museums:   re.compile(r"\b(museums?|gallery|galleries|exhibits?)\b"),
    DayThemeKey.sights:    re.compile(r"\b(sights?|landmarks?|attractions?|historic|tours?)\b"),
    DayThemeKey.food:      re.compile(
        r"\b(food|eat|restaurants?|cafes?|coffee|dinner|lunch|breakfast)\b"
    ),
    DayThemeKey.nightlife: re.compile(r"\b(nightlife|bars?|clubs?|party|drinks?)\b"),
    DayThemeKey.nature:    re.compile(r"\b(nature|hike|hiking|parks?|beach|beaches|outdoors?)\b"),
}


def normalize_types(types: Any) -> list[str]:
    """Lower-cased, stripped, de-duplicated tags in first-seen order."""
    if not isinstance(types, (list, tuple, set, frozenset)):
        return []
    seen: dict[str, None] = {}
    for t in types:
        tag = str(t if t is not None else "").strip().lower()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def classify_themes_from_types(types: Iterable[str] | None) -> list[DayThemeKey]:
    tags = set(normalize_types(types))
    if not tags:
        return []
    return [theme for theme in THEME_PRIORITY if tags & _THEME_TYPE_SETS[theme]]


def primary_theme_from_types(types: Iterable[str] | None) -> Optional[DayThemeKey]:
    themes = classify_themes_from_types(types)
    return themes[0] if themes else None


def infer_day_theme_from_message(message: Optional[str]) -> Optional[DayThemeKey]:
    """None for no keyword hit, the theme for exactly one, ``mixed`` for several."""
    text = str(message or "").lower()
    if not text.strip():
        return None
    hits = [theme for theme, pattern in _MESSAGE_PATTERNS.items() if pattern.search(text)]
    if not hits:
        return None
    if len(hits) == 1:
        return hits[0]
    return DayThemeKey.mixed
