"""Theme classification from place types and from free text."""

from __future__ import annotations

import pytest

from tripcore.planning.themes import (
    classify_themes_from_types,
    infer_day_theme_from_message,
    normalize_types,
    primary_theme_from_types,
)
from tripcore.schemas.itinerary import DayThemeKey


def test_normalize_types_lowercases_and_dedupes():
    assert normalize_types([" Museum", "museum", None, "", "PARK"]) == ["museum", "park"]
    assert normalize_types("museum") == []


@pytest.mark.parametrize(
    "types, expected",
    [
        (["museum"], [DayThemeKey.museums]),
        (["art_gallery", "restaurant"], [DayThemeKey.museums, DayThemeKey.food]),
        (["tourist_attraction"], [DayThemeKey.sights]),
        (["park"], [DayThemeKey.nature]),
        (["night_club"], [DayThemeKey.nightlife]),
        (["shopping_mall", "cafe"], [DayThemeKey.shopping, DayThemeKey.food]),
        (["lodging"], []),
        ([], []),
        (None, []),
    ],
)
def test_classify_themes_from_types(types, expected):
    assert classify_themes_from_types(types) == expected


def test_sights_excludes_museum_and_nature_overlap():
    # museum and park are historical-type tags but belong to their own themes
    assert DayThemeKey.sights not in classify_themes_from_types(["museum"])
    assert DayThemeKey.sights not in classify_themes_from_types(["park"])


def test_primary_theme_follows_priority():
    assert primary_theme_from_types(["restaurant", "museum", "store"]) == DayThemeKey.shopping
    assert primary_theme_from_types(["restaurant", "tourist_attraction"]) == DayThemeKey.sights
    assert primary_theme_from_types(["lodging"]) is None


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Plan a museum day please", DayThemeKey.museums),
        ("I want to go shopping", DayThemeKey.shopping),
        ("Somewhere with good food", DayThemeKey.food),
        ("Take me hiking", DayThemeKey.nature),
        ("Museums and then dinner", DayThemeKey.mixed),
        ("Just rearrange tomorrow", None),
        ("", None),
        (None, None),
    ],
)
def test_infer_day_theme_from_message(message, expected):
    assert infer_day_theme_from_message(message) == expected
