"""Pytest fixtures and record factories for offline engine tests."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from tripcore.schemas.itinerary import (
    ActivityDetails,
    Coordinates,
    CurationCandidate,
    ItineraryActivity,
    OpenHoursRow,
    ScheduleCandidate,
)

# 2026-01-05 is a Monday (day 1); 2026-03-18 is a Wednesday (day 3).
MONDAY = "2026-01-05"
WEDNESDAY = "2026-03-18"


def hours(day: int, open_at: str, close_at: str) -> OpenHoursRow:
    """OpenHoursRow from "HH:MM" strings."""
    oh, om = (int(p) for p in open_at.split(":"))
    ch, cm = (int(p) for p in close_at.split(":"))
    return OpenHoursRow(day=day, open_hour=oh, open_minute=om, close_hour=ch, close_minute=cm)


def activity(
    activity_id: str,
    destination_id: str = "1",
    date: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    catalog_id: Optional[int] = None,
    types: tuple[str, ...] = (),
    lng_lat: Optional[tuple[float, float]] = None,
    name: str = "",
) -> ItineraryActivity:
    return ItineraryActivity(
        itinerary_activity_id=activity_id,
        itinerary_destination_id=destination_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        activity=ActivityDetails(
            activity_id=catalog_id,
            name=name or f"Activity {activity_id}",
            types=tuple(types),
            coordinates=lng_lat,
        ),
    )


@pytest.fixture
def make_hours():
    return hours


@pytest.fixture
def make_activity():
    return activity


@pytest.fixture
def make_candidate():
    """Factory for scheduler candidates placed around central Rome by default."""

    def _factory(
        cid: str,
        lat: Optional[float] = 41.9,
        lng: Optional[float] = 12.5,
        duration: int = 60,
        **kwargs: Any,
    ) -> ScheduleCandidate:
        coords = Coordinates(lat, lng) if lat is not None and lng is not None else None
        return ScheduleCandidate(
            id=cid,
            name=kwargs.pop("name", f"Stop {cid}"),
            coordinates=coords,
            duration_minutes=duration,
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_curation_candidate():
    def _factory(
        cid: str,
        lat: Optional[float] = 41.9,
        lng: Optional[float] = 12.5,
        types: tuple[str, ...] = (),
        duration: Any = 60,
        **kwargs: Any,
    ) -> CurationCandidate:
        coords = Coordinates(lat, lng) if lat is not None and lng is not None else None
        return CurationCandidate(
            itinerary_activity_id=cid,
            name=kwargs.pop("name", f"Spot {cid}"),
            coordinates=coords,
            types=tuple(types),
            duration=duration,
            **kwargs,
        )

    return _factory
