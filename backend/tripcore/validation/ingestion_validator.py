"""
validation/ingestion_validator.py
---------------------------------
Data-quality guards applied to upstream rows before the planners use them.

The engine never rejects a whole request because of one bad row: failed
checks narrow a record to "unknown" (no coordinates, no opening window)
and planning carries on.

  Coordinates:
    ✓ Both axes numeric and finite
    ✓ Latitude in [-90, 90], longitude in [-180, 180]

  Opening-hours row:
    ✓ day in 0..6
    ✓ open/close hour in 0..23, minute in 0..59, all four present

Usage:
    from tripcore.validation import validate_coordinates, filter_valid

    clean_rows = filter_valid(rows, validate_open_hours_row)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, TypeVar

from tripcore.schemas.itinerary import Coordinates, OpenHoursRow

T = TypeVar("T")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
    """
    valid: bool
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# ── Coordinates ────────────────────────────────────────────────────────────────

def validate_coordinates(coords: Optional[Coordinates]) -> ValidationResult:
    if coords is None:
        return ValidationResult(valid=False, errors=["coordinates missing"])

    errors: list[str] = []
    lat, lng = _as_number(coords.lat), _as_number(coords.lng)
    if lat is None or lng is None:
        return ValidationResult(
            valid=False,
            errors=[f"lat/lng must be finite numbers (got lat={coords.lat!r}, lng={coords.lng!r})"],
        )
    if not (-90.0 <= lat <= 90.0):
        errors.append(f"lat={lat} is outside valid range [-90, 90]")
    if not (-180.0 <= lng <= 180.0):
        errors.append(f"lng={lng} is outside valid range [-180, 180]")
    return ValidationResult(valid=not errors, errors=errors)


def usable_coordinates(coords: Optional[Coordinates]) -> Optional[Coordinates]:
    """Return *coords* when they pass validation, else None ("unknown")."""
    return coords if validate_coordinates(coords) else None


# ── Opening-hours rows ─────────────────────────────────────────────────────────

def validate_open_hours_row(row: OpenHoursRow) -> ValidationResult:
    errors: list[str] = []

    day = _as_number(row.day)
    if day is None or day != int(day) or not (0 <= day <= 6):
        errors.append(f"day={row.day!r} must be an integer in 0..6")

    for label, value, upper in (
        ("open_hour", row.open_hour, 23),
        ("open_minute", row.open_minute, 59),
        ("close_hour", row.close_hour, 23),
        ("close_minute", row.close_minute, 59),
    ):
        number = _as_number(value)
        if number is None:
            errors.append(f"{label} is missing")
        elif not (0 <= number <= upper):
            errors.append(f"{label}={value!r} is outside valid range [0, {upper}]")

    return ValidationResult(valid=not errors, errors=errors)


# ── Batch helper ───────────────────────────────────────────────────────────────

def filter_valid(
    records: Iterable[T],
    validator: Callable[[T], ValidationResult],
) -> list[T]:
    """Keep only records the validator accepts, preserving order."""
    return [r for r in records if validator(r)]
