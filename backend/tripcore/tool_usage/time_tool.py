"""
tool_usage/time_tool.py
-----------------------
Wall-clock time and ISO-date primitives shared by every planner module.

All times are minutes from midnight in the destination's local day; no
timezone conversion happens anywhere in the engine. Parsers return None
on malformed input instead of raising.
"""

from __future__ import annotations

import math
import re
from datetime import date, timedelta
from typing import Any, Optional

from tripcore import config

MINUTES_PER_DAY: int = 24 * 60

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE     = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DURATION_TEXT_RE = re.compile(
    r"^(\d+(?:\.\d+)?)\s*(?:m|min|mins|minute|minutes)$", re.IGNORECASE
)
_DURATION_CLOCK_RE = re.compile(r"^(\d+):(\d{2})(?::(\d{2}))?$")
_DURATION_BARE_RE  = re.compile(r"^(\d+(?:\.\d+)?)$")


def clamp_minute(value: float) -> int:
    """Floor *value* and clamp it to [0, 1440]."""
    return max(0, min(MINUTES_PER_DAY, math.floor(value)))


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: touching windows do not overlap."""
    return a_start < b_end and a_end > b_start


def parse_time_to_minutes(value: Any) -> Optional[int]:
    """
    Parse "HH:MM" or "HH:MM:SS" into minutes from midnight.

    Seconds are dropped. "24:00" is accepted (end-of-day for end times);
    anything else out of range returns None.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes > 59 or seconds > 59:
        return None
    if hours == 24 and minutes == 0 and seconds == 0:
        return MINUTES_PER_DAY
    if hours > 23:
        return None
    return hours * 60 + minutes


def format_minutes_to_hhmm(minutes: float) -> str:
    """Format minutes from midnight as zero-padded "HH:MM"."""
    m = clamp_minute(minutes)
    return f"{m // 60:02d}:{m % 60:02d}"


def is_iso_date_string(value: Any) -> bool:
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def get_day_of_week_from_iso_date(iso_date: str) -> int:
    """Return 0..6 with Sunday = 0, matching OpenHoursRow.day."""
    return date.fromisoformat(iso_date).isoweekday() % 7


def list_iso_dates_in_range(from_date: str, to_date: str) -> list[str]:
    """Inclusive list of ISO dates; empty on invalid or inverted input."""
    if not is_iso_date_string(from_date) or not is_iso_date_string(to_date):
        return []
    start, end = date.fromisoformat(from_date), date.fromisoformat(to_date)
    if end < start:
        return []
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


def build_iso_date_range(
    from_date: str,
    to_date: str,
    max_days: int = config.CURATION_MAX_DAYS,
) -> list[str]:
    """Like list_iso_dates_in_range but truncated to *max_days* entries."""
    return list_iso_dates_in_range(from_date, to_date)[: max(0, max_days)]


def parse_duration_to_minutes(value: Any) -> Optional[int]:
    """
    Normalise a duration into whole positive minutes.

    Accepts a number of minutes, "45 minutes" / "45 min", "HH:MM[:SS]",
    or a bare numeric string. Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        minutes = math.floor(value)
        return minutes if minutes > 0 else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = _DURATION_TEXT_RE.match(text)
    if match:
        minutes = math.floor(float(match.group(1)))
        return minutes if minutes > 0 else None

    match = _DURATION_CLOCK_RE.match(text)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        total = hours * 60 + minutes + math.floor(seconds / 60 + 0.5)
        return total if total > 0 else None

    match = _DURATION_BARE_RE.match(text)
    if match:
        minutes = math.floor(float(match.group(1)))
        return minutes if minutes > 0 else None

    return None
