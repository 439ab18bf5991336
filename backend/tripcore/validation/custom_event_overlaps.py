"""
validation/custom_event_overlaps.py
-----------------------------------
Warnings for planned activities that collide with fixed trip blocks
(flights, hotel check-in/out, custom calendar events).

Output is a bounded list of human-readable lines. Once ``max_warnings``
lines exist, further overlaps are only counted and reported in one trailing
summary line.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tripcore import config
from tripcore.schemas.itinerary import PlannedItem, TripBlock
from tripcore.tool_usage.time_tool import format_minutes_to_hhmm, overlaps, parse_time_to_minutes

logger = logging.getLogger(__name__)

CUSTOM_EVENT_KIND_LABELS: dict[str, str] = {
    "flight":          "Flight",
    "hotel_check_in":  "Hotel check-in",
    "hotel_check_out": "Hotel check-out",
    "other":           "Custom event",
}
_DEFAULT_LABEL = "Custom event"


def get_custom_event_kind_label(kind: Optional[str]) -> str:
    return CUSTOM_EVENT_KIND_LABELS.get(str(kind or "").strip().lower(), _DEFAULT_LABEL)


def _window(start_time: Optional[str], end_time: Optional[str]) -> Optional[tuple[int, int]]:
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    if start is None or end is None or end <= start:
        return None
    return start, end


def _span(start: int, end: int) -> str:
    return f"{format_minutes_to_hhmm(start)}-{format_minutes_to_hhmm(end)}"


def build_custom_event_overlap_warnings(
    planned: Iterable[PlannedItem],
    blocks: Iterable[TripBlock],
    max_warnings: int = config.DEFAULT_MAX_WARNINGS,
) -> list[str]:
    limit = max(1, min(config.MAX_WARNINGS_CEILING, int(max_warnings)))

    blocks_by_date: dict[str, list[tuple[int, int, str, str]]] = {}
    for block in blocks:
        date = str(block.date or "").strip()
        window = _window(block.start_time, block.end_time)
        if not date or window is None:
            continue
        title = str(block.title or "").strip() or _DEFAULT_LABEL
        blocks_by_date.setdefault(date, []).append(
            (window[0], window[1], title, get_custom_event_kind_label(block.kind))
        )
    for day_blocks in blocks_by_date.values():
        day_blocks.sort(key=lambda b: (b[0], b[1], b[2]))

    warnings: list[str] = []
    suppressed = 0
    for item in planned:
        date = str(item.date or "").strip()
        day_blocks = blocks_by_date.get(date)
        window = _window(item.start_time, item.end_time)
        if not day_blocks or window is None:
            continue

        for b_start, b_end, title, label in day_blocks:
            if not overlaps(window[0], window[1], b_start, b_end):
                continue
            if len(warnings) >= limit:
                suppressed += 1
                continue
            warnings.append(
                f'Overlap on {date}: "{item.name}" ({_span(*window)}) '
                f'overlaps {label} "{title}" ({_span(b_start, b_end)}).'
            )

    if suppressed:
        logger.debug("overlap warnings: %d shown, %d suppressed", len(warnings), suppressed)
        warnings.append(f"Overlap warnings omitted for {suppressed} other item(s).")
    return warnings
