"""
schemas/preferences.py
----------------------
Stored AI-itinerary preference profile (``profiles.preferences.ai_itinerary``).

Version 1 layout; every field except ``version`` is optional so a partially
filled profile still merges with inferred values field by field.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

_HHMM = Annotated[str, Field(pattern=r"^\d{2}:\d{2}$")]


class AiItineraryPreferences(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    version: Literal[1]
    pace: Optional[Literal["relaxed", "balanced", "packed"]] = None
    day_start: Optional[_HHMM] = None
    day_end: Optional[_HHMM] = None
    interests: Optional[Annotated[list[Annotated[str, Field(min_length=1, max_length=40)]],
                                  Field(max_length=12)]] = None
    travel_mode: Optional[Literal["walking", "driving", "transit", "bicycling"]] = None
