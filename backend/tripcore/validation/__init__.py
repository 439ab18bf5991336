"""
tripcore/validation package — input guards and custom-event overlap warnings.
"""
from tripcore.validation.custom_event_overlaps import build_custom_event_overlap_warnings
from tripcore.validation.ingestion_validator import (
    ValidationResult,
    filter_valid,
    validate_coordinates,
    validate_open_hours_row,
)

__all__ = [
    "ValidationResult",
    "filter_valid",
    "validate_coordinates",
    "validate_open_hours_row",
    "build_custom_event_overlap_warnings",
]
