"""
tripcore/planning package — opening hours, themes, the auto-scheduler and
the themed curation engine.
"""
from tripcore.planning.curation import build_curated_day_plan
from tripcore.planning.scheduler import AutoScheduler, auto_schedule_activities
from tripcore.planning.themes import (
    classify_themes_from_types,
    infer_day_theme_from_message,
    primary_theme_from_types,
)

__all__ = [
    "AutoScheduler",
    "auto_schedule_activities",
    "build_curated_day_plan",
    "classify_themes_from_types",
    "infer_day_theme_from_message",
    "primary_theme_from_types",
]
