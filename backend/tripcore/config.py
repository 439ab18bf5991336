"""
config.py
---------
Central configuration for the tripcore scheduling engine.
Every knob is read from the environment (or an optional .env beside this
package) once at import time. All time values are wall-clock minutes.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("TRIPCORE_LOG_LEVEL", "WARNING")

# ── Day window (minutes from midnight) ───────────────────────────────────────
DAY_START_MIN: int = int(os.getenv("DAY_START_MIN", "600"))    # 10:00
DAY_END_MIN:   int = int(os.getenv("DAY_END_MIN",   "1080"))   # 18:00

# ── Scheduler ────────────────────────────────────────────────────────────────
SCHEDULE_STEP_MIN:       int   = int(os.getenv("SCHEDULE_STEP_MIN",   "5"))
SCHEDULE_BUFFER_MIN:     int   = int(os.getenv("SCHEDULE_BUFFER_MIN", "10"))
WALKING_METERS_PER_MIN:  int   = int(os.getenv("WALKING_METERS_PER_MIN", "75"))   # ~4.5 km/h
CLUSTER_RADIUS_M:        float = float(os.getenv("CLUSTER_RADIUS_M", "5000"))
DEFAULT_DURATION_MIN:    int   = int(os.getenv("DEFAULT_DURATION_MIN", "60"))
MIN_DURATION_MIN:        int   = 15
MAX_DURATION_MIN:        int   = 8 * 60

# ── Curation ─────────────────────────────────────────────────────────────────
CURATION_DAY_START: str = os.getenv("CURATION_DAY_START", "09:00")
CURATION_DAY_END:   str = os.getenv("CURATION_DAY_END",   "18:00")
CURATION_MAX_DAYS:  int = int(os.getenv("CURATION_MAX_DAYS", "14"))
CURATION_GRID_DEG:  float = float(os.getenv("CURATION_GRID_DEG", "0.02"))
MIN_FREE_WINDOW_MIN: int = 10

# ── Caps on engine output ────────────────────────────────────────────────────
MAX_OPERATIONS:         int = int(os.getenv("MAX_OPERATIONS", "25"))
MAX_ALTERNATIVES:       int = 3       # hard cap, not configurable
DEFAULT_MAX_WARNINGS:   int = int(os.getenv("DEFAULT_MAX_WARNINGS", "8"))
MAX_WARNINGS_CEILING:   int = 25

# ── Alternatives ranking ─────────────────────────────────────────────────────
PROXIMITY_MAX_POINTS:   float = 10.0  # linear to 0 at 10 km
TYPE_OVERLAP_POINTS:    float = 1.5
OPEN_DURING_SLOT_POINTS: float = 3.0

# ── Travel-time conflicts ────────────────────────────────────────────────────
TRAVEL_TIGHT_THRESHOLD_MIN: int = int(os.getenv("TRAVEL_TIGHT_THRESHOLD_MIN", "5"))
TRAVEL_BUFFER_MIN:          int = int(os.getenv("TRAVEL_BUFFER_MIN", "10"))
TRAVEL_MAX_SHIFT_MIN:       int = int(os.getenv("TRAVEL_MAX_SHIFT_MIN", "90"))
