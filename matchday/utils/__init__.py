"""
Utilities package for the Matchday engine.

This package contains the time formatters and shared constants.
"""
from .time_utils import (
    format_match_time, format_time_with_added, format_total_game_time,
    format_half_summary, now_ts, FIRST_HALF, SECOND_HALF
)
from .constants import (
    APP_TITLE, DEFAULT_PLANNED_DURATION_MIN, DEFAULT_MATCH_FORMAT, MATCH_FORMATS,
    MATCH_LOCATIONS, PLAYERS_ON_PITCH, AUTOSAVE_INTERVAL_SECONDS
)

__all__ = [
    "format_match_time", "format_time_with_added", "format_total_game_time",
    "format_half_summary", "now_ts", "FIRST_HALF", "SECOND_HALF",
    "APP_TITLE", "DEFAULT_PLANNED_DURATION_MIN", "DEFAULT_MATCH_FORMAT", "MATCH_FORMATS",
    "MATCH_LOCATIONS", "PLAYERS_ON_PITCH", "AUTOSAVE_INTERVAL_SECONDS"
]
