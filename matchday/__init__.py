"""
Matchday

A match clock and event-timeline engine for recording football matches:
a suspension-safe two-half clock, match-report time formatting with
stoppage notation, and a time-ordered log of goals, cards, penalties and
substitutions.

The Flask JSON API in ``matchday.ui`` is imported separately so the core
has no web dependency.
"""
from .errors import MatchError, InvalidTransition, PreconditionViolation, NotFound
from .models import ClockPhase, Half, EventKind, MatchEvent, MatchMetadata, MatchSnapshot
from .services import (
    MatchClock, EventTimeline, MatchSession, JsonFileMatchStore, InMemoryMatchStore,
    AutosaveLoop, ReportService
)
from .utils import format_match_time, format_time_with_added, format_total_game_time, now_ts

__version__ = "1.0.0"

__all__ = [
    "MatchError", "InvalidTransition", "PreconditionViolation", "NotFound",
    "ClockPhase", "Half", "EventKind", "MatchEvent", "MatchMetadata", "MatchSnapshot",
    "MatchClock", "EventTimeline", "MatchSession", "JsonFileMatchStore",
    "InMemoryMatchStore", "AutosaveLoop", "ReportService",
    "format_match_time", "format_time_with_added", "format_total_game_time", "now_ts"
]
