"""
Models package for the Matchday engine.

This package contains the core data models used throughout the application.
"""
from .clock_state import ClockPhase, ClockState, Half
from .match_event import (
    EventKind, GoalType, CardColor, PenaltyOutcome, Milestone,
    MatchEvent, GoalForEvent, GoalAgainstEvent, CardEvent, PenaltyEvent,
    SubstitutionEvent, MilestoneEvent, EVENT_TYPES, build_event, event_from_json
)
from .match_snapshot import MatchMetadata, MatchSnapshot
from .match_report import MatchReport, PlayerTally, TimelineEntry

__all__ = [
    "ClockPhase", "ClockState", "Half",
    "EventKind", "GoalType", "CardColor", "PenaltyOutcome", "Milestone",
    "MatchEvent", "GoalForEvent", "GoalAgainstEvent", "CardEvent", "PenaltyEvent",
    "SubstitutionEvent", "MilestoneEvent", "EVENT_TYPES", "build_event", "event_from_json",
    "MatchMetadata", "MatchSnapshot",
    "MatchReport", "PlayerTally", "TimelineEntry"
]
