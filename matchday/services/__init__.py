"""
Services package for the Matchday engine.

This package contains the clock, timeline and session services plus the
persistence, autosave and reporting collaborators around them.
"""
from .match_clock import MatchClock
from .event_timeline import EventTimeline, TimelineView
from .match_session import MatchSession
from .persistence_service import MatchStore, InMemoryMatchStore, JsonFileMatchStore
from .autosave import AutosaveLoop
from .report_service import ReportService, MatchReportExporter
from .service_factory import ServiceFactory

__all__ = [
    "MatchClock", "EventTimeline", "TimelineView", "MatchSession",
    "MatchStore", "InMemoryMatchStore", "JsonFileMatchStore",
    "AutosaveLoop", "ReportService", "MatchReportExporter", "ServiceFactory"
]
