"""Match summary reporting for the Matchday engine."""

from __future__ import annotations

import csv
import io
from typing import Dict, List, Mapping, Optional, Protocol

from ..models import (
    CardColor, CardEvent, ClockPhase, GoalAgainstEvent, GoalForEvent, Half,
    MatchEvent, MatchMetadata, MatchReport, MatchSnapshot, MilestoneEvent, PenaltyEvent,
    PenaltyOutcome, PlayerTally, SubstitutionEvent, TimelineEntry
)
from ..utils import format_half_summary, format_time_with_added, format_total_game_time
from .event_timeline import EventTimeline

MILESTONE_LABELS = {
    "kick_off": "Kick-off",
    "half_time_whistle": "Half time",
    "second_half_kick_off": "Second half kick-off",
    "full_time_whistle": "Full time",
}


class ExportServiceInterface(Protocol):
    """Interface for report export - supports ISP."""

    def export_to_csv(self, report: MatchReport) -> str:
        """Export report to CSV format."""
        ...


class MatchReportExporter:
    """Write the report timeline as CSV rows: Minute, Half, Event, Details."""

    HEADER = ["Minute", "Half", "Event", "Details"]

    def export_to_csv(self, report: MatchReport) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.HEADER)
        for entry in report.first_half + report.second_half:
            writer.writerow([entry.minute, entry.half, entry.kind, entry.description])
        writer.writerow([])
        writer.writerow(["Score", "", report.result, f"{report.score_for}-{report.score_against}"])
        writer.writerow(["Total time", "", "", report.total_time])
        return buffer.getvalue()


class ReportService:
    """
    Build :class:`MatchReport` values from snapshots.

    Works purely from a snapshot, so it can summarise a stored match as
    easily as a live one.
    """

    def __init__(
        self,
        player_names: Optional[Mapping[str, str]] = None,
        export_service: Optional[ExportServiceInterface] = None,
    ) -> None:
        self.player_names: Dict[str, str] = dict(player_names or {})
        self.export_service = export_service or MatchReportExporter()

    def build_report(self, snapshot: MatchSnapshot, at_ts: Optional[float] = None) -> MatchReport:
        """Summarise a snapshot; ``at_ts`` pins the clock reading for running matches."""
        timeline = EventTimeline(snapshot.events)
        elapsed = snapshot.elapsed_seconds(at_ts)
        score_for, score_against = timeline.score_for(), timeline.score_against()

        metadata = snapshot.metadata
        return MatchReport(
            match_id=snapshot.match_id,
            opposition=metadata.opposition,
            location=metadata.location,
            match_format=metadata.match_format,
            match_date=metadata.match_date,
            phase=snapshot.phase.value,
            result=self._result(snapshot.phase, score_for, score_against),
            score_for=score_for,
            score_against=score_against,
            elapsed_seconds=elapsed,
            total_time=format_total_game_time(
                elapsed,
                snapshot.planned_duration_minutes,
                snapshot.first_half_added_seconds,
                snapshot.second_half_added_seconds,
            ),
            half_summary=format_half_summary(
                elapsed,
                snapshot.planned_duration_minutes,
                snapshot.first_half_added_seconds,
                snapshot.second_half_added_seconds,
            ),
            card_counts={color.value: count for color, count in timeline.card_counts().items()},
            players=self._player_tallies(metadata, timeline, elapsed),
            first_half=self._entries(snapshot, timeline, Half.FIRST),
            second_half=self._entries(snapshot, timeline, Half.SECOND),
        )

    def export_report_csv(self, snapshot: MatchSnapshot, at_ts: Optional[float] = None) -> str:
        return self.export_service.export_to_csv(self.build_report(snapshot, at_ts))

    def describe(self, event: MatchEvent) -> str:
        """Human-readable line for one event."""
        if isinstance(event, GoalForEvent):
            text = f"Goal ({event.goal_type.value.replace('_', ' ')})"
            if event.scorer_id:
                text += f" by {self._name(event.scorer_id)}"
            if event.assist_id:
                text += f", assist {self._name(event.assist_id)}"
            return text
        if isinstance(event, GoalAgainstEvent):
            return f"Goal conceded ({event.goal_type.value.replace('_', ' ')})"
        if isinstance(event, CardEvent):
            return f"{event.card_color.value.capitalize()} card: {self._name(event.player_id)}"
        if isinstance(event, PenaltyEvent):
            side = "for" if event.for_team else "against"
            text = f"Penalty {side} {event.outcome.value}"
            if event.player_id:
                text += f" ({self._name(event.player_id)})"
            return text
        if isinstance(event, SubstitutionEvent):
            return f"{self._name(event.player_on_id)} on for {self._name(event.player_off_id)}"
        if isinstance(event, MilestoneEvent):
            return MILESTONE_LABELS[event.milestone.value]
        raise TypeError(f"Unhandled event type: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _name(self, player_id: str) -> str:
        return self.player_names.get(player_id, player_id)

    @staticmethod
    def _result(phase: ClockPhase, score_for: int, score_against: int) -> str:
        if phase is not ClockPhase.COMPLETED:
            return "ongoing"
        if score_for > score_against:
            return "win"
        if score_for < score_against:
            return "loss"
        return "draw"

    def _entries(self, snapshot: MatchSnapshot, timeline: EventTimeline, half: Half) -> List[TimelineEntry]:
        entries = []
        for event in timeline.events_in_half(half, snapshot.half_time_elapsed_seconds):
            entries.append(
                TimelineEntry(
                    event_id=event.id,
                    kind=event.kind.value,
                    match_time_seconds=event.match_time_seconds,
                    minute=format_time_with_added(
                        event.match_time_seconds,
                        snapshot.planned_duration_minutes,
                        half.value,
                        snapshot.first_half_added_seconds,
                    ),
                    half=half.value,
                    description=self.describe(event),
                )
            )
        return entries

    @staticmethod
    def _player_tallies(metadata: MatchMetadata, timeline: EventTimeline, elapsed: int) -> List[PlayerTally]:
        """
        Per-player contributions, with every squad member listed.

        Time on the pitch runs from kick-off (starters) or the substitution
        stamp (players coming on) until the player is taken off or the clock
        reading the report was built at.
        """
        tallies: Dict[str, PlayerTally] = {}
        # player id -> match time the player last came on, while on the pitch
        on_since: Dict[str, int] = {player_id: 0 for player_id in metadata.starting_lineup}

        def tally(player_id: str) -> PlayerTally:
            if player_id not in tallies:
                tallies[player_id] = PlayerTally(player_id=player_id)
            return tallies[player_id]

        for player_id in metadata.starting_lineup + metadata.substitutes:
            tally(player_id)

        for event in timeline.ordered_view():
            if isinstance(event, GoalForEvent):
                if event.scorer_id:
                    tally(event.scorer_id).goals += 1
                if event.assist_id:
                    tally(event.assist_id).assists += 1
            elif isinstance(event, CardEvent):
                if event.card_color is CardColor.RED:
                    tally(event.player_id).red_cards += 1
                else:
                    tally(event.player_id).yellow_cards += 1
            elif isinstance(event, PenaltyEvent):
                if event.for_team and event.player_id and event.outcome is PenaltyOutcome.SCORED:
                    tally(event.player_id).penalties_scored += 1
            elif isinstance(event, SubstitutionEvent):
                tally(event.player_off_id).subbed_off = True
                tally(event.player_on_id).subbed_on = True
                came_on = on_since.pop(event.player_off_id, None)
                if came_on is not None:
                    tally(event.player_off_id).time_on_pitch_seconds += event.match_time_seconds - came_on
                on_since.setdefault(event.player_on_id, event.match_time_seconds)

        for player_id, came_on in on_since.items():
            tally(player_id).time_on_pitch_seconds += max(0, elapsed - came_on)
        for player in tallies.values():
            player.time_off_pitch_seconds = max(0, elapsed - player.time_on_pitch_seconds)

        return sorted(tallies.values(), key=lambda t: (-t.goals, -t.assists, t.player_id))
