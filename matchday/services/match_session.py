"""
Match session service for the Matchday engine.

MatchSession is the only object the outside world (web API, persistence
loop, display) talks to. It owns one MatchClock and one EventTimeline,
stamps every event with the clock, and hands out immutable snapshots.
"""
import logging
import threading
import uuid
from typing import Any, Callable, List, Mapping, Optional

from ..errors import InvalidTransition, NotFound, PreconditionViolation
from ..models import (
    CardColor, ClockPhase, EventKind, GoalType, MatchEvent, MatchMetadata,
    MatchSnapshot, Milestone, MilestoneEvent, PenaltyOutcome, build_event
)
from ..utils import DEFAULT_PLANNED_DURATION_MIN
from .event_timeline import EventTimeline, TimelineView
from .match_clock import MatchClock

logger = logging.getLogger(__name__)


def _new_event_id() -> str:
    return uuid.uuid4().hex


class MatchSession:
    """
    Lifecycle of one match: not started, live, half time, live, completed.

    Every command runs under a per-session re-entrant lock, so commands are
    applied one at a time in the order received and a concurrent
    :meth:`snapshot` never sees a half-applied command. Nothing in here
    blocks on I/O.
    """

    def __init__(
        self,
        metadata: MatchMetadata,
        planned_duration_minutes: int = DEFAULT_PLANNED_DURATION_MIN,
        *,
        clock: Optional[MatchClock] = None,
        timeline: Optional[EventTimeline] = None,
        id_factory: Callable[[], str] = _new_event_id,
    ):
        if not isinstance(metadata, MatchMetadata):
            raise PreconditionViolation(f"metadata must be MatchMetadata, got {type(metadata).__name__}")
        self._metadata = metadata
        self._clock = clock if clock is not None else MatchClock(planned_duration_minutes)
        self._timeline = timeline if timeline is not None else EventTimeline()
        self._new_id = id_factory
        self._lock = threading.RLock()

    @classmethod
    def from_snapshot(cls, snapshot: MatchSnapshot, **kwargs) -> "MatchSession":
        """Restore a session; a running clock keeps running across the gap."""
        return cls(
            snapshot.metadata,
            clock=MatchClock.from_state(snapshot.clock_state()),
            timeline=EventTimeline(snapshot.events),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def match_id(self) -> str:
        return self._metadata.match_id

    @property
    def metadata(self) -> MatchMetadata:
        return self._metadata

    @property
    def phase(self) -> ClockPhase:
        return self._clock.phase

    @property
    def is_completed(self) -> bool:
        return self._clock.phase is ClockPhase.COMPLETED

    def elapsed_seconds(self) -> int:
        return self._clock.elapsed_seconds()

    def display_time(self) -> str:
        return self._clock.display_time()

    def ordered_events(self) -> TimelineView:
        return self._timeline.ordered_view()

    def score(self):
        """(goals for, goals against)"""
        with self._lock:
            return self._timeline.score_for(), self._timeline.score_against()

    def result(self) -> str:
        """``win``/``draw``/``loss`` once completed, ``ongoing`` before."""
        with self._lock:
            if not self.is_completed:
                return "ongoing"
            goals_for, goals_against = self.score()
        if goals_for > goals_against:
            return "win"
        if goals_for < goals_against:
            return "loss"
        return "draw"

    def players_on_pitch(self) -> List[str]:
        with self._lock:
            return self._timeline.players_on_pitch(self._metadata.starting_lineup)

    def available_substitutes(self) -> List[str]:
        with self._lock:
            return self._timeline.available_substitutes(
                self._metadata.starting_lineup, self._metadata.substitutes
            )

    # ------------------------------------------------------------------
    # Clock commands
    # ------------------------------------------------------------------
    def start_match(self) -> MatchEvent:
        with self._lock:
            return self._milestone_transition("start", Milestone.KICK_OFF)

    def pause_match(self) -> None:
        with self._lock:
            self._clock.pause()

    def resume_match(self) -> None:
        with self._lock:
            self._clock.resume()

    def trigger_half_time(self) -> MatchEvent:
        with self._lock:
            return self._milestone_transition("trigger_half_time", Milestone.HALF_TIME_WHISTLE)

    def start_second_half(self) -> MatchEvent:
        with self._lock:
            return self._milestone_transition("start_second_half", Milestone.SECOND_HALF_KICK_OFF)

    def end_match(self) -> MatchEvent:
        with self._lock:
            event = self._milestone_transition("trigger_full_time", Milestone.FULL_TIME_WHISTLE)
            logger.info("Match %s completed at %ss", self.match_id, event.match_time_seconds)
            return event

    def set_added_time(self, half, seconds: int) -> None:
        with self._lock:
            self._clock.set_added_time(half, seconds)

    # ------------------------------------------------------------------
    # Event commands
    # ------------------------------------------------------------------
    def log_event(self, kind, **payload) -> MatchEvent:
        """Keyword form of :meth:`log_event_payload`."""
        return self.log_event_payload(kind, payload)

    def log_event_payload(self, kind, payload: Mapping[str, Any]) -> MatchEvent:
        """
        Stamp a gameplay event with the current clock value and record it.

        The payload is passed as a mapping so request bodies can carry any
        key without clashing with parameter names.

        Raises:
            InvalidTransition: Before kick-off or after full time
            PreconditionViolation: Bad kind or payload, or an impossible substitution
        """
        with self._lock:
            try:
                event_kind = kind if isinstance(kind, EventKind) else EventKind(kind)
            except ValueError:
                raise PreconditionViolation(f"Unknown event kind: {kind!r}") from None
            if event_kind is EventKind.MILESTONE:
                raise PreconditionViolation("Milestones are recorded by clock commands only")
            if not self._clock.phase.is_live:
                raise InvalidTransition(f"log {event_kind.value}", self._clock.phase)

            event = build_event(event_kind, self._new_id(), self._clock.elapsed_seconds(), dict(payload))
            if event_kind is EventKind.SUBSTITUTION:
                self._check_substitution(event.player_off_id, event.player_on_id)
            self._timeline.record(event)
            logger.info(
                "Match %s: %s at %ss", self.match_id, event_kind.value, event.match_time_seconds
            )
            return event

    def log_goal_for(
        self,
        scorer_id: Optional[str] = None,
        assist_id: Optional[str] = None,
        goal_type=GoalType.OPEN_PLAY,
    ) -> MatchEvent:
        return self.log_event(
            EventKind.GOAL_FOR, scorer_id=scorer_id, assist_id=assist_id, goal_type=goal_type
        )

    def log_goal_against(self, goal_type=GoalType.OPEN_PLAY) -> MatchEvent:
        return self.log_event(EventKind.GOAL_AGAINST, goal_type=goal_type)

    def log_card(self, player_id: str, card_color=CardColor.YELLOW) -> MatchEvent:
        return self.log_event(EventKind.CARD, player_id=player_id, card_color=card_color)

    def log_penalty(self, for_team: bool, outcome=PenaltyOutcome.SCORED, player_id: Optional[str] = None) -> MatchEvent:
        return self.log_event(EventKind.PENALTY, for_team=for_team, outcome=outcome, player_id=player_id)

    def log_substitution(self, player_off_id: str, player_on_id: str) -> MatchEvent:
        return self.log_event(
            EventKind.SUBSTITUTION, player_off_id=player_off_id, player_on_id=player_on_id
        )

    def remove_event(self, event_id: str) -> MatchEvent:
        """
        Remove a gameplay event (corrections are remove + re-record).

        Raises:
            NotFound: If the event does not exist
            PreconditionViolation: If the event is a milestone
            InvalidTransition: Once the match is completed
        """
        with self._lock:
            if self.is_completed:
                raise InvalidTransition("remove event", self._clock.phase)
            event = self._timeline.get(event_id)
            if event.is_milestone:
                raise PreconditionViolation("Milestone events cannot be removed")
            return self._timeline.remove(event_id)

    def undo_last_event(self) -> MatchEvent:
        """Remove the most recently recorded gameplay event."""
        with self._lock:
            if self.is_completed:
                raise InvalidTransition("undo event", self._clock.phase)
            last = self._timeline.last_recorded()
            if last is None:
                raise NotFound("Event", "last recorded")
            return self._timeline.remove(last.id)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def snapshot(self) -> MatchSnapshot:
        """Capture the full session state. Pure in-memory, safe to poll."""
        with self._lock:
            return MatchSnapshot.from_parts(
                self._metadata, self._clock.state, self._timeline.ordered_view()
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _milestone_transition(self, command: str, milestone: Milestone) -> MatchEvent:
        """
        Run a clock command and record its milestone as one step.

        The command runs against a copy of the clock, which only replaces the
        live clock once the milestone is in the timeline. A failing id
        factory or a duplicate id therefore leaves the phase untouched.
        """
        trial = MatchClock.from_state(self._clock.state)
        getattr(trial, command)()
        event = MilestoneEvent(
            id=self._new_id(),
            match_time_seconds=trial.elapsed_seconds(),
            milestone=milestone,
        )
        self._timeline.record(event)
        self._clock = trial
        return event

    def _check_substitution(self, player_off_id: str, player_on_id: str) -> None:
        # Matches set up without a lineup accept any substitution
        if not self._metadata.starting_lineup:
            return
        on_pitch = self._timeline.players_on_pitch(self._metadata.starting_lineup)
        if player_off_id not in on_pitch:
            raise PreconditionViolation(f"{player_off_id} is not on the pitch")
        available = self._timeline.available_substitutes(
            self._metadata.starting_lineup, self._metadata.substitutes
        )
        if player_on_id not in available:
            raise PreconditionViolation(f"{player_on_id} is not available to come on")
