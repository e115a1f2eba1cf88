"""
Event timeline service for the Matchday engine.

The timeline receives events already stamped by the session; it never
reads the clock itself and never changes an event's stamp.
"""
from __future__ import annotations

import logging
from collections import Counter
from operator import attrgetter
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from ..errors import NotFound, PreconditionViolation
from ..models import (
    CardColor, CardEvent, EventKind, GoalForEvent, Half, MatchEvent, Milestone,
    MilestoneEvent, SubstitutionEvent
)

logger = logging.getLogger(__name__)


class TimelineView:
    """
    Events in canonical order: match time ascending, ties by recording order.

    The order is recomputed every time the view is iterated, so the view
    can be iterated repeatedly and always reflects the current timeline.
    """

    def __init__(self, events: List[MatchEvent]):
        self._events = events

    def __iter__(self) -> Iterator[MatchEvent]:
        # sorted() is stable, so equal stamps keep their recording order
        return iter(sorted(self._events, key=attrgetter("match_time_seconds")))

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"TimelineView({len(self._events)} events)"


class EventTimeline:
    """Append-only log of match events with derived counts."""

    def __init__(self, events: Optional[Iterable[MatchEvent]] = None):
        self._events: List[MatchEvent] = []
        for event in events or ():
            self.record(event)

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return any(e.id == event_id for e in self._events)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def record(self, event: MatchEvent) -> None:
        """
        Append an event.

        Raises:
            PreconditionViolation: If it is not a MatchEvent or its id is taken
        """
        if not isinstance(event, MatchEvent):
            raise PreconditionViolation(f"Expected a MatchEvent, got {type(event).__name__}")
        if event.id in self:
            raise PreconditionViolation(f"Duplicate event id: {event.id}")
        self._events.append(event)
        logger.debug("Recorded %s event %s at %ss", event.kind.value, event.id, event.match_time_seconds)

    def remove(self, event_id: str) -> MatchEvent:
        """
        Remove an event by id.

        Returns:
            The removed event

        Raises:
            NotFound: If no event has that id
        """
        for index, event in enumerate(self._events):
            if event.id == event_id:
                del self._events[index]
                logger.debug("Removed %s event %s", event.kind.value, event_id)
                return event
        raise NotFound("Event", event_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, event_id: str) -> MatchEvent:
        for event in self._events:
            if event.id == event_id:
                return event
        raise NotFound("Event", event_id)

    def ordered_view(self) -> TimelineView:
        return TimelineView(self._events)

    def last_recorded(self, *, include_milestones: bool = False) -> Optional[MatchEvent]:
        """Most recently recorded event (by recording order, not match time)."""
        for event in reversed(self._events):
            if include_milestones or not event.is_milestone:
                return event
        return None

    def score_for(self) -> int:
        return self._count(EventKind.GOAL_FOR)

    def score_against(self) -> int:
        return self._count(EventKind.GOAL_AGAINST)

    def card_counts(self) -> Dict[CardColor, int]:
        counts = {color: 0 for color in CardColor}
        for event in self._events:
            if isinstance(event, CardEvent):
                counts[event.card_color] += 1
        return counts

    def counts_by_kind(self) -> Dict[EventKind, int]:
        counts = {kind: 0 for kind in EventKind}
        counts.update(Counter(e.kind for e in self._events))
        return counts

    def scorers(self) -> Dict[str, int]:
        """Goals per scorer id (unattributed goals are left out)."""
        return dict(Counter(
            e.scorer_id for e in self._events
            if isinstance(e, GoalForEvent) and e.scorer_id is not None
        ))

    def assists(self) -> Dict[str, int]:
        return dict(Counter(
            e.assist_id for e in self._events
            if isinstance(e, GoalForEvent) and e.assist_id is not None
        ))

    def players_on_pitch(self, starting_lineup: Sequence[str]) -> List[str]:
        """Starting lineup with substitutions applied in match-time order."""
        on_pitch = list(starting_lineup)
        for event in self.ordered_view():
            if isinstance(event, SubstitutionEvent):
                if event.player_off_id in on_pitch:
                    on_pitch.remove(event.player_off_id)
                if event.player_on_id not in on_pitch:
                    on_pitch.append(event.player_on_id)
        return on_pitch

    def available_substitutes(self, starting_lineup: Sequence[str], substitutes: Sequence[str]) -> List[str]:
        """Squad players not on the pitch, including anyone already subbed off."""
        on_pitch = set(self.players_on_pitch(starting_lineup))
        return [p for p in list(substitutes) + list(starting_lineup) if p not in on_pitch]

    def events_in_half(self, half, half_time_elapsed_seconds: Optional[int]) -> List[MatchEvent]:
        """
        Events of one half, in canonical order.

        Before half time has been called everything belongs to the first
        half. Afterwards an event is a second-half event when it was recorded
        at or after the second-half kick-off, or is stamped past the
        half-time value. Events logged during the break share the half-time
        stamp and stay in the first half.
        """
        which = half if isinstance(half, Half) else Half(half)
        if half_time_elapsed_seconds is None:
            return list(self.ordered_view()) if which is Half.FIRST else []

        kick_off_index = self._second_half_kick_off_index()
        selected = []
        for index, event in enumerate(self._events):
            in_second = (
                (kick_off_index is not None and index >= kick_off_index)
                or event.match_time_seconds > half_time_elapsed_seconds
            )
            if in_second == (which is Half.SECOND):
                selected.append(event)
        return list(TimelineView(selected))

    def _second_half_kick_off_index(self) -> Optional[int]:
        for index, event in enumerate(self._events):
            if isinstance(event, MilestoneEvent) and event.milestone is Milestone.SECOND_HALF_KICK_OFF:
                return index
        return None

    def _count(self, kind: EventKind) -> int:
        return sum(1 for e in self._events if e.kind is kind)
