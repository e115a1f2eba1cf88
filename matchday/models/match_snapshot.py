"""
Snapshot models for the Matchday engine.

A MatchSnapshot is the complete, immutable state of one match session at
one instant. It is what the persistence collaborator stores and what the
display layer reads; nothing in it is recomputed from the live clock.
"""
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..errors import PreconditionViolation
from ..utils import (
    DEFAULT_MATCH_FORMAT, DEFAULT_PLANNED_DURATION_MIN, MATCH_FORMATS, MATCH_LOCATIONS,
    PLAYERS_ON_PITCH, now_ts
)
from .clock_state import ClockPhase, ClockState, Half
from .match_event import EventKind, MatchEvent, event_from_json


def _id_tuple(values, field_name: str) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        raise PreconditionViolation(f"{field_name} must be a list of player ids, not a string")
    result = tuple(values)
    for value in result:
        if not isinstance(value, str) or not value:
            raise PreconditionViolation(f"{field_name} contains an invalid player id: {value!r}")
    if len(set(result)) != len(result):
        raise PreconditionViolation(f"{field_name} contains duplicate player ids")
    return result


@dataclass(frozen=True)
class MatchMetadata:
    """
    Match setup details fixed before kick-off.

    Attributes:
        match_id: Unique identifier used as the storage key
        opposition: Opponent name
        location: ``"home"`` or ``"away"``
        match_format: One of ``5v5``, ``7v7``, ``9v9``, ``11v11``
        match_date: ISO date string
        team_id: Owning team, if any
        starting_lineup: Player ids starting on the pitch
        substitutes: Player ids on the bench
    """
    match_id: str
    opposition: str = ""
    location: str = "home"
    match_format: str = DEFAULT_MATCH_FORMAT
    match_date: Optional[str] = None
    team_id: Optional[str] = None
    starting_lineup: Tuple[str, ...] = field(default_factory=tuple)
    substitutes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.match_id, str) or not self.match_id.strip():
            raise PreconditionViolation(f"match_id must be a non-empty string, got {self.match_id!r}")
        if self.location not in MATCH_LOCATIONS:
            raise PreconditionViolation(f"location must be one of {MATCH_LOCATIONS}, got {self.location!r}")
        if self.match_format not in MATCH_FORMATS:
            raise PreconditionViolation(f"match_format must be one of {MATCH_FORMATS}, got {self.match_format!r}")
        lineup = _id_tuple(self.starting_lineup, "starting_lineup")
        subs = _id_tuple(self.substitutes, "substitutes")
        if len(lineup) > PLAYERS_ON_PITCH[self.match_format]:
            raise PreconditionViolation(
                f"{self.match_format} allows {PLAYERS_ON_PITCH[self.match_format]} starters, got {len(lineup)}"
            )
        overlap = set(lineup) & set(subs)
        if overlap:
            raise PreconditionViolation(
                f"Players cannot both start and be substitutes: {', '.join(sorted(overlap))}"
            )
        object.__setattr__(self, "starting_lineup", lineup)
        object.__setattr__(self, "substitutes", subs)

    def to_json(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "team_id": self.team_id,
            "opposition": self.opposition,
            "location": self.location,
            "match_format": self.match_format,
            "match_date": self.match_date,
            "starting_lineup": list(self.starting_lineup),
            "substitutes": list(self.substitutes),
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "MatchMetadata":
        return cls(
            match_id=data.get("match_id"),
            team_id=data.get("team_id"),
            opposition=data.get("opposition", ""),
            location=data.get("location", "home"),
            match_format=data.get("match_format", DEFAULT_MATCH_FORMAT),
            match_date=data.get("match_date"),
            starting_lineup=data.get("starting_lineup") or (),
            substitutes=data.get("substitutes") or (),
        )


@dataclass(frozen=True)
class MatchSnapshot:
    """Immutable state of one match session: clock fields, metadata and ordered events."""
    metadata: MatchMetadata
    phase: ClockPhase = ClockPhase.NOT_STARTED
    current_half: Half = Half.FIRST
    accumulated_seconds: int = 0
    running_since_ts: Optional[float] = None
    first_half_added_seconds: int = 0
    second_half_added_seconds: int = 0
    planned_duration_minutes: int = DEFAULT_PLANNED_DURATION_MIN
    half_time_elapsed_seconds: Optional[int] = None
    events: Tuple[MatchEvent, ...] = field(default_factory=tuple)

    @classmethod
    def from_parts(cls, metadata: MatchMetadata, clock: ClockState, events) -> "MatchSnapshot":
        return cls(
            metadata=metadata,
            phase=clock.phase,
            current_half=clock.current_half,
            accumulated_seconds=clock.accumulated_seconds,
            running_since_ts=clock.running_since_ts,
            first_half_added_seconds=clock.first_half_added_seconds,
            second_half_added_seconds=clock.second_half_added_seconds,
            planned_duration_minutes=clock.planned_duration_minutes,
            half_time_elapsed_seconds=clock.half_time_elapsed_seconds,
            events=tuple(events),
        )

    @property
    def match_id(self) -> str:
        return self.metadata.match_id

    @property
    def is_completed(self) -> bool:
        return self.phase is ClockPhase.COMPLETED

    def clock_state(self) -> ClockState:
        """Rebuild (and validate) the clock fields as a ClockState."""
        return ClockState(
            planned_duration_minutes=self.planned_duration_minutes,
            accumulated_seconds=self.accumulated_seconds,
            running_since_ts=self.running_since_ts,
            current_half=self.current_half,
            first_half_added_seconds=self.first_half_added_seconds,
            second_half_added_seconds=self.second_half_added_seconds,
            half_time_elapsed_seconds=self.half_time_elapsed_seconds,
            phase=self.phase,
        )

    def elapsed_seconds(self, at_ts: Optional[float] = None) -> int:
        """Clock value derived from the captured anchor, as of ``at_ts`` (default: now)."""
        if self.running_since_ts is None:
            return self.accumulated_seconds
        current = now_ts() if at_ts is None else at_ts
        return self.accumulated_seconds + max(0, int(current - self.running_since_ts))

    @property
    def score_for(self) -> int:
        return sum(1 for e in self.events if e.kind is EventKind.GOAL_FOR)

    @property
    def score_against(self) -> int:
        return sum(1 for e in self.events if e.kind is EventKind.GOAL_AGAINST)

    def to_json(self) -> Dict[str, Any]:
        """
        Convert the snapshot to its persisted record.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = {"match_id": self.match_id}
        data.update(self.clock_state().to_json())
        data["metadata"] = self.metadata.to_json()
        data["events"] = [event.to_json() for event in self.events]
        return data

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "MatchSnapshot":
        """
        Create MatchSnapshot from its persisted record.

        Raises:
            PreconditionViolation: If the record is malformed
        """
        if not isinstance(data, dict):
            raise PreconditionViolation(f"Snapshot record must be an object, got {type(data).__name__}")
        metadata = MatchMetadata.from_json(data.get("metadata") or {"match_id": data.get("match_id")})
        if data.get("match_id") not in (None, metadata.match_id):
            raise PreconditionViolation("Snapshot match_id does not match its metadata")
        clock = ClockState.from_json(data)
        events = [event_from_json(item) for item in data.get("events", [])]
        return MatchSnapshot.from_parts(metadata, clock, events)

    def digest(self) -> str:
        """Stable hash of the persisted record, used to skip redundant writes."""
        raw = json.dumps(self.to_json(), sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(raw).hexdigest()
