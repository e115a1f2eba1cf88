"""
Match event models for the Matchday engine.

Each event kind is its own frozen dataclass carrying only the fields that
make sense for it, so a card can never carry an assist and a substitution
can never carry a goal type. Events are stamped with the clock value at the
moment they were recorded and that stamp never changes afterwards.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type

from ..errors import PreconditionViolation


class EventKind(Enum):
    """Tag identifying each event variant."""
    GOAL_FOR = "goal_for"
    GOAL_AGAINST = "goal_against"
    CARD = "card"
    PENALTY = "penalty"
    SUBSTITUTION = "substitution"
    MILESTONE = "milestone"


class GoalType(Enum):
    OPEN_PLAY = "open_play"
    CORNER = "corner"
    FREE_KICK = "free_kick"
    PENALTY = "penalty"


class CardColor(Enum):
    YELLOW = "yellow"
    RED = "red"


class PenaltyOutcome(Enum):
    SCORED = "scored"
    SAVED = "saved"
    MISSED = "missed"


class Milestone(Enum):
    """Synthetic timeline entries marking clock phase transitions."""
    KICK_OFF = "kick_off"
    HALF_TIME_WHISTLE = "half_time_whistle"
    SECOND_HALF_KICK_OFF = "second_half_kick_off"
    FULL_TIME_WHISTLE = "full_time_whistle"


def _coerce_enum(enum_cls: Type[Enum], value: Any, field_name: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise PreconditionViolation(f"{field_name} must be one of [{allowed}], got {value!r}") from None


def _require_id(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PreconditionViolation(f"{field_name} must be a non-empty string, got {value!r}")
    return value


def _optional_id(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    return _require_id(value, field_name)


@dataclass(frozen=True)
class MatchEvent:
    """
    Base class for everything that appears on the match timeline.

    Attributes:
        id: Unique identifier, immutable
        match_time_seconds: Clock value when the event was recorded
    """
    id: str
    match_time_seconds: int

    kind: ClassVar[EventKind]

    def __post_init__(self) -> None:
        _require_id(self.id, "id")
        seconds = self.match_time_seconds
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise PreconditionViolation(f"match_time_seconds must be a non-negative integer, got {seconds!r}")

    def _set(self, name: str, value: Any) -> None:
        # frozen dataclass: normalisation in __post_init__ goes through object
        object.__setattr__(self, name, value)

    @property
    def is_milestone(self) -> bool:
        return self.kind is EventKind.MILESTONE

    def payload(self) -> Dict[str, Any]:
        """Kind-specific fields, JSON-ready."""
        result = {}
        for f in fields(self):
            if f.name in ("id", "match_time_seconds"):
                continue
            value = getattr(self, f.name)
            result[f.name] = value.value if isinstance(value, Enum) else value
        return result

    def to_json(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "kind": self.kind.value,
            "match_time_seconds": self.match_time_seconds,
        }
        data.update(self.payload())
        return data


@dataclass(frozen=True)
class GoalForEvent(MatchEvent):
    """Goal scored by our team."""
    scorer_id: Optional[str] = None
    assist_id: Optional[str] = None
    goal_type: GoalType = GoalType.OPEN_PLAY

    kind: ClassVar[EventKind] = EventKind.GOAL_FOR

    def __post_init__(self) -> None:
        super().__post_init__()
        _optional_id(self.scorer_id, "scorer_id")
        _optional_id(self.assist_id, "assist_id")
        self._set("goal_type", _coerce_enum(GoalType, self.goal_type, "goal_type"))
        if self.assist_id is not None and self.assist_id == self.scorer_id:
            raise PreconditionViolation("A player cannot assist their own goal")


@dataclass(frozen=True)
class GoalAgainstEvent(MatchEvent):
    """Goal conceded."""
    goal_type: GoalType = GoalType.OPEN_PLAY

    kind: ClassVar[EventKind] = EventKind.GOAL_AGAINST

    def __post_init__(self) -> None:
        super().__post_init__()
        self._set("goal_type", _coerce_enum(GoalType, self.goal_type, "goal_type"))


@dataclass(frozen=True)
class CardEvent(MatchEvent):
    player_id: str
    card_color: CardColor

    kind: ClassVar[EventKind] = EventKind.CARD

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_id(self.player_id, "player_id")
        self._set("card_color", _coerce_enum(CardColor, self.card_color, "card_color"))


@dataclass(frozen=True)
class PenaltyEvent(MatchEvent):
    """
    Penalty taken, by us or against us.

    A scored penalty is logged here for the record; the score itself only
    counts goal events.
    """
    for_team: bool
    outcome: PenaltyOutcome
    player_id: Optional[str] = None

    kind: ClassVar[EventKind] = EventKind.PENALTY

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.for_team, bool):
            raise PreconditionViolation(f"for_team must be a boolean, got {self.for_team!r}")
        self._set("outcome", _coerce_enum(PenaltyOutcome, self.outcome, "outcome"))
        _optional_id(self.player_id, "player_id")


@dataclass(frozen=True)
class SubstitutionEvent(MatchEvent):
    player_off_id: str
    player_on_id: str

    kind: ClassVar[EventKind] = EventKind.SUBSTITUTION

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_id(self.player_off_id, "player_off_id")
        _require_id(self.player_on_id, "player_on_id")
        if self.player_off_id == self.player_on_id:
            raise PreconditionViolation("A player cannot be substituted for themselves")


@dataclass(frozen=True)
class MilestoneEvent(MatchEvent):
    milestone: Milestone

    kind: ClassVar[EventKind] = EventKind.MILESTONE

    def __post_init__(self) -> None:
        super().__post_init__()
        self._set("milestone", _coerce_enum(Milestone, self.milestone, "milestone"))


EVENT_TYPES: Dict[EventKind, Type[MatchEvent]] = {
    EventKind.GOAL_FOR: GoalForEvent,
    EventKind.GOAL_AGAINST: GoalAgainstEvent,
    EventKind.CARD: CardEvent,
    EventKind.PENALTY: PenaltyEvent,
    EventKind.SUBSTITUTION: SubstitutionEvent,
    EventKind.MILESTONE: MilestoneEvent,
}


def build_event(kind, event_id: str, match_time_seconds: int, payload: Dict[str, Any]) -> MatchEvent:
    """
    Construct the variant for ``kind`` from a loose payload dictionary.

    Raises:
        PreconditionViolation: Unknown kind, unknown/missing fields or bad values
    """
    event_kind = _coerce_enum(EventKind, kind, "kind")
    event_cls = EVENT_TYPES[event_kind]

    allowed = {f.name for f in fields(event_cls)} - {"id", "match_time_seconds"}
    unknown = set(payload) - allowed
    if unknown:
        raise PreconditionViolation(
            f"Unexpected fields for {event_kind.value} event: {', '.join(sorted(unknown))}"
        )
    try:
        return event_cls(id=event_id, match_time_seconds=match_time_seconds, **payload)
    except TypeError as exc:
        # missing required payload fields
        raise PreconditionViolation(f"Invalid {event_kind.value} event: {exc}") from exc


def event_from_json(data: Dict[str, Any]) -> MatchEvent:
    """Create the right event variant from its JSON dictionary."""
    if not isinstance(data, dict):
        raise PreconditionViolation(f"Event record must be an object, got {type(data).__name__}")
    payload = {k: v for k, v in data.items() if k not in ("id", "kind", "match_time_seconds")}
    return build_event(data.get("kind"), data.get("id"), data.get("match_time_seconds"), payload)
