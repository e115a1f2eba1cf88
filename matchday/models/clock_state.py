"""
Clock state model for the Matchday engine.

This module contains the phase/half enumerations and the ClockState
dataclass, which is the plain data behind a MatchClock. All mutation goes
through :class:`matchday.services.MatchClock`; this class only knows how to
validate and (de)serialize itself.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..errors import PreconditionViolation
from ..utils import DEFAULT_PLANNED_DURATION_MIN, FIRST_HALF, SECOND_HALF


class Half(Enum):
    """Which half of the match is (or was last) being played."""
    FIRST = FIRST_HALF
    SECOND = SECOND_HALF


class ClockPhase(Enum):
    """Clock state machine phases."""
    NOT_STARTED = "not_started"
    FIRST_HALF_RUNNING = "first_half_running"
    FIRST_HALF_PAUSED = "first_half_paused"
    HALF_TIME = "half_time"
    SECOND_HALF_RUNNING = "second_half_running"
    SECOND_HALF_PAUSED = "second_half_paused"
    COMPLETED = "completed"

    @property
    def is_running(self) -> bool:
        return self in (ClockPhase.FIRST_HALF_RUNNING, ClockPhase.SECOND_HALF_RUNNING)

    @property
    def is_paused(self) -> bool:
        return self in (ClockPhase.FIRST_HALF_PAUSED, ClockPhase.SECOND_HALF_PAUSED)

    @property
    def is_live(self) -> bool:
        """True between kick-off and the full-time whistle."""
        return self not in (ClockPhase.NOT_STARTED, ClockPhase.COMPLETED)


# Running phase -> paused counterpart, and back
PAUSED_PHASE = {
    ClockPhase.FIRST_HALF_RUNNING: ClockPhase.FIRST_HALF_PAUSED,
    ClockPhase.SECOND_HALF_RUNNING: ClockPhase.SECOND_HALF_PAUSED,
}
RUNNING_PHASE = {paused: running for running, paused in PAUSED_PHASE.items()}


def _check_int(name: str, value, *, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise PreconditionViolation(f"{name} must be an integer >= {minimum}, got {value!r}")
    return value


@dataclass
class ClockState:
    """
    Represents the complete timing state of one match.

    Attributes:
        planned_duration_minutes: Regulation length of the whole match
        accumulated_seconds: Played seconds banked before the current running spell
        running_since_ts: Epoch seconds when the clock last started running, or None
        current_half: Half being played
        first_half_added_seconds: Operator-declared stoppage for the first half
        second_half_added_seconds: Operator-declared stoppage for the second half
        half_time_elapsed_seconds: Clock value at the half-time whistle
        phase: State machine phase
    """
    planned_duration_minutes: int = DEFAULT_PLANNED_DURATION_MIN
    accumulated_seconds: int = 0
    running_since_ts: Optional[float] = None
    current_half: Half = Half.FIRST
    first_half_added_seconds: int = 0
    second_half_added_seconds: int = 0
    half_time_elapsed_seconds: Optional[int] = None
    phase: ClockPhase = ClockPhase.NOT_STARTED

    def __post_init__(self) -> None:
        _check_int("planned_duration_minutes", self.planned_duration_minutes, minimum=1)
        if self.planned_duration_minutes % 2:
            raise PreconditionViolation(
                f"planned_duration_minutes must split into two whole-minute halves, "
                f"got {self.planned_duration_minutes}"
            )
        _check_int("accumulated_seconds", self.accumulated_seconds)
        _check_int("first_half_added_seconds", self.first_half_added_seconds)
        _check_int("second_half_added_seconds", self.second_half_added_seconds)
        if self.half_time_elapsed_seconds is not None:
            _check_int("half_time_elapsed_seconds", self.half_time_elapsed_seconds)
        # A running phase without an anchor (or vice versa) cannot be resumed safely
        if self.phase.is_running != (self.running_since_ts is not None):
            raise PreconditionViolation(
                f"running_since_ts={self.running_since_ts!r} is inconsistent with phase {self.phase.value}"
            )

    @property
    def half_duration_seconds(self) -> int:
        return self.planned_duration_minutes * 60 // 2

    @property
    def regulation_seconds(self) -> int:
        return self.planned_duration_minutes * 60

    def copy(self) -> "ClockState":
        return replace(self)

    def to_json(self) -> dict:
        """
        Convert ClockState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "phase": self.phase.value,
            "current_half": self.current_half.value,
            "accumulated_seconds": self.accumulated_seconds,
            "running_since_ts": self.running_since_ts,
            "first_half_added_seconds": self.first_half_added_seconds,
            "second_half_added_seconds": self.second_half_added_seconds,
            "planned_duration_minutes": self.planned_duration_minutes,
            "half_time_elapsed_seconds": self.half_time_elapsed_seconds,
        }

    @staticmethod
    def from_json(data: dict) -> "ClockState":
        """
        Create ClockState from JSON dictionary.

        Args:
            data: Dictionary with clock state data

        Returns:
            New ClockState instance

        Raises:
            PreconditionViolation: If a field is missing or malformed
        """
        try:
            return ClockState(
                planned_duration_minutes=data.get("planned_duration_minutes", DEFAULT_PLANNED_DURATION_MIN),
                accumulated_seconds=data.get("accumulated_seconds", 0),
                running_since_ts=data.get("running_since_ts"),
                current_half=Half(data.get("current_half", FIRST_HALF)),
                first_half_added_seconds=data.get("first_half_added_seconds", 0),
                second_half_added_seconds=data.get("second_half_added_seconds", 0),
                half_time_elapsed_seconds=data.get("half_time_elapsed_seconds"),
                phase=ClockPhase(data.get("phase", ClockPhase.NOT_STARTED.value)),
            )
        except PreconditionViolation:
            raise
        except ValueError as exc:
            raise PreconditionViolation(f"Invalid clock record: {exc}") from exc
