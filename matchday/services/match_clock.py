"""Match clock service for the Matchday engine."""

import logging
from typing import Optional

from ..errors import InvalidTransition, PreconditionViolation
from ..models import ClockPhase, ClockState, Half
from ..models.clock_state import PAUSED_PHASE, RUNNING_PHASE
from ..utils import DEFAULT_PLANNED_DURATION_MIN, format_time_with_added, now_ts

logger = logging.getLogger(__name__)

FIRST_HALF_PHASES = (ClockPhase.FIRST_HALF_RUNNING, ClockPhase.FIRST_HALF_PAUSED)
SECOND_HALF_PHASES = (ClockPhase.SECOND_HALF_RUNNING, ClockPhase.SECOND_HALF_PAUSED)


class MatchClock:
    """
    Two-half match clock anchored to wall-clock instants.

    Elapsed time is never counted tick by tick. While running, the clock
    only remembers when it started (``running_since_ts``); every read
    derives the value from the current wall-clock reading, so a process
    that was suspended for ten minutes reads the same value as one that
    ticked every second throughout.
    """

    def __init__(
        self,
        planned_duration_minutes: int = DEFAULT_PLANNED_DURATION_MIN,
        *,
        state: Optional[ClockState] = None,
    ):
        self._state = state.copy() if state is not None else ClockState(
            planned_duration_minutes=planned_duration_minutes
        )

    @classmethod
    def from_state(cls, state: ClockState) -> "MatchClock":
        """Rebuild a clock from persisted state (running clocks keep running)."""
        return cls(state=state)

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------
    @property
    def state(self) -> ClockState:
        """A copy of the underlying state; mutating it does not affect the clock."""
        return self._state.copy()

    @property
    def phase(self) -> ClockPhase:
        return self._state.phase

    @property
    def current_half(self) -> Half:
        return self._state.current_half

    @property
    def planned_duration_minutes(self) -> int:
        return self._state.planned_duration_minutes

    @property
    def half_duration_seconds(self) -> int:
        return self._state.half_duration_seconds

    @property
    def regulation_seconds(self) -> int:
        return self._state.regulation_seconds

    @property
    def first_half_added_seconds(self) -> int:
        return self._state.first_half_added_seconds

    @property
    def second_half_added_seconds(self) -> int:
        return self._state.second_half_added_seconds

    @property
    def half_time_elapsed_seconds(self) -> Optional[int]:
        return self._state.half_time_elapsed_seconds

    @property
    def is_running(self) -> bool:
        return self._state.phase.is_running

    @property
    def is_paused(self) -> bool:
        return self._state.phase.is_paused

    # ------------------------------------------------------------------
    # Core timer controls
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Kick off the first half."""
        self._require("start", ClockPhase.NOT_STARTED)
        self._state.current_half = Half.FIRST
        self._state.running_since_ts = now_ts()
        self._transition(ClockPhase.FIRST_HALF_RUNNING)

    def pause(self) -> None:
        """Stop the clock and bank the running spell."""
        self._require("pause", *PAUSED_PHASE)
        self._fold()
        self._transition(PAUSED_PHASE[self._state.phase])

    def resume(self) -> None:
        """Restart the clock in the same half after a pause."""
        self._require("resume", *RUNNING_PHASE)
        self._state.running_since_ts = now_ts()
        self._transition(RUNNING_PHASE[self._state.phase])

    def trigger_half_time(self) -> None:
        """
        End the first half; the clock value at this instant closes the half.

        When the half ran past its regulation length, the overrun actually
        played replaces the declared first-half added time, so the second
        half always kicks off at the half-way minute.
        """
        self._require("trigger half time", *FIRST_HALF_PHASES)
        self._fold()
        ended_at = self._state.accumulated_seconds
        self._state.half_time_elapsed_seconds = ended_at
        overrun = ended_at - self.half_duration_seconds
        if overrun > 0:
            self._state.first_half_added_seconds = overrun
        self._transition(ClockPhase.HALF_TIME)

    def start_second_half(self) -> None:
        """Kick off the second half from the banked first-half value."""
        self._require("start second half", ClockPhase.HALF_TIME)
        self._state.current_half = Half.SECOND
        self._state.running_since_ts = now_ts()
        self._transition(ClockPhase.SECOND_HALF_RUNNING)

    def trigger_full_time(self) -> None:
        """End the match. The clock is frozen from here on."""
        self._require("trigger full time", *SECOND_HALF_PHASES)
        self._fold()
        self._transition(ClockPhase.COMPLETED)

    # ------------------------------------------------------------------
    # Adjustment APIs
    # ------------------------------------------------------------------
    def set_added_time(self, half, seconds: int) -> None:
        """
        Declare stoppage time for a half.

        Allowed in any phase before completion, including after the half in
        question has ended, so operators can correct it later. Calling half
        time overwrites the first-half value with the overrun actually played.

        Raises:
            PreconditionViolation: If seconds is not a non-negative integer
            InvalidTransition: If the match is already completed
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise PreconditionViolation(f"Added time must be a non-negative integer, got {seconds!r}")
        try:
            which = half if isinstance(half, Half) else Half(half)
        except ValueError:
            raise PreconditionViolation(f"half must be 'first' or 'second', got {half!r}") from None
        self._reject("set added time", ClockPhase.COMPLETED)

        if which is Half.FIRST:
            self._state.first_half_added_seconds = seconds
        else:
            self._state.second_half_added_seconds = seconds
        logger.debug("Added time for %s half set to %ss", which.value, seconds)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def elapsed_seconds(self) -> int:
        """Played seconds since kick-off, excluding paused spells."""
        return self._state.accumulated_seconds + self._running_seconds()

    def display_time(self) -> str:
        """Minute marker for the live display, e.g. ``"45+2:30'"``."""
        return format_time_with_added(
            self.elapsed_seconds(),
            self._state.planned_duration_minutes,
            self._state.current_half.value,
            self._state.first_half_added_seconds,
        )

    def should_suggest_half_time(self) -> bool:
        """True once the first half has reached its length plus declared stoppage."""
        if self._state.phase not in FIRST_HALF_PHASES:
            return False
        target = self.half_duration_seconds + self._state.first_half_added_seconds
        return self.elapsed_seconds() >= target

    def should_suggest_full_time(self) -> bool:
        if self._state.phase not in SECOND_HALF_PHASES:
            return False
        target = (
            self.regulation_seconds
            + self._state.first_half_added_seconds
            + self._state.second_half_added_seconds
        )
        return self.elapsed_seconds() >= target

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _running_seconds(self) -> int:
        if self._state.running_since_ts is None:
            return 0
        # A wall clock stepped backwards contributes nothing rather than negative time
        return max(0, int(now_ts() - self._state.running_since_ts))

    def _fold(self) -> None:
        if self._state.running_since_ts is not None:
            self._state.accumulated_seconds += self._running_seconds()
            self._state.running_since_ts = None

    def _require(self, command: str, *allowed: ClockPhase) -> None:
        if self._state.phase not in allowed:
            raise InvalidTransition(command, self._state.phase)

    def _reject(self, command: str, *forbidden: ClockPhase) -> None:
        if self._state.phase in forbidden:
            raise InvalidTransition(command, self._state.phase)

    def _transition(self, phase: ClockPhase) -> None:
        previous = self._state.phase
        self._state.phase = phase
        logger.debug(
            "Clock %s -> %s at %ss", previous.value, phase.value, self.elapsed_seconds()
        )
