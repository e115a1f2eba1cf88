"""
Time formatting utilities for the Matchday engine.

Every formatter here is a pure function of its arguments: no hidden state,
safe to call from the display refresh loop as often as needed. Minutes are
always truncated (floor), never rounded.
"""
import time

from ..errors import PreconditionViolation

FIRST_HALF = "first"
SECOND_HALF = "second"


def _require_seconds(name: str, value) -> int:
    # bool is an int subclass; True seconds is always a caller bug
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise PreconditionViolation(f"{name} must be an integer number of seconds, got {value!r}")
    if value < 0:
        raise PreconditionViolation(f"{name} must be non-negative, got {value}")
    return value


def _require_duration(planned_duration_minutes) -> int:
    if (
        planned_duration_minutes is None
        or isinstance(planned_duration_minutes, bool)
        or not isinstance(planned_duration_minutes, int)
        or planned_duration_minutes <= 0
    ):
        raise PreconditionViolation(
            f"planned_duration_minutes must be a positive integer, got {planned_duration_minutes!r}"
        )
    if planned_duration_minutes % 2:
        raise PreconditionViolation(
            f"planned_duration_minutes must split into two whole-minute halves, got {planned_duration_minutes}"
        )
    return planned_duration_minutes


def _half_value(half) -> str:
    value = getattr(half, "value", half)
    if value not in (FIRST_HALF, SECOND_HALF):
        raise PreconditionViolation(f"half must be 'first' or 'second', got {half!r}")
    return value


def _added_marker(base_minutes: int, added_seconds: int) -> str:
    added_minutes, remainder = divmod(added_seconds, 60)
    if remainder:
        return f"{base_minutes}+{added_minutes}:{remainder:02d}'"
    return f"{base_minutes}+{added_minutes}'"


def format_match_time(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format. Minutes are not capped, so
        long matches run past 99.

    Example:
        >>> format_match_time(125)
        '02:05'
        >>> format_match_time(6061)
        '101:01'
    """
    _require_seconds("seconds", seconds)
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def format_time_with_added(
    elapsed_seconds: int,
    planned_duration_minutes: int,
    half,
    first_half_added_seconds: int = 0,
) -> str:
    """
    Format a live clock value as a match-report minute marker.

    Args:
        elapsed_seconds: Clock value (total played seconds since kick-off)
        planned_duration_minutes: Regulation length of the whole match
        half: ``"first"``/``"second"`` or a :class:`~matchday.models.Half`
        first_half_added_seconds: Stoppage declared for the first half; the
            second half is re-based on it

    Returns:
        ``"23'"`` during regulation time, ``"45+2'"`` or ``"45+2:30'"`` in
        stoppage time.

    Example:
        >>> format_time_with_added(3660, 90, "first")
        "45+16'"
        >>> format_time_with_added(2880, 90, "second", 120)
        "46'"
    """
    _require_seconds("elapsed_seconds", elapsed_seconds)
    planned = _require_duration(planned_duration_minutes)
    _require_seconds("first_half_added_seconds", first_half_added_seconds)
    which = _half_value(half)

    half_seconds = planned * 60 // 2
    if which == FIRST_HALF:
        boundary, display = half_seconds, elapsed_seconds
    else:
        boundary = planned * 60
        # Time within the second half, laid back on top of the first half
        display = max(0, half_seconds + (elapsed_seconds - half_seconds - first_half_added_seconds))

    if display < boundary:
        return f"{display // 60}'"
    return _added_marker(boundary // 60, display - boundary)


def format_total_game_time(
    total_elapsed_seconds: int,
    planned_duration_minutes: int,
    first_half_added_seconds: int = 0,
    second_half_added_seconds: int = 0,
) -> str:
    """
    Summarise a finished (or in-progress) match length.

    This is coarser than :func:`format_time_with_added`: the added part is
    the sum of both halves' declared stoppage in whole minutes.

    Example:
        >>> format_total_game_time(5500, 90, 120, 180)
        "90+5'"
    """
    _require_seconds("total_elapsed_seconds", total_elapsed_seconds)
    planned = _require_duration(planned_duration_minutes)
    _require_seconds("first_half_added_seconds", first_half_added_seconds)
    _require_seconds("second_half_added_seconds", second_half_added_seconds)

    if total_elapsed_seconds <= planned * 60:
        return f"{total_elapsed_seconds // 60}'"
    added_minutes = (first_half_added_seconds + second_half_added_seconds) // 60
    return f"{planned}+{added_minutes}'"


def format_half_summary(
    total_elapsed_seconds: int,
    planned_duration_minutes: int,
    first_half_added_seconds: int = 0,
    second_half_added_seconds: int = 0,
) -> str:
    """Total minutes, followed by a per-half breakdown when stoppage was played."""
    _require_seconds("total_elapsed_seconds", total_elapsed_seconds)
    planned = _require_duration(planned_duration_minutes)
    _require_seconds("first_half_added_seconds", first_half_added_seconds)
    _require_seconds("second_half_added_seconds", second_half_added_seconds)

    result = f"{total_elapsed_seconds // 60}'"
    if not (first_half_added_seconds or second_half_added_seconds):
        return result

    half_minutes = planned // 2
    parts = []
    for added in (first_half_added_seconds, second_half_added_seconds):
        added_minutes = added // 60
        parts.append(f"{half_minutes}'+{added_minutes}" if added_minutes else f"{half_minutes}'")
    return f"{result} ({parts[0]} / {parts[1]})"


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()
