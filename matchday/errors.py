"""
Error taxonomy for the Matchday engine.

Every failure raised by the clock, the timeline or the session is one of
these. None of them is transient: the engine is a pure in-memory state
machine, so callers should surface the error rather than retry.
"""


class MatchError(Exception):
    """Base class for all engine errors."""


class InvalidTransition(MatchError):
    """A command is not legal in the current clock phase."""

    def __init__(self, command: str, phase: object):
        self.command = command
        self.phase = getattr(phase, "value", phase)
        super().__init__(f"Cannot {command} while match is {self.phase}")


class PreconditionViolation(MatchError, ValueError):
    """Malformed input, such as negative seconds or an unknown event kind."""


class NotFound(MatchError, LookupError):
    """The referenced event (or stored match) does not exist."""

    def __init__(self, what: str, identifier: str):
        self.what = what
        self.identifier = identifier
        super().__init__(f"{what} not found: {identifier}")
