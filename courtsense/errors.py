"""
Exception types for the Court Sense offense tracker.

Every error raised by the core derives from :class:`CourtSenseError` so the
web layer can turn user-correctable problems into a 400 response.
"""


class CourtSenseError(Exception):
    """Base class for recoverable, user-correctable errors."""
    pass


class InvalidTransition(CourtSenseError, ValueError):
    """An offense flow action is not valid in the current step."""
    pass


class FreeThrowValidationError(InvalidTransition):
    """A foul was confirmed without any free throw taken."""
    pass


class ClockRunningError(CourtSenseError):
    """The requested clock operation needs the clock to be stopped."""
    pass


class LineupError(CourtSenseError):
    """The on-court lineup cannot be changed as requested."""
    pass


class LineupFullError(LineupError):
    """Adding a player would exceed the on-court limit."""
    pass


class LineupLockedError(LineupError):
    """The lineup cannot change while the clock is running."""
    pass


class PlayerValidationError(CourtSenseError):
    """Custom exception for player and team validation errors."""
    pass


class NotFoundError(CourtSenseError, LookupError):
    """A game, player or offense id does not exist."""
    pass


class StorageError(CourtSenseError):
    """Stored data could not be read, so it must not be overwritten."""
    pass
