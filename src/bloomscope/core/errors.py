"""
Error taxonomy for the generation pipeline and the interactive layer.
"""


class BloomscopeError(Exception):
    """Base class for all bloomscope errors."""


class DecodeFailure(BloomscopeError):
    """An uploaded file could not be decoded as audio."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Could not decode audio file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProjectionFailure(BloomscopeError):
    """The 2D projection could not be fitted."""


class PlaybackFailure(BloomscopeError):
    """A clip could not be played back."""


class EmptyInput(BloomscopeError):
    """Generation was requested with no clips loaded."""
