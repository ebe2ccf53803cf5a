"""Exception types raised by the transform engine.

ValidationError and NotFoundError also derive from the matching builtin
(ValueError / LookupError) so generic handlers keep working.
"""


class TransformError(Exception):
    """Base class for all engine errors."""


class ValidationError(TransformError, ValueError):
    """Bad or missing parameters. Raised before any host mutation."""


class FormatError(ValidationError):
    """Malformed bar|beat or bar:beat notation."""


class NotFoundError(TransformError, LookupError):
    """A track or clip the caller targeted does not exist."""


class LimitExceededError(TransformError):
    """An operation would produce more objects than allowed."""

    def __init__(self, message: str, count: int, limit: int):
        super().__init__(message)
        self.count = count
        self.limit = limit


class HostCommandError(TransformError):
    """The host rejected a command."""

    def __init__(self, command: str, message: str):
        super().__init__(f"{command}: {message}")
        self.command = command
