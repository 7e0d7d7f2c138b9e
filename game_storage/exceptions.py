"""Typed failures raised by the game lifecycle.

The router maps each of these to an HTTP status; none of them should escape
as a 500.
"""


class GameStorageException(Exception):
    """Base class of every lifecycle failure."""

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)


class ValidationError(GameStorageException):
    """Caller-supplied data violates a precondition."""


class NotFoundError(GameStorageException):
    """A referenced game or team code does not exist."""

    def __init__(self, kind: str, code: str):
        self.kind = kind
        super().__init__(f"{kind} {code} not found", code)


class ExternalServiceError(GameStorageException):
    """The match-execution service rejected or did not acknowledge a start."""

    def __init__(self, code: str, reason: str = "match service did not accept the game"):
        super().__init__(f"Game {code}: {reason}", code)


class ConflictError(GameStorageException):
    """A concurrent transition on the same game won the race."""


class InvalidTransitionError(ConflictError):
    """The game's current state does not allow the requested operation."""

    def __init__(self, code: str | None, state, operation):
        self.state = state
        self.operation = operation
        super().__init__(
            f"Game {code} is {state.value}; cannot {operation.value}", code
        )
