"""
Exceptions raised by users_online.

Input errors (a missing identifier, a non-positive duration) propagate to
the caller. Store errors are wrapped in StoreFailure, logged by the tracker
and turned into a safe default; they never escape a tracker operation.
"""

from typing import Optional


class UsersOnlineError(Exception):
    """Base exception for users_online errors."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class InvalidIdentity(UsersOnlineError, ValueError):
    """Raised when an entity has no usable identifier for its presence key."""

    def __init__(self, entity=None):
        message = f"Entity {type(entity).__name__} has no identifier; a presence key cannot be built."
        hint = (
            "Save the object first, or define get_presence_id() on it to "
            "return a non-empty identifier."
        )
        super().__init__(message, hint)
        self.entity = entity


class InvalidDuration(UsersOnlineError, ValueError):
    """Raised when a presence duration is not a positive number of seconds."""

    def __init__(self, duration):
        message = f"Presence duration must be greater than 0 seconds, got {duration!r}."
        super().__init__(message)
        self.duration = duration


class StoreFailure(UsersOnlineError):
    """A presence store call failed (timeout, connection loss, serialization)."""

    def __init__(self, operation: str, key: str, error: BaseException):
        message = f"Presence store {operation} failed for key '{key}': {error}"
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.error = error
