"""
Session and storage exceptions.
"""

from .base import StorefrontException


class SessionException(StorefrontException):
    """Base exception for session-related errors."""
    pass


class InvalidSessionException(SessionException):
    """Raised when a login response or decoded token cannot form a session."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid session: {reason}",
            details={'reason': reason}
        )
        self.reason = reason


class StorageUnavailableException(SessionException):
    """Raised by storage backends when the underlying store cannot be read or written."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Storage unavailable for key '{key}': {reason}",
            details={'key': key, 'reason': reason}
        )
        self.key = key
        self.reason = reason
