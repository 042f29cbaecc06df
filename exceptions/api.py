"""
Remote API exceptions.

Every REST client in the storefront maps HTTP outcomes onto these types:
missing token and HTTP 401 -> AuthenticationRequiredException,
HTTP 403 on an admin-scoped path -> ForbiddenException, other non-2xx
(including a 403 elsewhere) -> OperationFailedException,
no response at all -> TransportException.
"""

from .base import StorefrontException


class ApiException(StorefrontException):
    """Base exception for remote API errors."""

    def __init__(self, message: str, operation: str, details: dict | None = None):
        details = dict(details or {})
        details.setdefault('operation', operation)
        super().__init__(message, details)
        self.operation = operation


class AuthenticationRequiredException(ApiException):
    """
    Raised when a call needs a session that is missing or no longer valid.

    reason is "missing_token" when the call was refused locally before any
    network round-trip, "unauthorized" when the backend answered HTTP 401.
    """

    MISSING_TOKEN = "missing_token"
    UNAUTHORIZED = "unauthorized"

    def __init__(self, operation: str, reason: str = MISSING_TOKEN):
        super().__init__(
            "Authentication required",
            operation,
            details={'reason': reason}
        )
        self.reason = reason

    @property
    def session_invalid(self) -> bool:
        return self.reason == self.UNAUTHORIZED


class ForbiddenException(ApiException):
    """Raised when an admin-scoped call answers HTTP 403 (role mismatch)."""

    def __init__(self, operation: str, path: str):
        super().__init__(
            "You do not have permission to perform this action",
            operation,
            details={'path': path}
        )
        self.path = path


class OperationFailedException(ApiException):
    """Raised when the backend answers with any other non-success status."""

    def __init__(self, operation: str, status_code: int, message: str):
        super().__init__(
            message,
            operation,
            details={'status_code': status_code}
        )
        self.status_code = status_code


class TransportException(ApiException):
    """Raised when no response was received at all (connection refused, DNS, timeout)."""

    def __init__(self, operation: str, message: str, reason: str = ""):
        super().__init__(
            message,
            operation,
            details={'reason': reason}
        )
        self.reason = reason
