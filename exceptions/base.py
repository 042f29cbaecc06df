"""
Root of the storefront client's exception hierarchy.
"""


class StorefrontException(Exception):
    """
    Every error raised by this client derives from here, so callers can catch
    one type at the UI boundary.

    `details` carries context for logs and error mapping: operation name,
    HTTP status, product or wishlist item ids.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        parts = [f"'{self.message}'"]
        parts.extend(f"{key}={value}" for key, value in self.details.items())
        return f"{type(self).__name__}({', '.join(parts)})"
