"""
Cart-related exceptions.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class InvalidCartStateException(CartException):
    """Raised when the cart view is asked to make a transition its state machine forbids."""

    def __init__(self, current_state: str, required_state: str):
        super().__init__(
            f"Invalid cart state transition: {current_state} -> {required_state}",
            details={'current_state': current_state, 'required_state': required_state}
        )
        self.current_state = current_state
        self.required_state = required_state
