"""
Order-related exceptions.
"""

from .api import OperationFailedException


class EmptyCartCheckoutException(OperationFailedException):
    """Raised when checkout is rejected because the server cart has no lines (HTTP 400)."""

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__("order_checkout", 400, message)
