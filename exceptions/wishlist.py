"""
Wishlist-related exceptions.
"""

from .api import OperationFailedException


class WishlistItemExistsException(OperationFailedException):
    """Raised when the backend reports the product is already in the wishlist (HTTP 409)."""

    def __init__(self, product_id: int):
        super().__init__("wishlist_add", 409, "Item already in wishlist")
        self.details['product_id'] = product_id
        self.product_id = product_id
