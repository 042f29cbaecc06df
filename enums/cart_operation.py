from enum import Enum


class CartOperation(str, Enum):
    """
    Remote cart operations.

    Each operation has its own generic failure message in l10n
    (key: cart_<value>_failed) used when the backend sends no message.
    """

    ADD = "add"
    FETCH = "fetch"
    REMOVE = "remove"
    UPDATE_QUANTITY = "update_quantity"
    UPDATE_SIZE = "update_size"
    CLEAR = "clear"
