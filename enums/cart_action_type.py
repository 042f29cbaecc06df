from enum import Enum


class CartActionType(str, Enum):
    LOAD_ITEMS = "LOAD_ITEMS"              # Replace items wholesale with a re-derived projection
    RESET = "RESET"                        # Logout: items forced empty, state UNAUTHENTICATED
    SET_SYNC_STATE = "SET_SYNC_STATE"
    TOGGLE_CART = "TOGGLE_CART"
    OPEN_CART = "OPEN_CART"
    CLOSE_CART = "CLOSE_CART"
    SHOW_NOTIFICATION = "SHOW_NOTIFICATION"
    HIDE_NOTIFICATION = "HIDE_NOTIFICATION"
