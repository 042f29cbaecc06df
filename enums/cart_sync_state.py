from enum import Enum


class CartSyncState(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"  # No session, or the cart view could not be loaded
    SYNCING = "SYNCING"                  # A reconciliation fetch or mutation is in flight
    READY = "READY"                      # Items reflect the last known remote cart
