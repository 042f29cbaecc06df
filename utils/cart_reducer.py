"""
Pure reducer for the local cart view.

Every change to CartViewState goes through reduce_cart(); the reconciler only
decides which action to dispatch. Items are always replaced wholesale, never
patched, so the view stays a projection of the last fetched remote cart.
"""
from pydantic import BaseModel, ConfigDict

from enums.cart_action_type import CartActionType
from enums.cart_sync_state import CartSyncState
from models.cart_view import CartViewState, LocalCartItem
from utils.cart_state_machine import CartStateMachine


class CartAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: CartActionType
    items: tuple[LocalCartItem, ...] = ()
    sync_state: CartSyncState | None = None
    message: str = ""


def reduce_cart(state: CartViewState, action: CartAction) -> CartViewState:
    """
    Apply one action and return the new state (the input is never modified).

    Raises:
        InvalidCartStateException: If the action would make a forbidden sync transition
    """
    match action.type:
        case CartActionType.LOAD_ITEMS:
            sync_state = action.sync_state or CartSyncState.READY
            CartStateMachine.validate_transition(state.sync_state, sync_state)
            return state.model_copy(update={'items': tuple(action.items), 'sync_state': sync_state})
        case CartActionType.RESET:
            CartStateMachine.validate_transition(state.sync_state, CartSyncState.UNAUTHENTICATED)
            return state.model_copy(update={'items': (), 'sync_state': CartSyncState.UNAUTHENTICATED})
        case CartActionType.SET_SYNC_STATE:
            CartStateMachine.validate_transition(state.sync_state, action.sync_state)
            return state.model_copy(update={'sync_state': action.sync_state})
        case CartActionType.TOGGLE_CART:
            return state.model_copy(update={'is_open': not state.is_open})
        case CartActionType.OPEN_CART:
            return state.model_copy(update={'is_open': True})
        case CartActionType.CLOSE_CART:
            return state.model_copy(update={'is_open': False})
        case CartActionType.SHOW_NOTIFICATION:
            return state.model_copy(update={'show_notification': True, 'notification_message': action.message})
        case CartActionType.HIDE_NOTIFICATION:
            return state.model_copy(update={'show_notification': False, 'notification_message': ''})
    return state
