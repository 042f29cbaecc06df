"""
Cart reconciliation.

CartReconciler owns the local cart view (CartViewState) and keeps it a
projection of the backend cart:

- login: UNAUTHENTICATED -> SYNCING -> fetch -> READY (a failed fetch is only
  logged and leaves an empty UNAUTHENTICATED view)
- logout: items cleared synchronously, no network call
- mutation: SYNCING -> remote call -> fresh get_cart -> full re-derivation -> READY;
  a failed call leaves items untouched and emits exactly one notification
- checkout: same shape, through OrderClient; the backend empties the cart

Responses are tagged with the authentication epoch current at request start;
anything arriving after a logout or a new login is discarded.
"""
import logging
from contextlib import contextmanager
from typing import Awaitable, Callable

from enums.auth_event import AuthEvent
from enums.cart_action_type import CartActionType
from enums.cart_operation import CartOperation
from enums.cart_sync_state import CartSyncState
from enums.message_entity import MessageEntity
from enums.notification_level import NotificationLevel
from exceptions.api import AuthenticationRequiredException
from exceptions.base import StorefrontException
from models.cart import RemoteCart
from models.cart_view import CartViewState, LocalCartItem
from models.order import Order
from services.auth_events import AuthEventBus
from services.cart_client import RemoteCartClient
from services.cart_enrichment import CartEnricher
from services.notification import NotificationService
from services.order import OrderClient
from utils.cart_reducer import CartAction, reduce_cart
from utils.error_handler import handle_service_error, handle_unexpected_error
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

CartListener = Callable[[CartViewState], None]


class CartReconciler:
    def __init__(self, cart_client: RemoteCartClient, enricher: CartEnricher,
                 notifications: NotificationService, order_client: OrderClient | None = None):
        self.cart_client = cart_client
        self.order_client = order_client
        self.enricher = enricher
        self.notifications = notifications
        self._state = CartViewState()
        self._listeners: list[CartListener] = []
        self._authenticated = False
        self._auth_epoch = 0
        self._in_flight = 0
        self._loaded = False
        notifications.subscribe(self._show_notification, self._hide_notification)

    # ========================================================================
    # View state
    # ========================================================================

    @property
    def state(self) -> CartViewState:
        return self._state

    @property
    def items(self) -> tuple[LocalCartItem, ...]:
        return self._state.items

    @property
    def sync_state(self) -> CartSyncState:
        return self._state.sync_state

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener called with the new state after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_cart_item_by_product_id(self, product_id: int) -> LocalCartItem | None:
        return next((item for item in self._state.items if item.product_id == product_id), None)

    def toggle_cart(self) -> None:
        self._dispatch(CartAction(type=CartActionType.TOGGLE_CART))

    def open_cart(self) -> None:
        self._dispatch(CartAction(type=CartActionType.OPEN_CART))

    def close_cart(self) -> None:
        self._dispatch(CartAction(type=CartActionType.CLOSE_CART))

    def hide_notification(self) -> None:
        self.notifications.dismiss()

    # ========================================================================
    # Authentication transitions
    # ========================================================================

    def bind(self, event_bus: AuthEventBus) -> None:
        event_bus.subscribe(AuthEvent.LOGIN, self.handle_login)
        event_bus.subscribe(AuthEvent.LOGOUT, self.handle_logout)

    def handle_logout(self, reason: str = "", **_) -> None:
        """Clear the view immediately. Synchronous, issues no network call."""
        logger.info(f"[Cart] Logout ({reason or 'unspecified'}), clearing cart view")
        self._auth_epoch += 1
        self._authenticated = False
        self._in_flight = 0
        self._loaded = False
        self._dispatch(CartAction(type=CartActionType.RESET))

    async def handle_login(self, **_) -> None:
        """Load the remote cart for a freshly authenticated session."""
        self._auth_epoch += 1
        epoch = self._auth_epoch
        self._authenticated = True
        self._in_flight = 0
        self._loaded = False
        self._dispatch(CartAction(type=CartActionType.RESET))
        logger.info("[Cart] Login, loading remote cart")
        with self._in_flight_scope(epoch):
            try:
                await self._reconcile(epoch)
            except StorefrontException as e:
                logger.warning(f"[Cart] Could not load cart after login: {e!r}")
            except Exception as e:
                logger.error(f"[Cart] Unexpected error loading cart after login: {e}", exc_info=True)

    async def on_auth_changed(self, authenticated: bool) -> None:
        if authenticated:
            await self.handle_login()
        else:
            self.handle_logout(reason="auth_changed")

    async def sync_cart(self) -> bool:
        """
        Re-fetch the remote cart. Failures are logged and keep the current items.

        Returns:
            True if the view was re-derived
        """
        if not self._authenticated:
            logger.debug("[Cart] sync_cart while unauthenticated, nothing to do")
            return False
        epoch = self._auth_epoch
        with self._in_flight_scope(epoch):
            try:
                return await self._reconcile(epoch)
            except StorefrontException as e:
                logger.warning(f"[Cart] Sync failed: {e!r}")
            except Exception as e:
                logger.error(f"[Cart] Unexpected error during sync: {e}", exc_info=True)
        return False

    # ========================================================================
    # Mutations
    # ========================================================================

    async def add_item(self, product_id: int, quantity: int = 1) -> bool:
        def added_message() -> str:
            item = self.get_cart_item_by_product_id(product_id)
            if item is not None and item.product.name:
                return self._text("cart_item_added").format(product_name=item.product.name)
            return self._text("cart_item_added_generic")

        return await self._mutate(
            CartOperation.ADD,
            lambda: self.cart_client.add_to_cart(product_id, quantity),
            success_message=added_message,
        )

    async def remove_item(self, product_id: int) -> bool:
        return await self._mutate(
            CartOperation.REMOVE,
            lambda: self.cart_client.remove_from_cart(product_id),
        )

    async def update_quantity(self, product_id: int, quantity: int) -> bool:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return await self.remove_item(product_id)
        return await self._mutate(
            CartOperation.UPDATE_QUANTITY,
            lambda: self.cart_client.update_quantity(product_id, quantity),
        )

    async def update_size(self, product_id: int, size: str) -> bool:
        return await self._mutate(
            CartOperation.UPDATE_SIZE,
            lambda: self.cart_client.update_size(product_id, size),
        )

    async def clear_cart(self) -> bool:
        async def clear() -> RemoteCart:
            await self.cart_client.clear_cart()
            return RemoteCart()

        return await self._mutate(
            CartOperation.CLEAR,
            clear,
            success_message=lambda: self._text("cart_cleared"),
        )

    async def checkout(self) -> Order | None:
        """
        Place an order for the server cart, then re-derive the view from a fresh fetch.

        The backend empties the cart on checkout; if the fetch fails the view is
        emptied locally. A failed checkout leaves items untouched and emits one
        notification.

        Returns:
            The placed order, or None if checkout failed
        """
        if self.order_client is None:
            raise RuntimeError("CartReconciler was created without an OrderClient")
        if not self._authenticated:
            self.notifications.push(self._text("cart_login_required"), NotificationLevel.INFO)
            return None

        epoch = self._auth_epoch
        with self._in_flight_scope(epoch):
            try:
                order = await self.order_client.checkout()
            except Exception as e:
                self._notify_failure(epoch, "checkout", e)
                return None

            if epoch != self._auth_epoch:
                logger.info(f"[Cart] Order {order.id} placed by a previous session, view left alone")
                return order

            try:
                await self._reconcile(epoch)
            except Exception as e:
                logger.warning(f"[Cart] Re-fetch after checkout failed, emptying view: {e!r}")
                await self._commit(epoch, RemoteCart())

        if epoch == self._auth_epoch:
            self.notifications.push(self._text("order_placed").format(order_id=order.id),
                                    NotificationLevel.SUCCESS)
        return order

    async def _mutate(self, operation: CartOperation, call: Callable[[], Awaitable[RemoteCart | None]],
                      success_message: Callable[[], str] | None = None) -> bool:
        """
        Run one remote mutation and re-derive the view from a fresh fetch.

        Any 2xx counts as applied, whatever its body. If the follow-up fetch
        fails, the cart echoed by the mutation (when it had one) is used instead
        and the user is told the view may be out of date.

        Returns:
            True if the mutation was applied and the view re-derived
        """
        if not self._authenticated:
            self.notifications.push(self._text("cart_login_required"), NotificationLevel.INFO)
            return False

        epoch = self._auth_epoch
        with self._in_flight_scope(epoch):
            try:
                echoed = await call()
            except Exception as e:
                self._notify_failure(epoch, operation.value, e)
                return False

            if epoch != self._auth_epoch:
                logger.info(f"[Cart] Discarding {operation.value} result from a previous session")
                return False

            try:
                refreshed = await self._reconcile(epoch)
            except Exception as e:
                logger.warning(f"[Cart] Re-fetch after {operation.value} failed: {e!r}")
                if echoed is not None and not await self._commit(epoch, echoed):
                    return False
                if epoch != self._auth_epoch:
                    return False
                self.notifications.push(self._text("cart_out_of_date"), NotificationLevel.INFO)
                return True

        if refreshed and success_message is not None:
            self.notifications.push(success_message(), NotificationLevel.SUCCESS)
        return refreshed

    def _notify_failure(self, epoch: int, label: str, error: Exception) -> None:
        # a 401 ends the session itself; its notice belongs in the reset view
        if epoch != self._auth_epoch and not isinstance(error, AuthenticationRequiredException):
            logger.info(f"[Cart] {label} failed after the session changed, not notifying: {error!r}")
            return
        if isinstance(error, StorefrontException):
            logger.warning(f"[Cart] {label} failed: {error!r}")
            message = handle_service_error(error, MessageEntity.USER)
        else:
            message = handle_unexpected_error(error, MessageEntity.USER)
        self.notifications.push(message, NotificationLevel.ERROR)

    # ========================================================================
    # Reconciliation plumbing
    # ========================================================================

    async def _reconcile(self, epoch: int) -> bool:
        cart = await self.cart_client.get_cart()
        return await self._commit(epoch, cart)

    async def _commit(self, epoch: int, cart: RemoteCart | None) -> bool:
        items = await self.enricher.enrich(cart)
        if epoch != self._auth_epoch:
            logger.info("[Cart] Discarding stale cart from a previous session")
            return False
        self._loaded = True
        self._dispatch(CartAction(type=CartActionType.LOAD_ITEMS, items=items,
                                  sync_state=self._derived_sync_state()))
        logger.debug(f"[Cart] Re-derived {len(items)} line(s)")
        return True

    @contextmanager
    def _in_flight_scope(self, epoch: int):
        self._in_flight += 1
        self._refresh_sync_state()
        try:
            yield
        finally:
            # handle_logout/handle_login reset the counter for a new epoch
            if epoch == self._auth_epoch:
                self._in_flight -= 1
                self._refresh_sync_state()

    def _derived_sync_state(self) -> CartSyncState:
        if not self._authenticated:
            return CartSyncState.UNAUTHENTICATED
        if self._in_flight:
            return CartSyncState.SYNCING
        if self._loaded:
            return CartSyncState.READY
        return CartSyncState.UNAUTHENTICATED

    def _refresh_sync_state(self) -> None:
        sync_state = self._derived_sync_state()
        if sync_state != self._state.sync_state:
            self._dispatch(CartAction(type=CartActionType.SET_SYNC_STATE, sync_state=sync_state))

    def _dispatch(self, action: CartAction) -> None:
        new_state = reduce_cart(self._state, action)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def _show_notification(self, message: str, level: NotificationLevel) -> None:
        self._dispatch(CartAction(type=CartActionType.SHOW_NOTIFICATION, message=message))

    def _hide_notification(self) -> None:
        self._dispatch(CartAction(type=CartActionType.HIDE_NOTIFICATION))

    @staticmethod
    def _text(key: str) -> str:
        return Localizator.get_text(MessageEntity.USER, key)
