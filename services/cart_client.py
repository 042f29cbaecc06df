import logging
from typing import Any

from pydantic import ValidationError

from enums.cart_operation import CartOperation
from exceptions.base import StorefrontException
from models.cart import RemoteCart
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


def _operation(op: CartOperation) -> str:
    return f"cart_{op.value}"


def _mutation_cart(payload: Any, operation: CartOperation) -> RemoteCart | None:
    """
    Cart echoed by a successful mutation, or None when the body is not cart-shaped
    (a plain-text ack, a line without an id). The call itself still succeeded.
    """
    if not isinstance(payload, dict):
        logger.debug(f"[Cart] {operation.value} answered without a cart body")
        return None
    try:
        return RemoteCart.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"[Cart] {operation.value} returned an unreadable cart: {e.error_count()} error(s)")
        return None


class RemoteCartClient(ApiClient):
    """
    REST client for the authenticated cart resource (/user/cart).

    Every call needs a bearer token; errors surface as the typed exceptions of
    ApiClient and are never swallowed, except by the convenience readers at the
    bottom which degrade to neutral values.
    """

    async def add_to_cart(self, product_id: int, quantity: int = 1) -> RemoteCart | None:
        payload = await self._request("POST", f"/user/cart/add/{product_id}", _operation(CartOperation.ADD),
                                      params={"quantity": quantity})
        logger.info(f"[Cart] Added product {product_id} x{quantity}")
        return _mutation_cart(payload, CartOperation.ADD)

    async def get_cart(self) -> RemoteCart | None:
        """
        Returns:
            The user's cart, or None if the backend has no cart for the user yet (404)
        """
        payload = await self._request("GET", "/user/cart", _operation(CartOperation.FETCH),
                                      not_found_as_none=True)
        if payload is None:
            logger.info("[Cart] No cart found for user")
            return None
        return RemoteCart.model_validate(payload)

    async def remove_from_cart(self, product_id: int) -> RemoteCart | None:
        payload = await self._request("DELETE", f"/user/cart/remove/{product_id}",
                                      _operation(CartOperation.REMOVE))
        logger.info(f"[Cart] Removed product {product_id}")
        return _mutation_cart(payload, CartOperation.REMOVE)

    async def update_quantity(self, product_id: int, quantity: int) -> RemoteCart | None:
        payload = await self._request("PUT", f"/user/cart/update/{product_id}",
                                      _operation(CartOperation.UPDATE_QUANTITY),
                                      params={"quantity": quantity})
        logger.info(f"[Cart] Product {product_id} quantity -> {quantity}")
        return _mutation_cart(payload, CartOperation.UPDATE_QUANTITY)

    async def update_size(self, product_id: int, size: str) -> RemoteCart | None:
        payload = await self._request("PUT", f"/user/cart/size/{product_id}",
                                      _operation(CartOperation.UPDATE_SIZE),
                                      params={"size": size})
        logger.info(f"[Cart] Product {product_id} size -> {size}")
        return _mutation_cart(payload, CartOperation.UPDATE_SIZE)

    async def clear_cart(self) -> str:
        """
        Returns:
            Backend confirmation text
        """
        payload = await self._request("DELETE", "/user/cart/clear", _operation(CartOperation.CLEAR))
        logger.info("[Cart] Cart cleared")
        if isinstance(payload, str):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            return payload["message"]
        return "Cart cleared successfully"

    # Convenience readers

    async def get_cart_item_count(self) -> int:
        try:
            cart = await self.get_cart()
        except StorefrontException as e:
            logger.warning(f"[Cart] Could not read item count: {e}")
            return 0
        if cart is None:
            return 0
        if cart.total_items is not None:
            return cart.total_items
        return sum(line.quantity for line in cart.items)

    async def get_cart_total(self) -> float:
        try:
            cart = await self.get_cart()
        except StorefrontException as e:
            logger.warning(f"[Cart] Could not read cart total: {e}")
            return 0.0
        if cart is None or cart.total_amount is None:
            return 0.0
        return float(cart.total_amount)

    async def is_product_in_cart(self, product_id: int) -> bool:
        try:
            cart = await self.get_cart()
        except StorefrontException as e:
            logger.warning(f"[Cart] Could not check product {product_id}: {e}")
            return False
        return cart is not None and cart.find_line(product_id) is not None
