import logging

from pydantic import ValidationError

from enums.order_status import OrderStatus
from exceptions.api import OperationFailedException
from exceptions.base import StorefrontException
from exceptions.order import EmptyCartCheckoutException
from models.order import BuyNowRequest, Order
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class OrderClient(ApiClient):
    """
    REST client for /user/orders.

    checkout() consumes the server cart; callers holding a cart view must
    re-fetch it afterwards (CartReconciler.checkout does). buy_now() orders a
    single product without touching the cart.

    The read helpers below get_order_history() log failures and return
    neutral values instead of raising.
    """

    async def buy_now(self, product_id: int, quantity: int, size: str) -> Order:
        request = BuyNowRequest(product_id=product_id, quantity=quantity, size=size)
        payload = await self._request("POST", "/user/orders/buy-now", "order_buy_now",
                                      json_body=request.model_dump(by_alias=True))
        order = Order.model_validate(payload)
        logger.info(f"[Order] Buy-now order {order.id} for product {product_id} x{quantity}")
        return order

    async def checkout(self) -> Order:
        """
        Place an order for everything in the server cart.

        Raises:
            EmptyCartCheckoutException: The backend refused because the cart is empty (HTTP 400)
        """
        try:
            payload = await self._request("POST", "/user/orders/checkout", "order_checkout", json_body={})
        except OperationFailedException as e:
            if e.status_code == 400:
                raise EmptyCartCheckoutException()
            raise
        order = Order.model_validate(payload)
        logger.info(f"[Order] Checkout placed order {order.id} ({order.total_amount:.2f})")
        return order

    async def get_order_history(self) -> list[Order]:
        payload = await self._request("GET", "/user/orders/history", "order_history")
        if not isinstance(payload, list):
            return []
        orders = []
        for raw in payload:
            try:
                orders.append(Order.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"[Order] Skipping malformed order: {e.error_count()} error(s)")
        return orders

    async def get_order_by_id(self, order_id: int) -> Order | None:
        # no single-order endpoint; searched in the history
        try:
            orders = await self.get_order_history()
        except StorefrontException as e:
            logger.warning(f"[Order] Could not load order {order_id}: {e}")
            return None
        return next((order for order in orders if order.id == order_id), None)

    async def get_recent_orders(self, limit: int = 5) -> list[Order]:
        try:
            orders = await self.get_order_history()
        except StorefrontException as e:
            logger.warning(f"[Order] Could not load recent orders: {e}")
            return []
        return sorted(orders, key=lambda order: order.ordered_at, reverse=True)[:limit]

    async def get_total_spent(self) -> float:
        try:
            orders = await self.get_order_history()
        except StorefrontException as e:
            logger.warning(f"[Order] Could not compute total spent: {e}")
            return 0.0
        return sum(order.total_amount for order in orders)

    async def get_order_count(self) -> int:
        try:
            orders = await self.get_order_history()
        except StorefrontException as e:
            logger.warning(f"[Order] Could not count orders: {e}")
            return 0
        return len(orders)

    @staticmethod
    def format_order_status(status: str) -> str:
        known = OrderStatus.from_api(status)
        return known.label if known is not None else status

    @staticmethod
    def get_status_color(status: str) -> str:
        known = OrderStatus.from_api(status)
        return known.color if known is not None else "gray"
