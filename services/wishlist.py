import logging

from pydantic import ValidationError

from exceptions.api import AuthenticationRequiredException, OperationFailedException
from exceptions.base import StorefrontException
from exceptions.wishlist import WishlistItemExistsException
from models.wishlist import WishlistItem
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class WishlistClient(ApiClient):
    """REST client for /user/wishlist. Calls are scoped to the stored user's id."""

    def _require_user_id(self, operation: str) -> int | str:
        session = self.session_store.load_auth() or self.session_store.memory_session
        if session is None or session.user.id is None:
            logger.warning(f"[Wishlist] {operation}: no user id in session")
            raise AuthenticationRequiredException(operation)
        return session.user.id

    async def add_to_wishlist(self, product_id: int) -> str:
        """
        Raises:
            WishlistItemExistsException: Product already in the wishlist (HTTP 409)
        """
        user_id = self._require_user_id("wishlist_add")
        try:
            payload = await self._request("POST", f"/user/wishlist/{user_id}/{product_id}", "wishlist_add",
                                          json_body={})
        except OperationFailedException as e:
            if e.status_code == 409:
                raise WishlistItemExistsException(product_id)
            raise
        logger.info(f"[Wishlist] Added product {product_id}")
        return payload if isinstance(payload, str) else "Added to wishlist"

    async def remove_from_wishlist_by_product_id(self, product_id: int) -> str:
        user_id = self._require_user_id("wishlist_remove")
        payload = await self._request("DELETE", f"/user/wishlist/{user_id}/{product_id}", "wishlist_remove")
        logger.info(f"[Wishlist] Removed product {product_id}")
        return payload if isinstance(payload, str) else "Removed from wishlist"

    async def remove_from_wishlist(self, wishlist_id: int) -> str:
        payload = await self._request("DELETE", f"/user/wishlist/{wishlist_id}", "wishlist_remove")
        logger.info(f"[Wishlist] Removed wishlist entry {wishlist_id}")
        return payload if isinstance(payload, str) else "Removed from wishlist"

    async def get_wishlist(self) -> list[WishlistItem]:
        """
        Returns:
            Wishlist entries; empty when the user has no wishlist yet (404)
        """
        user_id = self._require_user_id("wishlist_fetch")
        payload = await self._request("GET", f"/user/wishlist/user/{user_id}", "wishlist_fetch",
                                      not_found_as_none=True)
        if not isinstance(payload, list):
            return []
        items = []
        for raw in payload:
            try:
                items.append(WishlistItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"[Wishlist] Skipping malformed entry: {e.error_count()} error(s)")
        return items

    async def is_in_wishlist(self, product_id: int) -> bool:
        try:
            items = await self.get_wishlist()
        except StorefrontException as e:
            logger.warning(f"[Wishlist] Could not check product {product_id}: {e}")
            return False
        return any(item.product_id == product_id for item in items)
