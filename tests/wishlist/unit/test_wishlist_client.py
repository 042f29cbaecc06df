"""
Unit Tests: WishlistClient

Wishlist calls are scoped to the stored user's id; duplicates surface as
WishlistItemExistsException, a missing wishlist as an empty list.
"""

import pytest
import pytest_asyncio

from exceptions import AuthenticationRequiredException, OperationFailedException, WishlistItemExistsException
from models.wishlist import WishlistItem
from services.auth_events import AuthEventBus
from services.session_store import SessionStore
from services.storage import InMemoryStorage
from services.wishlist import WishlistClient
from models.session import AuthUser, Session


@pytest.fixture
def session_store(backend):
    store = SessionStore(InMemoryStorage())
    store.save_auth(Session(token=backend.issue_token(), user=AuthUser(id=5, email="jane@example.com")))
    return store


@pytest_asyncio.fixture
async def wishlist(backend, session_store):
    client = WishlistClient(session_store, AuthEventBus(), base_url=backend.url)
    yield client
    await client.close()


class TestWishlistClient:

    @pytest.mark.asyncio
    async def test_add_and_get(self, wishlist, backend):
        assert await wishlist.add_to_wishlist(42) == "Product added to wishlist"

        items = await wishlist.get_wishlist()

        assert ("POST", "/user/wishlist/5/42") in backend.requests
        assert len(items) == 1
        assert items[0].id == 100
        assert items[0].product_id == 42
        assert items[0].product_name == "Oversized Tee"
        assert items[0].price == "799.0"
        assert items[0].image_url == "/img/tee.jpg"

    @pytest.mark.asyncio
    async def test_duplicate(self, wishlist):
        await wishlist.add_to_wishlist(42)

        with pytest.raises(WishlistItemExistsException) as exc_info:
            await wishlist.add_to_wishlist(42)

        assert exc_info.value.product_id == 42
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_other_failures_propagate(self, wishlist, backend):
        backend.failures["wishlist_add"] = (500, "")

        with pytest.raises(OperationFailedException) as exc_info:
            await wishlist.add_to_wishlist(42)

        assert not isinstance(exc_info.value, WishlistItemExistsException)
        assert exc_info.value.message == "Failed to add item to wishlist"

    @pytest.mark.asyncio
    async def test_missing_wishlist_is_empty(self, wishlist):
        assert await wishlist.get_wishlist() == []
        assert await wishlist.is_in_wishlist(42) is False

    @pytest.mark.asyncio
    async def test_remove_by_product_and_by_entry(self, wishlist, backend):
        await wishlist.add_to_wishlist(42)
        await wishlist.add_to_wishlist(43)

        await wishlist.remove_from_wishlist_by_product_id(42)
        assert [item.product_id for item in await wishlist.get_wishlist()] == [43]

        entry_id = (await wishlist.get_wishlist())[0].id
        await wishlist.remove_from_wishlist(entry_id)
        assert await wishlist.get_wishlist() == []

    @pytest.mark.asyncio
    async def test_is_in_wishlist_degrades_on_failure(self, wishlist, backend):
        await wishlist.add_to_wishlist(42)
        assert await wishlist.is_in_wishlist(42) is True

        backend.failures["wishlist_get"] = (500, "boom")
        assert await wishlist.is_in_wishlist(42) is False

    @pytest.mark.asyncio
    async def test_requires_user(self, backend):
        client = WishlistClient(SessionStore(InMemoryStorage()), AuthEventBus(), base_url=backend.url)
        try:
            with pytest.raises(AuthenticationRequiredException):
                await client.get_wishlist()
        finally:
            await client.close()

        assert backend.requests == []


class TestWishlistItemShapes:

    def test_legacy_shape(self):
        item = WishlistItem.model_validate({"wishlistId": 3, "productId": 42, "name": "Tee",
                                            "productPrice": 799, "productImage": "/img/tee.jpg"})

        assert item.id == 3
        assert item.product_name == "Tee"
        assert item.price == "799"
        assert item.image_url == "/img/tee.jpg"
        assert item.date_added

    def test_current_shape(self):
        item = WishlistItem.model_validate({"id": 4, "userId": 5, "productId": 43, "productName": "Hoodie",
                                            "price": "1499", "imageUrl": "/img/h.jpg", "category": "Hoodie",
                                            "dateAdded": "2024-05-01"})

        assert item.user_id == 5
        assert item.category == "Hoodie"
        assert item.date_added == "2024-05-01"
