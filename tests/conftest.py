"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests: a mocked config module, an in-process
aiohttp backend speaking the storefront REST API, and a wired Storefront.
"""

import sys
import os
import time
from unittest.mock import MagicMock
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from jose import jwt

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Mock config module completely before any imports
config_mock = MagicMock()
config_mock.API_URL = "http://localhost:8085"
config_mock.HTTP_TIMEOUT_SECONDS = None
config_mock.SESSION_STORAGE_BACKEND = "memory"
config_mock.SESSION_DB_NAME = "session.db"
config_mock.SESSION_ENCRYPTION = False
config_mock.SESSION_ENCRYPTION_SECRET = "test_session_secret_1234567890abcdef1234567890"
config_mock.NOTIFICATION_DISMISS_SECONDS = 0  # No auto-dismiss timers in tests
config_mock.STORE_LANGUAGE = "en"  # For Localizator
config_mock.LOG_LEVEL = "DEBUG"
config_mock.LOG_MASK_SECRETS = True
config_mock.LOG_RETENTION_DAYS = 5

sys.modules['config'] = config_mock

JWT_TEST_KEY = "backend-signing-key"


def make_token(role: str = "USER", expires_in: int = 3600, **claims) -> str:
    """Signed HS256 token like the backend issues (the client never verifies it)."""
    payload = {"sub": claims.pop("sub", "jane@example.com"), "role": role,
               "exp": int(time.time()) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, JWT_TEST_KEY, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


# ============================================================================
# Fake storefront backend
# ============================================================================

class FakeBackend:
    """
    In-memory backend for the cart, product, auth, wishlist, order and one
    admin endpoint.

    failures maps a route name ("add", "get_cart", "remove", "update_quantity",
    "update_size", "clear", "product", "login", "wishlist_add", ...) to a
    (status, body) answered instead of the normal response.
    acks maps a cart mutation route name to a plain-text body answered (with 200)
    after the change has been applied, in place of the cart JSON.
    """

    def __init__(self):
        self.user = {
            "id": 5,
            "email": "jane@example.com",
            "firstName": "Jane",
            "lastName": "Doe",
            "phoneNumber": "5550100200",
            "role": "USER",
            "password": "$2a$10$hashedpasswordvalue",
        }
        self.password = "correct-horse"
        self.tokens: set[str] = set()
        self.products = {
            42: {
                "id": 42, "productName": "Oversized Tee", "price": "799.0", "quantity": 12,
                "isActive": "true", "description": "Heavy cotton tee", "originalPrice": "999.0",
                "discount": None, "M": "4", "L": "5", "XL": "3", "imageUrl": "/img/tee.jpg",
                "category": "TShirts", "date": "2024-05-01", "time": "10:00:00", "reviews": [],
            },
            43: {
                "id": 43, "productName": "Zip Hoodie", "price": "1499", "quantity": 3,
                "isActive": "true", "description": "Fleece hoodie", "xs": "1", "xl": "2",
                "imageUrl": "/img/hoodie.jpg", "category": "Hoodie", "reviews": [{"r": 5}],
            },
        }
        self.lines: list[dict] = []
        self.next_line_id = 7
        self.has_cart = False
        self.wishlist: list[dict] = []
        self.orders: list[dict] = []
        self.next_order_id = 1001
        self.failures: dict[str, tuple[int, str]] = {}
        self.acks: dict[str, str] = {}
        self.requests: list[tuple[str, str]] = []
        self.url = ""

        self.app = web.Application(middlewares=[self._record])
        self.app.router.add_post("/user/cart/add/{product_id}", self.add)
        self.app.router.add_get("/user/cart", self.get_cart)
        self.app.router.add_delete("/user/cart/remove/{product_id}", self.remove)
        self.app.router.add_put("/user/cart/update/{product_id}", self.update_quantity)
        self.app.router.add_put("/user/cart/size/{product_id}", self.update_size)
        self.app.router.add_delete("/user/cart/clear", self.clear)
        self.app.router.add_get("/public/getProductById/{product_id}", self.product_by_id)
        self.app.router.add_get("/public/getAllProducts", self.all_products)
        self.app.router.add_get("/public/getLatestProducts", self.latest_products)
        self.app.router.add_get("/public/getProductByCategory", self.products_by_category)
        self.app.router.add_post("/auth/login", self.login)
        self.app.router.add_post("/auth/signup", self.signup)
        self.app.router.add_post("/user/wishlist/{user_id}/{product_id}", self.wishlist_add)
        self.app.router.add_delete("/user/wishlist/{user_id}/{product_id}", self.wishlist_remove_by_product)
        self.app.router.add_delete("/user/wishlist/{wishlist_id}", self.wishlist_remove)
        self.app.router.add_get("/user/wishlist/user/{user_id}", self.wishlist_get)
        self.app.router.add_post("/user/orders/checkout", self.checkout)
        self.app.router.add_post("/user/orders/buy-now", self.buy_now)
        self.app.router.add_get("/user/orders/history", self.order_history)
        self.app.router.add_get("/admin/products", self.admin_products)

    # helpers

    def issue_token(self, role: str = "USER") -> str:
        token = make_token(role=role, sub=self.user["email"], userId=self.user["id"])
        self.tokens.add(token)
        return token

    def add_line(self, product_id: int, quantity: int, size: str = "M", price: str | None = None) -> dict:
        product = self.products.get(product_id, {})
        line = {
            "id": self.next_line_id,
            "productId": product_id,
            "productName": product.get("productName", f"Product {product_id}"),
            "price": price if price is not None else product.get("price", "100.0"),
            "quantity": quantity,
            "size": size,
            "imageUrl": product.get("imageUrl", "/img/unknown.jpg"),
            "category": product.get("category", "TShirts"),
            "isActive": "true",
        }
        self.next_line_id += 1
        self.lines.append(line)
        self.has_cart = True
        return line

    def cart_json(self) -> dict:
        items = []
        for line in self.lines:
            item = dict(line)
            item["lineTotal"] = float(line["price"]) * line["quantity"]
            items.append(item)
        return {
            "id": 1,
            "userId": self.user["id"],
            "items": items,
            "totalAmount": sum(item["lineTotal"] for item in items),
            "totalItems": sum(item["quantity"] for item in items),
        }

    def count(self, method: str, path_prefix: str) -> int:
        return sum(1 for m, p in self.requests if m == method and p.startswith(path_prefix))

    @property
    def cart_request_count(self) -> int:
        return sum(1 for _, p in self.requests if p.startswith("/user/cart"))

    def _find_line(self, product_id: int) -> dict | None:
        return next((line for line in self.lines if line["productId"] == product_id), None)

    @web.middleware
    async def _record(self, request, handler):
        self.requests.append((request.method, request.path))
        return await handler(request)

    def _authorized(self, request) -> bool:
        header = request.headers.get("Authorization", "")
        return header.startswith("Bearer ") and header[len("Bearer "):] in self.tokens

    def _cart_response(self, name: str):
        if name in self.acks:
            return web.Response(text=self.acks[name])
        return web.json_response(self.cart_json())

    def _guard(self, request, name: str, authenticated: bool = True):
        if authenticated and not self._authorized(request):
            return web.Response(status=401, text="Unauthorized")
        if name in self.failures:
            status, body = self.failures[name]
            return web.Response(status=status, text=body)
        return None

    # cart

    async def add(self, request):
        if (failure := self._guard(request, "add")) is not None:
            return failure
        product_id = int(request.match_info["product_id"])
        if product_id not in self.products:
            return web.Response(status=404, text="Product not found")
        quantity = int(request.query.get("quantity", "1"))
        line = self._find_line(product_id)
        if line is None:
            self.add_line(product_id, quantity)
        else:
            line["quantity"] += quantity
        return self._cart_response("add")

    async def get_cart(self, request):
        if (failure := self._guard(request, "get_cart")) is not None:
            return failure
        if not self.has_cart:
            return web.Response(status=404, text="Cart not found")
        return web.json_response(self.cart_json())

    async def remove(self, request):
        if (failure := self._guard(request, "remove")) is not None:
            return failure
        line = self._find_line(int(request.match_info["product_id"]))
        if line is None:
            return web.json_response({"message": "Item not in cart"}, status=400)
        self.lines.remove(line)
        return self._cart_response("remove")

    async def update_quantity(self, request):
        if (failure := self._guard(request, "update_quantity")) is not None:
            return failure
        line = self._find_line(int(request.match_info["product_id"]))
        if line is None:
            return web.json_response({"message": "Item not in cart"}, status=400)
        line["quantity"] = int(request.query["quantity"])
        return self._cart_response("update_quantity")

    async def update_size(self, request):
        if (failure := self._guard(request, "update_size")) is not None:
            return failure
        line = self._find_line(int(request.match_info["product_id"]))
        if line is None:
            return web.json_response({"message": "Item not in cart"}, status=400)
        line["size"] = request.query["size"]
        return self._cart_response("update_size")

    async def clear(self, request):
        if (failure := self._guard(request, "clear")) is not None:
            return failure
        self.lines.clear()
        return web.Response(text="Cart cleared successfully")

    # products

    async def product_by_id(self, request):
        if (failure := self._guard(request, "product", authenticated=False)) is not None:
            return failure
        product = self.products.get(int(request.match_info["product_id"]))
        if product is None:
            return web.Response(status=404, text="Product not found")
        return web.json_response(product)

    async def all_products(self, request):
        if (failure := self._guard(request, "products", authenticated=False)) is not None:
            return failure
        return web.json_response(list(self.products.values()))

    async def latest_products(self, request):
        if (failure := self._guard(request, "products", authenticated=False)) is not None:
            return failure
        return web.json_response(list(self.products.values())[-1:])

    async def products_by_category(self, request):
        if (failure := self._guard(request, "category", authenticated=False)) is not None:
            return failure
        category = request.query.get("category", "")
        return web.json_response([p for p in self.products.values() if p.get("category") == category])

    # auth

    async def login(self, request):
        if (failure := self._guard(request, "login", authenticated=False)) is not None:
            return failure
        body = await request.json()
        if body.get("email") != self.user["email"] or body.get("password") != self.password:
            return web.Response(status=401, text="Invalid email or password")
        return web.json_response({**self.user, "token": self.issue_token(self.user["role"])})

    async def signup(self, request):
        if (failure := self._guard(request, "signup", authenticated=False)) is not None:
            return failure
        body = await request.json()
        self.user = {
            "id": 6, "email": body["email"], "firstName": body["firstName"],
            "lastName": body["lastName"], "phoneNumber": body.get("phoneNumber"),
            "role": body.get("role", "USER"), "password": "$2a$10$hashed",
        }
        self.password = body["password"]
        return web.json_response({**self.user, "token": self.issue_token(self.user["role"])})

    # wishlist

    async def wishlist_add(self, request):
        if (failure := self._guard(request, "wishlist_add")) is not None:
            return failure
        product_id = int(request.match_info["product_id"])
        if any(entry["productId"] == product_id for entry in self.wishlist):
            return web.Response(status=409, text="Product already in wishlist")
        product = self.products.get(product_id, {})
        self.wishlist.append({
            "wishlistId": len(self.wishlist) + 100,
            "userId": int(request.match_info["user_id"]),
            "productId": product_id,
            "name": product.get("productName", ""),
            "productPrice": product.get("price", "0"),
            "productImage": product.get("imageUrl", ""),
        })
        return web.Response(text="Product added to wishlist")

    async def wishlist_remove_by_product(self, request):
        if (failure := self._guard(request, "wishlist_remove")) is not None:
            return failure
        product_id = int(request.match_info["product_id"])
        self.wishlist = [entry for entry in self.wishlist if entry["productId"] != product_id]
        return web.Response(text="Product removed from wishlist")

    async def wishlist_remove(self, request):
        if (failure := self._guard(request, "wishlist_remove")) is not None:
            return failure
        wishlist_id = int(request.match_info["wishlist_id"])
        self.wishlist = [entry for entry in self.wishlist if entry["wishlistId"] != wishlist_id]
        return web.Response(text="Wishlist item removed")

    async def wishlist_get(self, request):
        if (failure := self._guard(request, "wishlist_get")) is not None:
            return failure
        if not self.wishlist:
            return web.Response(status=404, text="Wishlist not found")
        return web.json_response(self.wishlist)


    # orders

    def record_order(self, product_id: int, quantity: int, size: str | None, total: float,
                     order_date: str = "2024-06-01T12:00:00", status: str = "PENDING") -> dict:
        product = self.products.get(product_id, {})
        order = {
            "id": self.next_order_id,
            "orderDate": order_date,
            "totalAmount": total,
            "status": status,
            "productName": product.get("productName", f"Product {product_id}"),
            "quantity": quantity,
            "size": size,
            "image": product.get("imageUrl"),
            "userId": self.user["id"],
            "message": None,
        }
        self.next_order_id += 1
        self.orders.append(order)
        return order

    async def checkout(self, request):
        if (failure := self._guard(request, "checkout")) is not None:
            return failure
        if not self.lines:
            return web.Response(status=400, text="Cart is empty")
        first = self.lines[0]
        total = sum(float(line["price"]) * line["quantity"] for line in self.lines)
        order = self.record_order(first["productId"], sum(line["quantity"] for line in self.lines),
                                  first["size"], total)
        self.lines.clear()
        return web.json_response(order)

    async def buy_now(self, request):
        if (failure := self._guard(request, "buy_now")) is not None:
            return failure
        body = await request.json()
        product = self.products.get(body["productId"])
        if product is None:
            return web.Response(status=404, text="Product not found")
        total = float(product["price"]) * body["quantity"]
        return web.json_response(self.record_order(body["productId"], body["quantity"], body["size"], total))

    async def order_history(self, request):
        if (failure := self._guard(request, "order_history")) is not None:
            return failure
        return web.json_response(self.orders)

    # admin

    async def admin_products(self, request):
        if (failure := self._guard(request, "admin_products")) is not None:
            return failure
        return web.Response(status=403, text="Access denied")

@pytest_asyncio.fixture
async def backend():
    """Fake backend served on a local port; backend.url is the API base URL."""
    fake = FakeBackend()
    server = TestServer(fake.app)
    await server.start_server()
    fake.url = str(server.make_url("")).rstrip("/")
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def storefront(backend):
    """Storefront wired against the fake backend with in-memory session storage."""
    from services.storage import InMemoryStorage
    from storefront import Storefront

    sf = Storefront(InMemoryStorage(), base_url=backend.url, dismiss_seconds=0)
    yield sf
    await sf.close()


@pytest.fixture
def user_session():
    from models.session import AuthUser, Session

    return Session(
        token=make_token(sub="jane@example.com"),
        user=AuthUser(id=5, email="jane@example.com", first_name="Jane", last_name="Doe", role="USER"),
    )


@pytest.fixture
def admin_session():
    from models.session import AuthUser, Session

    return Session(
        token=make_token(role="ROLE_ADMIN", sub="admin@example.com"),
        user=AuthUser(id=1, email="admin@example.com", first_name="Ada", last_name="Admin", role="ADMIN"),
    )
