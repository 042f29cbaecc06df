"""
Storefront client wiring.

Builds the session store, the REST clients, the auth event bus and the cart
reconciler from config and connects them:

    SessionStore   <- auth:logout / auth:forbidden
    CartReconciler <- auth:login / auth:logout
    AuthService    <- auth:logout

The store subscribes first so stored credentials are gone before the cart
view is cleared.

Usage:
    storefront = Storefront.from_config()
    await storefront.start()
    await storefront.auth.login("user@example.com", "secret")
    await storefront.cart.add_item(42, quantity=2)
    order = await storefront.cart.checkout()
    await storefront.close()
"""
import logging

import config
from db import create_storage_engine, create_session_maker, create_db_and_tables
from services.auth import AuthService
from services.auth_events import AuthEventBus
from services.cart import CartReconciler
from services.cart_client import RemoteCartClient
from services.cart_enrichment import CartEnricher
from services.notification import NotificationService
from services.order import OrderClient
from services.product import ProductService
from services.session_store import SessionStore
from services.storage import DatabaseStorage, EncryptedStorage, InMemoryStorage, KeyValueStorage
from services.wishlist import WishlistClient
from utils.config_validator import validate_or_exit

logger = logging.getLogger(__name__)


def build_storage() -> KeyValueStorage:
    """Storage backend selected by SESSION_STORAGE_BACKEND, encrypted if SESSION_ENCRYPTION."""
    if config.SESSION_STORAGE_BACKEND == "database":
        engine = create_storage_engine(config.SESSION_DB_NAME)
        session_maker = create_session_maker(engine)
        create_db_and_tables(engine, session_maker)
        storage = DatabaseStorage(session_maker)
    else:
        storage = InMemoryStorage()
    if config.SESSION_ENCRYPTION:
        storage = EncryptedStorage(storage, config.SESSION_ENCRYPTION_SECRET)
    logger.info(f"[Storefront] Session storage: {config.SESSION_STORAGE_BACKEND}"
                f"{' (encrypted)' if config.SESSION_ENCRYPTION else ''}")
    return storage


class Storefront:
    def __init__(self, storage: KeyValueStorage, base_url: str | None = None,
                 timeout: float | None = None, dismiss_seconds: float | None = None):
        self.event_bus = AuthEventBus()
        self.session_store = SessionStore(storage)
        self.session_store.bind(self.event_bus)

        self.products = ProductService(self.session_store, self.event_bus, base_url, timeout)
        self.cart_client = RemoteCartClient(self.session_store, self.event_bus, base_url, timeout)
        self.wishlist = WishlistClient(self.session_store, self.event_bus, base_url, timeout)
        self.orders = OrderClient(self.session_store, self.event_bus, base_url, timeout)
        self.auth = AuthService(self.session_store, self.event_bus, base_url, timeout)
        self.auth.bind()

        self.notifications = NotificationService(dismiss_seconds)
        self.cart = CartReconciler(self.cart_client, CartEnricher(self.products), self.notifications,
                                   order_client=self.orders)
        self.cart.bind(self.event_bus)

    @classmethod
    def from_config(cls) -> "Storefront":
        validate_or_exit(config)
        return cls(build_storage())

    async def start(self) -> None:
        """Restore a persisted session; the cart loads through auth:login."""
        session = await self.auth.restore_session()
        if session is None:
            logger.info("[Storefront] Started without a session")

    async def close(self) -> None:
        for client in (self.products, self.cart_client, self.wishlist, self.orders, self.auth):
            await client.close()
