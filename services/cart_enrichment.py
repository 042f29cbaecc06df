"""
Cart line enrichment.

Turns RemoteCartLines into LocalCartItems carrying a full Product. Lookups run
concurrently; a line whose product cannot be resolved (lookup error or no such
product) gets a Product synthesized from the line itself, so enrichment never
fails and never drops a line.
"""
import asyncio
import logging
from datetime import datetime

from enums.product_category import ProductCategory
from models.cart import RemoteCart, RemoteCartLine
from models.cart_view import LocalCartItem
from models.product import Product
from services.product import ProductService, DEFAULT_RATING
from utils.price_parser import parse_price

logger = logging.getLogger(__name__)

FALLBACK_MARKUP = 1.2
FALLBACK_STOCK_QUANTITY = 100
FALLBACK_COLOR = "Default"


def synthesize_product(line: RemoteCartLine) -> Product:
    """Minimal Product built only from what the cart line carries."""
    price = parse_price(line.price)
    now = datetime.now().isoformat()
    return Product(
        id=str(line.product_id),
        name=line.product_name,
        description="",
        price=price,
        original_price=price * FALLBACK_MARKUP,
        category=ProductCategory.from_api(line.category),
        images=[line.image_url] if line.image_url else [],
        sizes=[line.size] if line.size else [],
        colors=[FALLBACK_COLOR],
        in_stock=line.active,
        stock_quantity=FALLBACK_STOCK_QUANTITY,
        rating=DEFAULT_RATING,
        review_count=0,
        tags=[],
        created_at=now,
        updated_at=now,
    )


def to_local_item(line: RemoteCartLine, product: Product) -> LocalCartItem:
    return LocalCartItem(
        id=str(line.id),
        product_id=line.product_id,
        product=product,
        quantity=line.quantity,
        unit_price=parse_price(line.price),
        selected_size=line.size,
        selected_color=FALLBACK_COLOR,
    )


class CartEnricher:
    def __init__(self, product_service: ProductService):
        self.product_service = product_service

    async def resolve_product(self, line: RemoteCartLine) -> Product:
        try:
            product = await self.product_service.get_product_by_id(line.product_id)
        except Exception as e:
            # enrichment must never surface an error to the cart view
            logger.warning(f"[Enrichment] Lookup failed for product {line.product_id}, using cart line data: {e}")
            return synthesize_product(line)
        if product is None:
            logger.info(f"[Enrichment] Product {line.product_id} not found, using cart line data")
            return synthesize_product(line)
        return product

    async def enrich(self, cart: RemoteCart | None) -> tuple[LocalCartItem, ...]:
        """
        Project a remote cart onto local items, one per line, in line order.

        Returns:
            Empty tuple for a missing cart
        """
        if cart is None or not cart.items:
            return ()
        products = await asyncio.gather(*(self.resolve_product(line) for line in cart.items))
        return tuple(to_local_item(line, product) for line, product in zip(cart.items, products))
