import logging
from datetime import datetime

from pydantic import ValidationError

from enums.product_category import ProductCategory
from exceptions.api import OperationFailedException, TransportException
from models.product import ApiProduct, Product
from services.api_client import ApiClient
from utils.price_parser import parse_optional_price, parse_price

logger = logging.getLogger(__name__)

SIZE_ORDER = ("XS", "M", "L", "XL", "XXL")
DEFAULT_SIZES = ["M", "L", "XL"]
DEFAULT_COLORS = ["Black", "White", "Navy", "Gray"]
PLACEHOLDER_IMAGE = "/images/placeholder.jpg"
DEFAULT_RATING = 4.5


class ProductService(ApiClient):
    """
    Product lookup against the public (unauthenticated) catalog endpoints.

    Backend products are transformed into storefront Products by
    transform_product(); the cart reconciler uses get_product_by_id() to
    enrich cart lines.
    """

    async def get_product_by_id(self, product_id: int | str) -> Product | None:
        """
        Returns:
            The product, or None when the backend does not know the id (404)
        """
        payload = await self._request("GET", f"/public/getProductById/{product_id}", "product_fetch",
                                      authenticated=False, not_found_as_none=True)
        if not payload or not isinstance(payload, dict):
            return None
        return self.transform_product(ApiProduct.model_validate(payload))

    async def get_all_products(self) -> list[Product]:
        payload = await self._request("GET", "/public/getAllProducts", "product_fetch", authenticated=False)
        return self._transform_all(payload)

    async def get_latest_products(self) -> list[Product]:
        payload = await self._request("GET", "/public/getLatestProducts", "product_fetch", authenticated=False)
        return self._transform_all(payload)

    async def get_products_by_category(self, category: str) -> list[Product]:
        """
        Products of one storefront category.

        The category is sent in the backend's spelling; the result is filtered to
        the requested storefront category unless that would leave nothing. If the
        category endpoint fails, all products are filtered locally instead.
        """
        desired = ProductCategory.from_api(category)
        try:
            payload = await self._request("GET", "/public/getProductByCategory", "product_fetch",
                                          params={"category": desired.to_backend()},
                                          authenticated=False)
        except (OperationFailedException, TransportException) as e:
            logger.warning(f"[Product] Category endpoint failed for '{category}', filtering all products: {e}")
            return [p for p in await self.get_all_products() if p.category == desired]
        products = self._transform_all(payload)
        filtered = [p for p in products if p.category == desired]
        return filtered if filtered else products

    async def search_products(self, query: str) -> list[Product]:
        """Case-insensitive match on name, description and category."""
        term = query.strip().lower()
        products = await self.get_all_products()
        if not term:
            return products
        return [
            p for p in products
            if term in p.name.lower() or term in p.description.lower() or term in p.category.value
        ]

    def _transform_all(self, payload) -> list[Product]:
        if not isinstance(payload, list):
            return []
        products = []
        for raw in payload:
            try:
                products.append(self.transform_product(ApiProduct.model_validate(raw)))
            except ValidationError as e:
                logger.warning(f"[Product] Skipping malformed product: {e.error_count()} error(s)")
        return products

    @staticmethod
    def transform_product(api_product: ApiProduct) -> Product:
        sizes = [size for size in SIZE_ORDER if api_product.size_stock(size) > 0]
        if not sizes:
            sizes = list(DEFAULT_SIZES)

        price = parse_price(api_product.price)
        original_price = parse_optional_price(api_product.original_price)

        if api_product.discount is not None and parse_optional_price(api_product.discount) is not None:
            discount_percent = parse_price(api_product.discount)
        elif original_price:
            discount = (original_price - price) / original_price * 100
            discount_percent = float(round(max(0.0, min(100.0, discount))))
        else:
            discount_percent = None

        if api_product.date and api_product.time:
            created_at = f"{api_product.date} {api_product.time}"
        else:
            created_at = datetime.now().isoformat()

        tags = [
            api_product.category or "",
            "new-arrival",
            "in-stock" if api_product.active else "out-of-stock",
        ]

        return Product(
            id=str(api_product.id),
            name=api_product.product_name,
            price=price,
            original_price=original_price,
            discount_percent=discount_percent,
            description=api_product.description or "",
            category=ProductCategory.from_api(api_product.category),
            images=[api_product.image_url] if api_product.image_url else [PLACEHOLDER_IMAGE],
            sizes=sizes,
            colors=list(DEFAULT_COLORS),
            in_stock=api_product.active and api_product.quantity > 0,
            stock_quantity=api_product.quantity,
            rating=DEFAULT_RATING,
            review_count=len(api_product.reviews or []),
            tags=tags,
            created_at=created_at,
            updated_at=created_at,
        )
