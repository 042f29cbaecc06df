from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from enums.product_category import ProductCategory


class Product(BaseModel):
    """Storefront product as rendered by UI consumers."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    price: float
    original_price: float | None = None
    discount_percent: float | None = None
    category: ProductCategory = ProductCategory.T_SHIRTS
    images: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    in_stock: bool = True
    stock_quantity: int = 0
    rating: float = 4.5
    review_count: int = 0
    tags: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


class ApiProduct(BaseModel):
    """
    Product exactly as the public product endpoints return it.

    Per-size stock arrives as loose keys (XS, M, L, XL, XXL, in either case),
    kept in model_extra and read through size_stock().
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    product_name: str = ""
    price: str = "0"
    quantity: int = 0
    is_active: str = "false"
    description: str | None = None
    original_price: str | None = None
    discount: str | None = None
    image_url: str | None = None
    category: str | None = None
    date: str | None = None
    time: str | None = None
    reviews: list | None = None

    @field_validator('price', 'original_price', 'discount', mode='before')
    @classmethod
    def serialize_numeric(cls, v):
        return None if v is None else str(v)

    @field_validator('is_active', mode='before')
    @classmethod
    def serialize_active_flag(cls, v):
        return "false" if v is None else str(v).lower()

    @field_validator('quantity', mode='before')
    @classmethod
    def default_quantity(cls, v):
        return 0 if v is None else v

    @property
    def active(self) -> bool:
        return self.is_active in ("true", "1")

    def size_stock(self, size: str) -> int:
        """Stock for one size, 0 when the key is missing or not a number."""
        extra = self.model_extra or {}
        for key in (size.upper(), size.lower()):
            raw = extra.get(key)
            if raw is None:
                continue
            try:
                stock = int(str(raw).strip())
            except ValueError:
                continue
            if stock > 0:
                return stock
        return 0
