from enum import Enum


class ProductCategory(str, Enum):
    T_SHIRTS = "t-shirts"
    HOODIES = "hoodies"
    SHIRTS = "shirts"
    JACKETS = "jackets"
    PANTS = "pants"
    JEANS = "jeans"
    SHORTS = "shorts"
    SWEATERS = "sweaters"

    @staticmethod
    def from_api(value: str | None) -> "ProductCategory":
        """
        Map a backend category spelling to a storefront category.

        Unknown or missing categories fall back to T_SHIRTS.

        Examples:
            >>> ProductCategory.from_api("Hoodie")
            <ProductCategory.HOODIES: 'hoodies'>
            >>> ProductCategory.from_api("TShirts")
            <ProductCategory.T_SHIRTS: 't-shirts'>
        """
        if not value:
            return ProductCategory.T_SHIRTS
        return _API_CATEGORY_MAP.get(value.strip().lower(), ProductCategory.T_SHIRTS)

    def to_backend(self) -> str:
        """Spelling the backend expects in /public/getProductByCategory."""
        return _BACKEND_CATEGORY_NAMES.get(self, self.value)


_API_CATEGORY_MAP = {
    "apparel": ProductCategory.T_SHIRTS,
    "t-shirt": ProductCategory.T_SHIRTS,
    "t-shirts": ProductCategory.T_SHIRTS,
    "tshirt": ProductCategory.T_SHIRTS,
    "tshirts": ProductCategory.T_SHIRTS,
    "hoodie": ProductCategory.HOODIES,
    "hoodies": ProductCategory.HOODIES,
    "shirt": ProductCategory.SHIRTS,
    "shirts": ProductCategory.SHIRTS,
    "jacket": ProductCategory.JACKETS,
    "jackets": ProductCategory.JACKETS,
    "pant": ProductCategory.PANTS,
    "pants": ProductCategory.PANTS,
    "jean": ProductCategory.JEANS,
    "jeans": ProductCategory.JEANS,
    "short": ProductCategory.SHORTS,
    "shorts": ProductCategory.SHORTS,
    "sweater": ProductCategory.SWEATERS,
    "sweaters": ProductCategory.SWEATERS,
}

# Backend stores a few categories with their own capitalization
_BACKEND_CATEGORY_NAMES = {
    ProductCategory.HOODIES: "Hoodie",
    ProductCategory.T_SHIRTS: "TShirts",
}
