from datetime import datetime

from pydantic import BaseModel, model_validator


class WishlistItem(BaseModel):
    id: int
    user_id: int | None = None
    product_id: int
    product_name: str = ""
    price: str = "0"
    image_url: str = ""
    category: str | None = None
    date_added: str

    @model_validator(mode='before')
    @classmethod
    def normalize_shape(cls, data):
        """
        The wishlist endpoint has returned several shapes over time
        (id/wishlistId, price/productPrice, imageUrl/productImage, name/productName).
        """
        if not isinstance(data, dict):
            return data
        return {
            'id': data.get('id', data.get('wishlistId')),
            'user_id': data.get('userId', data.get('user_id')),
            'product_id': data.get('productId', data.get('product_id')),
            'product_name': str(data.get('productName') or data.get('name') or data.get('product_name') or ''),
            'price': str(data.get('price') or data.get('productPrice') or '0'),
            'image_url': str(data.get('imageUrl') or data.get('productImage') or data.get('image_url') or ''),
            'category': str(data['category']) if data.get('category') else None,
            'date_added': str(data.get('dateAdded') or data.get('date_added') or datetime.now().isoformat()),
        }
