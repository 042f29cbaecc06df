"""
Local cart view.

CartViewState is what UI consumers render. It is rebuilt wholesale from the
remote cart after every mutation and every authentication transition; the
totals are computed from items on each read and cannot be set independently.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from enums.cart_sync_state import CartSyncState
from models.product import Product


class LocalCartItem(BaseModel):
    id: str  # str(RemoteCartLine.id)
    product_id: int
    product: Product
    quantity: int
    unit_price: float
    selected_size: str | None = None
    # view-only fields, regenerated on every re-derivation
    selected_color: str = "Default"
    added_at: datetime = Field(default_factory=datetime.now)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


class CartViewState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[LocalCartItem, ...] = ()
    is_open: bool = False
    sync_state: CartSyncState = CartSyncState.UNAUTHENTICATED
    show_notification: bool = False
    notification_message: str = ""

    @computed_field
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def total_amount(self) -> float:
        return round(sum(item.line_total for item in self.items), 2)
