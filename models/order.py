from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from enums.order_status import OrderStatus


class Order(BaseModel):
    """
    Order as returned by checkout, buy-now and the order history.

    The backend records one product line per order; a checkout of several
    lines comes back as the order for the first line.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int
    order_date: str
    total_amount: float = 0.0
    status: str = OrderStatus.PENDING.value
    product_name: str = ""
    quantity: int = 1
    size: str | None = None
    image: str | None = None
    user_id: int | None = None
    message: str | None = None

    @field_validator('total_amount', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return 0.0 if v in (None, "") else v

    @property
    def known_status(self) -> OrderStatus | None:
        return OrderStatus.from_api(self.status)

    @property
    def ordered_at(self) -> datetime:
        """order_date as a datetime; unparseable dates sort as the oldest."""
        try:
            return datetime.fromisoformat(self.order_date.replace("Z", "+00:00")).replace(tzinfo=None)
        except ValueError:
            return datetime.min


class BuyNowRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: int
    quantity: int = Field(default=1, ge=1)
    size: str
