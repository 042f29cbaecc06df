# remote cart as owned by the backend (GET /user/cart and every cart mutation).
# The client never assigns line ids; a line id is distinct from the product id
# it references. Prices arrive as serialized numeric strings
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RemoteCartLine(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int
    product_id: int
    product_name: str = ""
    price: str = "0"
    quantity: int = 1
    line_total: float | None = None
    size: str | None = None
    image_url: str | None = None
    category: str | None = None
    is_active: str = "true"

    @field_validator('price', mode='before')
    @classmethod
    def serialize_price(cls, v):
        return "0" if v is None else str(v)

    @field_validator('is_active', mode='before')
    @classmethod
    def serialize_active_flag(cls, v):
        return "false" if v is None else str(v).lower()

    @property
    def active(self) -> bool:
        return self.is_active in ("true", "1")


class RemoteCart(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | None = None
    user_id: int | None = None
    items: list[RemoteCartLine] = Field(default_factory=list)
    total_amount: float | None = None
    total_items: int | None = None

    def find_line(self, product_id: int) -> RemoteCartLine | None:
        return next((line for line in self.items if line.product_id == product_id), None)
