from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"          # Placed, not yet confirmed by the shop
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"    # Being packed
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @staticmethod
    def from_api(value: str | None) -> "OrderStatus | None":
        if not value:
            return None
        try:
            return OrderStatus(value.strip().upper())
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


# Badge colors used by order lists
_STATUS_COLORS = {
    OrderStatus.PENDING: "yellow",
    OrderStatus.CONFIRMED: "blue",
    OrderStatus.PROCESSING: "indigo",
    OrderStatus.SHIPPED: "purple",
    OrderStatus.DELIVERED: "green",
    OrderStatus.CANCELLED: "red",
}
