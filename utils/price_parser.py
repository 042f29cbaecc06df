import math
import re

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_price(value) -> float:
    """
    Parse a serialized backend price ("799.0", "₹1,299", 799) into a float.

    Everything but digits and dots is stripped; unparseable input yields 0.0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        price = float(cleaned)
    except ValueError:
        return 0.0
    return price if math.isfinite(price) else 0.0


def parse_optional_price(value) -> float | None:
    """Like parse_price, but None for missing, unparseable or non-positive values."""
    if value is None:
        return None
    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        price = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price
