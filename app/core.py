# app/core.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, List, Optional, Tuple

import structlog
from pydantic import BaseModel

from .errors import OrderValidationError
from .models import OrderItem, Product

logger = structlog.get_logger(__name__)

DEFAULT_CUSTOMER_EMAIL = "guest@example.com"
MIN_QUANTITY = 1
MAX_QUANTITY = 99
ORDER_ID_PREFIX = "ord_"

_CENTS = Decimal("0.01")


class OrderItemIn(BaseModel):
    product_id: str
    quantity: Optional[Any] = None


class OrderIn(BaseModel):
    customer_email: Optional[str] = None
    items: List[OrderItemIn] = []


# ---------------------------
# Validation
# ---------------------------
def _as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float) and value.is_integer() and value >= 1:
        return int(value)
    return None


def validate_order_body(body: Any) -> OrderIn:
    """
    Check the shape of a POST /orders body and return it as an OrderIn.
    Stops at the first bad element; the catalog is not consulted here.
    """
    # JSON arrays count as objects here, they just carry no named fields
    if not isinstance(body, (dict, list)):
        raise OrderValidationError("Request body must be a JSON object")
    fields = body if isinstance(body, dict) else {}

    items = fields.get("items")
    if not isinstance(items, list):
        raise OrderValidationError("Body must include an items array")

    email = fields.get("customerEmail")
    if email is not None and not isinstance(email, str):
        raise OrderValidationError("customerEmail must be a string")

    parsed = []
    for index, item in enumerate(items):
        if not isinstance(item, (dict, list)):
            raise OrderValidationError(
                f"items[{index}]: each item must be an object with productId and quantity"
            )
        if isinstance(item, list):
            item = {}
        product_id = item.get("productId")
        if not isinstance(product_id, str) or not product_id.strip():
            raise OrderValidationError(f"items[{index}]: productId must be a non-empty string")
        quantity = _as_positive_int(item.get("quantity"))
        if quantity is None:
            raise OrderValidationError(f"items[{index}]: quantity must be a positive integer")
        parsed.append(OrderItemIn(product_id=product_id, quantity=quantity))

    return OrderIn(customer_email=email, items=parsed)


# ---------------------------
# Pricing helpers
# ---------------------------
def clamp_quantity(value: Any) -> int:
    # missing, zero or garbage quantities count as one unit
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        n = 0
    if not n:
        n = MIN_QUANTITY
    return max(MIN_QUANTITY, min(MAX_QUANTITY, n))


def line_amount(unit_price: float, quantity: int) -> Decimal:
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(unit_price)) * quantity


def round_money(amount: Decimal) -> float:
    return float(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def build_order_items(
    requested: List[OrderItemIn], lookup: Callable[[str], Optional[Product]]
) -> Tuple[List[OrderItem], float]:
    """
    Re-price requested items from the catalog.

    Items whose product id is not in the catalog are dropped without error.
    Returns the priced items and the total rounded to cents.
    """
    items: List[OrderItem] = []
    total = Decimal("0")
    for req in requested:
        product = lookup(req.product_id)
        if product is None:
            logger.debug("order_item_dropped", product_id=req.product_id)
            continue
        quantity = clamp_quantity(req.quantity)
        items.append(OrderItem(product_id=product.id, quantity=quantity, unit_price=product.price))
        total += line_amount(product.price, quantity)
    return items, round_money(total)


def generate_order_id() -> str:
    return ORDER_ID_PREFIX + uuid.uuid4().hex[:12]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
