# sdk/checkout.py
import re
from typing import Any, Dict, Optional

import structlog

from sdk.cart import Cart
from sdk.pystore import StoreClient
from sdk.recent_orders import RecentOrders

logger = structlog.get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CheckoutError(Exception):
    """Raised before anything is sent when the checkout input is unusable."""


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def place_order(
    client: StoreClient,
    cart: Cart,
    recent: RecentOrders,
    customer_email: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Submit the cart as an order.

    On success the returned order is remembered in `recent` and the cart is
    emptied. API failures raise StoreAPIError and leave the cart as it was.
    """
    email = (customer_email or "").strip()
    if email and not is_valid_email(email):
        raise CheckoutError("Please enter a valid email address.")
    if not len(cart):
        raise CheckoutError("Your cart is empty.")

    order = client.create_order(cart.to_order_items(), email or None)
    recent.save(order)
    cart.clear()
    logger.info("checkout_complete", order_id=order.get("id"), total=order.get("totalAmount"))
    return order
