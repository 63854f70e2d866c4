from typing import Any, List, Optional

import structlog

from .core import (
    DEFAULT_CUSTOMER_EMAIL, build_order_items, generate_order_id,
    utc_timestamp, validate_order_body
)
from .database import Catalog, OrderStore
from .errors import DuplicateOrderError, NotFoundError
from .models import Category, Order, OrderStatus, Product

# This file contains the core logic for all API endpoints.

logger = structlog.get_logger(__name__)

_ID_ATTEMPTS = 5


# Product endpoints
def list_products_logic(catalog: Catalog, category: Optional[str] = None, tag: Optional[str] = None) -> List[Product]:
    return catalog.list_products(category=category, tag=tag)


def get_product_logic(catalog: Catalog, product_id: str) -> Product:
    p = catalog.get_product(product_id)
    if p is None:
        logger.info("product_not_found", product_id=product_id)
        raise NotFoundError("Product not found")
    return p


def list_categories_logic(catalog: Catalog) -> List[Category]:
    return catalog.list_categories()


# Orders
def list_orders_logic(store: OrderStore) -> List[Order]:
    return store.list()


def get_order_logic(store: OrderStore, order_id: str, email: Optional[str] = None) -> Order:
    """
    Look an order up by id. When an email is given it has to match the
    stored one ignoring case; a mismatch reports the same "not found" as an
    unknown id.
    """
    order = store.get(order_id)
    if order is None:
        logger.info("order_not_found", order_id=order_id)
        raise NotFoundError("Order not found")
    email = (email or "").strip()
    if email and order.customer_email.lower() != email.lower():
        logger.info("order_email_mismatch", order_id=order_id)
        raise NotFoundError("Order not found")
    return order


def create_order_logic(catalog: Catalog, store: OrderStore, body: Any) -> Order:
    req = validate_order_body(body)
    items, total = build_order_items(req.items, catalog.get_product)
    email = req.customer_email if req.customer_email is not None else DEFAULT_CUSTOMER_EMAIL
    now = utc_timestamp()

    for attempt in range(_ID_ATTEMPTS):
        order = Order(
            id=generate_order_id(),
            customer_email=email,
            items=items,
            total_amount=total,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        try:
            store.add(order)
        except DuplicateOrderError:
            logger.warning("order_id_collision", order_id=order.id, attempt=attempt)
            continue
        logger.info(
            "order_created",
            order_id=order.id,
            items=len(items),
            dropped=len(req.items) - len(items),
            total=total,
        )
        return order

    raise DuplicateOrderError(order.id)
