# app/database.py
import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from .errors import DuplicateOrderError
from .models import Category, Order, Product

# This file holds the in-memory order store and the read-only catalog.

logger = structlog.get_logger(__name__)


class OrderStore:
    """
    Process-local order repository.

    Orders are indexed by id and kept in insertion order. Every access goes
    through one lock so concurrent submissions cannot lose an append.
    """

    def __init__(self, orders: Iterable[Order] = ()):
        self._lock = threading.Lock()
        self._orders: Dict[str, Order] = {}
        for order in orders:
            self.add(order)

    def add(self, order: Order) -> Order:
        with self._lock:
            if order.id in self._orders:
                raise DuplicateOrderError(order.id)
            self._orders[order.id] = order
        return order

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def list(self) -> List[Order]:
        with self._lock:
            return list(self._orders.values())

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


class Catalog:
    """Read-only products and categories."""

    def __init__(self, products: Iterable[Product], categories: Iterable[Category] = ()):
        self._products: Dict[str, Product] = {p.id: p for p in products}
        self._categories: List[Category] = list(categories)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        return cls(
            products=[Product.model_validate(p) for p in data.get("products", [])],
            categories=[Category.model_validate(c) for c in data.get("categories", [])],
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Catalog":
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        catalog = cls.from_dict(data)
        logger.info("catalog_loaded", path=str(path), products=len(catalog))
        return catalog

    @classmethod
    def default(cls) -> "Catalog":
        return cls.from_dict({"categories": SEED_CATEGORIES, "products": SEED_PRODUCTS})

    def list_products(self, category: Optional[str] = None, tag: Optional[str] = None) -> List[Product]:
        out = []
        for p in self._products.values():
            if category and p.category_id != category:
                continue
            if tag and tag not in p.tags:
                continue
            out.append(p)
        return out

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def list_categories(self) -> List[Category]:
        return list(self._categories)

    def __len__(self) -> int:
        return len(self._products)


# ---------------------------
# Seed catalog
# ---------------------------
SEED_CATEGORIES: List[Dict[str, Any]] = [
    {"id": "cat_audio", "name": "Audio"},
    {"id": "cat_books", "name": "Books"},
    {"id": "cat_home", "name": "Home & Kitchen"},
]

SEED_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "p1",
        "name": "Wireless Headphones",
        "description": "Over-ear headphones with active noise cancellation.",
        "price": 129.99,
        "currency": "USD",
        "categoryId": "cat_audio",
        "tags": ["wireless", "bluetooth", "bestseller"],
        "inStock": True,
        "imageUrl": "https://picsum.photos/seed/p1/400/300",
    },
    {
        "id": "p2",
        "name": "Portable Speaker",
        "description": "Water-resistant speaker with 12 hours of playback.",
        "price": 59.5,
        "currency": "USD",
        "categoryId": "cat_audio",
        "tags": ["bluetooth", "outdoor"],
        "inStock": True,
        "imageUrl": "https://picsum.photos/seed/p2/400/300",
    },
    {
        "id": "p3",
        "name": "USB Microphone",
        "description": "Cardioid condenser microphone for streaming and calls.",
        "price": 74.25,
        "currency": "USD",
        "categoryId": "cat_audio",
        "tags": ["usb", "recording"],
        "inStock": False,
    },
    {
        "id": "p4",
        "name": "The Pragmatic Cookbook",
        "description": "Weeknight recipes in thirty minutes or less.",
        "price": 24.0,
        "currency": "USD",
        "categoryId": "cat_books",
        "tags": ["cooking", "paperback"],
        "inStock": True,
        "imageUrl": "https://picsum.photos/seed/p4/400/300",
    },
    {
        "id": "p5",
        "name": "Field Guide to Birds",
        "description": "Illustrated guide covering over 800 species.",
        "price": 19.99,
        "currency": "USD",
        "categoryId": "cat_books",
        "tags": ["nature", "hardcover", "bestseller"],
        "inStock": True,
    },
    {
        "id": "p6",
        "name": "Pour-Over Coffee Set",
        "description": "Glass dripper, carafe and 100 paper filters.",
        "price": 34.95,
        "currency": "USD",
        "categoryId": "cat_home",
        "tags": ["coffee", "gift"],
        "inStock": True,
        "imageUrl": "https://picsum.photos/seed/p6/400/300",
    },
    {
        "id": "p7",
        "name": "Dish Sponge",
        "description": "Single cellulose sponge, sold loose.",
        "price": 0.1,
        "currency": "USD",
        "categoryId": "cat_home",
        "tags": ["cooking"],
        "inStock": True,
    },
]
