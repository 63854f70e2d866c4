# sdk/cart.py
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import structlog

from app.core import line_amount, round_money
from sdk.storage import SessionStorage, StorageError

logger = structlog.get_logger(__name__)

CART_KEY = "cart"


@dataclass
class CartItem:
    product_id: str
    quantity: int


@dataclass
class PricedLine:
    product_id: str
    quantity: int
    product: Optional[Dict[str, Any]]
    unit_price: float
    line_total: float


@dataclass
class PricedCart:
    lines: List[PricedLine]
    total: float


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value)


def _quantity(value: Any) -> Optional[int]:
    value = _as_int(value)
    return value if value is not None and value > 0 else None


def _whole_number(value: Any) -> int:
    n = _as_int(value)
    if n is None:
        raise ValueError(f"quantity must be a whole number, got {value!r}")
    return n


def parse_cart(raw: Optional[str]) -> List[CartItem]:
    """
    Decode the stored cart. Entries with a bad shape are skipped; anything
    that is not a JSON list gives an empty cart.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(data, list):
        return []

    items = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        pid = entry.get("productId")
        qty = _quantity(entry.get("quantity"))
        if not isinstance(pid, str) or qty is None:
            continue
        items.append(CartItem(product_id=pid, quantity=qty))
    return items


class Cart:
    def __init__(self, storage: SessionStorage):
        self.storage = storage
        self._items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        try:
            raw = self.storage.get(CART_KEY)
        except (StorageError, OSError) as e:
            logger.warning("cart_load_failed", error=str(e))
            return []
        return parse_cart(raw)

    def _save(self) -> None:
        payload = json.dumps(self.to_order_items())
        try:
            self.storage.set(CART_KEY, payload)
        except (StorageError, OSError) as e:
            logger.warning("cart_save_failed", error=str(e))

    @property
    def items(self) -> List[CartItem]:
        return [CartItem(i.product_id, i.quantity) for i in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def quantity_of(self, product_id: str) -> int:
        for item in self._items:
            if item.product_id == product_id:
                return item.quantity
        return 0

    # ---------------------------
    # Mutations
    # ---------------------------
    def add(self, product_id: str, quantity: int = 1) -> None:
        quantity = _whole_number(quantity)
        if quantity < 1:
            raise ValueError("quantity must be >= 1")
        for item in self._items:
            if item.product_id == product_id:
                item.quantity += quantity
                break
        else:
            self._items.append(CartItem(product_id, quantity))
        self._save()

    def set_quantity(self, product_id: str, quantity: int) -> None:
        quantity = _whole_number(quantity)
        if quantity <= 0:
            self.remove(product_id)
            return
        for item in self._items:
            if item.product_id == product_id:
                item.quantity = quantity
        self._save()

    def remove(self, product_id: str) -> None:
        self._items = [i for i in self._items if i.product_id != product_id]
        self._save()

    def clear(self) -> None:
        self._items = []
        self._save()

    # ---------------------------
    # Views
    # ---------------------------
    def to_order_items(self) -> List[Dict[str, Any]]:
        return [{"productId": i.product_id, "quantity": i.quantity} for i in self._items]

    def price(self, products: Iterable[Dict[str, Any]]) -> PricedCart:
        """Estimate the cart against a product listing; the server re-prices on submit."""
        by_id = {p.get("id"): p for p in products}
        lines = []
        total = Decimal("0")
        for item in self._items:
            product = by_id.get(item.product_id)
            unit_price = float(product.get("price", 0)) if product else 0.0
            line = line_amount(unit_price, item.quantity)
            total += line
            lines.append(PricedLine(
                product_id=item.product_id,
                quantity=item.quantity,
                product=product,
                unit_price=unit_price,
                line_total=round_money(line),
            ))
        return PricedCart(lines=lines, total=round_money(total))
