# tests/test_cart.py
import json

import pytest

from app.core import OrderItemIn, build_order_items
from app.database import Catalog
from sdk.cart import CART_KEY, Cart, parse_cart
from sdk.storage import JsonFileStorage, MemoryStorage, StorageError

PRODUCTS = [
    {"id": "p1", "name": "Headphones", "price": 129.99, "currency": "USD"},
    {"id": "p7", "name": "Sponge", "price": 0.1, "currency": "USD"},
]


@pytest.fixture
def storage():
    return MemoryStorage()


def test_add_same_product_merges(storage):
    cart = Cart(storage)
    cart.add("p1", 2)
    cart.add("p1", 3)
    assert [(i.product_id, i.quantity) for i in cart.items] == [("p1", 5)]


def test_add_keeps_insertion_order(storage):
    cart = Cart(storage)
    cart.add("p2")
    cart.add("p1")
    cart.add("p2")
    assert cart.to_order_items() == [
        {"productId": "p2", "quantity": 2},
        {"productId": "p1", "quantity": 1},
    ]


def test_add_rejects_non_positive_quantity(storage):
    cart = Cart(storage)
    with pytest.raises(ValueError):
        cart.add("p1", 0)
    assert len(cart) == 0


@pytest.mark.parametrize("quantity", [2.5, True, "2", None])
def test_add_rejects_non_integer_quantity(storage, quantity):
    cart = Cart(storage)
    with pytest.raises(ValueError):
        cart.add("p1", quantity)
    assert len(cart) == 0
    assert storage.get(CART_KEY) is None


def test_set_quantity_rejects_non_integer(storage):
    cart = Cart(storage)
    cart.add("p1", 2)
    with pytest.raises(ValueError):
        cart.set_quantity("p1", 2.5)
    assert cart.quantity_of("p1") == 2
    assert Cart(storage).to_order_items() == [{"productId": "p1", "quantity": 2}]


def test_integral_float_quantity_survives_reload(storage):
    cart = Cart(storage)
    cart.add("p1", 2.0)
    cart.set_quantity("p1", 3.0)
    assert Cart(storage).to_order_items() == [{"productId": "p1", "quantity": 3}]


@pytest.mark.parametrize("quantity", [0, -3])
def test_set_quantity_to_zero_or_less_removes(storage, quantity):
    cart = Cart(storage)
    cart.add("p1", 2)
    cart.add("p2", 1)
    cart.set_quantity("p1", quantity)
    assert [i.product_id for i in cart.items] == ["p2"]


def test_set_quantity_overwrites(storage):
    cart = Cart(storage)
    cart.add("p1", 2)
    cart.set_quantity("p1", 7)
    cart.set_quantity("unknown", 4)
    assert cart.quantity_of("p1") == 7
    assert cart.quantity_of("unknown") == 0


def test_remove_and_clear(storage):
    cart = Cart(storage)
    cart.add("p1")
    cart.add("p2")
    cart.remove("p1")
    assert [i.product_id for i in cart.items] == ["p2"]
    cart.clear()
    assert len(cart) == 0
    assert json.loads(storage.get(CART_KEY)) == []


def test_every_mutation_is_persisted(storage):
    cart = Cart(storage)
    cart.add("p1", 2)
    assert json.loads(storage.get(CART_KEY)) == [{"productId": "p1", "quantity": 2}]
    cart.set_quantity("p1", 4)
    assert json.loads(storage.get(CART_KEY)) == [{"productId": "p1", "quantity": 4}]

    reloaded = Cart(storage)
    assert reloaded.to_order_items() == [{"productId": "p1", "quantity": 4}]


def test_items_are_copies(storage):
    cart = Cart(storage)
    cart.add("p1", 1)
    cart.items[0].quantity = 50
    assert cart.quantity_of("p1") == 1


@pytest.mark.parametrize("raw", [None, "", "not json", "{}", '"cart"', "42"])
def test_unreadable_data_loads_empty(raw):
    assert parse_cart(raw) == []


def test_bad_entries_are_discarded():
    raw = json.dumps([
        {"productId": "p1", "quantity": 2},
        {"productId": 5, "quantity": 1},
        {"productId": "p2", "quantity": 0},
        {"productId": "p3", "quantity": -1},
        {"productId": "p4", "quantity": "3"},
        {"productId": "p5", "quantity": 1.5},
        {"productId": "p6", "quantity": True},
        {"productId": "p7"},
        "p8",
        {"productId": "p9", "quantity": 3.0},
    ])
    items = parse_cart(raw)
    assert [(i.product_id, i.quantity) for i in items] == [("p1", 2), ("p9", 3)]


def test_storage_quota_is_swallowed():
    storage = MemoryStorage(quota=10)
    cart = Cart(storage)
    cart.add("p1", 2)
    assert cart.quantity_of("p1") == 2
    assert storage.get(CART_KEY) is None


class BrokenStorage:
    def get(self, key):
        raise StorageError("storage disabled")

    def set(self, key, value):
        raise StorageError("storage disabled")

    def remove(self, key):
        raise StorageError("storage disabled")

    def clear(self):
        raise StorageError("storage disabled")


def test_unavailable_storage_degrades_to_memory():
    cart = Cart(BrokenStorage())
    assert len(cart) == 0
    cart.add("p1")
    cart.remove("p1")
    cart.clear()
    assert len(cart) == 0


def test_price_estimate_matches_server_total():
    catalog = Catalog.default()
    products = [p.model_dump(by_alias=True) for p in catalog.list_products()]
    cart = Cart(MemoryStorage())
    cart.add("p5", 3)
    cart.add("p7", 7)
    cart.add("p2", 99)

    requested = [OrderItemIn(product_id=i["productId"], quantity=i["quantity"]) for i in cart.to_order_items()]
    _, server_total = build_order_items(requested, catalog.get_product)
    assert cart.price(products).total == server_total == 5951.17


def test_price_estimate():
    cart = Cart(MemoryStorage())
    cart.add("p1", 1)
    cart.add("p7", 3)
    cart.add("gone", 2)
    priced = cart.price(PRODUCTS)
    assert [line.line_total for line in priced.lines] == [129.99, 0.3, 0.0]
    assert priced.lines[2].product is None
    assert priced.lines[2].unit_price == 0.0
    assert priced.total == 130.29


def test_file_storage_round_trip(tmp_path):
    path = tmp_path / "session" / "state.json"
    cart = Cart(JsonFileStorage(path))
    cart.add("p1", 3)

    resumed = Cart(JsonFileStorage(path))
    assert resumed.to_order_items() == [{"productId": "p1", "quantity": 3}]


def test_file_storage_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{{{")
    storage = JsonFileStorage(path)
    assert storage.get(CART_KEY) is None
    storage.set("other", "x")
    storage.remove("other")
    assert storage.get("other") is None
