# tests/test_validation.py
import pytest

from app.core import OrderItemIn, build_order_items, clamp_quantity, validate_order_body
from app.database import Catalog
from app.errors import OrderValidationError


@pytest.mark.parametrize("body, message", [
    ({}, "Body must include an items array"),
    ({"items": "p1"}, "Body must include an items array"),
    ({"items": {"productId": "p1"}}, "Body must include an items array"),
    ({"items": [{"quantity": 1}]}, "items[0]: productId must be a non-empty string"),
    ({"items": [{"productId": "   ", "quantity": 1}]}, "items[0]: productId must be a non-empty string"),
    ({"items": [{"productId": 7, "quantity": 1}]}, "items[0]: productId must be a non-empty string"),
    ({"items": [{"productId": "p1", "quantity": 0}]}, "items[0]: quantity must be a positive integer"),
    ({"items": [{"productId": "p1", "quantity": 1.5}]}, "items[0]: quantity must be a positive integer"),
    ({"items": [{"productId": "p1", "quantity": -2}]}, "items[0]: quantity must be a positive integer"),
    ({"items": [{"productId": "p1", "quantity": "2"}]}, "items[0]: quantity must be a positive integer"),
    ({"items": [{"productId": "p1", "quantity": True}]}, "items[0]: quantity must be a positive integer"),
    ({"items": [{"productId": "p1"}]}, "items[0]: quantity must be a positive integer"),
    ({"items": ["p1"]}, "items[0]: each item must be an object with productId and quantity"),
    ({"items": [None]}, "items[0]: each item must be an object with productId and quantity"),
    ({"items": [], "customerEmail": 42}, "customerEmail must be a string"),
])
def test_rejected_bodies(client, body, message):
    r = client.post("/orders", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": message}


def test_first_bad_item_is_reported(client):
    body = {"items": [
        {"productId": "p1", "quantity": 1},
        {"productId": "p2", "quantity": 0},
        {"productId": "", "quantity": 1},
    ]}
    r = client.post("/orders", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "items[1]: quantity must be a positive integer"


@pytest.mark.parametrize("raw", ["\"text\"", "42", "null", "not json", ""])
def test_non_object_body(client, raw):
    r = client.post("/orders", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Request body must be a JSON object"}


def test_array_body_has_no_items(client):
    r = client.post("/orders", json=[{"productId": "p1", "quantity": 1}])
    assert r.status_code == 400
    assert r.json() == {"error": "Body must include an items array"}


def test_array_item_has_no_product_id(client):
    r = client.post("/orders", json={"items": [["p1", 1]]})
    assert r.status_code == 400
    assert r.json() == {"error": "items[0]: productId must be a non-empty string"}


def test_rejected_order_is_not_stored(client, store):
    client.post("/orders", json={"items": [{"productId": "p1", "quantity": 0}]})
    assert len(store) == 0


def test_integral_float_quantity_is_accepted():
    req = validate_order_body({"items": [{"productId": "p1", "quantity": 2.0}]})
    assert req.items[0].quantity == 2


def test_validation_does_not_check_catalog():
    req = validate_order_body({"items": [{"productId": "ghost", "quantity": 1}], "customerEmail": "a@b.co"})
    assert req.customer_email == "a@b.co"
    assert [i.product_id for i in req.items] == ["ghost"]


def test_validation_error_type():
    with pytest.raises(OrderValidationError) as exc:
        validate_order_body(None)
    assert exc.value.status_code == 400


@pytest.mark.parametrize("value, expected", [
    (0, 1), (None, 1), (-5, 1), (1, 1), (50, 50), (99, 99), (150, 99), ("7", 7), ("abc", 1), (float("nan"), 1),
])
def test_clamp_quantity(value, expected):
    assert clamp_quantity(value) == expected


def test_build_order_items_clamps_missing_quantity():
    catalog = Catalog.default()
    items, total = build_order_items(
        [OrderItemIn(product_id="p4"), OrderItemIn(product_id="p4", quantity=0), OrderItemIn(product_id="x")],
        catalog.get_product,
    )
    assert [i.quantity for i in items] == [1, 1]
    assert total == 48.0
