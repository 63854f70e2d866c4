# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Catalog, OrderStore
from app.main import create_app


@pytest.fixture
def catalog():
    return Catalog.default()


@pytest.fixture
def store():
    return OrderStore()


@pytest.fixture
def app(catalog, store):
    return create_app(catalog=catalog, store=store, settings=Settings(log_level="WARNING"))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def place(client):
    """POST an order body and return the response."""
    def _place(items, **extra):
        body = {"items": items}
        body.update(extra)
        return client.post("/orders", json=body)
    return _place
