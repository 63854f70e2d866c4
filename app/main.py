# app/main.py
from typing import List, Optional

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .database import Catalog, OrderStore
from .errors import StoreError
from .logs import configure_logging
from .models import Category, Order, Product
from .sdk import (
    create_order_logic, get_order_logic, get_product_logic,
    list_categories_logic, list_orders_logic, list_products_logic
)

logger = structlog.get_logger(__name__)


# ---------------------------
# Dependencies
# ---------------------------
def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_store(request: Request) -> OrderStore:
    return request.app.state.store


def create_app(
    catalog: Optional[Catalog] = None,
    store: Optional[OrderStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    if catalog is None:
        catalog = Catalog.from_file(settings.catalog_path) if settings.catalog_path else Catalog.default()

    app = FastAPI(title="pystore (in-memory catalog & orders)")
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.store = store if store is not None else OrderStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # ---------------------------
    # Health
    # ---------------------------
    @app.get("/")
    async def root(catalog: Catalog = Depends(get_catalog), store: OrderStore = Depends(get_store)):
        return {"status": "ok", "products": len(catalog), "orders": len(store)}

    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.get("/products", response_model=List[Product])
    async def list_products(
        category: Optional[str] = None,
        tag: Optional[str] = None,
        catalog: Catalog = Depends(get_catalog),
    ):
        return list_products_logic(catalog, category=category, tag=tag)

    @app.get("/products/{product_id}", response_model=Product)
    async def get_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
        return get_product_logic(catalog, product_id)

    @app.get("/categories", response_model=List[Category])
    async def list_categories(catalog: Catalog = Depends(get_catalog)):
        return list_categories_logic(catalog)

    # ---------------------------
    # Orders
    # ---------------------------
    @app.get("/orders", response_model=List[Order])
    async def list_orders(store: OrderStore = Depends(get_store)):
        return list_orders_logic(store)

    @app.get("/orders/{order_id}", response_model=Order)
    async def get_order(
        order_id: str,
        email: Optional[str] = Query(None),
        store: OrderStore = Depends(get_store),
    ):
        return get_order_logic(store, order_id, email)

    @app.post("/orders", response_model=Order, status_code=201)
    async def create_order(
        request: Request,
        catalog: Catalog = Depends(get_catalog),
        store: OrderStore = Depends(get_store),
    ):
        # validation needs the raw body to report index-qualified errors
        try:
            body = await request.json()
        except ValueError:
            body = None
        return create_order_logic(catalog, store, body)

    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
