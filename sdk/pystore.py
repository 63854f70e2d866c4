# sdk/pystore.py
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import requests

DEFAULT_BASE_URL = os.getenv("PYSTORE_API_URL", "http://127.0.0.1:8085")


class StoreAPIError(Exception):
    """Non-2xx answer from the API; `message` is the server's `error` text."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


def _check(r) -> Any:
    # works for requests and httpx responses alike
    if r.status_code >= 400:
        message = None
        try:
            body = r.json()
            if isinstance(body, dict):
                message = body.get("error") or body.get("detail")
        except ValueError:
            pass
        raise StoreAPIError(r.status_code, str(message or f"HTTP {r.status_code}"))
    return r.json()


def _order_payload(items: List[Dict[str, Any]], customer_email: Optional[str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "items": [{"productId": i["productId"], "quantity": i["quantity"]} for i in items]
    }
    if customer_email:
        payload["customerEmail"] = customer_email
    return payload


class StoreClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def health(self):
        r = self.session.get(f"{self.base_url}/", timeout=self.timeout)
        return _check(r)

    # Catalog
    def list_products(self, category: Optional[str] = None, tag: Optional[str] = None):
        params = {}
        if category:
            params["category"] = category
        if tag:
            params["tag"] = tag
        r = self.session.get(f"{self.base_url}/products", params=params, timeout=self.timeout)
        return _check(r)

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.base_url}/products/{quote(product_id, safe='')}", timeout=self.timeout)
        return _check(r)

    def list_categories(self):
        r = self.session.get(f"{self.base_url}/categories", timeout=self.timeout)
        return _check(r)

    # Orders
    def list_orders(self):
        r = self.session.get(f"{self.base_url}/orders", timeout=self.timeout)
        return _check(r)

    def get_order(self, order_id: str, email: Optional[str] = None):
        params = {"email": email} if email else {}
        r = self.session.get(
            f"{self.base_url}/orders/{quote(order_id, safe='')}", params=params, timeout=self.timeout
        )
        return _check(r)

    def create_order(self, items: List[Dict[str, Any]], customer_email: Optional[str] = None):
        payload = _order_payload(items, customer_email)
        r = self.session.post(f"{self.base_url}/orders", json=payload, timeout=self.timeout)
        return _check(r)

    # Async create (used by demo_concurrent.py)
    async def create_order_async(
        self,
        items: List[Dict[str, Any]],
        customer_email: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        payload = _order_payload(items, customer_email)
        if client is not None:
            r = await client.post(f"{self.base_url}/orders", json=payload)
            return _check(r)
        async with httpx.AsyncClient(timeout=self.timeout) as ac:
            r = await ac.post(f"{self.base_url}/orders", json=payload)
            return _check(r)


def _parse_item(raw: str) -> Dict[str, Any]:
    pid, _, qty = raw.partition(":")
    return {"productId": pid, "quantity": int(qty) if qty else 1}


if __name__ == "__main__":
    import argparse
    from rich import print

    parser = argparse.ArgumentParser(description="PyStore CLI")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Catalog commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List all products")
    lp.add_argument("--category", help="Filter products by category id")
    lp.add_argument("--tag", help="Filter products by tag")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")

    subparsers.add_parser("list-categories", help="List product categories")

    # ---------------------------
    # Order commands
    # ---------------------------
    po = subparsers.add_parser("create-order", help="Place an order")
    po.add_argument("--email", help="Customer email")
    po.add_argument("--item", action="append", required=True, help="productId[:quantity], repeatable")

    go = subparsers.add_parser("get-order", help="Look up an order")
    go.add_argument("--order-id", required=True)
    go.add_argument("--email", help="Email the order was placed with")

    subparsers.add_parser("list-orders", help="List every order (admin)")

    # ---------------------------
    # Parse and execute
    # ---------------------------
    args = parser.parse_args()
    c = StoreClient(base_url=args.base_url)

    try:
        if args.command == "list-products":
            print(c.list_products(args.category, args.tag))
        elif args.command == "get-product":
            print(c.get_product(args.product_id))
        elif args.command == "list-categories":
            print(c.list_categories())
        elif args.command == "create-order":
            print(c.create_order([_parse_item(i) for i in args.item], args.email))
        elif args.command == "get-order":
            print(c.get_order(args.order_id, args.email))
        elif args.command == "list-orders":
            print(c.list_orders())
    except StoreAPIError as e:
        print(f"[red]{e}[/red]")
        raise SystemExit(1)
