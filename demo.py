#!/usr/bin/env python
from sdk.cart import Cart
from sdk.checkout import place_order
from sdk.pystore import DEFAULT_BASE_URL, StoreAPIError, StoreClient
from sdk.recent_orders import RecentOrders
from sdk.storage import MemoryStorage


def main():
    c = StoreClient(base_url=DEFAULT_BASE_URL)
    storage = MemoryStorage()
    cart = Cart(storage)
    recent = RecentOrders(storage)

    # -----------------------------
    # Browse catalog
    # -----------------------------
    print("Categories...")
    print(c.list_categories())

    print("\nListing products...")
    products = c.list_products()
    for p in products:
        print(f"  {p['id']:<4} {p['name']:<28} {p['currency']} {p['price']:.2f}")

    print("\nBestsellers...")
    print([p["name"] for p in c.list_products(tag="bestseller")])

    # -----------------------------
    # Fill the cart
    # -----------------------------
    print("\nAdding products to cart...")
    cart.add("p1", 1)
    cart.add("p5", 2)
    cart.add("p5", 1)
    priced = cart.price(products)
    for line in priced.lines:
        print(f"  {line.product_id} x{line.quantity} @ {line.unit_price:.2f} = {line.line_total:.2f}")
    print(f"  estimated total: {priced.total:.2f}")

    # -----------------------------
    # Place order
    # -----------------------------
    email = "alice@example.com"
    print(f"\nPlacing order for {email}...")
    order = place_order(c, cart, recent, email)
    print(order)
    print("cart now holds", len(cart), "entries")

    # -----------------------------
    # Look the order up
    # -----------------------------
    print("\nLooking up with matching email (different case)...")
    print(c.get_order(order["id"], "ALICE@example.com"))

    print("\nLooking up with another email...")
    try:
        c.get_order(order["id"], "mallory@example.com")
    except StoreAPIError as e:
        print(e)

    print("\nRecent orders this session:")
    print([o["id"] for o in recent.list()])


if __name__ == "__main__":
    main()
