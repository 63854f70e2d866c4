import asyncio

import httpx

from sdk.pystore import DEFAULT_BASE_URL, StoreAPIError, StoreClient

BUYERS = 25


async def simulate_order(c: StoreClient, ac: httpx.AsyncClient, n: int):
    email = f"buyer{n}@example.com"
    try:
        order = await c.create_order_async([{"productId": "p2", "quantity": 1 + n % 3}], email, client=ac)
        print(f"✅ {email} placed {order['id']} (total {order['totalAmount']:.2f})")
        return order["id"]
    except StoreAPIError as e:
        print(f"❌ {email} order failed: {e}")
    except httpx.HTTPError as e:
        print(f"❌ {email} could not reach the store: {e}")
    return None


async def main():
    c = StoreClient(base_url=DEFAULT_BASE_URL)
    before = len(c.list_orders())

    print(f"\n⚡ Submitting {BUYERS} orders concurrently...")
    async with httpx.AsyncClient(timeout=c.timeout) as ac:
        ids = await asyncio.gather(*(simulate_order(c, ac, n) for n in range(BUYERS)))

    placed = [i for i in ids if i]
    after = len(c.list_orders())
    print(f"\n🧾 placed={len(placed)} distinct={len(set(placed))} stored={after - before}")


if __name__ == "__main__":
    asyncio.run(main())
