# cli.py
import argparse
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.cart import Cart
from sdk.checkout import CheckoutError, place_order
from sdk.pystore import DEFAULT_BASE_URL, StoreAPIError, StoreClient
from sdk.recent_orders import RecentOrders
from sdk.storage import JsonFileStorage, MemoryStorage

console = Console()

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
email_cache = set()

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def _money(amount: float, currency: str = "USD") -> str:
    return f"{currency} {amount:.2f}"


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Products Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=8)
    table.add_column("Name", style="bold", width=26)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Category", width=12)
    table.add_column("Tags", width=24)
    table.add_column("Stock", width=6)

    for p in products:
        table.add_row(
            p.get("id", "N/A"),
            p.get("name", "N/A"),
            _money(p.get("price", 0), p.get("currency", "USD")),
            p.get("categoryId", "N/A"),
            ", ".join(p.get("tags", [])),
            "[green]yes[/green]" if p.get("inStock") else "[red]no[/red]",
        )
    console.print(table)


def show_product(p: Dict[str, Any]):
    body = Text()
    body.append(f"{p.get('description', '')}\n\n")
    body.append("Price: ", style="bold")
    body.append(_money(p.get("price", 0), p.get("currency", "USD")) + "\n", style="green")
    body.append("Category: ", style="bold")
    body.append(f"{p.get('categoryId', 'N/A')}\n")
    body.append("Tags: ", style="bold")
    body.append(", ".join(p.get("tags", [])) + "\n")
    if p.get("imageUrl"):
        body.append("Image: ", style="bold")
        body.append(p["imageUrl"], style="dim")
    console.print(Panel(body, title=f"{p.get('name')} ({p.get('id')})", border_style="cyan"))


def show_categories(categories: List[Dict[str, Any]]):
    if not categories:
        console.print("[italic yellow]No categories[/italic yellow]")
        return
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    for cat in categories:
        table.add_row(cat.get("id", ""), cat.get("name", ""))
    console.print(table)


def show_cart(cart: Cart, products: List[Dict[str, Any]]):
    priced = cart.price(products)

    title = Text()
    title.append("🛒 Shopping Cart", style="bold")
    title.append(f" - Estimated total: {priced.total:.2f}", style="bold green")

    if not priced.lines:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=12)

    for line in priced.lines:
        if line.product is None:
            name = f"[red]Product unavailable: {line.product_id}[/red]"
            currency = "USD"
        else:
            name = line.product.get("name", line.product_id)
            currency = line.product.get("currency", "USD")
        table.add_row(
            name,
            str(line.quantity),
            _money(line.unit_price, currency),
            _money(line.line_total, currency),
        )

    console.print(Panel(table, title=title, border_style="blue"))


def show_order(order: Dict[str, Any]):
    table = Table(box=box.SIMPLE, header_style="bold")
    table.add_column("Product")
    table.add_column("Qty", justify="right")
    table.add_column("Unit", justify="right")
    table.add_column("Line", justify="right")
    for item in order.get("items", []):
        unit = item.get("unitPrice", 0)
        qty = item.get("quantity", 0)
        table.add_row(item.get("productId", "?"), str(qty), f"{unit:.2f}", f"{unit * qty:.2f}")

    header = (
        f"[bold]Email:[/bold] {order.get('customerEmail')}\n"
        f"[bold]Status:[/bold] {order.get('status')}\n"
        f"[bold]Placed:[/bold] {order.get('createdAt')}"
    )
    console.print(Panel.fit(
        Text.from_markup(header + f"\n[bold]Total:[/bold] [green]{order.get('totalAmount', 0):.2f}[/green]"),
        title=f"🧾 Order #{order.get('id')}",
        border_style="green"
    ))
    console.print(table)


def show_orders(orders: List[Dict[str, Any]], title: str):
    if not orders:
        console.print("[italic yellow]No orders found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Order ID", style="dim", width=18)
    table.add_column("Email", width=24)
    table.add_column("Contents", width=30)
    table.add_column("Status", width=10)
    table.add_column("Total", justify="right", width=10)

    for order in orders:
        items = order.get("items", [])
        contents = ", ".join(f"{it.get('productId')} x{it.get('quantity')}" for it in items[:3])
        if len(items) > 3:
            contents += f" +{len(items) - 3} more"
        status_style = "yellow" if order.get("status") == "pending" else "green"
        table.add_row(
            order.get("id", "N/A"),
            order.get("customerEmail", ""),
            contents or "No items",
            f"[{status_style}]{order.get('status', 'N/A')}[/{status_style}]",
            f"{order.get('totalAmount', 0):.2f}",
        )

    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    API and connection errors are shown and turned into None.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)
    except (StoreAPIError, CheckoutError) as e:
        status_message = f"Error: {e}"
        console.print(show_status(status_message, False))
        return None
    except OSError as e:
        # requests' ConnectionError and Timeout derive from OSError
        status_message = f"Error: cannot reach the store ({e})"
        console.print(show_status(status_message, False))
        return None

    if success_msg:
        status_message = success_msg
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_products(client: StoreClient) -> List[Dict[str, Any]]:
    global product_cache
    product_cache = try_api(client.list_products) or []
    return product_cache


def get_product_completer():
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_email_completer():
    return WordCompleter(list(email_cache), ignore_case=True)


def remember_email(email: str):
    if email:
        email_cache.add(email)


def create_header(base_url: str):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ PyStore",
        f"[bold blue]Catalog & Orders[/bold blue] [dim]{base_url}[/dim]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


# ---------------------------
# Main menu
# ---------------------------
def menu(client: StoreClient, cart: Cart, recent: RecentOrders):
    global status_message

    console.clear()
    console.print(create_header(client.base_url))

    # Preload products for autocomplete and cart pricing
    refresh_products(client)

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "7", "🧹 Clear cart"),
            ("2", "ℹ️ Product details", "8", "✅ Place order"),
            ("3", "🏷️ Categories", "9", "🔍 Look up order"),
            ("4", "🛒 Add to cart", "10", "🕘 Recent orders"),
            ("5", "✏️ Set quantity", "11", "📋 All orders (admin)"),
            ("6", "🛒 View cart", "q", "👋 Quit"),
        ]

        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 12)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            category = prompt_with_autocomplete("Category id (blank for all)").strip()
            products = try_api(client.list_products, category or None, success_msg="Products loaded")
            if products is not None:
                if not category:
                    product_cache[:] = products
                show_products(products)

        elif choice == "2":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
            resp = try_api(client.get_product, pid, success_msg=f"Product {pid} loaded")
            if resp:
                show_product(resp)

        elif choice == "3":
            resp = try_api(client.list_categories, success_msg="Categories loaded")
            if resp is not None:
                show_categories(resp)

        elif choice == "4":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
            if not any(p.get("id") == pid for p in product_cache):
                status_message = f"Error: unknown product {pid!r}"
                continue
            qty = IntPrompt.ask("Enter quantity", default=1)
            if qty < 1:
                status_message = "Error: quantity must be at least 1"
                continue
            cart.add(pid, qty)
            status_message = f"Added {qty} of {pid} to cart"
            show_cart(cart, product_cache)

        elif choice == "5":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
            qty = IntPrompt.ask("New quantity (0 removes)", default=1)
            cart.set_quantity(pid, qty)
            status_message = f"Quantity of {pid} set to {qty}" if qty > 0 else f"Removed {pid} from cart"
            show_cart(cart, product_cache)

        elif choice == "6":
            show_cart(cart, product_cache)

        elif choice == "7":
            if Confirm.ask("Empty the cart?"):
                cart.clear()
                status_message = "Cart cleared"

        elif choice == "8":
            show_cart(cart, product_cache)
            email = prompt_with_autocomplete("Email (optional)", completer=get_email_completer()).strip()
            remember_email(email)
            order = try_api(place_order, client, cart, recent, email, success_msg="Order placed")
            if order:
                console.print(Panel.fit(
                    f"[green]Your order has been placed successfully![/green]\n"
                    f"Order ID: [bold]{order.get('id')}[/bold]\n"
                    f"Total: [bold]{order.get('totalAmount', 0):.2f}[/bold]",
                    title="✅ Order Confirmation"
                ))

        elif choice == "9":
            order_id = prompt_with_autocomplete(
                "Order ID",
                completer=WordCompleter([o.get("id", "") for o in recent.list()]),
            ).strip()
            if not order_id:
                status_message = "Error: please enter your order ID"
                continue
            email = prompt_with_autocomplete("Email (optional)", completer=get_email_completer()).strip()
            order = try_api(client.get_order, order_id, email or None, success_msg=f"Order {order_id} loaded")
            if order:
                show_order(order)

        elif choice == "10":
            show_orders(recent.list(), "🕘 Recent orders (this session)")

        elif choice == "11":
            orders = try_api(client.list_orders, success_msg="All orders loaded")
            if orders is not None:
                show_orders(orders, "📋 All orders")

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for using PyStore! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="PyStore interactive client")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    parser.add_argument(
        "--session-file",
        help="Keep the cart and recent orders in this JSON file (default: memory only)",
    )
    args = parser.parse_args(argv)

    storage = JsonFileStorage(args.session_file) if args.session_file else MemoryStorage()
    client = StoreClient(base_url=args.base_url)
    menu(client, Cart(storage), RecentOrders(storage))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
