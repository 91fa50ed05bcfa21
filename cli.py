# cli.py - interactive Modern Mart client with autocomplete
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.martclient import MartClient

console = Console()
c = MartClient(base_url=os.getenv("MART_API_URL", "http://127.0.0.1:5000"))

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
current_email: Optional[str] = None

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def money(amount: Optional[float]) -> str:
    return f"₹{(amount or 0):,.2f}"


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
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=32)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Off", justify="right", width=6)
    table.add_column("Stock", justify="right", width=7)
    table.add_column("Rating", justify="right", width=8)
    table.add_column("Sizes", width=18)

    for p in products:
        off = p.get("discount_percentage") or 0
        rating = p.get("average_rating")
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            money(p.get("price")),
            f"{off}%" if off else "-",
            str(p.get("stock_quantity", 0)),
            f"{rating:.1f} ({p.get('review_count', 0)})" if rating is not None else "-",
            ", ".join(p.get("size_chart") or []) or "-",
        )
    console.print(table)


def show_pagination(pagination: Dict[str, Any]):
    console.print(
        f"[dim]Page {pagination.get('currentPage')} of {pagination.get('totalPages')} "
        f"({pagination.get('totalItems')} products)[/dim]"
    )


def show_cart(cart: Dict[str, Any]):
    if not cart:
        console.print("[italic yellow]No cart data[/italic yellow]")
        return

    summary = cart.get("summary", {})
    title = Text()
    title.append("🛒 Shopping Cart", style="bold")
    title.append(f" - Total: {money(summary.get('total'))}", style="bold green")

    items = cart.get("items", [])
    if not items:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Item", style="dim", width=6)
    table.add_column("Product", style="bold", width=32)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Line total", justify="right", width=12)

    for it in items:
        table.add_row(
            str(it.get("id")),
            it.get("product_name", "Unknown"),
            str(it.get("quantity", 0)),
            money(it.get("unit_price")),
            money(it.get("total_price")),
        )

    totals = Table.grid(padding=(0, 2))
    totals.add_column(justify="right")
    totals.add_column(justify="right")
    totals.add_row("Subtotal", money(summary.get("subtotal")))
    totals.add_row("Discount", money(summary.get("discount")))
    shipping = summary.get("shipping")
    totals.add_row("Shipping", "[green]FREE[/green]" if not shipping else money(shipping))
    totals.add_row("Tax", money(summary.get("tax")))
    totals.add_row("[bold]Total[/bold]", f"[bold]{money(summary.get('total'))}[/bold]")

    console.print(Panel(table, title=title, border_style="blue"))
    console.print(totals)
    if not summary.get("free_shipping_eligible"):
        remaining = (summary.get("free_shipping_threshold") or 0) - (summary.get("subtotal") or 0)
        console.print(f"[dim]Add {money(remaining)} more for free shipping[/dim]")


def show_orders(orders: List[Dict[str, Any]]):
    if not orders:
        console.print("[italic yellow]No orders found[/italic yellow]")
        return

    table = Table(
        title=f"📋 Orders for {current_email or 'you'}",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Order ID", style="dim", width=9)
    table.add_column("Placed", width=20)
    table.add_column("Status", width=12)
    table.add_column("Payment", width=12)
    table.add_column("Total", justify="right", width=12)

    for order in orders:
        status_style = "green" if order.get("status") in ("Delivered", "Shipped") else "yellow"
        table.add_row(
            str(order.get("id", "N/A")),
            (order.get("created_at") or "")[:19].replace("T", " "),
            f"[{status_style}]{order.get('status', 'N/A')}[/{status_style}]",
            order.get("payment_method") or "-",
            money(order.get("total")),
        )

    console.print(table)


def show_wishlist(items: List[Dict[str, Any]]):
    if not items:
        console.print("[italic yellow]Your wishlist is empty[/italic yellow]")
        return
    table = Table(title="💖 Wishlist", box=box.ROUNDED, header_style="bold magenta")
    table.add_column("Product ID", style="dim", width=10)
    table.add_column("Name", style="bold", width=32)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Stock", justify="right", width=7)
    for w in items:
        table.add_row(str(w.get("product_id")), w.get("name", ""), money(w.get("price")), str(w.get("stock_quantity", 0)))
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_text(e: Exception) -> str:
    # surface the API's {"detail": ...} body when there is one
    response = getattr(e, "response", None)
    if response is not None:
        try:
            return f"HTTP {response.status_code}: {response.json().get('detail', response.text)}"
        except ValueError:
            return f"HTTP {response.status_code}: {response.text}"
    return str(e)


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
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

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {_error_text(e)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.all_products) or []
    return WordCompleter([str(p["id"]) for p in product_cache] + [p["name"] for p in product_cache], ignore_case=True)


def resolve_product_id(raw: str) -> Optional[int]:
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    for p in product_cache:
        if p.get("name", "").lower() == raw.lower():
            return p["id"]
    console.print(f"[red]Unknown product: {raw}[/red]")
    return None


def require_login() -> bool:
    if c.token:
        return True
    console.print("[yellow]Please log in first (option 11 or 12).[/yellow]")
    return False


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Modern Mart",
        "[bold blue]Storefront CLI with Autocomplete[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


# ---------------------------
# Menu actions
# ---------------------------
def browse_products():
    global product_cache
    search = prompt_with_autocomplete("Search (blank for all)").strip() or None
    categories = [cat["name"] for cat in (try_api(c.list_categories) or [])]
    category = prompt_with_autocomplete("Category (blank for all)", completer=WordCompleter(categories)).strip() or None
    sort_by = prompt_with_autocomplete(
        "Sort by", completer=WordCompleter(["created_at", "price", "price_desc", "name", "rating"]),
        default="created_at"
    ).strip()
    page = IntPrompt.ask("Page", default=1)
    resp = try_api(c.list_products, page=page, search=search, category=category, sort_by=sort_by,
                   success_msg="Products loaded")
    if resp:
        show_products(resp["products"])
        show_pagination(resp["pagination"])


def product_details():
    pid = resolve_product_id(prompt_with_autocomplete("Product ID or name", completer=get_product_completer()))
    if pid is None:
        return
    product = try_api(c.get_product, pid)
    if product:
        show_products([product])
        if product.get("description"):
            console.print(Panel(product["description"], title=product["name"]))
        if c.token:
            try_api(c.record_visit, pid)
        if product.get("slug"):
            reviews = try_api(c.list_reviews, product["slug"]) or []
            for r in reviews[:5]:
                console.print(f"⭐ {r['rating']}  [bold]{r['first_name']} {r['last_name']}[/bold]: {r.get('comment') or ''}")


def add_to_cart():
    if not require_login():
        return
    pid = resolve_product_id(prompt_with_autocomplete("Product ID or name", completer=get_product_completer()))
    if pid is None:
        return
    qty = IntPrompt.ask("Quantity", default=1)
    if try_api(c.add_to_cart, pid, qty, success_msg=f"Added {qty} x product {pid} to cart") is not None:
        cart = try_api(c.view_cart)
        if cart:
            show_cart(cart)


def change_cart_item():
    if not require_login():
        return
    cart = try_api(c.view_cart)
    if not cart or not cart.get("items"):
        console.print("[italic yellow]Your cart is empty[/italic yellow]")
        return
    show_cart(cart)
    item_id = IntPrompt.ask("Cart item ID")
    qty = IntPrompt.ask("New quantity (0 removes)", default=0)
    if try_api(c.update_cart_item, item_id, qty, success_msg="Cart updated") is not None:
        show_cart(try_api(c.view_cart))


def checkout():
    if not require_login():
        return
    cart = try_api(c.view_cart)
    if not cart or not cart.get("items"):
        console.print("[italic yellow]Your cart is empty[/italic yellow]")
        return
    show_cart(cart)
    if not Confirm.ask("Place this order?"):
        return
    address = Prompt.ask("Shipping address")
    payment = prompt_with_autocomplete("Payment method", completer=WordCompleter(["card", "upi", "cod"]), default="card")
    resp = try_api(c.checkout_cart, address, payment, success_msg="Order placed")
    if resp:
        console.print(Panel.fit(
            f"[green]Order placed successfully![/green]\nOrder ID: [bold]{resp['orderId']}[/bold]",
            title="✅ Order Confirmation"
        ))


def list_orders():
    if not require_login():
        return
    orders = try_api(c.list_orders, success_msg="Orders loaded")
    if orders is not None:
        show_orders(orders)
        stats = try_api(c.user_stats)
        if stats:
            console.print(
                f"[dim]Total spent {money(stats['total_spent'])}, average order "
                f"{money(stats['average_order_value'])}, favorite category "
                f"{stats['favorite_category'] or '-'}[/dim]"
            )


def wishlist():
    if not require_login():
        return
    show_wishlist(try_api(c.view_wishlist) or [])
    raw = prompt_with_autocomplete("Toggle product (blank to skip)", completer=get_product_completer()).strip()
    if raw:
        pid = resolve_product_id(raw)
        if pid is not None:
            resp = try_api(c.toggle_wishlist, pid)
            if resp:
                console.print(show_status(resp["message"]))


def register():
    global current_email
    first = Prompt.ask("First name")
    last = Prompt.ask("Last name")
    email = Prompt.ask("Email")
    phone = Prompt.ask("Phone")
    password = Prompt.ask("Password", password=True)
    if try_api(c.register, first, last, email, phone, password, success_msg=f"Welcome, {first}!"):
        current_email = email


def login():
    global current_email
    email = Prompt.ask("Email", default=current_email or "")
    password = Prompt.ask("Password", password=True)
    if try_api(c.login, email, password, success_msg="OTP issued (see the server log)") is None:
        return
    otp = Prompt.ask("Enter the 6-digit OTP")
    if try_api(c.verify_otp, email, otp, success_msg=f"Logged in as {email}"):
        current_email = email


def show_profile():
    if not require_login():
        return
    user = try_api(c.profile)
    if user:
        console.print(Panel.fit(
            f"[bold]{user['first_name']} {user['last_name']}[/bold]\n"
            f"📧 {user['email']}\n📞 {user.get('phone') or '-'}\n"
            f"🖼️  {user.get('avatar_url') or 'no avatar'}",
            title="👤 Profile", border_style="green"
        ))


def ask_support():
    message = Prompt.ask("Ask our assistant")
    reply = try_api(c.ask_chatbot, message)
    if reply:
        console.print(Panel(reply, title="🤖 Assistant", border_style="cyan"))


# ---------------------------
# Main menu
# ---------------------------
ACTIONS = {
    "1": browse_products,
    "2": product_details,
    "3": add_to_cart,
    "4": lambda: require_login() and show_cart(try_api(c.view_cart)),
    "5": change_cart_item,
    "6": checkout,
    "7": list_orders,
    "8": wishlist,
    "9": show_profile,
    "10": ask_support,
    "11": register,
    "12": login,
}


def menu():
    global status_message

    console.clear()
    console.print(create_header())

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 Browse products", "7", "📋 My orders"),
            ("2", "ℹ️ Product details", "8", "💖 Wishlist"),
            ("3", "🛒 Add to cart", "9", "👤 Profile"),
            ("4", "🛒 View cart", "10", "🤖 Ask support"),
            ("5", "✏️ Change cart item", "11", "📝 Register"),
            ("6", "✅ Checkout", "12", "🔑 Log in"),
            ("", "", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)

        who = f" - {current_email}" if c.token and current_email else ""
        console.print(Panel(menu_table, title=f"📋 Menu{who}", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(list(ACTIONS) + ["q", "quit", "exit"])
        ).strip()

        if choice in ACTIONS:
            ACTIONS[choice]()
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for shopping at Modern Mart! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)
