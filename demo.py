#!/usr/bin/env python
import os
import uuid

import requests

from sdk.martclient import MartClient


def main():
    c = MartClient(base_url=os.getenv("MART_API_URL", "http://127.0.0.1:5000"))

    print("Checking API health...")
    print(c.health())

    # -----------------------------
    # Register a fresh shopper
    # -----------------------------
    email = f"demo-{uuid.uuid4().hex[:8]}@example.com"
    print(f"\nRegistering {email}...")
    print(c.register("Demo", "Shopper", email, "+15550100", "password123"))

    # -----------------------------
    # Login with a one-time code
    # -----------------------------
    print("\nRequesting OTP...")
    print(c.login(email, "password123"))
    otp = input("Enter the OTP printed in the server log (blank to keep the registration token): ").strip()
    if otp:
        print(c.verify_otp(email, otp))

    # -----------------------------
    # Browse the catalog
    # -----------------------------
    print("\nListing products...")
    listing = c.list_products(limit=5, sort_by="price")
    for p in listing["products"]:
        print(f"  #{p['id']} {p['name']} - {p['price']}")
    print(listing["pagination"])

    if not listing["products"]:
        print("\nCatalog is empty; run `python -m modern_mart.seed --seed` first.")
        return

    print("\nSearching for 'shirt'...")
    print([p["name"] for p in c.search_products("shirt")])

    first, *rest = listing["products"]
    second = rest[0] if rest else first
    c.record_visit(first["id"])

    # -----------------------------
    # Cart
    # -----------------------------
    print("\nAdding products to cart...")
    print(c.add_to_cart(first["id"], 1))
    print(c.add_to_cart(second["id"], 2))

    print("\nViewing cart...")
    cart = c.view_cart()
    for it in cart["items"]:
        print(f"  {it['quantity']} x {it['product_name']} = {it['total_price']}")
    print(cart["summary"])

    # -----------------------------
    # Wishlist
    # -----------------------------
    print("\nToggling wishlist...")
    print(c.toggle_wishlist(first["id"]))
    print(c.view_wishlist())

    # -----------------------------
    # Checkout
    # -----------------------------
    print("\nPlacing order...")
    order = c.checkout_cart("221B Baker Street, London", "card")
    print(order)
    print(c.get_order(order["orderId"]))

    print("\nCart count after checkout:", c.cart_count())

    # -----------------------------
    # Bad order is rolled back
    # -----------------------------
    print("\nPlacing an order with an unknown product...")
    try:
        c.place_order([{"productId": first["id"], "quantity": 1}, {"productId": 999999, "quantity": 1}])
    except requests.HTTPError as e:
        print("Expected failure:", e.response.status_code, e.response.json())

    print("\nOrders:")
    for o in c.list_orders():
        print(f"  #{o['id']} {o['status']} total={o['total']}")

    print("\nStats:", c.user_stats())
    print("Recently visited:", [v["name"] for v in c.recently_visited()])


if __name__ == "__main__":
    main()
