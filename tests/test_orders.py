# tests/test_orders.py
from modern_mart.models import Order, OrderItem


def place(client, headers, items, **extra):
    return client.post("/api/orders", json={"items": items, **extra}, headers=headers)


def test_place_and_fetch_order(client, auth_headers, catalog):
    r = place(
        client, auth_headers,
        [{"productId": catalog["shirt"], "quantity": 1}, {"productId": catalog["tie"], "quantity": 2, "price": 200}],
        shippingAddress="1 Main St", paymentMethod="card",
    )
    assert r.status_code == 201
    order_id = r.json()["orderId"]

    body = client.get(f"/api/orders/{order_id}", headers=auth_headers).json()
    assert body["order"]["status"] == "Pending"
    assert body["order"]["shipping_address"] == "1 Main St"
    assert body["order"]["total"] == 1000
    prices = {i["name"]: (i["price"], i["quantity"]) for i in body["items"]}
    # price falls back to the catalog price when omitted
    assert prices == {"Classic White Dress Shirt": (600, 1), "Silk Tie": (200, 2)}


def test_items_required(client, auth_headers):
    assert place(client, auth_headers, []).status_code == 400
    r = client.post("/api/orders", json={}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Order items are required"


def test_missing_product_rolls_back(client, db_session, auth_headers, catalog):
    r = place(client, auth_headers, [
        {"productId": catalog["shirt"], "quantity": 1},
        {"productId": 9999, "quantity": 1},
    ])
    assert r.status_code == 404
    assert db_session.query(Order).count() == 0
    assert db_session.query(OrderItem).count() == 0


def test_bad_quantity_rolls_back(client, db_session, auth_headers, catalog):
    r = place(client, auth_headers, [
        {"productId": catalog["shirt"], "quantity": 1},
        {"productId": catalog["tie"], "quantity": 0},
    ])
    assert r.status_code == 400
    assert db_session.query(Order).count() == 0


def test_orders_newest_first_and_private(client, auth_headers, make_user, headers_for, catalog):
    first = place(client, auth_headers, [{"productId": catalog["tie"], "quantity": 1}]).json()["orderId"]
    second = place(client, auth_headers, [{"productId": catalog["navy"], "quantity": 1}]).json()["orderId"]

    orders = client.get("/api/orders", headers=auth_headers).json()["orders"]
    assert [o["id"] for o in orders] == [second, first]

    other = headers_for(make_user(email="eve@example.com"))
    assert client.get("/api/orders", headers=other).json()["orders"] == []
    assert client.get(f"/api/orders/{first}", headers=other).status_code == 404


def test_orders_require_login(client):
    assert client.post("/api/orders", json={"items": []}).status_code == 401


def test_oversized_numbers_are_rejected(client, db_session, auth_headers, catalog):
    huge = 2**64
    assert client.get(f"/api/orders/{huge}", headers=auth_headers).status_code == 422
    r = place(client, auth_headers, [{"productId": catalog["tie"], "quantity": huge}])
    assert r.status_code == 422
    assert db_session.query(Order).count() == 0
