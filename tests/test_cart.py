# tests/test_cart.py


def add(client, headers, product_id, quantity=1):
    return client.post("/api/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)


def test_cart_requires_login(client):
    assert client.get("/api/cart").status_code == 401


def test_add_then_merge(client, auth_headers, catalog):
    r = add(client, auth_headers, catalog["shirt"])
    assert r.status_code == 201
    assert r.json()["added"] is True

    r2 = add(client, auth_headers, catalog["shirt"], 2)
    assert r2.status_code == 200
    assert r2.json()["updated"] is True

    items = client.get("/api/cart", headers=auth_headers).json()["cart"]["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 3
    assert items[0]["product_name"] == "Classic White Dress Shirt"
    assert items[0]["total_price"] == 1800
    assert items[0]["size_chart"] == ["s", "m", "l"]
    assert items[0]["product_image"] == "men-shirts/white.jpg"


def test_add_validation(client, auth_headers, catalog):
    assert client.post("/api/cart/add", json={"quantity": 1}, headers=auth_headers).status_code == 400
    assert add(client, auth_headers, catalog["tie"], 0).status_code == 400
    r = add(client, auth_headers, 9999)
    assert r.status_code == 404
    assert r.json()["detail"] == "Product not found"


def test_summary(client, auth_headers, catalog):
    add(client, auth_headers, catalog["tie"], 2)
    summary = client.get("/api/cart", headers=auth_headers).json()["cart"]["summary"]
    assert summary["subtotal"] == 500
    assert summary["shipping"] == 50
    assert summary["total"] == 600
    assert summary["free_shipping_eligible"] is False

    add(client, auth_headers, catalog["shirt"])
    summary = client.get("/api/cart", headers=auth_headers).json()["cart"]["summary"]
    assert summary["subtotal"] == 1100
    assert summary["shipping"] == 0
    assert summary["total"] == 1150


def test_update_and_remove(client, auth_headers, catalog):
    add(client, auth_headers, catalog["tie"])
    add(client, auth_headers, catalog["navy"])
    items = client.get("/api/cart", headers=auth_headers).json()["cart"]["items"]
    tie_item, navy_item = items[0]["id"], items[1]["id"]

    assert client.put(f"/api/cart/{tie_item}", json={"quantity": 4}, headers=auth_headers).status_code == 200
    assert client.put(f"/api/cart/{tie_item}", json={"quantity": -1}, headers=auth_headers).status_code == 400
    assert client.put(f"/api/cart/{tie_item}", json={}, headers=auth_headers).status_code == 400

    r = client.put(f"/api/cart/{navy_item}", json={"quantity": 0}, headers=auth_headers)
    assert r.json()["removed"] is True
    items = client.get("/api/cart", headers=auth_headers).json()["cart"]["items"]
    assert [(i["id"], i["quantity"]) for i in items] == [(tie_item, 4)]

    assert client.delete(f"/api/cart/{tie_item}", headers=auth_headers).status_code == 200
    assert client.delete(f"/api/cart/{tie_item}", headers=auth_headers).status_code == 404
    assert client.get("/api/cart/count", headers=auth_headers).json()["count"] == 0


def test_items_are_private(client, auth_headers, make_user, headers_for, catalog):
    add(client, auth_headers, catalog["tie"])
    item_id = client.get("/api/cart", headers=auth_headers).json()["cart"]["items"][0]["id"]

    other = headers_for(make_user(email="eve@example.com"))
    assert client.get("/api/cart", headers=other).json()["cart"]["items"] == []
    assert client.put(f"/api/cart/{item_id}", json={"quantity": 9}, headers=other).status_code == 404
    assert client.delete(f"/api/cart/{item_id}", headers=other).status_code == 404


def test_clear(client, auth_headers, catalog):
    add(client, auth_headers, catalog["tie"])
    add(client, auth_headers, catalog["shirt"])
    assert client.get("/api/cart/count", headers=auth_headers).json()["count"] == 2
    assert client.delete("/api/cart", headers=auth_headers).json()["cleared"] is True
    assert client.get("/api/cart/count", headers=auth_headers).json()["count"] == 0


def test_oversized_ids_and_quantities(client, auth_headers, catalog):
    huge = 2**64
    assert client.post("/api/cart/add", json={"productId": huge}, headers=auth_headers).status_code == 422
    assert add(client, auth_headers, catalog["tie"], huge).status_code == 422
    assert client.put(f"/api/cart/{huge}", json={"quantity": 1}, headers=auth_headers).status_code == 422
    assert client.delete(f"/api/cart/{huge}", headers=auth_headers).status_code == 422
    assert client.post(f"/api/wishlist/toggle/{huge}", headers=auth_headers).status_code == 422
    assert client.post(f"/api/recently-visited/{huge}", headers=auth_headers).status_code == 422

    add(client, auth_headers, catalog["tie"], 2**63 - 1)
    r = add(client, auth_headers, catalog["tie"], 1)
    assert r.status_code == 400
    assert r.json()["detail"] == "quantity is too large"
