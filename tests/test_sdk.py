# tests/test_sdk.py
import httpx
import pytest

from sdk.martclient import MartClient


@pytest.fixture
def mart(client):
    return MartClient(base_url="http://testserver", session=client)


def test_register_browse_and_checkout(mart, catalog):
    mart.register("Sam", "Lee", "sam@example.com", "+15550003", "pass1234")
    assert mart.profile()["email"] == "sam@example.com"

    listing = mart.list_products(sort_by="price", limit=2)
    assert [p["name"] for p in listing["products"]] == ["Navy Shirt", "Silk Tie"]
    assert [p["name"] for p in mart.search_products("silk")] == ["Silk Tie"]

    mart.add_to_cart(catalog["tie"], 2)
    mart.add_to_cart(catalog["navy"])
    assert mart.cart_count() == 2

    order = mart.checkout_cart("9 Elm St", "upi")
    assert mart.cart_count() == 0

    detail = mart.get_order(order["orderId"])
    assert detail["order"]["total"] == 600
    assert detail["order"]["payment_method"] == "upi"
    assert [o["id"] for o in mart.list_orders()] == [order["orderId"]]


def test_checkout_empty_cart(mart):
    mart.register("Sam", "Lee", "sam@example.com", "+15550003", "pass1234")
    with pytest.raises(ValueError):
        mart.checkout_cart()


def test_errors_surface_as_http_errors(mart):
    with pytest.raises(httpx.HTTPStatusError) as exc:
        mart.view_cart()
    assert exc.value.response.status_code == 401
