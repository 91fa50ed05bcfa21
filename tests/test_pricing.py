# tests/test_pricing.py
import pytest

from modern_mart.pricing import compute_cart_summary, line_total


def test_empty_cart_still_pays_shipping_and_tax():
    s = compute_cart_summary([])
    assert s["subtotal"] == 0
    assert s["shipping"] == 50
    assert s["tax"] == 50
    assert s["total"] == 100
    assert s["free_shipping_eligible"] is False


def test_subtotal_is_sum_of_lines():
    s = compute_cart_summary([(19.99, 3), (5.0, 2)])
    assert s["subtotal"] == pytest.approx(69.97)
    assert s["total"] == pytest.approx(69.97 + 50 + 50)


def test_threshold_is_eligible_but_still_charged():
    s = compute_cart_summary([(1000.0, 1)])
    assert s["free_shipping_eligible"] is True
    assert s["shipping"] == 50
    assert s["total"] == 1100


def test_above_threshold_ships_free():
    s = compute_cart_summary([(500.5, 2)])
    assert s["shipping"] == 0
    assert s["total"] == pytest.approx(1001 + 50)


def test_overrides():
    s = compute_cart_summary([(10.0, 1)], free_shipping_threshold=5, shipping_fee=9, tax=0)
    assert s["shipping"] == 0
    assert s["tax"] == 0
    assert s["total"] == 10
    assert s["free_shipping_threshold"] == 5


def test_line_total_rounds():
    assert line_total(0.1, 3) == 0.3
