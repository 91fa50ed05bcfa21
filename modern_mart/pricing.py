from typing import Any, Dict, Iterable, Optional, Tuple

from . import config


def line_total(unit_price: float, quantity: int) -> float:
    return round(unit_price * quantity, 2)


def compute_cart_summary(
    lines: Iterable[Tuple[float, int]],
    free_shipping_threshold: Optional[float] = None,
    shipping_fee: Optional[float] = None,
    tax: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Summarize a cart given (unit_price, quantity) pairs.

    Shipping is waived only when the subtotal is strictly above the threshold,
    while ``free_shipping_eligible`` is reported from ``subtotal >= threshold``.
    Discounts are not implemented and always report 0.
    """
    threshold = config.FREE_SHIPPING_THRESHOLD if free_shipping_threshold is None else free_shipping_threshold
    fee = config.SHIPPING_FEE if shipping_fee is None else shipping_fee
    tax = config.FLAT_TAX if tax is None else tax

    subtotal = round(sum(unit_price * quantity for unit_price, quantity in lines), 2)
    discount = 0
    shipping = 0 if subtotal > threshold else fee
    total = round(subtotal - discount + shipping + tax, 2)

    return {
        "subtotal": subtotal,
        "discount": discount,
        "shipping": shipping,
        "tax": tax,
        "total": total,
        "free_shipping_threshold": threshold,
        "free_shipping_eligible": subtotal >= threshold,
    }
