import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from ..auth import get_current_user
from ..core import OrderIn, OrderItemIn, RowId, _make_order_dict, _make_order_item_dict
from ..database import get_db
from ..models import User, Product, Order, OrderItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def create_order(
    db: Session,
    user: User,
    items: List[OrderItemIn],
    shipping_address: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> Order:
    """
    Insert an order and its line items in one transaction.

    Items are flushed one at a time, so a bad line surfaces mid-loop; any
    error rolls the whole order back before it is re-raised.
    """
    user_id = user.id
    try:
        order = Order(
            user_id=user_id,
            shipping_address=shipping_address,
            payment_method=payment_method,
            status="Pending",
        )
        db.add(order)
        db.flush()

        total = 0.0
        for item in items:
            if not item.product_id:
                raise HTTPException(status_code=400, detail="Each item needs a productId")
            if item.quantity is None or item.quantity <= 0:
                raise HTTPException(status_code=400, detail="Each item needs a quantity > 0")
            product = db.get(Product, item.product_id)
            if product is None:
                raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")

            price = product.price if item.price is None else item.price
            db.add(OrderItem(order_id=order.id, product_id=product.id, quantity=item.quantity, price=price))
            db.flush()
            total += price * item.quantity

        order.total = round(total, 2)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning(f"Order for user {user_id} rolled back")
        raise

    logger.info(f"Order {order.id} created for user {user_id} ({len(items)} items, total {order.total})")
    return order


@router.get("")
def list_orders(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    orders = (
        db.query(Order)
        .filter(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return {"orders": [_make_order_dict(o) for o in orders]}


@router.get("/{order_id}")
def get_order(order_id: RowId, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    order = (
        db.query(Order)
        .options(selectinload(Order.items).joinedload(OrderItem.product))
        .filter(Order.id == order_id, Order.user_id == user.id)
        .first()
    )
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"order": _make_order_dict(order), "items": [_make_order_item_dict(oi) for oi in order.items]}


@router.post("", status_code=201)
def place_order(payload: OrderIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Order items are required")
    order = create_order(db, user, payload.items, payload.shipping_address, payload.payment_method)
    return {"message": "Order created successfully", "orderId": order.id}
