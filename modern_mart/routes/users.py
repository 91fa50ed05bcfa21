from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..core import _iso
from ..database import get_db
from ..models import User, Order, OrderItem, Product, Category

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/stats")
def user_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    line_value = OrderItem.price * OrderItem.quantity

    order_totals = (
        db.query(func.sum(line_value).label("total"))
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.user_id == user.id)
        .group_by(Order.id)
        .subquery()
    )
    total_spent, average_order_value = db.query(
        func.sum(order_totals.c.total), func.avg(order_totals.c.total)
    ).one()

    favorite = (
        db.query(Category.name)
        .join(Product, Product.category_id == Category.id)
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.user_id == user.id)
        .group_by(Category.id)
        .order_by(func.sum(line_value).desc())
        .first()
    )
    last_order_date = db.query(func.max(Order.created_at)).filter(Order.user_id == user.id).scalar()

    return {
        "total_spent": round(total_spent or 0, 2),
        "average_order_value": round(average_order_value or 0, 2),
        "favorite_category": favorite[0] if favorite else None,
        "last_order_date": _iso(last_order_date),
    }
