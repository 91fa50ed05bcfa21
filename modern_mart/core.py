from datetime import datetime
from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Optional, Dict, Any, List

from .models import User, Category, Product, Order, OrderItem

# SQLite integers are signed 64-bit; larger values never reach a query
MAX_DB_INT = 2**63 - 1

DbInt = Annotated[int, Field(ge=-MAX_DB_INT, le=MAX_DB_INT)]
RowId = Annotated[int, Path(ge=1, le=MAX_DB_INT)]

# Request bodies keep the camelCase keys the storefront client sends.


class _CamelIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterIn(_CamelIn):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyOtpIn(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class ProfileIn(_CamelIn):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None


class AddToCartIn(_CamelIn):
    product_id: Optional[DbInt] = Field(None, alias="productId")
    quantity: DbInt = 1


class UpdateCartIn(BaseModel):
    quantity: Optional[DbInt] = None


class WishlistIn(_CamelIn):
    product_id: Optional[DbInt] = Field(None, alias="productId")


class OrderItemIn(_CamelIn):
    product_id: Optional[DbInt] = Field(None, alias="productId")
    quantity: Optional[DbInt] = None
    price: Optional[float] = None


class OrderIn(_CamelIn):
    items: Optional[List[OrderItemIn]] = None
    shipping_address: Optional[str] = Field(None, alias="shippingAddress")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")


class ReviewIn(BaseModel):
    user_id: Optional[DbInt] = None
    rating: Optional[DbInt] = None
    comment: Optional[str] = None


class ChatIn(BaseModel):
    message: Optional[str] = None


class ContactIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


# ---------------------------
# Row -> JSON helpers
# ---------------------------
def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _size_chart_list(size_chart: Optional[str]) -> List[str]:
    if not size_chart:
        return []
    return [s.strip() for s in size_chart.split(",") if s.strip()]


def _discount_percentage(price: float, original_price: Optional[float]) -> int:
    if original_price and original_price > 0:
        return round((original_price - price) / original_price * 100)
    return 0


def _primary_image(p: Product) -> Optional[str]:
    return p.images[0].image_url if p.images else None


def _make_product_dict(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "slug": p.slug,
        "description": p.description,
        "price": p.price,
        "original_price": p.original_price,
        "stock_quantity": p.stock_quantity,
        "category_id": p.category_id,
        "brand_id": p.brand_id,
        "size_chart": _size_chart_list(p.size_chart),
        "discount": p.discount,
        "featured": bool(p.featured),
        "discount_percentage": _discount_percentage(p.price, p.original_price),
        "primary_image": _primary_image(p),
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }


def _make_user_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "email": u.email,
        "phone": u.phone,
        "avatar_url": u.avatar_url,
        "created_at": _iso(u.created_at),
    }


def _make_category_dict(c: Category) -> Dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def _make_order_dict(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "user_id": o.user_id,
        "shipping_address": o.shipping_address,
        "payment_method": o.payment_method,
        "status": o.status,
        "total": o.total,
        "created_at": _iso(o.created_at),
        "updated_at": _iso(o.updated_at),
    }


def _make_order_item_dict(oi: OrderItem) -> Dict[str, Any]:
    return {
        "id": oi.id,
        "order_id": oi.order_id,
        "product_id": oi.product_id,
        "quantity": oi.quantity,
        "price": oi.price,
        "name": oi.product.name if oi.product else None,
        "line_total": round(oi.price * oi.quantity, 2),
    }
