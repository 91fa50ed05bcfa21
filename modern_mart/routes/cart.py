from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, joinedload

from ..auth import get_current_user
from ..core import AddToCartIn, UpdateCartIn, RowId, MAX_DB_INT, _iso, _size_chart_list, _primary_image
from ..database import get_db
from ..models import User, Product, CartItem
from ..pricing import compute_cart_summary, line_total

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _cart_line(ci: CartItem):
    p = ci.product
    return {
        "id": ci.id,
        "user_id": ci.user_id,
        "product_id": ci.product_id,
        "quantity": ci.quantity,
        "created_at": _iso(ci.created_at),
        "updated_at": _iso(ci.updated_at),
        "product_name": p.name,
        "unit_price": p.price,
        "stock_quantity": p.stock_quantity,
        "size_chart": _size_chart_list(p.size_chart),
        "brand": p.brand.name if p.brand else None,
        "product_image": _primary_image(p),
        "total_price": line_total(p.price, ci.quantity),
    }


def _owned_item(db: Session, item_id: int, user: User) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


@router.get("")
def view_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        db.query(CartItem)
        .options(joinedload(CartItem.product))
        .filter(CartItem.user_id == user.id)
        .order_by(CartItem.id)
        .all()
    )
    items = [_cart_line(ci) for ci in rows]
    summary = compute_cart_summary((ci.product.price, ci.quantity) for ci in rows)
    return {"cart": {"items": items, "summary": summary}}


@router.post("/add")
def cart_add(payload: AddToCartIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not payload.product_id:
        raise HTTPException(status_code=400, detail="Product ID is required")
    if payload.quantity <= 0:
        raise HTTPException(status_code=400, detail="quantity must be > 0")
    if not db.get(Product, payload.product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    existing = (
        db.query(CartItem)
        .filter(CartItem.user_id == user.id, CartItem.product_id == payload.product_id)
        .first()
    )
    if existing:
        if existing.quantity + payload.quantity > MAX_DB_INT:
            raise HTTPException(status_code=400, detail="quantity is too large")
        existing.quantity += payload.quantity
        db.commit()
        return {"message": "Cart item updated", "updated": True}

    db.add(CartItem(user_id=user.id, product_id=payload.product_id, quantity=payload.quantity))
    db.commit()
    return JSONResponse(status_code=201, content={"message": "Item added to cart", "added": True})


@router.get("/count")
def cart_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    count = db.query(CartItem).filter(CartItem.user_id == user.id).count()
    return {"count": count}


@router.put("/{item_id}")
def cart_update(
    item_id: RowId,
    payload: UpdateCartIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.quantity is None or payload.quantity < 0:
        raise HTTPException(status_code=400, detail="Valid quantity is required")
    item = _owned_item(db, item_id, user)

    if payload.quantity == 0:
        db.delete(item)
        db.commit()
        return {"message": "Item removed from cart", "removed": True}

    item.quantity = payload.quantity
    db.commit()
    return {"message": "Cart item updated", "updated": True}


@router.delete("/{item_id}")
def cart_remove(item_id: RowId, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    item = _owned_item(db, item_id, user)
    db.delete(item)
    db.commit()
    return {"message": "Item removed from cart", "removed": True}


@router.delete("")
def cart_clear(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.query(CartItem).filter(CartItem.user_id == user.id).delete()
    db.commit()
    return {"message": "Cart cleared", "cleared": True}
