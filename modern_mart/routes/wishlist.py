from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from ..auth import get_current_user
from ..core import RowId, WishlistIn, _iso
from ..database import get_db
from ..models import User, Product, WishlistItem

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


def _require_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _find(db: Session, user: User, product_id: int):
    return (
        db.query(WishlistItem)
        .filter(WishlistItem.user_id == user.id, WishlistItem.product_id == product_id)
        .first()
    )


@router.get("")
def view_wishlist(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        db.query(WishlistItem)
        .options(joinedload(WishlistItem.product))
        .filter(WishlistItem.user_id == user.id)
        .order_by(WishlistItem.id)
        .all()
    )
    wishlist = [
        {
            "id": w.id,
            "user_id": w.user_id,
            "product_id": w.product_id,
            "created_at": _iso(w.created_at),
            "name": w.product.name,
            "price": w.product.price,
            "stock_quantity": w.product.stock_quantity,
        }
        for w in rows
    ]
    return {"wishlist": wishlist}


@router.get("/count")
def wishlist_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"count": db.query(WishlistItem).filter(WishlistItem.user_id == user.id).count()}


@router.post("/toggle/{product_id}")
def wishlist_toggle(product_id: RowId, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _require_product(db, product_id)
    existing = _find(db, user, product_id)
    if existing:
        db.delete(existing)
        db.commit()
        return {"message": "Item removed from wishlist", "removed": True}

    db.add(WishlistItem(user_id=user.id, product_id=product_id))
    db.commit()
    return {"message": "Item added to wishlist", "added": True}


@router.post("", status_code=201)
def wishlist_add(payload: WishlistIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not payload.product_id:
        raise HTTPException(status_code=400, detail="Product ID is required")
    _require_product(db, payload.product_id)
    if _find(db, user, payload.product_id):
        raise HTTPException(status_code=409, detail="Item already in wishlist")

    db.add(WishlistItem(user_id=user.id, product_id=payload.product_id))
    db.commit()
    return {"message": "Item added to wishlist", "added": True}


@router.delete("/{product_id}")
def wishlist_remove(product_id: RowId, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    item = _find(db, user, product_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not in wishlist")
    db.delete(item)
    db.commit()
    return {"message": "Item removed from wishlist", "removed": True}


@router.delete("")
def wishlist_clear(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.query(WishlistItem).filter(WishlistItem.user_id == user.id).delete()
    db.commit()
    return {"message": "Wishlist cleared", "cleared": True}
