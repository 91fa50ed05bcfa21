from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from ..auth import get_current_user
from ..core import RowId, _iso, _size_chart_list, _primary_image
from ..database import get_db
from ..models import User, Product, RecentlyVisited, utcnow

router = APIRouter(prefix="/api/recently-visited", tags=["recently-visited"])


@router.get("")
def list_recently_visited(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        db.query(RecentlyVisited)
        .options(joinedload(RecentlyVisited.product))
        .filter(RecentlyVisited.user_id == user.id)
        .order_by(RecentlyVisited.visited_at.desc(), RecentlyVisited.id.desc())
        .all()
    )
    visited = []
    for rv in rows:
        p = rv.product
        visited.append({
            "id": rv.id,
            "user_id": rv.user_id,
            "product_id": rv.product_id,
            "visited_at": _iso(rv.visited_at),
            "name": p.name,
            "price": p.price,
            "original_price": p.original_price,
            "stock_quantity": p.stock_quantity,
            "size_chart": _size_chart_list(p.size_chart),
            "image_url": _primary_image(p),
        })
    return {"recentlyVisited": visited}


@router.post("/{product_id}")
def record_visit(product_id: RowId, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not db.get(Product, product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    visit = (
        db.query(RecentlyVisited)
        .filter(RecentlyVisited.user_id == user.id, RecentlyVisited.product_id == product_id)
        .first()
    )
    if visit:
        visit.visited_at = utcnow()
    else:
        db.add(RecentlyVisited(user_id=user.id, product_id=product_id))
    db.commit()
    return {"message": "Product added to recently visited"}
