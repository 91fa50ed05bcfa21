from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core import RowId, _make_category_dict
from ..database import get_db
from ..models import Category

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
def list_categories(db: Session = Depends(get_db)):
    categories = db.query(Category).order_by(Category.id).all()
    return {"categories": [_make_category_dict(c) for c in categories]}


@router.get("/{category_id}")
def get_category(category_id: RowId, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"category": _make_category_dict(c)}
