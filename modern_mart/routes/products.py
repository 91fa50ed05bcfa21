import math
from typing import Optional, Dict, Any, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ..core import RowId, _make_product_dict
from ..database import get_db
from ..models import Product, Category, Brand, Review

router = APIRouter(prefix="/api/products", tags=["products"])

SIZES = ["xs", "s", "m", "l", "xl", "xxl"]

# keeps the offset (page - 1) * limit inside a SQLite integer
MAX_PAGE = 10**9


def _ratings(db: Session, product_ids: List[int]) -> Dict[int, Tuple[float, int]]:
    if not product_ids:
        return {}
    rows = (
        db.query(Review.product_id, func.avg(Review.rating), func.count(Review.id))
        .filter(Review.product_id.in_(product_ids))
        .group_by(Review.product_id)
        .all()
    )
    return {pid: (round(float(avg), 2), count) for pid, avg, count in rows}


def _with_ratings(db: Session, products: List[Product]) -> List[Dict[str, Any]]:
    ratings = _ratings(db, [p.id for p in products])
    out = []
    for p in products:
        d = _make_product_dict(p)
        d["average_rating"], d["review_count"] = ratings.get(p.id, (0, 0))
        out.append(d)
    return out


def _order_by(sort_by: str, sort_order: str, rating_column):
    if sort_by == "price":
        column, descending = Product.price, False
    elif sort_by == "price_desc":
        column, descending = Product.price, True
    elif sort_by == "name":
        column, descending = Product.name, False
    elif sort_by == "rating":
        column, descending = rating_column, True
    else:
        column, descending = Product.created_at, True

    if sort_order.upper() == "ASC":
        descending = False
    return [column.desc() if descending else column.asc(), Product.id.asc()]


# ---------------------------
# Catalog listing with filters
# ---------------------------
@router.get("")
def list_products(
    page: int = Query(1, le=MAX_PAGE),
    limit: int = Query(12, le=MAX_PAGE),
    sortBy: str = "created_at",
    sortOrder: str = "DESC",
    search: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    discount: Optional[str] = None,
    featured: Optional[str] = None,
    db: Session = Depends(get_db),
):
    page = max(1, page)
    limit = max(1, min(100, limit))

    q = (
        db.query(Product)
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(Brand, Product.brand_id == Brand.id)
    )
    if search:
        term = f"%{search}%"
        q = q.filter(or_(Product.name.like(term), Product.description.like(term)))
    if category:
        q = q.filter(Category.name == category)
    if brand:
        q = q.filter(Brand.name == brand)
    if discount == "true":
        q = q.filter(or_(Product.discount > 0, Product.original_price > Product.price))
    if featured == "true":
        q = q.filter(Product.featured.is_(True))

    total = q.count()

    ratings_sq = (
        db.query(Review.product_id.label("product_id"), func.avg(Review.rating).label("avg_rating"))
        .group_by(Review.product_id)
        .subquery()
    )
    rating_column = func.coalesce(ratings_sq.c.avg_rating, 0)
    if sortBy == "rating":
        q = q.outerjoin(ratings_sq, ratings_sq.c.product_id == Product.id)

    products = (
        q.options(selectinload(Product.images))
        .order_by(*_order_by(sortBy, sortOrder, rating_column))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    filters = {
        "categories": [name for (name,) in db.query(Category.name).distinct().order_by(Category.name)],
        "brands": [name for (name,) in db.query(Brand.name).distinct().order_by(Brand.name)],
        "sizes": SIZES,
        "discount": True,
        "featured": True,
    }
    pagination = {
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "totalItems": total,
        "itemsPerPage": limit,
    }
    return {"products": _with_ratings(db, products), "filters": filters, "pagination": pagination}


@router.get("/all")
def all_products(db: Session = Depends(get_db)):
    products = db.query(Product).options(selectinload(Product.images)).order_by(Product.id).all()
    return {"products": [_make_product_dict(p) for p in products]}


@router.get("/search")
def search_products(q: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    term = f"%{q}%"
    products = (
        db.query(Product)
        .filter(or_(Product.name.like(term), Product.description.like(term)))
        .order_by(Product.id)
        .all()
    )
    return {"products": [_make_product_dict(p) for p in products]}


@router.get("/category/{category}")
def products_by_category(category: str, db: Session = Depends(get_db)):
    products = (
        db.query(Product)
        .join(Category, Product.category_id == Category.id)
        .filter(Category.name == category)
        .order_by(Product.id)
        .all()
    )
    return {"products": [_make_product_dict(p) for p in products]}


@router.get("/slug/{slug}")
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    p = db.query(Product).filter(Product.slug == slug).first()
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    product = _with_ratings(db, [p])[0]
    product["category_name"] = p.category.name if p.category else None
    product["brand"] = p.brand.name if p.brand else None
    return {"product": product}


@router.get("/{product_id}")
def get_product(product_id: RowId, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": _make_product_dict(p)}
