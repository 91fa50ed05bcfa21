from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from ..core import ReviewIn, _iso
from ..database import get_db
from ..models import Product, Review, User

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def _product_by_slug(db: Session, slug: str) -> Product:
    product = db.query(Product).filter(Product.slug == slug).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/{slug}")
def list_reviews(slug: str, db: Session = Depends(get_db)):
    product = _product_by_slug(db, slug)
    reviews = (
        db.query(Review)
        .options(joinedload(Review.user))
        .filter(Review.product_id == product.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return {
        "reviews": [
            {
                "id": r.id,
                "rating": r.rating,
                "comment": r.comment,
                "created_at": _iso(r.created_at),
                "first_name": r.user.first_name,
                "last_name": r.user.last_name,
            }
            for r in reviews
        ]
    }


@router.post("/{slug}", status_code=201)
def add_review(slug: str, payload: ReviewIn, db: Session = Depends(get_db)):
    if not payload.user_id or not payload.rating:
        raise HTTPException(status_code=400, detail="user_id and rating are required")
    if not 1 <= payload.rating <= 5:
        raise HTTPException(status_code=400, detail="rating must be between 1 and 5")

    product = _product_by_slug(db, slug)
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    review = Review(product_id=product.id, user_id=payload.user_id, rating=payload.rating, comment=payload.comment or None)
    db.add(review)
    db.commit()
    return {"message": "Review submitted successfully", "reviewId": review.id}
