# backend/routes/reviews.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.review import Review
from schemas import review as schemas
from schemas.user import TokenUser
from utils.authentication import authenticate_user
from utils.errors import BadRequestError, NotFoundError
from utils.permissions import check_permissions
from utils.ratings import recalculate_product_rating

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def _get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError(f"No review with id : {review_id}")
    return review


@router.get("", response_model=schemas.ReviewList)
def get_all_reviews(db: Session = Depends(get_db)):
    reviews = db.query(Review).order_by(Review.id).all()
    return {"reviews": reviews, "count": len(reviews)}


# One review per user and product
@router.post("", response_model=schemas.ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: schemas.ReviewCreate,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise NotFoundError(f"No product with id : {payload.product_id}")

    user_id = int(current_user.user_id)
    already_submitted = db.query(Review).filter(
        Review.product_id == product.id, Review.user_id == user_id
    ).first()
    if already_submitted:
        raise BadRequestError("Already submitted review!")

    review = Review(**payload.model_dump(), user_id=user_id)
    db.add(review)
    db.commit()
    db.refresh(review)

    recalculate_product_rating(db, review.product_id)
    return {"review": review}


@router.get("/{review_id}", response_model=schemas.ReviewResponse)
def get_single_review(review_id: int, db: Session = Depends(get_db)):
    return {"review": _get_review(db, review_id)}


@router.patch("/{review_id}", response_model=schemas.ReviewResponse)
def update_review(
    review_id: int,
    payload: schemas.ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    review = _get_review(db, review_id)
    check_permissions(current_user, review.user_id)

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(review, key, value)
    db.commit()
    db.refresh(review)

    recalculate_product_rating(db, review.product_id)
    return {"review": review}


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    review = _get_review(db, review_id)
    check_permissions(current_user, review.user_id)

    product_id = review.product_id
    db.delete(review)
    db.commit()

    recalculate_product_rating(db, product_id)
    return {"msg": "Review deleted successfully!"}
