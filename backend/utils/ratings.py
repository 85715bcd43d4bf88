# backend/utils/ratings.py
import math

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.product import Product
from models.review import Review


# Recompute a product's rating aggregates; call after every review change
def recalculate_product_rating(db: Session, product_id: int) -> None:
    average, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.product_id == product_id)
        .one()
    )
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        return
    product.average_rating = math.ceil(average or 0)
    product.num_of_reviews = count or 0
    db.commit()
