# backend/models/review.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A user's rating of a product; one review per user and product
class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    rating = Column(Integer, CheckConstraint("rating >= 1 AND rating <= 5"), nullable=False)
    title = Column(String(100), nullable=False)
    comment = Column(String, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    product = relationship("Product", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_review_product_user"),
    )
