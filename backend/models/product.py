# backend/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey, DateTime, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Product
# A single catalog entry. Prices are kept in minor units (cents),
# rating aggregates are recomputed explicitly whenever a review changes.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    price = Column(Integer, CheckConstraint("price >= 0"), nullable=False, default=0)
    description = Column(String(1000), nullable=False)
    image = Column(String, nullable=False, default="/uploads/example.jpeg")

    category = Column(String, nullable=False)
    company = Column(String, nullable=False)
    colors = Column(JSON, nullable=False, default=lambda: ["#222"])

    featured = Column(Boolean, nullable=False, default=False)
    free_shipping = Column(Boolean, nullable=False, default=False)
    inventory = Column(Integer, CheckConstraint("inventory >= 0"), nullable=False, default=15)

    # Aggregates maintained by utils.ratings
    average_rating = Column(Float, nullable=False, default=0)
    num_of_reviews = Column(Integer, nullable=False, default=0)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    reviews = relationship("Review", back_populates="product")
