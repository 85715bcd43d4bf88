from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from schemas.product import ProductOut


# Request schema for reviewing a product
class ReviewCreate(BaseModel):
    product_id: int
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=100)
    comment: str = Field(min_length=1)

# Request schema for editing a review; omitted fields stay unchanged
class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    comment: Optional[str] = Field(None, min_length=1)

class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rating: int
    title: str
    comment: str
    user_id: int
    product_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ReviewResponse(BaseModel):
    review: ReviewOut

class ReviewList(BaseModel):
    reviews: List[ReviewOut]
    count: int

# Single product view including its reviews
class ProductWithReviews(ProductOut):
    reviews: List[ReviewOut] = []

class ProductDetailResponse(BaseModel):
    product: ProductWithReviews
