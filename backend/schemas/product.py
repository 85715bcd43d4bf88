# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Literal
from datetime import datetime

Category = Literal["office", "kitchen", "bedroom"]
Company = Literal["ikea", "liddy", "marcos"]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product
class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: int = Field(default=0, ge=0, description="Price in cents")
    description: str = Field(min_length=1, max_length=1000)
    image: Optional[str] = None
    category: Category
    company: Company
    colors: List[str] = Field(default_factory=lambda: ["#222"])
    featured: bool = False
    free_shipping: bool = False
    inventory: int = Field(default=15, ge=0)


# Schema for partial product updates
class ProductUpdate(BaseModel):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    image: Optional[str] = None
    category: Optional[Category] = None
    company: Optional[Company] = None
    colors: Optional[List[str]] = None
    featured: Optional[bool] = None
    free_shipping: Optional[bool] = None
    inventory: Optional[int] = Field(None, ge=0)


# Full product representation
class ProductOut(ORMBase):
    id: int
    name: str
    price: int
    description: str
    image: str
    category: str
    company: str
    colors: List[str]
    featured: bool
    free_shipping: bool
    inventory: int
    average_rating: float
    num_of_reviews: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductResponse(BaseModel):
    product: ProductOut


class ProductListResponse(BaseModel):
    products: List[ProductOut]
    count: int


class ImageUploadResponse(BaseModel):
    image: str
