from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


# Input schema for a single line of a new order
class OrderItemIn(BaseModel):
    product_id: int
    amount: int = Field(gt=0)


# Input schema for creating an order; presence of fields is checked in the route
class OrderCreatePayload(BaseModel):
    items: List[OrderItemIn] = []
    tax: Optional[int] = Field(None, ge=0)
    shipping_fee: Optional[int] = Field(None, ge=0)


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: str
    image: str
    price: int
    amount: int


# Output schema representing the full order details
class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: str
    tax: int
    shipping_fee: int
    sub_total: int
    total: int
    client_secret: str
    payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]


class OrderEnvelope(BaseModel):
    order: OrderResponse


class OrderCreatedResponse(BaseModel):
    order: OrderResponse
    client_secret: str


class OrderList(BaseModel):
    orders: List[OrderResponse]
    count: int


# Schema for confirming payment of an order
class OrderPaymentPatch(BaseModel):
    payment_id: Optional[str] = None
