from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

ORDER_STATUSES = ("pending", "failed", "paid", "delivered", "canceled")

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default="pending", nullable=False)

    # Amounts in minor units
    tax = Column(Integer, nullable=False)
    shipping_fee = Column(Integer, nullable=False)
    sub_total = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)

    # Payment details (client secret from the payment intent, id after confirmation)
    client_secret = Column(String, nullable=False)
    payment_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    # Snapshot of the product at purchase time
    name = Column(String, nullable=False)
    image = Column(String, nullable=False)
    price = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
