# backend/routes/orders.py
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.order import Order, OrderItem
from models.product import Product
from schemas.order import (
    OrderCreatePayload, OrderCreatedResponse, OrderEnvelope, OrderList, OrderPaymentPatch,
)
from schemas.user import TokenUser
from utils.audit import client_ip, write_log
from utils.authentication import authenticate_user, authorize_roles
from utils.errors import BadRequestError, NotFoundError
from utils.payment_client import payment_client
from utils.permissions import check_permissions

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


def _orders_query(db: Session):
    return db.query(Order).options(joinedload(Order.items)).order_by(Order.id)


def _get_order(db: Session, order_id: int) -> Order:
    order = _orders_query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError(f"No order with id : {order_id}")
    return order


# List every order (Admin only)
@router.get("", response_model=OrderList)
def get_all_orders(
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    orders = _orders_query(db).all()
    return {"orders": orders, "count": len(orders)}


# Create an order from the posted items and open a (fake) payment intent
@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    if not payload.items:
        raise BadRequestError("No cart items provided!")
    if payload.tax is None or payload.shipping_fee is None:
        raise BadRequestError("No tax or shipping_fee provided!")

    # Snapshot products and compute totals
    order_items, sub_total = [], 0
    for item in payload.items:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if not product:
            raise NotFoundError(f"No product with id : {item.product_id}")
        order_items.append(OrderItem(
            product_id=product.id, name=product.name, image=product.image,
            price=product.price, amount=item.amount,
        ))
        sub_total += item.amount * product.price

    total = payload.tax + payload.shipping_fee + sub_total
    payment_intent = payment_client.create_payment_intent(amount=total, currency="usd")

    order = Order(
        user_id=int(current_user.user_id), tax=payload.tax, shipping_fee=payload.shipping_fee,
        sub_total=sub_total, total=total, client_secret=payment_intent["client_secret"],
        items=order_items,
    )
    db.add(order)
    db.commit()
    db.refresh(order)

    write_log(db, user_id=order.user_id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "total": total})

    logger.info("Order %s created by user %s", order.id, order.user_id)
    return {"order": order, "client_secret": order.client_secret}


# Orders of the calling user
@router.get("/showAllMyOrders", response_model=OrderList)
def get_current_user_orders(
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    orders = _orders_query(db).filter(Order.user_id == int(current_user.user_id)).all()
    return {"orders": orders, "count": len(orders)}


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_single_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    order = _get_order(db, order_id)
    check_permissions(current_user, order.user_id)
    return {"order": order}


# Record the payment confirmation for an order
@router.patch("/{order_id}", response_model=OrderEnvelope)
def update_order(
    order_id: int,
    payload: OrderPaymentPatch,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    order = _get_order(db, order_id)
    check_permissions(current_user, order.user_id)

    if not payload.payment_id:
        raise BadRequestError("Please provide payment_id!")

    order.payment_id = payload.payment_id
    order.status = "paid"
    db.commit()
    db.refresh(order)
    return {"order": order}
