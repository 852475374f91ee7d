# storefront/routes/orders.py
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.order import Order
from storefront.models.users import User
from storefront.schemas.order import (
    OrderCreatePayload, OrderLine, OrderResponse, OrderStatus, OrderStatusPatch
)

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        username=order.user.username if order.user else "unknown",
        items=[OrderLine.model_validate(it) for it in (order.items or [])],
        total_amount=round(order.total_amount, 2),
        status=OrderStatus(order.status),
        created_at=order.created_at,
    )

def _newest_first(query):
    return query.order_by(Order.created_at.desc(), Order.id.desc())

# List every order (admin view)
@router.get("", response_model=List[OrderResponse])
def list_all_orders(db: Session = Depends(get_db)):
    return [_order_to_out(o) for o in _newest_first(db.query(Order)).all()]

# List orders placed by one user
@router.get("/user/{user_id}", response_model=List[OrderResponse])
def list_user_orders(user_id: int, db: Session = Depends(get_db)):
    rows = _newest_first(db.query(Order).filter(Order.user_id == user_id)).all()
    return [_order_to_out(o) for o in rows]

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreatePayload, db: Session = Depends(get_db)):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Order has no items")

    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    order = Order(
        user_id=user.id,
        status=OrderStatus.PENDING.value,
        total_amount=payload.total_amount,
        items=[line.model_dump() for line in payload.items],
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.id} placed by user {user.id} ({len(payload.items)} lines)")
    return _order_to_out(order)

# Move a pending order to a terminal status; terminal orders are left as they are
@router.patch("/{order_id}", response_model=OrderResponse)
def update_order_status(order_id: int, payload: OrderStatusPatch, db: Session = Depends(get_db)):
    try:
        new_status = OrderStatus(payload.status.strip().upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown status {payload.status}")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status = OrderStatus(order.status)
    if old_status.is_terminal:
        logger.info(f"Order {order_id} already {old_status.value}, ignoring {new_status.value}")
        return _order_to_out(order)

    order.status = new_status.value
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order_id} status {old_status.value} -> {new_status.value}")
    return _order_to_out(order)
