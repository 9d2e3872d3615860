from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import require_user, user_actor
from app.models.user import User
from app.schemas.orders_schemas import OrderCreate, OrderStatusUpdate
from app.services.order_service import create_order, order_to_dict
from app.services.order_status_service import Actor, toggle_order_status

router = APIRouter()


@router.post("")
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    user: User = Depends(require_user)
):
    order = create_order(session, user.id, payload.products)
    return {"message": "Order created successfully", "data": {"order": order_to_dict(order)}}


@router.patch("/{order_id}/status")
def cancel_order(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(user_actor)
):
    order = toggle_order_status(session, actor, order_id, payload.status)
    return {
        "message": "Order status updated successfully",
        "data": {"order": order_to_dict(order, include_user=True)},
    }
