from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import vendor_actor
from app.schemas.orders_schemas import OrderStatusUpdate
from app.services.order_service import order_to_dict
from app.services.order_status_service import Actor, toggle_order_status

router = APIRouter()


@router.patch("/{order_id}/status")
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(vendor_actor)
):
    order = toggle_order_status(session, actor, order_id, payload.status)
    return {
        "message": "Order status updated successfully",
        "data": {"order": order_to_dict(order, include_user=True)},
    }
