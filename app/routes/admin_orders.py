# -------- ADMIN ORDERS --------
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import admin_actor
from app.schemas.orders_schemas import OrderStatusUpdate
from app.services.order_event_service import get_order_timeline
from app.services.order_service import get_order_or_404, order_to_dict
from app.services.order_status_service import Actor, toggle_order_status

router = APIRouter()


@router.patch("/{order_id}/status")
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(admin_actor)
):
    order = toggle_order_status(session, actor, order_id, payload.status)
    return {
        "message": "Order status updated successfully",
        "data": {"order": order_to_dict(order, include_user=True)},
    }


@router.get("/{order_id}/timeline")
def order_timeline(
    order_id: int,
    session: Session = Depends(get_session),
    _: Actor = Depends(admin_actor)
):
    order = get_order_or_404(session, order_id)
    events = get_order_timeline(session, order.id)

    return {
        "message": "Order timeline",
        "data": {
            "order_id": order.id,
            "events": [
                {
                    "event_type": e.event_type,
                    "label": e.label,
                    "meta": e.meta,
                    "created_by": e.created_by,
                    "created_at": e.created_at,
                }
                for e in events
            ],
        },
    }
