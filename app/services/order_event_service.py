from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from app.models.order_event import OrderEvent


class OrderEventType:
    ORDER_CREATED = "order_created"
    STATUS_CHANGED = "status_changed"
    PAYMENT_INITIALIZED = "payment_initialized"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_REFUNDED = "payment_refunded"
    TRANSFER_INITIATED = "transfer_initiated"
    TRANSFER_SETTLED = "transfer_settled"


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
) -> OrderEvent:
    """Stage a timeline entry. Nothing is flushed; the caller commits or rolls back."""
    event = OrderEvent(
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=datetime.utcnow(),
    )
    session.add(event)
    return event


def get_order_timeline(session: Session, order_id: int) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at, OrderEvent.id)
    ).all()
