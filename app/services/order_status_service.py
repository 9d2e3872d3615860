"""
Order status changes for every role.

One code path serves users, vendors and admins. What differs per role is
captured by two things:

* ``scope_filter(actor)``: the orders the actor can see at all. Anything
  outside it is reported as "not found".
* ``ALLOWED_TRANSITIONS[actor.role]``: the target statuses the actor may set.

Moving an order to CANCELLED or REJECTED gives its reserved stock back and
closes it: a closed order only accepts its own status again, as a no-op. The
"has it already been given back?" check is the WHERE clause of the status
UPDATE itself, so two concurrent cancellations cannot both restore stock.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import true, update
from sqlmodel import Session, select

from app.constants.order_status import (
    ADMIN_ROLES,
    ALLOWED_TRANSITIONS,
    RESTORING_STATUSES,
    OrderStatus,
    Role,
)
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.services.inventory_service import restore_inventory
from app.services.order_event_service import OrderEventType, log_order_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    role: Role
    # User.id for users, Vendor.id for vendors, Admin.id for admins
    profile_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def label(self) -> str:
        return f"{self.role.value.lower()}:{self.profile_id}"


def vendor_scope(vendor_id: int):
    """Orders made up only of this vendor's products."""
    own_line = (
        select(OrderItem.id)
        .join(Product, Product.id == OrderItem.product_id)
        .where(OrderItem.order_id == Order.id)
        .where(Product.vendor_id == vendor_id)
    )
    foreign_line = (
        select(OrderItem.id)
        .join(Product, Product.id == OrderItem.product_id)
        .where(OrderItem.order_id == Order.id)
        .where(Product.vendor_id != vendor_id)
    )
    return own_line.exists() & ~foreign_line.exists()


def scope_filter(actor: Actor):
    if actor.is_admin:
        return true()
    if actor.role == Role.VENDOR:
        return vendor_scope(actor.profile_id)
    if actor.role == Role.USER:
        return Order.user_id == actor.profile_id
    raise ForbiddenError("Role not allowed to manage orders")


def find_order_in_scope(session: Session, actor: Actor, order_id: int) -> Order:
    order = session.exec(
        select(Order).where(Order.id == order_id).where(scope_filter(actor))
    ).first()

    if not order:
        raise NotFoundError("Order not found")
    return order


def _set_status(session: Session, order_id: int, status: OrderStatus, *conditions) -> bool:
    statement = (
        update(Order)
        .execution_options(synchronize_session=False)
        .where(Order.id == order_id, *conditions)
    )
    result = session.exec(
        statement.values(status=status, updated_at=datetime.utcnow())
    )
    return result.rowcount == 1


def toggle_order_status(session: Session, actor: Actor, order_id: int, new_status: OrderStatus) -> Order:
    allowed = ALLOWED_TRANSITIONS.get(actor.role, set())
    if new_status not in allowed:
        raise ForbiddenError(f"Status {new_status.value} cannot be set by {actor.role.value}")

    order = find_order_in_scope(session, actor, order_id)
    previous = order.status
    restored = False

    live = Order.status.not_in(RESTORING_STATUSES)

    try:
        if new_status in RESTORING_STATUSES:
            # only the writer that moves the order out of a live state restores
            restored = _set_status(session, order.id, new_status, live)
            if restored:
                restore_inventory(session, order.id)
            written = restored or _set_status(session, order.id, new_status, Order.status == new_status)
        else:
            written = _set_status(session, order.id, new_status, live)

        # a cancelled or rejected order has its stock back and cannot be reopened
        if not written:
            raise BadRequestError("Order is already closed")

        log_order_event(
            session,
            order.id,
            OrderEventType.STATUS_CHANGED,
            f"Status changed to {new_status.value}",
            created_by=actor.label,
            meta={
                "from": previous.value,
                "to": new_status.value,
                "stock_restored": restored,
            },
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(
        f"Order {order.id} {previous.value} -> {new_status.value} by {actor.label}"
        f"{' (stock restored)' if restored else ''}"
    )
    return order
