import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlmodel import Session, select

from app.constants.order_status import AccountStatus, OrderStatus, PaymentStatus
from app.errors import BadRequestError, NotFoundError
from app.models.auth import Auth
from app.models.category import Category
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.user import User
from app.models.vendor import Vendor
from app.schemas.orders_schemas import OrderItemIn
from app.services.fees import to_money
from app.services.inventory_service import reserve_stock
from app.services.order_event_service import OrderEventType, log_order_event

logger = logging.getLogger(__name__)


def orderable_products_query(product_ids: Iterable[int]):
    """Products a customer may buy: live product, approved category, approved verified vendor."""
    return (
        select(Product)
        .join(Category, Category.id == Product.category_id)
        .join(Vendor, Vendor.id == Product.vendor_id)
        .join(Auth, Auth.id == Vendor.auth_id)
        .where(Product.id.in_(list(product_ids)))
        .where(Product.is_deleted == False)  # noqa: E712
        .where(Category.status == AccountStatus.APPROVED)
        .where(Category.is_deleted == False)  # noqa: E712
        .where(Auth.status == AccountStatus.APPROVED)
        .where(Auth.is_verified == True)  # noqa: E712
        .where(Auth.is_deleted == False)  # noqa: E712
    )


def _merge_quantities(items: List[OrderItemIn]) -> Dict[int, int]:
    quantities: Dict[int, int] = OrderedDict()
    for item in items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def create_order(session: Session, user_id: int, items: List[OrderItemIn]) -> Order:
    """
    Place an order for one vendor's products and reserve their stock.

    Any missing or unsellable product, short stock, or a second vendor fails
    the whole request; nothing is written in that case.
    """
    if not items:
        raise BadRequestError("Order must contain at least one product")

    quantities = _merge_quantities(items)

    user = session.get(User, user_id)
    if not user:
        raise BadRequestError("Failed to create order")

    products = session.exec(orderable_products_query(quantities.keys())).all()

    if len(products) != len(quantities):
        logger.info(f"Order rejected for user {user_id}: unavailable products")
        raise BadRequestError("Failed to create order")

    by_id = {p.id: p for p in products}

    for product_id, quantity in quantities.items():
        if by_id[product_id].stock < quantity:
            raise BadRequestError("Failed to create order")

    vendor_ids = {p.vendor_id for p in products}
    if len(vendor_ids) > 1:
        raise BadRequestError("Failed to create order")

    total_price = sum(
        (to_money(by_id[pid].price) * qty for pid, qty in quantities.items()),
        Decimal("0"),
    )

    try:
        order = Order(
            user_id=user.id,
            total_price=total_price,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
        )
        session.add(order)
        session.flush()

        for product_id, quantity in quantities.items():
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product_id,
                    price=to_money(by_id[product_id].price),
                    quantity=quantity,
                )
            )
        session.flush()

        # re-checked at write time; the pre-check above can be stale
        reserve_stock(session, quantities.items())

        log_order_event(
            session,
            order.id,
            OrderEventType.ORDER_CREATED,
            "Order placed",
            created_by=f"user:{user.id}",
            meta={"total_price": str(total_price), "lines": len(quantities)},
        )

        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Order {order.id} created for user {user.id}, total {total_price}")
    return order


def get_order_or_404(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def order_to_dict(order: Order, include_user: bool = False) -> dict:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "total_price": order.total_price,
        "status": order.status,
        "payment_status": order.payment_status,
        "paystack_reference": order.paystack_reference,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "product_id": item.product_id,
                "price": item.price,
                "quantity": item.quantity,
                "line_total": to_money(item.price) * item.quantity,
                "product": {
                    "id": item.product.id,
                    "name": item.product.name,
                    "price": item.product.price,
                    "category": {
                        "id": item.product.category.id,
                        "name": item.product.category.name,
                    } if item.product.category else None,
                    "vendor": {
                        "id": item.product.vendor.id,
                        "name": item.product.vendor.name,
                    } if item.product.vendor else None,
                },
            }
            for item in order.items
        ],
    }

    if include_user and order.user:
        data["user"] = {
            "id": order.user.id,
            "name": order.user.name,
            "phone": order.user.phone,
        }

    return data
