import logging
from typing import Iterable, Tuple

from sqlalchemy import update
from sqlmodel import Session, select

from app.errors import BadRequestError
from app.models.order_item import OrderItem
from app.models.product import Product

logger = logging.getLogger(__name__)


def reserve_stock(session: Session, lines: Iterable[Tuple[int, int]]):
    """
    Take ``quantity`` off each product's stock.

    Relative, conditional update: the row only changes when enough stock is
    left at write time, so two concurrent orders can never push it below
    zero. Raises ``BadRequestError`` on the first line that does not fit;
    the caller rolls the whole transaction back.
    """
    for product_id, quantity in lines:
        result = session.exec(
            update(Product)
            .execution_options(synchronize_session=False)
            .where(Product.id == product_id)
            .where(Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
        )

        if result.rowcount != 1:
            logger.info(f"Insufficient stock for product {product_id} (requested {quantity})")
            raise BadRequestError("Failed to create order")


def restore_inventory(session: Session, order_id: int) -> int:
    """Give back the stock taken by an order's lines. Returns lines restored."""
    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()

    for item in items:
        session.exec(
            update(Product)
            .execution_options(synchronize_session=False)
            .where(Product.id == item.product_id)
            .values(stock=Product.stock + item.quantity)
        )

    logger.info(f"Restored stock for {len(items)} lines of order {order_id}")
    return len(items)
