from sqlmodel import SQLModel, Field , Relationship
from sqlalchemy import UniqueConstraint, CheckConstraint
from typing import Optional , TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from app.models.order import Order
    from app.models.product import Product

class OrderItem(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("order_id", "product_id", name="uq_orderitem_order_product"),
        CheckConstraint("quantity >= 1", name="ck_orderitem_quantity_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id", index=True)

    # unit price at purchase time, not the live product price
    price: Decimal = Field(max_digits=12, decimal_places=2)
    quantity: int

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()
