from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import CheckConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal


if TYPE_CHECKING:
    from .category import Category
    from .vendor import Vendor

class Product(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None

    price: Decimal = Field(max_digits=12, decimal_places=2)
    # orders take and give back stock with relative updates only
    stock: int = Field(default=0)

    is_deleted: bool = Field(default=False)

    vendor_id: int = Field(foreign_key="vendor.id", index=True)
    category_id: int = Field(foreign_key="category.id", index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    vendor: Optional["Vendor"] = Relationship(back_populates="products")
    category: Optional["Category"] = Relationship(back_populates="products")

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
