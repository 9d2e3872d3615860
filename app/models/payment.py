from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import PaymentStatus, PaymentType, TransferStatus

if TYPE_CHECKING:
    from app.models.order import Order
    from app.models.vendor import Vendor


class Payment(SQLModel, table=True):
    """One settled share of an order: a row per vendor per order."""

    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="order.id", index=True)
    vendor_id: int = Field(foreign_key="vendor.id", index=True)

    amount: Decimal = Field(max_digits=12, decimal_places=2)
    platform_fee: Decimal = Field(max_digits=12, decimal_places=2)
    vendor_amount: Decimal = Field(max_digits=12, decimal_places=2)

    status: PaymentStatus = Field(default=PaymentStatus.PAID)
    type: PaymentType = Field(default=PaymentType.CHARGE)

    # <gateway reference>_<vendor id>; doubles as the idempotency key
    paystack_reference: str = Field(unique=True, index=True)

    # set by initiate_transfer, moved to COMPLETED / FAILED only by the webhook
    transfer_status: Optional[TransferStatus] = Field(default=None)
    paystack_transfer_reference: Optional[str] = Field(default=None, unique=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="payments")
    vendor: Optional["Vendor"] = Relationship()
