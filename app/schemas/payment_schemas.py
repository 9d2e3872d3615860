from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional


class InitializePaymentRequest(BaseModel):
    order_id: int
    callback_url: str = Field(..., min_length=1)


class RefundRequest(BaseModel):
    payment_id: int
    # defaults to the full payment amount
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
