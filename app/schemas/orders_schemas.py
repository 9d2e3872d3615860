from pydantic import BaseModel, Field
from typing import List

from app.constants.order_status import OrderStatus


class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    products: List[OrderItemIn] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
