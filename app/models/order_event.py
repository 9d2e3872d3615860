from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional
from datetime import datetime


class OrderEvent(SQLModel, table=True):
    """Append-only timeline entry, written in the transaction of the change it records."""

    __tablename__ = "order_event"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)

    event_type: str = Field(index=True)
    label: str
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # "system", or "<role>:<profile id>"
    created_by: str = Field(default="system")
    created_at: datetime = Field(default_factory=datetime.utcnow)
