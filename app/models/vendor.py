from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from app.models.auth import Auth
    from app.models.product import Product


class Vendor(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    auth_id: int = Field(foreign_key="auth.id", unique=True)

    name: str
    description: Optional[str] = None
    phone: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    pickup_address: Optional[str] = None

    # payout details
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    paystack_recipient_code: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    auth: Optional["Auth"] = Relationship(back_populates="vendor")
    products: List["Product"] = Relationship(back_populates="vendor")
