from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from app.models.auth import Auth
    from app.models.order import Order


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    auth_id: int = Field(foreign_key="auth.id", unique=True)
    name: str
    phone: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    delivery_address: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    auth: Optional["Auth"] = Relationship(back_populates="user")
    orders: List["Order"] = Relationship(back_populates="user")


class Admin(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    auth_id: int = Field(foreign_key="auth.id", unique=True)
    name: str
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    auth: Optional["Auth"] = Relationship(back_populates="admin")
