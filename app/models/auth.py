from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.constants.order_status import Role, AccountStatus

if TYPE_CHECKING:
    from app.models.user import User, Admin
    from app.models.vendor import Vendor


class Auth(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password: str

    role: Role = Field(default=Role.USER)
    status: AccountStatus = Field(default=AccountStatus.APPROVED)
    is_verified: bool = Field(default=False)
    is_deleted: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    user: Optional["User"] = Relationship(
        back_populates="auth", sa_relationship_kwargs={"uselist": False}
    )
    admin: Optional["Admin"] = Relationship(
        back_populates="auth", sa_relationship_kwargs={"uselist": False}
    )
    vendor: Optional["Vendor"] = Relationship(
        back_populates="auth", sa_relationship_kwargs={"uselist": False}
    )


class OtpType:
    VERIFY = "VERIFY"
    RESET = "RESET"


class Otp(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    auth_id: int = Field(foreign_key="auth.id", unique=True)
    code: str
    type: str = Field(default=OtpType.VERIFY)  # VERIFY | RESET
    created_at: datetime = Field(default_factory=datetime.utcnow)
