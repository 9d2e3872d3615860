from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from app.constants.order_status import Role


class SignUp(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class SignIn(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class ForgotPassword(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class VerifyOtp(BaseModel):
    code: str = Field(..., min_length=6, max_length=6)

    @field_validator("code")
    @classmethod
    def upper_code(cls, v):
        return v.upper()


class UpdatePassword(BaseModel):
    password: str = Field(..., min_length=8)


class ProfileCreate(BaseModel):
    role: Role
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    # users
    delivery_address: Optional[str] = None
    # vendors
    description: Optional[str] = None
    pickup_address: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
