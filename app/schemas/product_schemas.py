from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional


class ProductCreate(BaseModel):
    kind: Literal["product.create"] = "product.create"
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: int


class ProductUpdate(BaseModel):
    kind: Literal["product.update"] = "product.update"
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not self.model_dump(exclude_unset=True, exclude={"kind"}):
            raise ValueError("Nothing to update")
        return self
