from pydantic import BaseModel, Field


class BankAccountUpdate(BaseModel):
    bank_name: str = Field(..., min_length=1)
    bank_code: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=6, max_length=20, pattern=r"^\d+$")
    account_name: str = Field(..., min_length=1)
