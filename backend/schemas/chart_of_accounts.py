from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from .account_type import AccountType


def _strip_and_require(v):
    if v is None or not v.strip():
        raise ValueError("must not be blank")
    return v.strip()


class AccountBase(BaseModel):
    account_number: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator('account_number', 'name')
    @classmethod
    def strip_and_require(cls, v):
        return _strip_and_require(v)


class AccountCreate(AccountBase):
    type_id: int
    parent_account_id: Optional[int] = None


class AccountUpdate(BaseModel):
    account_number: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    type_id: Optional[int] = None
    parent_account_id: Optional[int] = None
    is_active: Optional[bool] = None

    # Omitted means unchanged; an explicit null or blank is rejected
    @field_validator('account_number', 'name')
    @classmethod
    def strip_and_require(cls, v):
        return _strip_and_require(v)


class AccountSummary(BaseModel):
    id: int
    account_number: str
    name: str

    class Config:
        from_attributes = True


class Account(AccountBase):
    id: int
    type_id: int
    parent_account_id: Optional[int] = None
    is_active: bool
    type: Optional[AccountType] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountList(BaseModel):
    accounts: List[Account]
    total: int
    page: int
    page_size: int
    total_pages: int


class AccountWithBalance(Account):
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal


class AccountNode(BaseModel):
    id: int
    account_number: str
    name: str
    type_id: int
    parent_account_id: Optional[int] = None
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    subtree_balance: Decimal
    children: List['AccountNode'] = []


class AccountDeleteResult(BaseModel):
    account_id: int
    outcome: str  # "deleted" or "deactivated"


AccountNode.model_rebuild()
