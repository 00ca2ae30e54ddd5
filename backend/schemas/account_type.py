from pydantic import BaseModel
from typing import Optional


class AccountTypeBase(BaseModel):
    name: str
    description: Optional[str] = None


class AccountType(AccountTypeBase):
    id: int

    class Config:
        from_attributes = True


class AccountTypeWithCount(AccountType):
    account_count: int = 0
