from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional
from .chart_of_accounts import AccountSummary


class LedgerLineBase(BaseModel):
    account_id: int
    debit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    credit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    description: Optional[str] = None


class LedgerLineCreate(LedgerLineBase):
    pass


class LedgerLine(LedgerLineBase):
    id: int
    journal_entry_id: int
    account: Optional[AccountSummary] = None

    class Config:
        from_attributes = True


class LedgerLineEntrySummary(BaseModel):
    id: int
    entry_number: str
    date: date
    description: Optional[str] = None
    reference: Optional[str] = None
    is_posted: bool

    class Config:
        from_attributes = True


class LedgerLineDetail(LedgerLine):
    created_at: Optional[datetime] = None
    journal_entry: LedgerLineEntrySummary


class LedgerLineList(BaseModel):
    lines: List[LedgerLineDetail]
    total: int
    page: int
    page_size: int
    total_pages: int
