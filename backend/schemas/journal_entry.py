from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from .ledger_line import LedgerLineCreate, LedgerLine

ENTRY_PREFIX_PATTERN = r"^[A-Z]{2,10}$"


class JournalEntryBase(BaseModel):
    date: date
    description: Optional[str] = None
    reference: Optional[str] = Field(None, max_length=50)


class JournalEntryCreate(JournalEntryBase):
    # Generated as {prefix}-{YYYYMM}-{NNNN} when omitted
    entry_number: Optional[str] = Field(None, min_length=1, max_length=30)
    prefix: str = Field("JE", pattern=ENTRY_PREFIX_PATTERN)
    lines: List[LedgerLineCreate]


class JournalEntryUpdate(BaseModel):
    description: Optional[str] = None
    reference: Optional[str] = Field(None, max_length=50)
    lines: Optional[List[LedgerLineCreate]] = None


class JournalEntry(JournalEntryBase):
    id: int
    entry_number: str
    is_posted: bool
    posted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    lines: List[LedgerLine] = []

    @computed_field
    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @computed_field
    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    class Config:
        from_attributes = True


class JournalEntryList(BaseModel):
    entries: List[JournalEntry]
    total: int
    page: int
    page_size: int
    total_pages: int
