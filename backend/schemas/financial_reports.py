from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal
from .chart_of_accounts import Account
from .ledger_line import LedgerLineEntrySummary


class AccountBalance(BaseModel):
    account_id: int
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    as_of_date: Optional[date] = None


class TrialBalanceRow(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal


class TrialBalance(BaseModel):
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal
    as_of_date: Optional[date] = None


class AccountStatementLine(BaseModel):
    line_id: int
    journal_entry: LedgerLineEntrySummary
    description: Optional[str] = None
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


class AccountStatement(BaseModel):
    account: Account
    start_date: date
    end_date: date
    opening_balance: Decimal
    closing_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    net_movement: Decimal
    lines: List[AccountStatementLine]
