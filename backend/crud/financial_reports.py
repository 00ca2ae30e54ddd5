from sqlalchemy.orm import Session, joinedload
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import List, Optional
import pandas as pd
from models.chart_of_accounts import Account
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from schemas.financial_reports import TrialBalance, TrialBalanceRow, AccountStatement, AccountStatementLine
from schemas import chart_of_accounts as account_schemas
from schemas.ledger_line import LedgerLineEntrySummary
from crud.account_balance import get_balances, get_account_balance
from exceptions import AccountNotFoundError
from utils import to_money
import logging

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def get_trial_balance(db: Session, as_of_date: Optional[date] = None) -> List[TrialBalanceRow]:
    """
    One row per account with posted activity, sorted by account number.

    Accounts with only draft activity or no activity at all are left out.
    Inactive accounts still appear when they carry posted lines.
    """
    balances = get_balances(db, as_of_date=as_of_date)
    accounts = (
        db.query(Account)
        .options(joinedload(Account.type))
        .order_by(Account.account_number)
        .all()
    )

    rows = []
    for account in accounts:
        balance = balances.get(account.id)
        if balance is None or (balance.debit_total == 0 and balance.credit_total == 0):
            continue
        rows.append(TrialBalanceRow(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            account_type=account.type.name,
            debit_total=balance.debit_total,
            credit_total=balance.credit_total,
            balance=balance.balance,
        ))
    logger.debug(f"Trial balance has {len(rows)} rows")
    return rows


def get_trial_balance_report(db: Session, as_of_date: Optional[date] = None) -> TrialBalance:
    rows = get_trial_balance(db, as_of_date=as_of_date)
    total_debit = sum((row.debit_total for row in rows), ZERO)
    total_credit = sum((row.credit_total for row in rows), ZERO)
    return TrialBalance(
        rows=rows,
        total_debit=total_debit,
        total_credit=total_credit,
        difference=total_debit - total_credit,
        as_of_date=as_of_date,
    )


def export_trial_balance(db: Session, as_of_date: Optional[date] = None) -> BytesIO:
    """Trial balance as an in-memory Excel workbook."""
    report = get_trial_balance_report(db, as_of_date=as_of_date)
    df = pd.DataFrame(
        [
            {
                "Account Number": row.account_number,
                "Account Name": row.account_name,
                "Account Type": row.account_type,
                "Debit": float(row.debit_total),
                "Credit": float(row.credit_total),
                "Balance": float(row.balance),
            }
            for row in report.rows
        ],
        columns=["Account Number", "Account Name", "Account Type", "Debit", "Credit", "Balance"],
    )
    totals = pd.DataFrame([{
        "Account Number": "",
        "Account Name": "Total",
        "Account Type": "",
        "Debit": float(report.total_debit),
        "Credit": float(report.total_credit),
        "Balance": float(report.difference),
    }])
    df = pd.concat([df, totals], ignore_index=True)

    excel_file = BytesIO()
    with pd.ExcelWriter(excel_file, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Trial Balance")
    excel_file.seek(0)
    return excel_file


def get_account_statement(db: Session, account_id: int, start_date: date, end_date: date) -> AccountStatement:
    """
    Posted activity of one account within a period.

    The opening balance covers posted entries dated before `start_date`; each
    line carries the running balance after it.
    """
    account = (
        db.query(Account)
        .options(joinedload(Account.type))
        .filter(Account.id == account_id)
        .first()
    )
    if not account:
        raise AccountNotFoundError(account_id)

    opening = get_balances(db, [account_id], before_date=start_date).get(account_id)
    opening_balance = opening.balance if opening else ZERO

    lines = (
        db.query(LedgerLine)
        .join(JournalEntry, LedgerLine.journal_entry_id == JournalEntry.id)
        .options(joinedload(LedgerLine.journal_entry))
        .filter(
            LedgerLine.account_id == account_id,
            JournalEntry.is_posted.is_(True),
            JournalEntry.date >= start_date,
            JournalEntry.date <= end_date,
        )
        .order_by(JournalEntry.date, JournalEntry.id, LedgerLine.id)
        .all()
    )

    running_balance = opening_balance
    statement_lines = []
    for line in lines:
        debit = to_money(line.debit)
        credit = to_money(line.credit)
        running_balance += debit - credit
        statement_lines.append(AccountStatementLine(
            line_id=line.id,
            journal_entry=LedgerLineEntrySummary.model_validate(line.journal_entry),
            description=line.description,
            debit=debit,
            credit=credit,
            running_balance=running_balance,
        ))

    closing_balance = get_account_balance(db, account_id, as_of_date=end_date).balance
    total_debit = sum((l.debit for l in statement_lines), ZERO)
    total_credit = sum((l.credit for l in statement_lines), ZERO)

    return AccountStatement(
        account=account_schemas.Account.model_validate(account),
        start_date=start_date,
        end_date=end_date,
        opening_balance=opening_balance,
        closing_balance=closing_balance,
        total_debit=total_debit,
        total_credit=total_credit,
        net_movement=closing_balance - opening_balance,
        lines=statement_lines,
    )
