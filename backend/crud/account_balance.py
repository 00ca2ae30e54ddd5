from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional
from models.chart_of_accounts import Account
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from schemas.financial_reports import AccountBalance
from exceptions import AccountNotFoundError
from utils import to_money
import logging

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _posted_totals_query(db: Session, as_of_date: Optional[date] = None, before_date: Optional[date] = None):
    """Per-account debit/credit sums over lines of posted entries only."""
    query = (
        db.query(
            LedgerLine.account_id,
            func.coalesce(func.sum(LedgerLine.debit), 0),
            func.coalesce(func.sum(LedgerLine.credit), 0),
        )
        .join(JournalEntry, LedgerLine.journal_entry_id == JournalEntry.id)
        .filter(JournalEntry.is_posted.is_(True))
    )
    if as_of_date:
        query = query.filter(JournalEntry.date <= as_of_date)
    if before_date:
        query = query.filter(JournalEntry.date < before_date)
    return query.group_by(LedgerLine.account_id)


def make_balance(account_id: int, debit_total, credit_total, as_of_date: Optional[date] = None) -> AccountBalance:
    debit_total = to_money(debit_total)
    credit_total = to_money(credit_total)
    return AccountBalance(
        account_id=account_id,
        debit_total=debit_total,
        credit_total=credit_total,
        balance=debit_total - credit_total,
        as_of_date=as_of_date,
    )


def get_balances(
    db: Session,
    account_ids: Optional[Iterable[int]] = None,
    as_of_date: Optional[date] = None,
    before_date: Optional[date] = None,
) -> Dict[int, AccountBalance]:
    """Posted balances keyed by account id. Accounts without posted lines are absent."""
    query = _posted_totals_query(db, as_of_date=as_of_date, before_date=before_date)
    if account_ids is not None:
        account_ids = list(account_ids)
        if not account_ids:
            return {}
        query = query.filter(LedgerLine.account_id.in_(account_ids))
    return {
        account_id: make_balance(account_id, debit_total, credit_total, as_of_date)
        for account_id, debit_total, credit_total in query.all()
    }


def get_account_balance(db: Session, account_id: int, as_of_date: Optional[date] = None) -> AccountBalance:
    """
    Balance of one account from posted ledger lines only.

    Draft entries never contribute. With `as_of_date`, only posted entries
    dated on or before that day are counted.
    """
    exists = db.query(Account.id).filter(Account.id == account_id).first()
    if not exists:
        raise AccountNotFoundError(account_id)

    balances = get_balances(db, [account_id], as_of_date=as_of_date)
    balance = balances.get(account_id) or make_balance(account_id, ZERO, ZERO, as_of_date)
    logger.debug(f"Balance for account {account_id}: {balance.balance}")
    return balance


def get_account_with_balance(db: Session, account_id: int):
    """Account row plus its posted balance, without loading the hierarchy."""
    account = (
        db.query(Account)
        .options(joinedload(Account.type))
        .filter(Account.id == account_id)
        .first()
    )
    if not account:
        raise AccountNotFoundError(account_id)

    balance = get_account_balance(db, account_id)
    return {
        "id": account.id,
        "account_number": account.account_number,
        "name": account.name,
        "description": account.description,
        "type_id": account.type_id,
        "parent_account_id": account.parent_account_id,
        "is_active": account.is_active,
        "type": account.type,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
        "debit_total": balance.debit_total,
        "credit_total": balance.credit_total,
        "balance": balance.balance,
    }
