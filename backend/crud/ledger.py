"""
Ledger line storage.

These functions only stage changes on the session; the journal entry crud
owns the surrounding transaction and commits entry and lines together. They
never check posting status: callers must not touch lines of a posted entry.
"""

from sqlalchemy.orm import Session, joinedload
from datetime import date
from typing import Iterable, List, Optional
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from schemas.ledger_line import LedgerLineCreate
from utils import sum_money, to_money
import math


def _build_line(entry_id: int, line: LedgerLineCreate) -> LedgerLine:
    return LedgerLine(
        journal_entry_id=entry_id,
        account_id=line.account_id,
        debit=to_money(line.debit),
        credit=to_money(line.credit),
        description=line.description,
    )


def append_lines(db: Session, entry_id: int, lines: Iterable[LedgerLineCreate]) -> List[LedgerLine]:
    db_lines = [_build_line(entry_id, line) for line in lines]
    db.add_all(db_lines)
    db.flush()
    return db_lines


def replace_lines(db: Session, entry_id: int, lines: Iterable[LedgerLineCreate]) -> List[LedgerLine]:
    """Delete-then-insert the full line set of a draft entry."""
    db.query(LedgerLine).filter(LedgerLine.journal_entry_id == entry_id).delete(synchronize_session=False)
    db.flush()
    return append_lines(db, entry_id, lines)


def lines_for_entry(db: Session, entry_id: int) -> List[LedgerLine]:
    return (
        db.query(LedgerLine)
        .filter(LedgerLine.journal_entry_id == entry_id)
        .order_by(LedgerLine.id)
        .all()
    )


def lines_for_account(db: Session, account_id: int, posted_only: bool = False) -> List[LedgerLine]:
    query = db.query(LedgerLine).filter(LedgerLine.account_id == account_id)
    if posted_only:
        query = query.join(JournalEntry).filter(JournalEntry.is_posted.is_(True))
    return query.order_by(LedgerLine.id).all()


def count_lines_for_account(db: Session, account_id: int) -> int:
    return db.query(LedgerLine).filter(LedgerLine.account_id == account_id).count()


def entry_totals(db: Session, entry_id: int):
    """(line_count, total_debit, total_credit) as stored for an entry."""
    lines = lines_for_entry(db, entry_id)
    total_debit = sum_money(line.debit for line in lines)
    total_credit = sum_money(line.credit for line in lines)
    return len(lines), total_debit, total_credit


def get_ledger_lines(
    db: Session,
    account_id: Optional[int] = None,
    journal_entry_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    page_size: int = 10,
):
    """Browse ledger lines newest-first with optional filters."""
    query = db.query(LedgerLine).join(JournalEntry)

    if account_id:
        query = query.filter(LedgerLine.account_id == account_id)
    if journal_entry_id:
        query = query.filter(LedgerLine.journal_entry_id == journal_entry_id)
    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.date <= end_date)

    total = query.count()
    lines = (
        query.options(joinedload(LedgerLine.account), joinedload(LedgerLine.journal_entry))
        .order_by(LedgerLine.created_at.desc(), LedgerLine.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "lines": lines,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }
