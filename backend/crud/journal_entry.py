"""
Journal entry engine.

An entry is created as a draft (or posted straight away when the caller asks)
together with its ledger lines in one transaction. Drafts may be amended or
deleted; posting is one-way and the only transition out of draft.
"""

from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence
from models.chart_of_accounts import Account
from models.entry_sequence import EntrySequence
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from models.audit_mixin import now_local
from schemas.journal_entry import JournalEntryCreate, JournalEntryUpdate
from schemas.ledger_line import LedgerLineCreate
from crud import ledger as crud_ledger
from exceptions import (
    DuplicateEntryNumberError,
    EntryAlreadyPostedError,
    EntryNotFoundError,
    InsufficientLinesError,
    PersistenceConflictError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from utils import sum_money
import logging
import math

logger = logging.getLogger(__name__)

MIN_LINES = 2
# One retry after a unique violation on entry_number
MAX_NUMBER_ATTEMPTS = 2


def check_balance(line_count: int, total_debit: Decimal, total_credit: Decimal):
    if line_count < MIN_LINES:
        raise InsufficientLinesError(line_count)
    if total_debit != total_credit:
        raise UnbalancedEntryError(total_debit, total_credit)


def validate_lines(db: Session, lines: Sequence[LedgerLineCreate]):
    """Line count, exact debit/credit balance and account existence. Reads only."""
    total_debit = sum_money(line.debit for line in lines)
    total_credit = sum_money(line.credit for line in lines)
    check_balance(len(lines), total_debit, total_credit)

    account_ids = {line.account_id for line in lines}
    found = {row.id for row in db.query(Account.id).filter(Account.id.in_(account_ids)).all()}
    missing = account_ids - found
    if missing:
        raise UnknownAccountError(missing)


def _period_of(on_date: date) -> str:
    return on_date.strftime("%Y%m")


def format_entry_number(prefix: str, on_date: date, sequence: int) -> str:
    return f"{prefix}-{_period_of(on_date)}-{sequence:04d}"


def _highest_sequence(db: Session, prefix: str, period: str) -> int:
    """Largest numeric suffix stored under `{prefix}-{period}-`, 0 when there is none."""
    stem = f"{prefix}-{period}-"
    rows = db.query(JournalEntry.entry_number).filter(JournalEntry.entry_number.like(f"{stem}%")).all()
    suffixes = [row.entry_number[len(stem):] for row in rows]
    return max((int(s) for s in suffixes if s.isdigit()), default=0)


def generate_entry_number(db: Session, prefix: str, on_date: Optional[date] = None, resync: bool = False) -> str:
    """
    Draw the next `{prefix}-{YYYYMM}-{NNNN}` number.

    The per-prefix-month counter row is locked for the rest of the caller's
    transaction. A missing counter starts from the highest number already
    stored for that prefix and month; `resync` lifts an existing counter to
    at least that value. Nothing is committed here.
    """
    on_date = on_date or now_local().date()
    period = _period_of(on_date)

    sequence = (
        db.query(EntrySequence)
        .filter(EntrySequence.prefix == prefix, EntrySequence.period == period)
        .with_for_update()
        .first()
    )
    if sequence is None:
        sequence = EntrySequence(prefix=prefix, period=period, last_value=_highest_sequence(db, prefix, period))
        db.add(sequence)
    elif resync:
        sequence.last_value = max(sequence.last_value, _highest_sequence(db, prefix, period))

    sequence.last_value += 1
    db.flush()
    return format_entry_number(prefix, on_date, sequence.last_value)


def _insert_entry(db: Session, entry: JournalEntryCreate, entry_number: str, post: bool, user_id: Optional[str]) -> JournalEntry:
    db_entry = JournalEntry(
        entry_number=entry_number,
        date=entry.date,
        description=entry.description,
        reference=entry.reference,
        is_posted=post,
        posted_at=now_local() if post else None,
        created_by=user_id,
    )
    db.add(db_entry)
    db.flush()  # Flush to get the ID for the parent entry before creating lines
    crud_ledger.append_lines(db, db_entry.id, entry.lines)
    return db_entry


def create_journal_entry(db: Session, entry: JournalEntryCreate, post: bool = False, user_id: Optional[str] = None) -> JournalEntry:
    """
    Validate and persist an entry with all of its lines atomically.

    Without an explicit `entry_number` one is generated from `entry.prefix`
    and the entry date inside the inserting transaction; a collision on the
    unique number is retried once with a counter lifted to the highest stored
    number for that prefix and month.
    """
    validate_lines(db, entry.lines)

    if entry.entry_number:
        if get_journal_entry_by_number(db, entry.entry_number):
            raise DuplicateEntryNumberError(entry.entry_number)

    for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
        entry_number = entry.entry_number
        try:
            if not entry_number:
                entry_number = generate_entry_number(db, entry.prefix, entry.date, resync=attempt > 1)
            db_entry = _insert_entry(db, entry, entry_number, post, user_id)
            db.commit()
            break
        except IntegrityError as e:
            db.rollback()
            if entry.entry_number or attempt == MAX_NUMBER_ATTEMPTS:
                raise PersistenceConflictError(
                    f"Could not store journal entry {entry_number}: {e.orig}", entry_number=entry_number
                ) from e
            logger.warning(f"Entry number {entry_number} collided, retrying with a new number")
        except Exception:
            db.rollback()
            raise

    logger.info(
        f"Created journal entry {db_entry.entry_number} (id={db_entry.id}, "
        f"{'posted' if post else 'draft'}, {len(entry.lines)} lines)"
    )
    return get_journal_entry(db, db_entry.id)


def get_journal_entry(db: Session, entry_id: int) -> Optional[JournalEntry]:
    return (
        db.query(JournalEntry)
        .options(selectinload(JournalEntry.lines).joinedload(LedgerLine.account))
        .filter(JournalEntry.id == entry_id)
        .populate_existing()
        .first()
    )


def get_journal_entry_by_number(db: Session, entry_number: str) -> Optional[JournalEntry]:
    return db.query(JournalEntry).filter(JournalEntry.entry_number == entry_number).first()


def get_journal_entries(
    db: Session,
    page: int = 1,
    page_size: int = 20,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_posted: Optional[bool] = None,
):
    """Entries newest-first with the total count for pagination."""
    query = db.query(JournalEntry)

    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.date <= end_date)
    if is_posted is not None:
        query = query.filter(JournalEntry.is_posted.is_(is_posted))

    total = query.count()
    entries: List[JournalEntry] = (
        query.options(selectinload(JournalEntry.lines).joinedload(LedgerLine.account))
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return entries, total


def paginate_journal_entries(db: Session, page: int = 1, page_size: int = 20, **filters):
    entries, total = get_journal_entries(db, page=page, page_size=page_size, **filters)
    return {
        "entries": entries,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }


def _lock_draft(db: Session, entry_id: int) -> JournalEntry:
    db_entry = (
        db.query(JournalEntry)
        .filter(JournalEntry.id == entry_id)
        .with_for_update()
        .first()
    )
    if not db_entry:
        raise EntryNotFoundError(entry_id)
    if db_entry.is_posted:
        raise EntryAlreadyPostedError(entry_id)
    return db_entry


def update_journal_entry(db: Session, entry_id: int, entry_update: JournalEntryUpdate, user_id: Optional[str] = None) -> JournalEntry:
    """Amend a draft. A supplied line set replaces the old one wholesale and is re-validated."""
    db_entry = _lock_draft(db, entry_id)

    update_data = entry_update.model_dump(exclude_unset=True, exclude={"lines"})

    try:
        if entry_update.lines is not None:
            validate_lines(db, entry_update.lines)
        for key, value in update_data.items():
            setattr(db_entry, key, value)
        db_entry.updated_by = user_id
        if entry_update.lines is not None:
            crud_ledger.replace_lines(db, entry_id, entry_update.lines)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire(db_entry)
    logger.info(
        f"Updated draft journal entry {db_entry.entry_number} (id={entry_id})"
        + (f", replaced lines with {len(entry_update.lines)}" if entry_update.lines is not None else "")
    )
    return get_journal_entry(db, entry_id)


def post_journal_entry(db: Session, entry_id: int, user_id: Optional[str] = None) -> JournalEntry:
    """
    Mark an entry as posted. Irreversible.

    The stored lines are re-checked before the flag flips. The flip itself is
    conditional on the entry still being a draft, so a second or concurrent
    post is a no-op that returns the already-posted entry.
    """
    db_entry = db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()
    if not db_entry:
        raise EntryNotFoundError(entry_id)
    if db_entry.is_posted:
        logger.info(f"Journal entry {db_entry.entry_number} (id={entry_id}) is already posted")
        return get_journal_entry(db, entry_id)

    line_count, total_debit, total_credit = crud_ledger.entry_totals(db, entry_id)
    try:
        check_balance(line_count, total_debit, total_credit)
    except (InsufficientLinesError, UnbalancedEntryError) as e:
        logger.warning(f"Refusing to post journal entry {entry_id}: {e}")
        raise

    try:
        updated = (
            db.query(JournalEntry)
            .filter(JournalEntry.id == entry_id, JournalEntry.is_posted.is_(False))
            .update(
                {"is_posted": True, "posted_at": now_local(), "updated_by": user_id},
                synchronize_session=False,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    if updated:
        logger.info(f"Posted journal entry {db_entry.entry_number} (id={entry_id})")
    else:
        logger.info(f"Journal entry {db_entry.entry_number} (id={entry_id}) was posted concurrently")
    return get_journal_entry(db, entry_id)


def delete_journal_entry(db: Session, entry_id: int) -> None:
    """Remove a draft entry; its lines go with it."""
    db_entry = _lock_draft(db, entry_id)
    entry_number = db_entry.entry_number
    try:
        db.delete(db_entry)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Deleted draft journal entry {entry_number} (id={entry_id})")
