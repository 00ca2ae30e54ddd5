from datetime import date
from decimal import Decimal

from schemas.journal_entry import JournalEntryCreate
from schemas.ledger_line import LedgerLineCreate


def line(account, debit="0", credit="0", description=None):
    return LedgerLineCreate(
        account_id=account.id,
        debit=Decimal(debit),
        credit=Decimal(credit),
        description=description,
    )


def entry_request(lines, on_date=date(2024, 1, 15), description="Test entry", **kwargs):
    return JournalEntryCreate(date=on_date, description=description, lines=lines, **kwargs)
