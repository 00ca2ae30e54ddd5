from models.account_type import AccountType
from models.chart_of_accounts import Account
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from models.entry_sequence import EntrySequence

__all__ = ['AccountType', 'Account', 'JournalEntry', 'LedgerLine', 'EntrySequence',]
