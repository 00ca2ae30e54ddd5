"""
Typed exceptions raised by the ledger crud layer.

Every exception carries a machine-readable ``code`` and the structured values
that caused it, so routers and callers can branch on type instead of parsing
messages.

    LedgerError
    +-- NotFoundError
    |   +-- AccountNotFoundError
    |   +-- AccountTypeNotFoundError
    |   +-- EntryNotFoundError
    +-- LedgerValidationError
    |   +-- DuplicateAccountNumberError
    |   +-- ParentNotFoundError
    |   +-- TypeMismatchError
    |   +-- HierarchyCycleError
    |   +-- UnbalancedEntryError
    |   +-- InsufficientLinesError
    |   +-- UnknownAccountError
    |   +-- EntryAlreadyPostedError
    |   +-- DuplicateEntryNumberError
    +-- PersistenceConflictError
"""

from decimal import Decimal
from typing import Iterable, Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# Lookup misses


class NotFoundError(LedgerError):
    code: str = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account with id {account_id} not found")


class AccountTypeNotFoundError(NotFoundError):
    code: str = "ACCOUNT_TYPE_NOT_FOUND"

    def __init__(self, type_id):
        self.type_id = type_id
        super().__init__(f"Account type with id {type_id} not found")


class EntryNotFoundError(NotFoundError):
    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Journal entry with id {entry_id} not found")


# Validation failures, always detected before anything is written


class LedgerValidationError(LedgerError):
    code: str = "VALIDATION_ERROR"


class DuplicateAccountNumberError(LedgerValidationError):
    code: str = "DUPLICATE_ACCOUNT_NUMBER"

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account with number {account_number} already exists")


class ParentNotFoundError(LedgerValidationError):
    code: str = "PARENT_NOT_FOUND"

    def __init__(self, parent_id):
        self.parent_id = parent_id
        super().__init__(f"Parent account with id {parent_id} not found")


class TypeMismatchError(LedgerValidationError):
    code: str = "TYPE_MISMATCH"

    def __init__(self, type_id, expected_type_id, reason: Optional[str] = None):
        self.type_id = type_id
        self.expected_type_id = expected_type_id
        super().__init__(
            reason or f"Account type {type_id} does not match parent account type {expected_type_id}"
        )


class HierarchyCycleError(LedgerValidationError):
    code: str = "HIERARCHY_CYCLE"

    def __init__(self, account_id, parent_id):
        self.account_id = account_id
        self.parent_id = parent_id
        super().__init__(
            f"Account {parent_id} cannot be the parent of account {account_id}: it would create a cycle"
        )


class UnbalancedEntryError(LedgerValidationError):
    code: str = "UNBALANCED_ENTRY"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"The sum of debits ({total_debit}) must equal the sum of credits ({total_credit})"
        )


class InsufficientLinesError(LedgerValidationError):
    code: str = "INSUFFICIENT_LINES"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(f"A journal entry needs at least two ledger lines, got {line_count}")


class UnknownAccountError(LedgerValidationError):
    code: str = "UNKNOWN_ACCOUNT"

    def __init__(self, account_ids: Iterable):
        self.account_ids = sorted(account_ids, key=str)
        super().__init__(
            f"Ledger lines reference unknown account(s): {', '.join(str(a) for a in self.account_ids)}"
        )


class EntryAlreadyPostedError(LedgerValidationError):
    code: str = "ENTRY_ALREADY_POSTED"

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} is posted and can no longer be changed")


class DuplicateEntryNumberError(LedgerValidationError):
    code: str = "DUPLICATE_ENTRY_NUMBER"

    def __init__(self, entry_number: str):
        self.entry_number = entry_number
        super().__init__(f"Journal entry number {entry_number} already exists")


# Store-level conflicts


class PersistenceConflictError(LedgerError):
    code: str = "PERSISTENCE_CONFLICT"

    def __init__(self, message: str, entry_number: Optional[str] = None):
        self.entry_number = entry_number
        super().__init__(message)
