"""
Tests for the journal entry engine.

Covers the balanced-entry rule, atomic creation, entry numbering, the
draft -> posted state machine and draft isolation of account balances.
"""

from datetime import date
from decimal import Decimal
import re

import pytest

from crud import journal_entry as crud_journal
from crud import ledger as crud_ledger
from crud.account_balance import get_account_balance
from exceptions import (
    DuplicateEntryNumberError,
    EntryAlreadyPostedError,
    EntryNotFoundError,
    InsufficientLinesError,
    PersistenceConflictError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from models.entry_sequence import EntrySequence
from models.journal_entry import JournalEntry
from models.ledger_line import LedgerLine
from schemas.journal_entry import JournalEntryCreate, JournalEntryUpdate
from schemas.ledger_line import LedgerLineCreate
from tests.helpers import entry_request, line


# =============================================================================
# Validation
# =============================================================================


class TestCreateValidation:

    def test_unbalanced_entry_persists_nothing(self, db, cash, revenue):
        request = entry_request([line(cash, debit="100"), line(revenue, credit="90")])

        with pytest.raises(UnbalancedEntryError) as exc_info:
            crud_journal.create_journal_entry(db, request)

        assert exc_info.value.total_debit == Decimal("100.00")
        assert exc_info.value.total_credit == Decimal("90.00")
        assert db.query(JournalEntry).count() == 0
        assert db.query(LedgerLine).count() == 0
        assert db.query(EntrySequence).count() == 0

    def test_single_line_rejected(self, db, cash):
        with pytest.raises(InsufficientLinesError) as exc_info:
            crud_journal.create_journal_entry(db, entry_request([line(cash, debit="0", credit="0")]))
        assert exc_info.value.line_count == 1

    def test_no_lines_rejected(self, db):
        with pytest.raises(InsufficientLinesError):
            crud_journal.create_journal_entry(db, entry_request([]))

    def test_unknown_account_rejected(self, db, cash):
        lines = [
            line(cash, debit="50"),
            LedgerLineCreate(account_id=9999, credit=Decimal("50")),
        ]
        with pytest.raises(UnknownAccountError) as exc_info:
            crud_journal.create_journal_entry(db, entry_request(lines))
        assert exc_info.value.account_ids == [9999]
        assert db.query(JournalEntry).count() == 0

    def test_balance_is_exact_decimal(self, db, cash, revenue):
        lines = [
            line(cash, debit="0.10"),
            line(cash, debit="0.20"),
            line(revenue, credit="0.30"),
        ]
        created = crud_journal.create_journal_entry(db, entry_request(lines))
        assert sum(l.debit for l in created.lines) == sum(l.credit for l in created.lines) == Decimal("0.30")

    def test_negative_amounts_rejected_by_schema(self, cash):
        with pytest.raises(ValueError):
            LedgerLineCreate(account_id=cash.id, debit=Decimal("-5"))

    def test_duplicate_explicit_number_rejected(self, db, cash, revenue):
        lines = [line(cash, debit="10"), line(revenue, credit="10")]
        crud_journal.create_journal_entry(db, entry_request(lines, entry_number="MAN-0001"))
        with pytest.raises(DuplicateEntryNumberError):
            crud_journal.create_journal_entry(db, entry_request(lines, entry_number="MAN-0001"))
        assert db.query(JournalEntry).count() == 1


# =============================================================================
# Creation and numbering
# =============================================================================


class TestCreateEntry:

    def test_creates_draft_with_lines(self, db, cash, revenue):
        request = entry_request(
            [line(cash, debit="500", description="Cash sale"), line(revenue, credit="500")],
            reference="SALE-1",
        )
        created = crud_journal.create_journal_entry(db, request, user_id="alice")

        assert created.id is not None
        assert created.is_posted is False
        assert created.posted_at is None
        assert created.reference == "SALE-1"
        assert created.created_by == "alice"
        assert [(l.account_id, l.debit, l.credit) for l in created.lines] == [
            (cash.id, Decimal("500.00"), Decimal("0.00")),
            (revenue.id, Decimal("0.00"), Decimal("500.00")),
        ]
        assert created.lines[0].description == "Cash sale"

    def test_create_and_post_in_one_call(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "75", "0"), (revenue, "0", "75"), post=True)
        assert created.is_posted is True
        assert created.posted_at is not None

    def test_entry_numbers_follow_prefix_month_sequence(self, create_entry, cash, revenue):
        first = create_entry((cash, "1", "0"), (revenue, "0", "1"))
        second = create_entry((cash, "2", "0"), (revenue, "0", "2"))
        other_month = create_entry((cash, "3", "0"), (revenue, "0", "3"), on_date=date(2024, 2, 1))
        other_prefix = create_entry((cash, "4", "0"), (revenue, "0", "4"), prefix="ADJ")

        assert first.entry_number == "JE-202401-0001"
        assert second.entry_number == "JE-202401-0002"
        assert other_month.entry_number == "JE-202402-0001"
        assert other_prefix.entry_number == "ADJ-202401-0001"

    def test_counter_starts_after_existing_entries(self, db, cash, revenue, create_entry):
        create_entry((cash, "1", "0"), (revenue, "0", "1"), entry_number="JE-202401-0001")
        created = create_entry((cash, "1", "0"), (revenue, "0", "1"))
        assert created.entry_number == "JE-202401-0002"

    def test_number_collision_is_retried_once(self, db, cash, revenue, create_entry):
        create_entry((cash, "1", "0"), (revenue, "0", "1"))
        # Push the counter behind the stored numbers
        db.query(EntrySequence).update({"last_value": 0})
        db.commit()

        created = create_entry((cash, "1", "0"), (revenue, "0", "1"))

        assert created.entry_number == "JE-202401-0002"
        assert db.query(JournalEntry).count() == 2

    def test_new_counter_starts_after_highest_stored_number(self, db, cash, revenue, create_entry):
        create_entry((cash, "1", "0"), (revenue, "0", "1"), entry_number="JE-202401-0002")

        created = create_entry((cash, "1", "0"), (revenue, "0", "1"))

        assert created.entry_number == "JE-202401-0003"

    def test_retry_skips_past_manually_numbered_gap(self, db, cash, revenue, create_entry):
        create_entry((cash, "1", "0"), (revenue, "0", "1"))
        create_entry((cash, "1", "0"), (revenue, "0", "1"), entry_number="JE-202401-0002")

        created = create_entry((cash, "1", "0"), (revenue, "0", "1"))

        assert created.entry_number == "JE-202401-0003"
        assert db.query(EntrySequence).one().last_value == 3

    def test_second_collision_raises_conflict(self, db, cash, revenue, create_entry, monkeypatch):
        create_entry((cash, "1", "0"), (revenue, "0", "1"))
        monkeypatch.setattr(
            crud_journal, "generate_entry_number",
            lambda db, prefix, on_date=None, resync=False: "JE-202401-0001",
        )

        with pytest.raises(PersistenceConflictError) as exc_info:
            create_entry((cash, "2", "0"), (revenue, "0", "2"))

        assert exc_info.value.entry_number == "JE-202401-0001"
        assert db.query(JournalEntry).count() == 1
        assert db.query(LedgerLine).count() == 2

    def test_generate_entry_number_format(self, db, cash):
        number = crud_journal.generate_entry_number(db, "PAY", date(2023, 11, 30))
        db.rollback()
        assert re.match(r"^PAY-202311-\d{4}$", number)
        assert crud_journal.format_entry_number("INV", date(2024, 1, 15), 7) == "INV-202401-0007"

    def test_invalid_prefix_rejected_by_schema(self, cash, revenue):
        with pytest.raises(ValueError):
            JournalEntryCreate(
                date=date(2024, 1, 1),
                prefix="je",
                lines=[line(cash, debit="1"), line(revenue, credit="1")],
            )


# =============================================================================
# Reads
# =============================================================================


class TestReadEntries:

    def test_get_by_id_includes_lines(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "10", "0"), (revenue, "0", "10"))
        fetched = crud_journal.get_journal_entry(db, created.id)
        assert fetched.entry_number == created.entry_number
        assert [l.account.account_number for l in fetched.lines] == ["1011", "4012"]
        assert crud_journal.get_journal_entry(db, 999) is None

    def test_lines_for_entry_and_account(self, db, cash, revenue, create_entry):
        draft = create_entry((cash, "10", "0"), (revenue, "0", "10"))
        create_entry((cash, "20", "0"), (revenue, "0", "20"), post=True)

        assert len(crud_ledger.lines_for_entry(db, draft.id)) == 2
        assert len(crud_ledger.lines_for_account(db, cash.id)) == 2
        assert [l.debit for l in crud_ledger.lines_for_account(db, cash.id, posted_only=True)] == [Decimal("20.00")]

    def test_list_newest_first_with_total(self, db, cash, revenue, create_entry):
        created = [create_entry((cash, str(n), "0"), (revenue, "0", str(n))) for n in range(1, 6)]

        entries, total = crud_journal.get_journal_entries(db, page=1, page_size=2)
        assert total == 5
        assert [e.id for e in entries] == [created[4].id, created[3].id]

        entries, total = crud_journal.get_journal_entries(db, page=3, page_size=2)
        assert [e.id for e in entries] == [created[0].id]

    def test_list_filters_by_status_and_date(self, db, cash, revenue, create_entry):
        create_entry((cash, "1", "0"), (revenue, "0", "1"), post=True)
        create_entry((cash, "2", "0"), (revenue, "0", "2"), on_date=date(2024, 3, 1))

        _, posted_total = crud_journal.get_journal_entries(db, is_posted=True)
        _, march_total = crud_journal.get_journal_entries(db, start_date=date(2024, 3, 1))
        page = crud_journal.paginate_journal_entries(db, page=1, page_size=1)

        assert posted_total == 1
        assert march_total == 1
        assert page["total"] == 2
        assert page["total_pages"] == 2


# =============================================================================
# Amending drafts
# =============================================================================


class TestUpdateEntry:

    def test_replaces_lines_and_fields(self, db, cash, revenue, expense, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        update = JournalEntryUpdate(
            description="Corrected",
            lines=[line(expense, debit="40"), line(cash, credit="40")],
        )

        updated = crud_journal.update_journal_entry(db, created.id, update)

        assert updated.description == "Corrected"
        assert [(l.account_id, l.debit, l.credit) for l in updated.lines] == [
            (expense.id, Decimal("40.00"), Decimal("0.00")),
            (cash.id, Decimal("0.00"), Decimal("40.00")),
        ]
        assert db.query(LedgerLine).count() == 2

    def test_fields_only_update_keeps_lines(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        updated = crud_journal.update_journal_entry(db, created.id, JournalEntryUpdate(reference="REF-9"))
        assert updated.reference == "REF-9"
        assert len(updated.lines) == 2

    def test_unbalanced_replacement_leaves_entry_untouched(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        update = JournalEntryUpdate(description="Broken", lines=[line(cash, debit="100"), line(revenue, credit="99")])

        with pytest.raises(UnbalancedEntryError):
            crud_journal.update_journal_entry(db, created.id, update)

        fetched = crud_journal.get_journal_entry(db, created.id)
        assert fetched.description == "Test entry"
        assert [l.credit for l in fetched.lines] == [Decimal("0.00"), Decimal("100.00")]

    def test_posted_entry_cannot_be_updated(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"), post=True)
        with pytest.raises(EntryAlreadyPostedError):
            crud_journal.update_journal_entry(db, created.id, JournalEntryUpdate(description="Too late"))
        assert crud_journal.get_journal_entry(db, created.id).description == "Test entry"

    def test_missing_entry(self, db):
        with pytest.raises(EntryNotFoundError):
            crud_journal.update_journal_entry(db, 999, JournalEntryUpdate(description="x"))


# =============================================================================
# Posting
# =============================================================================


class TestPostEntry:

    def test_post_draft(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        posted = crud_journal.post_journal_entry(db, created.id, user_id="bob")
        assert posted.is_posted is True
        assert posted.posted_at is not None
        assert posted.updated_by == "bob"

    def test_posting_twice_is_a_no_op(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        first = crud_journal.post_journal_entry(db, created.id)
        posted_at = first.posted_at
        second = crud_journal.post_journal_entry(db, created.id)

        assert second.is_posted is True
        assert second.posted_at == posted_at
        assert db.query(LedgerLine).count() == 2
        assert get_account_balance(db, cash.id).balance == Decimal("100.00")

    def test_posting_is_one_way(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"), post=True)

        with pytest.raises(EntryAlreadyPostedError):
            crud_journal.update_journal_entry(db, created.id, JournalEntryUpdate(lines=[
                line(cash, debit="1"), line(revenue, credit="1"),
            ]))
        with pytest.raises(EntryAlreadyPostedError):
            crud_journal.delete_journal_entry(db, created.id)

        assert crud_journal.get_journal_entry(db, created.id).is_posted is True

    def test_post_rechecks_stored_lines(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        # A stray line written behind the engine's back
        crud_ledger.append_lines(db, created.id, [line(cash, debit="5")])
        db.commit()

        with pytest.raises(UnbalancedEntryError):
            crud_journal.post_journal_entry(db, created.id)
        assert crud_journal.get_journal_entry(db, created.id).is_posted is False

    def test_post_missing_entry(self, db):
        with pytest.raises(EntryNotFoundError):
            crud_journal.post_journal_entry(db, 999)


# =============================================================================
# Draft deletion
# =============================================================================


class TestDeleteEntry:

    def test_deleting_draft_removes_lines(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "100", "0"), (revenue, "0", "100"))
        crud_journal.delete_journal_entry(db, created.id)
        assert crud_journal.get_journal_entry(db, created.id) is None
        assert db.query(LedgerLine).count() == 0

    def test_missing_entry(self, db):
        with pytest.raises(EntryNotFoundError):
            crud_journal.delete_journal_entry(db, 999)


# =============================================================================
# Draft isolation
# =============================================================================


class TestDraftIsolation:

    def test_balances_change_only_after_posting(self, db, cash, revenue, create_entry):
        created = create_entry((cash, "250", "0"), (revenue, "0", "250"))
        assert get_account_balance(db, cash.id).balance == Decimal("0.00")

        crud_journal.update_journal_entry(db, created.id, JournalEntryUpdate(
            lines=[line(cash, debit="300"), line(revenue, credit="300")],
        ))
        assert get_account_balance(db, cash.id).balance == Decimal("0.00")
        assert get_account_balance(db, revenue.id).balance == Decimal("0.00")

        crud_journal.post_journal_entry(db, created.id)
        assert get_account_balance(db, cash.id).balance == Decimal("300.00")
        assert get_account_balance(db, revenue.id).balance == Decimal("-300.00")
