"""
Shared fixtures for the ledger tests.

Every test runs against a fresh in-memory SQLite database. The environment is
configured before any application module is imported so that `database`
builds its engine for SQLite and `main` does not write log files.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""

from datetime import date

import pytest

from database import Base, SessionLocal, engine, get_db
import models  # noqa: F401
from crud import account_type as crud_account_type
from crud import chart_of_accounts as crud_accounts
from crud import journal_entry as crud_journal
from crud.posting_accounts import get_posting_accounts
from schemas.chart_of_accounts import AccountCreate
from schemas.posting_accounts import PostingAccounts
from tests.helpers import entry_request, line


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def account_types(db):
    """Account types keyed by name."""
    return {t.name: t for t in crud_account_type.seed_account_types(db)}


@pytest.fixture
def make_account(db, account_types):
    def _make(account_number, name, type_name, parent=None):
        return crud_accounts.create_account(db, AccountCreate(
            account_number=account_number,
            name=name,
            type_id=account_types[type_name].id,
            parent_account_id=parent.id if parent else None,
        ))
    return _make


@pytest.fixture
def cash(make_account):
    return make_account("1011", "Cash in Bank", "Asset")


@pytest.fixture
def revenue(make_account):
    return make_account("4012", "Service Revenue", "Revenue")


@pytest.fixture
def expense(make_account):
    return make_account("5021", "Office Supplies", "Expense")


@pytest.fixture
def posting_accounts():
    return PostingAccounts(expense_categories={1: "5021", 2: "5022"})


@pytest.fixture
def chart(db, posting_accounts):
    """The default chart of accounts, keyed by account number."""
    crud_accounts.initialize_default_accounts(db, posting_accounts=posting_accounts)
    accounts = crud_accounts.get_accounts(db, page_size=500)["accounts"]
    return {account.account_number: account for account in accounts}


@pytest.fixture
def create_entry(db):
    """Create a journal entry from (account, debit, credit) triples."""
    def _create(*triples, post=False, on_date=date(2024, 1, 15), **kwargs):
        lines = [line(account, debit, credit) for account, debit, credit in triples]
        return crud_journal.create_journal_entry(db, entry_request(lines, on_date=on_date, **kwargs), post=post)
    return _create


@pytest.fixture
def client(db, posting_accounts):
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_posting_accounts] = lambda: posting_accounts
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
