"""
Tests for balances, the trial balance and account statements.
"""

from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from crud import account_balance as crud_balance
from crud import financial_reports as crud_reports
from exceptions import AccountNotFoundError


@pytest.fixture
def two_posted_entries(cash, revenue, expense, create_entry):
    """Entry A: Dr Cash 500 / Cr Revenue 500. Entry B: Dr Expense 200 / Cr Cash 200."""
    a = create_entry((cash, "500", "0"), (revenue, "0", "500"), post=True, on_date=date(2024, 1, 10))
    b = create_entry((expense, "200", "0"), (cash, "0", "200"), post=True, on_date=date(2024, 1, 20))
    return a, b


class TestAccountBalance:

    def test_balance_from_posted_lines(self, db, cash, two_posted_entries):
        balance = crud_balance.get_account_balance(db, cash.id)
        assert balance.debit_total == Decimal("500.00")
        assert balance.credit_total == Decimal("200.00")
        assert balance.balance == Decimal("300.00")

    def test_account_without_activity_has_zero_balance(self, db, cash):
        balance = crud_balance.get_account_balance(db, cash.id)
        assert (balance.debit_total, balance.credit_total, balance.balance) == (
            Decimal("0.00"), Decimal("0.00"), Decimal("0.00"),
        )

    def test_as_of_date_excludes_later_entries(self, db, cash, two_posted_entries):
        balance = crud_balance.get_account_balance(db, cash.id, as_of_date=date(2024, 1, 15))
        assert balance.balance == Decimal("500.00")
        assert balance.as_of_date == date(2024, 1, 15)

    def test_missing_account(self, db):
        with pytest.raises(AccountNotFoundError):
            crud_balance.get_account_balance(db, 999)

    def test_account_with_balance(self, db, cash, two_posted_entries):
        result = crud_balance.get_account_with_balance(db, cash.id)
        assert result["account_number"] == "1011"
        assert result["type"].name == "Asset"
        assert result["balance"] == Decimal("300.00")


class TestTrialBalance:

    def test_rows_after_two_posted_entries(self, db, cash, revenue, expense, two_posted_entries):
        rows = crud_reports.get_trial_balance(db)

        assert [(r.account_number, r.balance) for r in rows] == [
            ("1011", Decimal("300.00")),
            ("4012", Decimal("-500.00")),
            ("5021", Decimal("200.00")),
        ]
        cash_row = rows[0]
        assert cash_row.account_name == "Cash in Bank"
        assert cash_row.account_type == "Asset"
        assert (cash_row.debit_total, cash_row.credit_total) == (Decimal("500.00"), Decimal("200.00"))

    def test_draft_only_and_idle_accounts_are_excluded(self, db, cash, revenue, make_account, create_entry,
                                                       two_posted_entries):
        receivables = make_account("1021", "Trade Receivables", "Asset")
        make_account("2031", "Salaries Payable", "Liability")
        create_entry((receivables, "75", "0"), (revenue, "0", "75"))  # draft

        numbers = [r.account_number for r in crud_reports.get_trial_balance(db)]
        assert "1021" not in numbers
        assert "2031" not in numbers
        assert len(numbers) == len(set(numbers)) == 3

    def test_inactive_account_with_history_still_reported(self, db, cash, two_posted_entries):
        from crud.chart_of_accounts import delete_account
        assert delete_account(db, cash.id) == "deactivated"
        assert "1011" in [r.account_number for r in crud_reports.get_trial_balance(db)]

    def test_report_totals_agree(self, db, two_posted_entries):
        report = crud_reports.get_trial_balance_report(db)
        assert report.total_debit == Decimal("700.00")
        assert report.total_credit == Decimal("700.00")
        assert report.difference == Decimal("0.00")

    def test_report_as_of_date(self, db, two_posted_entries):
        report = crud_reports.get_trial_balance_report(db, as_of_date=date(2024, 1, 15))
        assert [r.account_number for r in report.rows] == ["1011", "4012"]
        assert report.as_of_date == date(2024, 1, 15)

    def test_empty_ledger(self, db, account_types):
        report = crud_reports.get_trial_balance_report(db)
        assert report.rows == []
        assert report.total_debit == report.total_credit == Decimal("0.00")

    def test_excel_export(self, db, two_posted_entries):
        workbook = load_workbook(crud_reports.export_trial_balance(db))
        sheet = workbook["Trial Balance"]
        rows = list(sheet.iter_rows(values_only=True))

        assert rows[0] == ("Account Number", "Account Name", "Account Type", "Debit", "Credit", "Balance")
        assert [row[0] for row in rows[1:4]] == ["1011", "4012", "5021"]
        assert rows[-1][1] == "Total"
        assert rows[-1][3] == rows[-1][4] == 700


class TestAccountStatement:

    def test_opening_running_and_closing_balances(self, db, cash, revenue, create_entry, two_posted_entries):
        create_entry((cash, "50", "0"), (revenue, "0", "50"), post=True, on_date=date(2024, 2, 5))
        create_entry((cash, "999", "0"), (revenue, "0", "999"), on_date=date(2024, 2, 6))  # draft

        statement = crud_reports.get_account_statement(db, cash.id, date(2024, 1, 15), date(2024, 2, 28))

        assert statement.opening_balance == Decimal("500.00")
        assert [(l.debit, l.credit, l.running_balance) for l in statement.lines] == [
            (Decimal("0.00"), Decimal("200.00"), Decimal("300.00")),
            (Decimal("50.00"), Decimal("0.00"), Decimal("350.00")),
        ]
        assert statement.closing_balance == Decimal("350.00")
        assert statement.net_movement == Decimal("-150.00")
        assert statement.total_debit == Decimal("50.00")
        assert statement.total_credit == Decimal("200.00")
        assert statement.account.account_number == "1011"

    def test_missing_account(self, db, account_types):
        with pytest.raises(AccountNotFoundError):
            crud_reports.get_account_statement(db, 999, date(2024, 1, 1), date(2024, 1, 31))
