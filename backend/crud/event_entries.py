"""
Event-to-entry generators.

Each generator turns a business event snapshot (invoice issued, expense
recorded, payslip run) into a balanced journal entry request and hands it to
the journal entry engine. Account numbers come from the PostingAccounts table
injected at construction, so the mapping can change without touching the
posting logic.
"""

from sqlalchemy.orm import Session
from decimal import Decimal
from typing import List, Optional
from schemas.business_events import InvoiceEvent, ExpenseEvent, PayslipEvent
from schemas.journal_entry import JournalEntryCreate
from schemas.ledger_line import LedgerLineCreate
from schemas.posting_accounts import PostingAccounts
from models.audit_mixin import now_local
from crud import chart_of_accounts as crud_accounts
from crud import journal_entry as crud_journal
from exceptions import UnknownAccountError
import logging

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class EntryGenerator:
    prefix: str = "JE"

    def __init__(self, posting_accounts: PostingAccounts):
        self.posting_accounts = posting_accounts

    def resolve(self, db: Session, account_number: str) -> int:
        account = crud_accounts.get_account_by_number(db, account_number)
        if not account:
            raise UnknownAccountError([account_number])
        return account.id

    def debit(self, db: Session, account_number: str, amount: Decimal, description: str) -> LedgerLineCreate:
        return LedgerLineCreate(account_id=self.resolve(db, account_number), debit=amount, credit=ZERO, description=description)

    def credit(self, db: Session, account_number: str, amount: Decimal, description: str) -> LedgerLineCreate:
        return LedgerLineCreate(account_id=self.resolve(db, account_number), debit=ZERO, credit=amount, description=description)

    def create(self, db: Session, entry: JournalEntryCreate, post: bool, user_id: Optional[str]):
        db_entry = crud_journal.create_journal_entry(db, entry, post=post, user_id=user_id)
        logger.info(f"Generated journal entry {db_entry.entry_number} for {entry.reference}")
        return db_entry


class InvoiceEntryGenerator(EntryGenerator):
    """Dr Trade Receivables (total) / Cr Service Revenue (net) + Cr Sales Tax Payable (tax)."""
    prefix = "INV"

    def build_lines(self, db: Session, invoice: InvoiceEvent) -> List[LedgerLineCreate]:
        accounts = self.posting_accounts
        reference = f"INV-{invoice.id}"
        lines = [
            self.debit(db, accounts.trade_receivables, invoice.total_amount, f"Receivable for invoice {reference}"),
            self.credit(db, accounts.service_revenue, invoice.amount, f"Revenue from invoice {reference}"),
        ]
        if invoice.tax_amount > 0:
            lines.append(self.credit(db, accounts.sales_tax_payable, invoice.tax_amount, f"Sales tax on invoice {reference}"))
        return lines

    def generate(self, db: Session, invoice: InvoiceEvent, post: bool = False, user_id: Optional[str] = None):
        description = f"Invoice INV-{invoice.id}"
        if invoice.client_name:
            description += f" issued to {invoice.client_name}"
        entry = JournalEntryCreate(
            prefix=self.prefix,
            date=invoice.issue_date,
            description=description,
            reference=f"INV-{invoice.id}",
            lines=self.build_lines(db, invoice),
        )
        return self.create(db, entry, post, user_id)


class ExpenseEntryGenerator(EntryGenerator):
    """Dr category expense (net) + Dr tax prepaid (tax) / Cr Cash in Bank (gross)."""
    prefix = "EXP"

    def build_lines(self, db: Session, expense: ExpenseEvent) -> List[LedgerLineCreate]:
        accounts = self.posting_accounts
        reference = f"EXP-{expense.id}"
        expense_account = accounts.expense_account_for(expense.category_id)
        lines = [
            self.debit(db, expense_account, expense.amount, expense.description or f"Expense {reference}"),
        ]
        if expense.tax_amount > 0:
            lines.append(self.debit(db, accounts.tax_prepaid, expense.tax_amount, f"Input tax on expense {reference}"))
        lines.append(
            self.credit(db, accounts.cash_in_bank, expense.amount + expense.tax_amount, f"Payment for expense {reference}")
        )
        return lines

    def generate(self, db: Session, expense: ExpenseEvent, post: bool = False, user_id: Optional[str] = None):
        description = expense.description or f"Expense EXP-{expense.id}"
        if expense.vendor_name:
            description += f" ({expense.vendor_name})"
        entry = JournalEntryCreate(
            prefix=self.prefix,
            date=expense.expense_date,
            description=description,
            reference=f"EXP-{expense.id}",
            lines=self.build_lines(db, expense),
        )
        return self.create(db, entry, post, user_id)


class PayrollEntryGenerator(EntryGenerator):
    """Dr Staff Salaries (gross) / Cr Salaries Payable (net) + Cr each deduction payable."""
    prefix = "PAY"

    def build_lines(self, db: Session, payslip: PayslipEvent) -> List[LedgerLineCreate]:
        accounts = self.posting_accounts
        reference = f"PAY-{payslip.id}"
        lines = [
            self.debit(db, accounts.staff_salaries, payslip.gross_salary, f"Gross salary for payslip {reference}"),
            self.credit(db, accounts.salaries_payable, payslip.net_salary, f"Net salary payable for payslip {reference}"),
        ]
        if payslip.tax_deduction > 0:
            lines.append(self.credit(db, accounts.payroll_tax_payable, payslip.tax_deduction, f"Payroll tax withheld for {reference}"))
        if payslip.provident_fund > 0:
            lines.append(self.credit(db, accounts.employee_benefits_payable, payslip.provident_fund, f"Provident fund for {reference}"))
        if payslip.other_deductions > 0:
            lines.append(self.credit(db, accounts.other_deductions_payable, payslip.other_deductions, f"Other deductions for {reference}"))
        return lines

    def generate(self, db: Session, payslip: PayslipEvent, post: bool = False, user_id: Optional[str] = None):
        description = f"Payroll for payslip PAY-{payslip.id}"
        if payslip.employee_name:
            description += f" ({payslip.employee_name})"
        entry = JournalEntryCreate(
            prefix=self.prefix,
            date=payslip.pay_date or now_local().date(),
            description=description,
            reference=f"PAY-{payslip.id}",
            lines=self.build_lines(db, payslip),
        )
        return self.create(db, entry, post, user_id)
