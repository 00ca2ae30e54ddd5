from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from database import get_db
from schemas.business_events import InvoiceEvent, ExpenseEvent, PayslipEvent
from schemas.journal_entry import JournalEntry
from schemas.posting_accounts import PostingAccounts
from crud.event_entries import InvoiceEntryGenerator, ExpenseEntryGenerator, PayrollEntryGenerator
from crud.posting_accounts import get_posting_accounts

router = APIRouter(
    prefix="/postings",
    tags=["Postings"],
)


@router.post("/invoices", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def post_invoice(
    invoice: InvoiceEvent,
    post: bool = False,
    db: Session = Depends(get_db),
    posting_accounts: PostingAccounts = Depends(get_posting_accounts),
):
    return InvoiceEntryGenerator(posting_accounts).generate(db, invoice, post=post)


@router.post("/expenses", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def post_expense(
    expense: ExpenseEvent,
    post: bool = False,
    db: Session = Depends(get_db),
    posting_accounts: PostingAccounts = Depends(get_posting_accounts),
):
    return ExpenseEntryGenerator(posting_accounts).generate(db, expense, post=post)


@router.post("/payslips", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def post_payslip(
    payslip: PayslipEvent,
    post: bool = False,
    db: Session = Depends(get_db),
    posting_accounts: PostingAccounts = Depends(get_posting_accounts),
):
    return PayrollEntryGenerator(posting_accounts).generate(db, payslip, post=post)
