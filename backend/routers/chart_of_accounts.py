from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.chart_of_accounts import (
    Account,
    AccountCreate,
    AccountDeleteResult,
    AccountList,
    AccountNode,
    AccountUpdate,
    AccountWithBalance,
)
from schemas.financial_reports import AccountBalance, AccountStatement
from schemas.ledger_line import LedgerLineList
from schemas.posting_accounts import PostingAccounts
from crud import chart_of_accounts as account_crud
from crud import account_balance as balance_crud
from crud import financial_reports as reports_crud
from crud import ledger as ledger_crud
from crud.posting_accounts import get_posting_accounts
from config import ACCOUNT_SEARCH_LIMIT

router = APIRouter(
    prefix="/chart-of-accounts",
    tags=["Chart of Accounts"],
)


@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(account: AccountCreate, db: Session = Depends(get_db)):
    return account_crud.create_account(db=db, account=account)


@router.post("/initialize", response_model=List[Account], status_code=status.HTTP_201_CREATED)
def initialize_default_accounts(
    db: Session = Depends(get_db),
    posting_accounts: PostingAccounts = Depends(get_posting_accounts),
):
    """Seed account types and the default chart. Existing accounts are left untouched."""
    return account_crud.initialize_default_accounts(db, posting_accounts=posting_accounts)


@router.get("/", response_model=AccountList)
def get_accounts(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    type_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return account_crud.get_accounts(db, page=page, page_size=page_size, type_id=type_id)


@router.get("/search", response_model=List[Account])
def search_accounts(
    q: str = Query(..., min_length=1),
    limit: int = Query(ACCOUNT_SEARCH_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return account_crud.search_accounts(db, q, limit=limit)


@router.get("/hierarchy/{type_id}", response_model=List[AccountNode])
def get_account_hierarchy(type_id: int, db: Session = Depends(get_db)):
    return account_crud.build_hierarchy(db, type_id)


@router.get("/by-number/{account_number}", response_model=Account)
def get_account_by_number(account_number: str, db: Session = Depends(get_db)):
    account = account_crud.get_account_by_number(db, account_number)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account with number {account_number} not found"
        )
    return account


@router.get("/{account_id}", response_model=Account)
def get_account(account_id: int, db: Session = Depends(get_db)):
    account = account_crud.get_account(db, account_id)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account with id {account_id} not found"
        )
    return account


@router.get("/{account_id}/balance", response_model=AccountBalance)
def get_account_balance(account_id: int, as_of_date: Optional[date] = None, db: Session = Depends(get_db)):
    return balance_crud.get_account_balance(db, account_id, as_of_date=as_of_date)


@router.get("/{account_id}/with-balance", response_model=AccountWithBalance)
def get_account_with_balance(account_id: int, db: Session = Depends(get_db)):
    return balance_crud.get_account_with_balance(db, account_id)


@router.get("/{account_id}/statement", response_model=AccountStatement)
def get_account_statement(account_id: int, start_date: date, end_date: date, db: Session = Depends(get_db)):
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )
    return reports_crud.get_account_statement(db, account_id, start_date, end_date)


@router.get("/{account_id}/ledger-lines", response_model=LedgerLineList)
def get_account_ledger_lines(
    account_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    if not account_crud.get_account(db, account_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account with id {account_id} not found"
        )
    return ledger_crud.get_ledger_lines(
        db, account_id=account_id, start_date=start_date, end_date=end_date, page=page, page_size=page_size
    )


@router.patch("/{account_id}", response_model=Account)
def update_account(account_id: int, account: AccountUpdate, db: Session = Depends(get_db)):
    return account_crud.update_account(db, account_id, account)


@router.delete("/{account_id}", response_model=AccountDeleteResult)
def delete_account(account_id: int, db: Session = Depends(get_db)):
    """Deletes an unused account outright; an account with ledger history is deactivated instead."""
    outcome = account_crud.delete_account(db, account_id)
    return {"account_id": account_id, "outcome": outcome}
