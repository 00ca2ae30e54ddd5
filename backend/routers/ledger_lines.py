from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from schemas.ledger_line import LedgerLineList
from crud import ledger as ledger_crud

router = APIRouter(
    prefix="/ledger-lines",
    tags=["Ledger Lines"],
)


@router.get("/", response_model=LedgerLineList)
def get_ledger_lines(
    account_id: Optional[int] = None,
    journal_entry_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return ledger_crud.get_ledger_lines(
        db,
        account_id=account_id,
        journal_entry_id=journal_entry_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
    )
